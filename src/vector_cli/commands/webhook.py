"""Webhook commands."""

from __future__ import annotations

from typing import Any, List, Optional

import typer

from vector_common import API_PREFIX, DEFAULT_PAGE, DEFAULT_PER_PAGE

from vector_cli.config import get_client, get_format
from vector_cli.output import (
    PLACEHOLDER,
    field,
    flag,
    format_bool,
    format_list,
    format_option,
    render_action,
    render_detail,
    render_list,
)
from vector_cli.services.api_client import compact

app = typer.Typer(no_args_is_help=True)

WEBHOOKS = f"{API_PREFIX}/webhooks"


def _enabled(webhook: Any) -> str:
    value = flag(webhook, "enabled")
    return PLACEHOLDER if value is None else format_bool(value)


@app.command(name="list")
def list_webhooks(
    ctx: typer.Context,
    page: int = typer.Option(DEFAULT_PAGE, help="Page number."),
    per_page: int = typer.Option(DEFAULT_PER_PAGE, help="Items per page."),
) -> None:
    """List webhooks."""
    with get_client() as client:
        response = client.get(WEBHOOKS, {"page": page, "per_page": per_page})
    render_list(
        response,
        get_format(ctx),
        headers=["ID", "Name", "URL", "Enabled"],
        row=lambda w: [field(w, "id"), field(w, "name"), field(w, "url"), _enabled(w)],
        empty="No webhooks found.",
    )


@app.command()
def show(ctx: typer.Context, webhook_id: str = typer.Argument(..., help="Webhook ID.")) -> None:
    """Show a webhook."""
    with get_client() as client:
        response = client.get(f"{WEBHOOKS}/{webhook_id}")
    render_detail(
        response,
        get_format(ctx),
        lambda w: [
            ("ID", field(w, "id")),
            ("Name", field(w, "name")),
            ("URL", field(w, "url")),
            ("Enabled", _enabled(w)),
            ("Events", format_list(w.get("events") if isinstance(w, dict) else None)),
            ("Has Secret", format_option(flag(w, "has_secret"))),
            ("Created", field(w, "created_at")),
            ("Updated", field(w, "updated_at")),
        ],
    )


@app.command()
def create(
    ctx: typer.Context,
    name: str = typer.Option(..., "--name", help="Webhook name."),
    url: str = typer.Option(..., "--url", help="Endpoint receiving the events."),
    events: List[str] = typer.Option(..., "--events", help="Event to subscribe to (repeatable)."),
    secret: Optional[str] = typer.Option(None, "--secret", help="Signing secret."),
) -> None:
    """Create a webhook."""
    with get_client() as client:
        response = client.post(WEBHOOKS, compact(name=name, url=url, events=events, secret=secret))
    render_action(
        response,
        get_format(ctx),
        lambda w: f"Webhook created: {field(w, 'name')} ({field(w, 'id')})",
    )


@app.command()
def update(
    ctx: typer.Context,
    webhook_id: str = typer.Argument(..., help="Webhook ID."),
    name: Optional[str] = typer.Option(None, "--name", help="New name."),
    url: Optional[str] = typer.Option(None, "--url", help="New endpoint."),
    events: Optional[List[str]] = typer.Option(None, "--events", help="Replace subscribed events (repeatable)."),
    secret: Optional[str] = typer.Option(None, "--secret", help="New signing secret."),
    enabled: Optional[bool] = typer.Option(None, "--enabled/--disabled", help="Enable or disable delivery."),
) -> None:
    """Update a webhook."""
    body = compact(name=name, url=url, events=events, secret=secret, enabled=enabled)
    with get_client() as client:
        response = client.put(f"{WEBHOOKS}/{webhook_id}", body)
    render_action(response, get_format(ctx), "Webhook updated successfully.")


@app.command()
def delete(ctx: typer.Context, webhook_id: str = typer.Argument(..., help="Webhook ID.")) -> None:
    """Delete a webhook."""
    with get_client() as client:
        response = client.delete(f"{WEBHOOKS}/{webhook_id}")
    render_action(response, get_format(ctx), "Webhook deleted successfully.")
