"""Account event log."""

from __future__ import annotations

from typing import Any, Optional

import typer

from vector_common import API_PREFIX, DEFAULT_PAGE, DEFAULT_PER_PAGE

from vector_cli.config import get_client, get_format
from vector_cli.output import PLACEHOLDER, field, render_list, text

app = typer.Typer(no_args_is_help=True)


def format_actor(actor: Any) -> str:
    """Token name if the event came from an API key, otherwise the IP."""
    return text(actor, "token_name") or text(actor, "ip") or PLACEHOLDER


def format_resource(resource: Any) -> str:
    kind = text(resource, "type")
    if kind is None:
        return PLACEHOLDER
    resource_id = text(resource, "id")
    return f"{kind}:{resource_id}" if resource_id is not None else kind


def _event_row(event: Any) -> list[str]:
    return [
        field(event, "id"),
        field(event, "event"),
        format_actor(event.get("actor")),
        format_resource(event.get("resource")),
        field(event, "created_at"),
    ]


@app.command(name="list")
def list_events(
    ctx: typer.Context,
    from_: Optional[str] = typer.Option(None, "--from", help="Only events after this timestamp."),
    to: Optional[str] = typer.Option(None, "--to", help="Only events before this timestamp."),
    event: Optional[str] = typer.Option(None, "--event", help="Filter by event name."),
    page: int = typer.Option(DEFAULT_PAGE, help="Page number."),
    per_page: int = typer.Option(DEFAULT_PER_PAGE, help="Items per page."),
) -> None:
    """List account events."""
    query = {"from": from_, "to": to, "event": event, "page": page, "per_page": per_page}
    with get_client() as client:
        response = client.get(f"{API_PREFIX}/events", query)
    render_list(
        response,
        get_format(ctx),
        headers=["ID", "Event", "Actor", "Resource", "Created"],
        row=lambda e: _event_row(e if isinstance(e, dict) else {}),
        empty="No events found.",
    )
