"""SSL certificate commands."""

from __future__ import annotations

import typer

from vector_common import API_PREFIX

from vector_cli.config import get_client, get_format
from vector_cli.output import (
    OutputFormat,
    field,
    flag,
    format_bool,
    print_json,
    print_message,
    render_detail,
    text,
)

app = typer.Typer(no_args_is_help=True)

ENVIRONMENTS = f"{API_PREFIX}/environments"


@app.command()
def status(ctx: typer.Context, env_id: str = typer.Argument(..., help="Environment ID.")) -> None:
    """Show SSL provisioning status."""
    with get_client() as client:
        response = client.get(f"{ENVIRONMENTS}/{env_id}/ssl")
    render_detail(
        response,
        get_format(ctx),
        lambda e: [
            ("Status", field(e, "status")),
            ("Provisioning Step", field(e, "provisioning_step")),
            ("Failure Reason", field(e, "failure_reason")),
            ("Production", format_bool(flag(e, "is_production") or False)),
            ("Custom Domain", field(e, "custom_domain")),
            ("FQDN", field(e, "fqdn")),
        ],
    )


@app.command()
def nudge(
    ctx: typer.Context,
    env_id: str = typer.Argument(..., help="Environment ID."),
    retry: bool = typer.Option(False, "--retry", help="Restart provisioning from the beginning."),
) -> None:
    """Nudge a stuck SSL provisioning."""
    with get_client() as client:
        response = client.post(f"{ENVIRONMENTS}/{env_id}/ssl/nudge", {"retry": True} if retry else {})

    if get_format(ctx) is OutputFormat.JSON:
        print_json(response)
        return
    print_message(text(response, "message") or "SSL provisioning nudge sent.")
