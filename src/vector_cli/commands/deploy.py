"""Deployment commands."""

from __future__ import annotations

from typing import Any, Optional

import typer

from vector_common import API_PREFIX, DEFAULT_PAGE, DEFAULT_PER_PAGE

from vector_cli.config import get_client, get_format
from vector_cli.output import (
    OutputFormat,
    data_of,
    field,
    print_json,
    print_key_value,
    print_message,
    render_action,
    render_list,
    text,
)
from vector_cli.services.api_client import compact

app = typer.Typer(no_args_is_help=True)

ENVIRONMENTS = f"{API_PREFIX}/environments"


def _summary(deploy: Any) -> str:
    return f"{field(deploy, 'id')} ({field(deploy, 'status')})"


@app.command(name="list")
def list_deployments(
    ctx: typer.Context,
    env_id: str = typer.Argument(..., help="Environment ID."),
    page: int = typer.Option(DEFAULT_PAGE, help="Page number."),
    per_page: int = typer.Option(DEFAULT_PER_PAGE, help="Items per page."),
) -> None:
    """List deployments of an environment."""
    with get_client() as client:
        response = client.get(f"{ENVIRONMENTS}/{env_id}/deployments", {"page": page, "per_page": per_page})
    render_list(
        response,
        get_format(ctx),
        headers=["ID", "Status", "Actor", "Created"],
        row=lambda d: [field(d, "id"), field(d, "status"), field(d, "actor"), field(d, "created_at")],
        empty="No deployments found.",
    )


@app.command()
def show(ctx: typer.Context, deploy_id: str = typer.Argument(..., help="Deployment ID.")) -> None:
    """Show a deployment with its build output."""
    with get_client() as client:
        response = client.get(f"{API_PREFIX}/deployments/{deploy_id}")

    if get_format(ctx) is OutputFormat.JSON:
        print_json(response)
        return

    deploy = data_of(response)
    print_key_value(
        [
            ("ID", field(deploy, "id")),
            ("Status", field(deploy, "status")),
            ("Actor", field(deploy, "actor")),
            ("Created", field(deploy, "created_at")),
            ("Updated", field(deploy, "updated_at")),
        ]
    )
    for stream in ("stdout", "stderr"):
        output = text(deploy, stream)
        if output:
            print_message(f"\n--- {stream} ---\n{output}")


@app.command()
def trigger(
    ctx: typer.Context,
    env_id: str = typer.Argument(..., help="Environment ID."),
    include_uploads: bool = typer.Option(False, "--include-uploads", help="Include wp-content/uploads."),
    include_database: bool = typer.Option(False, "--include-database", help="Include the database."),
) -> None:
    """Deploy the dev site to an environment."""
    body = compact(
        include_uploads=True if include_uploads else None,
        include_database=True if include_database else None,
    )
    with get_client() as client:
        response = client.post(f"{ENVIRONMENTS}/{env_id}/deployments", body or None)
    render_action(response, get_format(ctx), lambda d: f"Deployment initiated: {_summary(d)}")


@app.command()
def rollback(
    ctx: typer.Context,
    env_id: str = typer.Argument(..., help="Environment ID."),
    target_deployment_id: Optional[str] = typer.Option(
        None, "--target-deployment-id", help="Deployment to roll back to (defaults to the previous one)."
    ),
) -> None:
    """Roll an environment back to an earlier deployment."""
    with get_client() as client:
        response = client.post(
            f"{ENVIRONMENTS}/{env_id}/rollback", compact(target_deployment_id=target_deployment_id)
        )
    render_action(response, get_format(ctx), lambda d: f"Rollback initiated: {_summary(d)}")
