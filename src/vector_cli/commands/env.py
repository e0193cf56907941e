"""Environment commands, including per-environment secrets and databases."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional

import typer

from vector_common import API_PREFIX, DEFAULT_PAGE, DEFAULT_PER_PAGE

from vector_cli.commands.account import secret_body, secret_created, secret_pairs, secret_row
from vector_cli.commands.db import (
    check_import_size,
    import_options,
    import_query,
    import_status_pairs,
    render_import_result,
    render_import_session,
)
from vector_cli.config import get_client, get_format
from vector_cli.output import (
    field,
    flag,
    format_bool,
    format_list,
    format_option,
    number,
    render_action,
    render_detail,
    render_list,
)
from vector_cli.services.api_client import compact

app = typer.Typer(no_args_is_help=True)
secret_app = typer.Typer(no_args_is_help=True)
db_app = typer.Typer(no_args_is_help=True)
import_session_app = typer.Typer(no_args_is_help=True)
app.add_typer(secret_app, name="secret", help="Manage environment secrets.")
app.add_typer(db_app, name="db", help="Manage environment databases.")
db_app.add_typer(import_session_app, name="import-session", help="Import large databases via pre-signed upload.")

SITES = f"{API_PREFIX}/sites"
ENVIRONMENTS = f"{API_PREFIX}/environments"
SECRETS = f"{API_PREFIX}/secrets"


def _production(env: Any) -> str:
    return format_bool(flag(env, "is_production") or False)


@app.command(name="list")
def list_envs(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., help="Site ID."),
    page: int = typer.Option(DEFAULT_PAGE, help="Page number."),
    per_page: int = typer.Option(DEFAULT_PER_PAGE, help="Items per page."),
) -> None:
    """List environments of a site."""
    with get_client() as client:
        response = client.get(f"{SITES}/{site_id}/environments", {"page": page, "per_page": per_page})
    render_list(
        response,
        get_format(ctx),
        headers=["ID", "Name", "Status", "Production", "FQDN"],
        row=lambda e: [field(e, "id"), field(e, "name"), field(e, "status"), _production(e), field(e, "fqdn")],
        empty="No environments found.",
    )


@app.command()
def show(ctx: typer.Context, env_id: str = typer.Argument(..., help="Environment ID.")) -> None:
    """Show environment details."""
    with get_client() as client:
        response = client.get(f"{ENVIRONMENTS}/{env_id}")
    render_detail(
        response,
        get_format(ctx),
        lambda e: [
            ("ID", field(e, "id")),
            ("Name", field(e, "name")),
            ("Status", field(e, "status")),
            ("Production", _production(e)),
            ("PHP Version", field(e, "php_version")),
            ("FQDN", field(e, "fqdn")),
            ("Custom Domain", field(e, "custom_domain")),
            ("Subdomain", field(e, "subdomain")),
            ("Tags", format_list(e.get("tags") if isinstance(e, dict) else None)),
            ("Created", field(e, "created_at")),
            ("Updated", field(e, "updated_at")),
        ],
    )


@app.command()
def create(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., help="Site ID."),
    name: str = typer.Option(..., "--name", help="Environment name (e.g. staging)."),
    custom_domain: str = typer.Option(..., "--custom-domain", help="Custom domain for the environment."),
    php_version: str = typer.Option(..., "--php-version", help="PHP version."),
    is_production: bool = typer.Option(False, "--is-production", help="Mark as the production environment."),
    tags: Optional[List[str]] = typer.Option(None, "--tags", help="Tag to attach (repeatable)."),
) -> None:
    """Create an environment."""
    body = compact(
        name=name,
        custom_domain=custom_domain,
        php_version=php_version,
        is_production=is_production,
        tags=tags,
    )
    with get_client() as client:
        response = client.post(f"{SITES}/{site_id}/environments", body)
    render_action(
        response,
        get_format(ctx),
        lambda e: f"Environment created: {field(e, 'name')} ({field(e, 'id')})",
    )


@app.command()
def update(
    ctx: typer.Context,
    env_id: str = typer.Argument(..., help="Environment ID."),
    name: Optional[str] = typer.Option(None, "--name", help="New name."),
    custom_domain: Optional[str] = typer.Option(None, "--custom-domain", help="New custom domain."),
    tags: Optional[List[str]] = typer.Option(None, "--tags", help="Replace tags (repeatable)."),
) -> None:
    """Update an environment."""
    with get_client() as client:
        response = client.put(
            f"{ENVIRONMENTS}/{env_id}", compact(name=name, custom_domain=custom_domain, tags=tags)
        )
    render_action(response, get_format(ctx), "Environment updated successfully.")


@app.command()
def delete(ctx: typer.Context, env_id: str = typer.Argument(..., help="Environment ID.")) -> None:
    """Delete an environment."""
    with get_client() as client:
        response = client.delete(f"{ENVIRONMENTS}/{env_id}")
    render_action(response, get_format(ctx), "Environment deleted successfully.")


@app.command(name="reset-db-password")
def reset_db_password(ctx: typer.Context, env_id: str = typer.Argument(..., help="Environment ID.")) -> None:
    """Reset the environment's database password."""
    with get_client() as client:
        response = client.post(f"{ENVIRONMENTS}/{env_id}/db/reset-password")
    render_detail(
        response,
        get_format(ctx),
        lambda d: [
            ("Username", field(d, "db_username")),
            ("Password", field(d, "db_password")),
        ],
    )


# ---------------------------------------------------------------------------
# Secrets
# ---------------------------------------------------------------------------


@secret_app.command(name="list")
def secret_list(
    ctx: typer.Context,
    env_id: str = typer.Argument(..., help="Environment ID."),
    page: int = typer.Option(DEFAULT_PAGE, help="Page number."),
    per_page: int = typer.Option(DEFAULT_PER_PAGE, help="Items per page."),
) -> None:
    """List secrets of an environment."""
    with get_client() as client:
        response = client.get(f"{ENVIRONMENTS}/{env_id}/secrets", {"page": page, "per_page": per_page})
    render_list(
        response,
        get_format(ctx),
        headers=["ID", "Key", "Secret", "Value", "Created"],
        row=secret_row,
        empty="No secrets found.",
    )


@secret_app.command(name="show")
def secret_show(ctx: typer.Context, secret_id: str = typer.Argument(..., help="Secret ID.")) -> None:
    """Show an environment secret."""
    with get_client() as client:
        response = client.get(f"{SECRETS}/{secret_id}")
    render_detail(response, get_format(ctx), secret_pairs)


@secret_app.command(name="create")
def secret_create(
    ctx: typer.Context,
    env_id: str = typer.Argument(..., help="Environment ID."),
    key: str = typer.Option(..., "--key", help="Secret key."),
    value: str = typer.Option(..., "--value", help="Secret value."),
    no_secret: bool = typer.Option(False, "--no-secret", help="Store as a plain environment variable."),
) -> None:
    """Create an environment secret."""
    with get_client() as client:
        response = client.post(f"{ENVIRONMENTS}/{env_id}/secrets", secret_body(key, value, no_secret))
    render_action(response, get_format(ctx), secret_created)


@secret_app.command(name="update")
def secret_update(
    ctx: typer.Context,
    secret_id: str = typer.Argument(..., help="Secret ID."),
    key: Optional[str] = typer.Option(None, "--key", help="New key."),
    value: Optional[str] = typer.Option(None, "--value", help="New value."),
    no_secret: bool = typer.Option(False, "--no-secret", help="Store as a plain environment variable."),
) -> None:
    """Update an environment secret."""
    with get_client() as client:
        response = client.put(f"{SECRETS}/{secret_id}", secret_body(key, value, no_secret))
    render_action(response, get_format(ctx), "Secret updated successfully.")


@secret_app.command(name="delete")
def secret_delete(ctx: typer.Context, secret_id: str = typer.Argument(..., help="Secret ID.")) -> None:
    """Delete an environment secret."""
    with get_client() as client:
        response = client.delete(f"{SECRETS}/{secret_id}")
    render_action(response, get_format(ctx), "Secret deleted successfully.")


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@db_app.command(name="import")
def db_import(
    ctx: typer.Context,
    env_id: str = typer.Argument(..., help="Environment ID."),
    file: Path = typer.Argument(..., help="SQL file to import (max 50MB)."),
    drop_tables: bool = typer.Option(False, "--drop-tables", help="Drop existing tables first."),
    disable_foreign_keys: bool = typer.Option(
        False, "--disable-foreign-keys", help="Disable foreign key checks during import."
    ),
    search_replace_from: Optional[str] = typer.Option(None, "--search-replace-from", help="Search string."),
    search_replace_to: Optional[str] = typer.Option(None, "--search-replace-to", help="Replacement string."),
) -> None:
    """Import a SQL file directly into an environment (files up to 50MB)."""
    check_import_size(file)
    query = import_query(drop_tables, disable_foreign_keys, search_replace_from, search_replace_to)
    with get_client() as client:
        response = client.post_file(f"{ENVIRONMENTS}/{env_id}/db/import", file, query)
    render_import_result(response, get_format(ctx))


@import_session_app.command(name="create")
def import_session_create(
    ctx: typer.Context,
    env_id: str = typer.Argument(..., help="Environment ID."),
    filename: Optional[str] = typer.Option(None, "--filename", help="Name of the file to upload."),
    content_length: Optional[int] = typer.Option(None, "--content-length", help="File size in bytes."),
    drop_tables: bool = typer.Option(False, "--drop-tables", help="Drop existing tables first."),
    disable_foreign_keys: bool = typer.Option(
        False, "--disable-foreign-keys", help="Disable foreign key checks during import."
    ),
    search_replace_from: Optional[str] = typer.Option(None, "--search-replace-from", help="Search string."),
    search_replace_to: Optional[str] = typer.Option(None, "--search-replace-to", help="Replacement string."),
) -> None:
    """Create an environment import session and get an upload URL."""
    body = compact(
        filename=filename,
        content_length=content_length,
        options=import_options(drop_tables, disable_foreign_keys, search_replace_from, search_replace_to),
    )
    with get_client() as client:
        response = client.post(f"{ENVIRONMENTS}/{env_id}/db/imports", body)
    render_import_session(response, get_format(ctx), f"vector env db import-session run {env_id}")


@import_session_app.command(name="run")
def import_session_run(
    ctx: typer.Context,
    env_id: str = typer.Argument(..., help="Environment ID."),
    import_id: str = typer.Argument(..., help="Import session ID."),
) -> None:
    """Run an uploaded import."""
    with get_client() as client:
        response = client.post(f"{ENVIRONMENTS}/{env_id}/db/imports/{import_id}/run")
    render_action(response, get_format(ctx), lambda d: f"Import started: {import_id} ({field(d, 'status')})")


@import_session_app.command(name="status")
def import_session_status(
    ctx: typer.Context,
    env_id: str = typer.Argument(..., help="Environment ID."),
    import_id: str = typer.Argument(..., help="Import session ID."),
) -> None:
    """Check the status of an import session."""
    with get_client() as client:
        response = client.get(f"{ENVIRONMENTS}/{env_id}/db/imports/{import_id}")
    render_detail(response, get_format(ctx), import_status_pairs)


@db_app.command(name="promote")
def db_promote(
    ctx: typer.Context,
    env_id: str = typer.Argument(..., help="Environment ID."),
    drop_tables: bool = typer.Option(False, "--drop-tables", help="Drop existing tables first."),
    disable_foreign_keys: bool = typer.Option(
        False, "--disable-foreign-keys", help="Disable foreign key checks during promote."
    ),
) -> None:
    """Promote the dev database into this environment."""
    body = compact(
        drop_tables=True if drop_tables else None,
        disable_foreign_keys=True if disable_foreign_keys else None,
    )
    with get_client() as client:
        response = client.post(f"{ENVIRONMENTS}/{env_id}/db/promote", body)
    render_action(
        response,
        get_format(ctx),
        lambda d: f"Promote started: {field(d, 'id')} ({field(d, 'status')})",
    )


@db_app.command(name="promote-status")
def db_promote_status(
    ctx: typer.Context,
    env_id: str = typer.Argument(..., help="Environment ID."),
    promote_id: str = typer.Argument(..., help="Promote ID."),
) -> None:
    """Check the status of a database promote."""
    with get_client() as client:
        response = client.get(f"{ENVIRONMENTS}/{env_id}/db/promotes/{promote_id}")
    render_detail(
        response,
        get_format(ctx),
        lambda d: [
            ("Promote ID", field(d, "id")),
            ("Status", field(d, "status")),
            ("Duration (ms)", format_option(number(d, "duration_ms"))),
            ("Error", field(d, "error_message")),
            ("Created", field(d, "created_at")),
            ("Completed", field(d, "completed_at")),
        ],
    )
