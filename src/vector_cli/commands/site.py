"""Site management commands."""

from __future__ import annotations

from typing import Any, List, Optional

import typer

from vector_common import API_PREFIX, DEFAULT_PAGE, DEFAULT_PER_PAGE

from vector_cli.config import get_client, get_format
from vector_cli.output import (
    OutputFormat,
    data_of,
    field,
    format_list,
    format_option,
    number,
    print_json,
    print_key_value,
    print_message,
    print_notice,
    render_action,
    render_detail,
    render_list,
    text,
)
from vector_cli.services.api_client import compact

app = typer.Typer(no_args_is_help=True)
ssh_key_app = typer.Typer(no_args_is_help=True)
app.add_typer(ssh_key_app, name="ssh-key", help="Manage SSH keys attached to a site.")

SITES = f"{API_PREFIX}/sites"


def _created(data: Any) -> str:
    return f"{field(data, 'id')} ({field(data, 'status')})"


def _site_row(site: Any) -> list[str]:
    return [
        field(site, "id"),
        field(site, "status"),
        field(site, "your_customer_id"),
        field(site, "dev_domain"),
    ]


def _site_pairs(site: Any) -> list[tuple[str, str]]:
    return [
        ("ID", field(site, "id")),
        ("Status", field(site, "status")),
        ("Customer ID", field(site, "your_customer_id")),
        ("Dev Domain", field(site, "dev_domain")),
        ("Dev PHP Version", field(site, "dev_php_version")),
        ("Dev DB Host", field(site, "dev_db_host")),
        ("Dev DB Name", field(site, "dev_db_name")),
        ("Tags", format_list(site.get("tags") if isinstance(site, dict) else None)),
        ("Created", field(site, "created_at")),
        ("Updated", field(site, "updated_at")),
    ]


@app.command(name="list")
def list_sites(
    ctx: typer.Context,
    page: int = typer.Option(DEFAULT_PAGE, help="Page number."),
    per_page: int = typer.Option(DEFAULT_PER_PAGE, help="Items per page."),
) -> None:
    """List all sites."""
    with get_client() as client:
        response = client.get(SITES, {"page": page, "per_page": per_page})
    render_list(
        response,
        get_format(ctx),
        headers=["ID", "Status", "Customer ID", "Dev Domain"],
        row=_site_row,
        empty="No sites found.",
    )


@app.command()
def show(ctx: typer.Context, site_id: str = typer.Argument(..., metavar="ID", help="Site ID.")) -> None:
    """Show site details."""
    with get_client() as client:
        response = client.get(f"{SITES}/{site_id}")
    render_detail(response, get_format(ctx), _site_pairs)


@app.command()
def create(
    ctx: typer.Context,
    customer_id: str = typer.Option(..., "--customer-id", help="Your own identifier for this customer."),
    dev_php_version: str = typer.Option(..., "--dev-php-version", help="PHP version for the dev environment."),
    tags: Optional[List[str]] = typer.Option(None, "--tags", help="Tag to attach (repeatable)."),
) -> None:
    """Create a new site."""
    body = compact(your_customer_id=customer_id, dev_php_version=dev_php_version, tags=tags)
    with get_client() as client:
        response = client.post(SITES, body)
    render_action(response, get_format(ctx), lambda d: f"Site created: {_created(d)}")


@app.command()
def update(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., metavar="ID", help="Site ID."),
    customer_id: Optional[str] = typer.Option(None, "--customer-id", help="New customer identifier."),
    tags: Optional[List[str]] = typer.Option(None, "--tags", help="Replace tags (repeatable)."),
) -> None:
    """Update a site."""
    body = compact(your_customer_id=customer_id, tags=tags)
    with get_client() as client:
        response = client.put(f"{SITES}/{site_id}", body)
    render_action(response, get_format(ctx), "Site updated successfully.")


@app.command()
def delete(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., metavar="ID", help="Site ID."),
    force: bool = typer.Option(False, "--force", help="Skip confirmation."),
) -> None:
    """Delete a site."""
    if not force and not typer.confirm(
        f"Are you sure you want to delete site {site_id}?", default=False, err=True
    ):
        print_message("Aborted.")
        return

    with get_client() as client:
        response = client.delete(f"{SITES}/{site_id}")
    render_action(response, get_format(ctx), "Site deleted successfully.")


@app.command(name="clone")
def clone_site(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., metavar="ID", help="Site ID to clone."),
    customer_id: Optional[str] = typer.Option(None, "--customer-id", help="Customer identifier for the clone."),
    dev_php_version: Optional[str] = typer.Option(None, "--dev-php-version", help="PHP version for the clone."),
    tags: Optional[List[str]] = typer.Option(None, "--tags", help="Tag to attach (repeatable)."),
) -> None:
    """Clone a site."""
    body = compact(your_customer_id=customer_id, dev_php_version=dev_php_version, tags=tags)
    with get_client() as client:
        response = client.post(f"{SITES}/{site_id}/clone", body)
    render_action(response, get_format(ctx), lambda d: f"Site clone initiated: {_created(d)}")


@app.command()
def suspend(ctx: typer.Context, site_id: str = typer.Argument(..., metavar="ID", help="Site ID.")) -> None:
    """Suspend a site."""
    with get_client() as client:
        response = client.put(f"{SITES}/{site_id}/suspend")
    render_action(response, get_format(ctx), "Site suspension initiated.")


@app.command()
def unsuspend(ctx: typer.Context, site_id: str = typer.Argument(..., metavar="ID", help="Site ID.")) -> None:
    """Unsuspend a site."""
    with get_client() as client:
        response = client.put(f"{SITES}/{site_id}/unsuspend")
    render_action(response, get_format(ctx), "Site unsuspension initiated.")


@app.command(name="reset-sftp-password")
def reset_sftp_password(
    ctx: typer.Context, site_id: str = typer.Argument(..., metavar="ID", help="Site ID.")
) -> None:
    """Reset the dev SFTP password."""
    with get_client() as client:
        response = client.post(f"{SITES}/{site_id}/sftp/reset-password")

    if get_format(ctx) is OutputFormat.JSON:
        print_json(response)
        return

    data = data_of(response)
    sftp = data.get("dev_sftp") if isinstance(data, dict) else None
    if not isinstance(sftp, dict):
        print_message("SFTP password reset successfully.")
        return
    print_key_value(
        [
            ("Hostname", field(sftp, "hostname")),
            ("Port", format_option(number(sftp, "port"))),
            ("Username", field(sftp, "username")),
            ("Password", field(sftp, "password")),
        ]
    )


@app.command(name="reset-db-password")
def reset_db_password(
    ctx: typer.Context, site_id: str = typer.Argument(..., metavar="ID", help="Site ID.")
) -> None:
    """Reset the dev database password."""
    with get_client() as client:
        response = client.post(f"{SITES}/{site_id}/db/reset-password")
    render_detail(
        response,
        get_format(ctx),
        lambda d: [
            ("Username", field(d, "dev_db_username")),
            ("Password", field(d, "dev_db_password")),
        ],
    )


@app.command(name="purge-cache")
def purge_cache(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., metavar="ID", help="Site ID."),
    cache_tag: Optional[str] = typer.Option(None, "--cache-tag", help="Purge only this cache tag."),
    url: Optional[str] = typer.Option(None, "--url", help="Purge only this URL."),
) -> None:
    """Purge the site's CDN cache."""
    with get_client() as client:
        response = client.post(f"{SITES}/{site_id}/purge-cache", compact(cache_tag=cache_tag, url=url))
    render_action(response, get_format(ctx), "Cache purged successfully.")


@app.command()
def logs(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., metavar="ID", help="Site ID."),
    start_time: Optional[str] = typer.Option(None, "--start-time", help="Start of the time range."),
    end_time: Optional[str] = typer.Option(None, "--end-time", help="End of the time range."),
    limit: Optional[int] = typer.Option(None, "--limit", help="Maximum number of rows."),
    environment: Optional[str] = typer.Option(None, "--environment", help="Environment name."),
    deployment_id: Optional[str] = typer.Option(None, "--deployment-id", help="Deployment ID."),
    level: Optional[str] = typer.Option(None, "--level", help="Log level."),
    cursor: Optional[str] = typer.Option(None, "--cursor", help="Continue from a previous page."),
) -> None:
    """View site logs."""
    query = {
        "start_time": start_time,
        "end_time": end_time,
        "limit": limit,
        "environment": environment,
        "deployment_id": deployment_id,
        "level": level,
        "cursor": cursor,
    }
    with get_client() as client:
        response = client.get(f"{SITES}/{site_id}/logs", query)

    if get_format(ctx) is OutputFormat.JSON:
        print_json(response)
        return

    data = data_of(response)
    log_block = data.get("logs") if isinstance(data, dict) else None
    tables = log_block.get("tables") if isinstance(log_block, dict) else None
    if not isinstance(tables, list):
        print_message("No logs available.")
        return

    # Rows are positional, typically [timestamp, message, level].
    for table in tables:
        rows = table.get("rows") if isinstance(table, dict) else None
        for row in rows if isinstance(rows, list) else []:
            if not isinstance(row, list):
                continue
            parts = [cell for cell in row if isinstance(cell, str)]
            if parts:
                print_message(" | ".join(parts))

    next_cursor = text(data, "cursor")
    if data.get("has_more") is True and next_cursor:
        print_notice(f"\nMore results available. Use --cursor {next_cursor} to continue.")


@app.command(name="wp-reconfig")
def wp_reconfig(ctx: typer.Context, site_id: str = typer.Argument(..., metavar="ID", help="Site ID.")) -> None:
    """Regenerate wp-config.php."""
    with get_client() as client:
        response = client.post(f"{SITES}/{site_id}/wp/reconfig")
    render_action(response, get_format(ctx), "wp-config.php regenerated successfully.")


# ---------------------------------------------------------------------------
# SSH keys
# ---------------------------------------------------------------------------


def ssh_key_row(key: Any) -> list[str]:
    return [
        field(key, "id"),
        field(key, "name"),
        field(key, "fingerprint"),
        field(key, "created_at"),
    ]


@ssh_key_app.command(name="list")
def ssh_key_list(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., help="Site ID."),
    page: int = typer.Option(DEFAULT_PAGE, help="Page number."),
    per_page: int = typer.Option(DEFAULT_PER_PAGE, help="Items per page."),
) -> None:
    """List SSH keys for a site."""
    with get_client() as client:
        response = client.get(f"{SITES}/{site_id}/ssh-keys", {"page": page, "per_page": per_page})
    render_list(
        response,
        get_format(ctx),
        headers=["ID", "Name", "Fingerprint", "Created"],
        row=ssh_key_row,
        empty="No SSH keys found.",
    )


@ssh_key_app.command(name="add")
def ssh_key_add(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., help="Site ID."),
    name: str = typer.Option(..., "--name", help="Key name."),
    public_key: str = typer.Option(..., "--public-key", help="OpenSSH public key."),
) -> None:
    """Add an SSH key to a site."""
    with get_client() as client:
        response = client.post(f"{SITES}/{site_id}/ssh-keys", {"name": name, "public_key": public_key})
    render_action(
        response,
        get_format(ctx),
        lambda d: f"SSH key added: {field(d, 'name')} ({field(d, 'id')})",
    )


@ssh_key_app.command(name="remove")
def ssh_key_remove(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., help="Site ID."),
    key_id: str = typer.Argument(..., help="SSH key ID."),
) -> None:
    """Remove an SSH key from a site."""
    with get_client() as client:
        response = client.delete(f"{SITES}/{site_id}/ssh-keys/{key_id}")
    render_action(response, get_format(ctx), "SSH key removed successfully.")
