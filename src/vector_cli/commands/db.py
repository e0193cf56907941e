"""Site database import and export commands.

Direct imports upload the SQL file in a single multipart request and are
limited to files of at most 50 MiB.  Larger dumps go through an import
session: the API hands out a pre-signed upload URL, the caller uploads the
file out of band and then asks the API to run the import.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer

from vector_common import API_PREFIX, DIRECT_IMPORT_MAX_BYTES

from vector_cli.config import get_client, get_format
from vector_cli.errors import OtherError
from vector_cli.output import (
    OutputFormat,
    data_of,
    field,
    format_option,
    number,
    print_json,
    print_key_value,
    print_message,
    render_action,
    render_detail,
    text,
)
from vector_cli.services.api_client import compact

app = typer.Typer(no_args_is_help=True)
import_session_app = typer.Typer(no_args_is_help=True)
export_app = typer.Typer(no_args_is_help=True)
app.add_typer(import_session_app, name="import-session", help="Import large databases via pre-signed upload.")
app.add_typer(export_app, name="export", help="Export a site database.")

SITES = f"{API_PREFIX}/sites"


# ---------------------------------------------------------------------------
# Shared with ``vector env db``
# ---------------------------------------------------------------------------


def check_import_size(file_path: Path) -> None:
    """Reject files that are too large for a direct import."""
    try:
        size = file_path.stat().st_size
    except OSError as exc:
        raise OtherError(f"Failed to read file: {exc}") from exc
    if size > DIRECT_IMPORT_MAX_BYTES:
        raise OtherError("File too large for direct import. Use 'import-session' for files over 50MB.")


def import_query(
    drop_tables: bool,
    disable_foreign_keys: bool,
    search_replace_from: str | None,
    search_replace_to: str | None,
) -> dict[str, Any]:
    return compact(
        drop_tables="true" if drop_tables else None,
        disable_foreign_keys="true" if disable_foreign_keys else None,
        search_replace_from=search_replace_from,
        search_replace_to=search_replace_to,
    )


def import_options(
    drop_tables: bool,
    disable_foreign_keys: bool,
    search_replace_from: str | None = None,
    search_replace_to: str | None = None,
) -> dict[str, Any] | None:
    """Build the ``options`` object of an import request, or None when empty.

    ``search_replace`` is only sent when both ends are given.
    """
    options: dict[str, Any] = {}
    if drop_tables:
        options["drop_tables"] = True
    if disable_foreign_keys:
        options["disable_foreign_keys"] = True
    if search_replace_from is not None and search_replace_to is not None:
        options["search_replace"] = {"from": search_replace_from, "to": search_replace_to}
    return options or None


def render_import_result(response: Any, fmt: OutputFormat) -> None:
    if fmt is OutputFormat.JSON:
        print_json(response)
        return
    data = data_of(response)
    if isinstance(data, dict) and data.get("success") is True:
        print_message(f"Database imported successfully ({number(data, 'duration_ms') or 0}ms).")
        return
    raise OtherError(text(data, "error") or "Import failed")


def render_import_session(response: Any, fmt: OutputFormat, run_hint: str) -> None:
    """Show a freshly created import session and how to run it."""
    if fmt is OutputFormat.JSON:
        print_json(response)
        return
    data = data_of(response)
    print_key_value(
        [
            ("Import ID", field(data, "id")),
            ("Status", field(data, "status")),
            ("Upload URL", field(data, "upload_url")),
            ("Expires", field(data, "upload_expires_at")),
        ]
    )
    print_message("\nUpload your SQL file to the URL above, then run:")
    print_message(f"  {run_hint} {text(data, 'id') or 'IMPORT_ID'}")


def import_status_pairs(data: Any) -> list[tuple[str, str]]:
    return [
        ("Import ID", field(data, "id")),
        ("Status", field(data, "status")),
        ("Filename", field(data, "filename")),
        ("Duration (ms)", format_option(number(data, "duration_ms"))),
        ("Error", field(data, "error_message")),
        ("Created", field(data, "created_at")),
        ("Completed", field(data, "completed_at")),
    ]


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command(name="import")
def import_db(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., help="Site ID."),
    file: Path = typer.Argument(..., help="SQL file to import (max 50MB)."),
    drop_tables: bool = typer.Option(False, "--drop-tables", help="Drop existing tables first."),
    disable_foreign_keys: bool = typer.Option(
        False, "--disable-foreign-keys", help="Disable foreign key checks during import."
    ),
    search_replace_from: Optional[str] = typer.Option(None, "--search-replace-from", help="Search string."),
    search_replace_to: Optional[str] = typer.Option(None, "--search-replace-to", help="Replacement string."),
) -> None:
    """Import a SQL file directly (files up to 50MB)."""
    check_import_size(file)
    query = import_query(drop_tables, disable_foreign_keys, search_replace_from, search_replace_to)
    with get_client() as client:
        response = client.post_file(f"{SITES}/{site_id}/db/import", file, query)
    render_import_result(response, get_format(ctx))


@import_session_app.command(name="create")
def import_session_create(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., help="Site ID."),
    filename: Optional[str] = typer.Option(None, "--filename", help="Name of the file to upload."),
    content_length: Optional[int] = typer.Option(None, "--content-length", help="File size in bytes."),
    drop_tables: bool = typer.Option(False, "--drop-tables", help="Drop existing tables first."),
    disable_foreign_keys: bool = typer.Option(
        False, "--disable-foreign-keys", help="Disable foreign key checks during import."
    ),
    search_replace_from: Optional[str] = typer.Option(None, "--search-replace-from", help="Search string."),
    search_replace_to: Optional[str] = typer.Option(None, "--search-replace-to", help="Replacement string."),
) -> None:
    """Create an import session and get an upload URL."""
    body = compact(
        filename=filename,
        content_length=content_length,
        options=import_options(drop_tables, disable_foreign_keys, search_replace_from, search_replace_to),
    )
    with get_client() as client:
        response = client.post(f"{SITES}/{site_id}/db/imports", body)
    render_import_session(response, get_format(ctx), f"vector db import-session run {site_id}")


@import_session_app.command(name="run")
def import_session_run(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., help="Site ID."),
    import_id: str = typer.Argument(..., help="Import session ID."),
) -> None:
    """Run an uploaded import."""
    with get_client() as client:
        response = client.post(f"{SITES}/{site_id}/db/imports/{import_id}/run")
    render_action(response, get_format(ctx), lambda d: f"Import started: {import_id} ({field(d, 'status')})")


@import_session_app.command(name="status")
def import_session_status(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., help="Site ID."),
    import_id: str = typer.Argument(..., help="Import session ID."),
) -> None:
    """Check the status of an import session."""
    with get_client() as client:
        response = client.get(f"{SITES}/{site_id}/db/imports/{import_id}")
    render_detail(response, get_format(ctx), import_status_pairs)


@export_app.command(name="create")
def export_create(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., help="Site ID."),
    export_format: Optional[str] = typer.Option(None, "--format", help="Export format (e.g. sql)."),
) -> None:
    """Start a database export."""
    with get_client() as client:
        response = client.post(f"{SITES}/{site_id}/db/export", compact(format=export_format))

    if get_format(ctx) is OutputFormat.JSON:
        print_json(response)
        return
    data = data_of(response)
    print_message(f"Export started: {field(data, 'id')} ({field(data, 'status')})")
    print_message("\nCheck status with:")
    print_message(f"  vector db export status {site_id} {text(data, 'id') or 'EXPORT_ID'}")


@export_app.command(name="status")
def export_status(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., help="Site ID."),
    export_id: str = typer.Argument(..., help="Export ID."),
) -> None:
    """Check the status of a database export."""
    with get_client() as client:
        response = client.get(f"{SITES}/{site_id}/db/exports/{export_id}")
    render_detail(
        response,
        get_format(ctx),
        lambda d: [
            ("Export ID", field(d, "id")),
            ("Status", field(d, "status")),
            ("Format", field(d, "format")),
            ("Size (bytes)", format_option(number(d, "size_bytes"))),
            ("Duration (ms)", format_option(number(d, "duration_ms"))),
            ("Error", field(d, "error_message")),
            ("Download URL", field(d, "download_url")),
            ("Download Expires", field(d, "download_expires_at")),
            ("Created", field(d, "created_at")),
            ("Completed", field(d, "completed_at")),
        ],
    )
