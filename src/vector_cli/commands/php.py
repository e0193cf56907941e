"""Top-level ``vector php-versions`` command."""

from __future__ import annotations

from typing import Any

import typer

from vector_common import API_PREFIX

from vector_cli.config import get_client, get_format
from vector_cli.output import format_option, render_list


def _version_row(version: Any) -> list[str]:
    if isinstance(version, dict):
        version = version.get("version")
    return [format_option(version)]


def php_versions(ctx: typer.Context) -> None:
    """List available PHP versions."""
    with get_client() as client:
        response = client.get(f"{API_PREFIX}/php-versions")
    render_list(
        response,
        get_format(ctx),
        headers=["Version"],
        row=_version_row,
        empty="No PHP versions available.",
        paginated=False,
    )
