"""Output negotiation: JSON for scripts, tables for humans."""

from __future__ import annotations

import enum
import json
import sys
from typing import Any, Iterable, Sequence

from pydantic import ValidationError as _ModelValidationError
from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from vector_common import PaginationMeta

from vector_cli.errors import OtherError

console = Console()
err_console = Console(stderr=True)

PLACEHOLDER = "-"


class OutputFormat(enum.Enum):
    JSON = "json"
    TABLE = "table"

    @classmethod
    def detect(cls, json_flag: bool, no_json_flag: bool, is_tty: bool | None = None) -> OutputFormat:
        """Resolve the output mode.

        ``--json`` wins over everything, including ``--no-json``.  Without
        either flag, an interactive stdout gets tables and anything else
        (pipes, files) gets JSON.
        """
        if json_flag:
            return cls.JSON
        if no_json_flag:
            return cls.TABLE
        if is_tty is None:
            is_tty = sys.stdout.isatty()
        return cls.TABLE if is_tty else cls.JSON


# ---------------------------------------------------------------------------
# Printers
# ---------------------------------------------------------------------------


def print_json(data: Any) -> None:
    """Pretty-print ``data``; a serialization failure is reported, not raised."""
    try:
        rendered = json.dumps(data, indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        err_console.out(f"Error serializing JSON: {exc}", highlight=False)
        return
    console.out(rendered, highlight=False)


def print_message(message: str) -> None:
    console.out(message, highlight=False)


def print_notice(message: str) -> None:
    """Secondary information that must not pollute stdout."""
    err_console.out(message, highlight=False)


def print_error(message: str) -> None:
    err_console.out(f"Error: {message}", highlight=False)


def print_table(headers: Sequence[str], rows: Iterable[Sequence[str]]) -> None:
    table = Table(box=box.SQUARE, header_style="bold", show_lines=False)
    for header in headers:
        table.add_column(header)
    for row in rows:
        table.add_row(*(Text(cell) for cell in row))
    console.print(table)


def print_key_value(pairs: Sequence[tuple[str, str]]) -> None:
    """Print ``key: value`` lines with keys padded to the widest key."""
    width = max((len(key) for key, _ in pairs), default=0) + 1
    for key, value in pairs:
        console.out(f"{key + ':':<{width}} {value}", highlight=False)


# ---------------------------------------------------------------------------
# Cell formatting
# ---------------------------------------------------------------------------


def format_option(value: Any) -> str:
    if value is None:
        return PLACEHOLDER
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def format_bool(value: bool) -> str:
    return "Yes" if value else "No"


def format_list(values: Any) -> str:
    """Join a JSON array of strings, or ``-`` when empty or absent."""
    if not isinstance(values, list):
        return PLACEHOLDER
    items = [v for v in values if isinstance(v, str)]
    return ", ".join(items) if items else PLACEHOLDER


def text(obj: Any, key: str) -> str | None:
    """Return ``obj[key]`` when it is a string, else None."""
    if isinstance(obj, dict):
        value = obj.get(key)
        if isinstance(value, str):
            return value
    return None


def number(obj: Any, key: str) -> int | None:
    """Return ``obj[key]`` when it is a non-negative integer, else None."""
    if isinstance(obj, dict):
        value = obj.get(key)
        if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
            return value
    return None


def flag(obj: Any, key: str) -> bool | None:
    if isinstance(obj, dict):
        value = obj.get(key)
        if isinstance(value, bool):
            return value
    return None


def field(obj: Any, key: str) -> str:
    """String field or placeholder."""
    return format_option(text(obj, key))


def data_of(response: Any) -> Any:
    if isinstance(response, dict):
        return response.get("data")
    return None


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


def extract_pagination(response: Any) -> tuple[int, int, int] | None:
    """Return ``(current_page, last_page, total)`` or None if ``meta`` is incomplete."""
    if not isinstance(response, dict) or "meta" not in response:
        return None
    try:
        meta = PaginationMeta.model_validate(response["meta"])
    except _ModelValidationError:
        return None
    return meta.current_page, meta.last_page, meta.total


def print_pagination(current_page: int, last_page: int, total: int) -> None:
    if last_page > 1:
        console.out(f"\nPage {current_page} of {last_page} ({total} total)", highlight=False)


# ---------------------------------------------------------------------------
# Composite renderers
# ---------------------------------------------------------------------------


def render_list(
    response: Any,
    fmt: OutputFormat,
    *,
    headers: Sequence[str],
    row: Any,
    empty: str,
    paginated: bool = True,
) -> None:
    """Render a list response: JSON passthrough, or a table of ``row(item)``."""
    if fmt is OutputFormat.JSON:
        print_json(response)
        return

    items = data_of(response)
    if not isinstance(items, list):
        raise OtherError("Invalid response format")
    if not items:
        print_message(empty)
        return

    print_table(headers, [row(item) for item in items])

    if paginated:
        pagination = extract_pagination(response)
        if pagination is not None:
            print_pagination(*pagination)


def render_detail(response: Any, fmt: OutputFormat, pairs: Any) -> None:
    """Render a show response: JSON passthrough, or key/value lines of ``pairs(data)``."""
    if fmt is OutputFormat.JSON:
        print_json(response)
        return
    print_key_value(pairs(data_of(response)))


def render_action(response: Any, fmt: OutputFormat, message: Any) -> None:
    """Render a mutation result: JSON passthrough, or a one-line confirmation.

    ``message`` is either a string or a callable receiving the ``data`` block.
    """
    if fmt is OutputFormat.JSON:
        print_json(response)
        return
    print_message(message(data_of(response)) if callable(message) else message)
