"""Register the Vector MCP server with Claude Desktop."""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

import typer

from vector_common import MCP_SERVER_URL

from vector_cli.config import NOT_LOGGED_IN, get_api_key, get_format, load_credentials
from vector_cli.errors import ConfigError, UnauthorizedError
from vector_cli.output import OutputFormat, print_json, print_message

log = logging.getLogger(__name__)

app = typer.Typer(no_args_is_help=True)

SERVER_NAME = "vector"
CLAUDE_CONFIG = Path("Claude") / "claude_desktop_config.json"


def claude_config_path(platform: str | None = None) -> Path:
    """Location of ``claude_desktop_config.json`` on this platform."""
    platform = platform or sys.platform
    if platform == "darwin":
        return Path.home() / "Library" / "Application Support" / CLAUDE_CONFIG
    if platform.startswith("win"):
        appdata = os.environ.get("APPDATA")
        if not appdata:
            raise ConfigError("Could not determine AppData directory")
        return Path(appdata) / CLAUDE_CONFIG
    if platform.startswith("linux"):
        root = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
        return Path(root) / CLAUDE_CONFIG
    raise ConfigError("Unsupported platform")


def server_entry(token: str) -> dict[str, Any]:
    return {
        "command": "npx",
        "args": [
            "-y",
            "mcp-remote",
            MCP_SERVER_URL,
            "--header",
            f"Authorization: Bearer {token}",
        ],
    }


def _load_claude_config(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read Claude config: {exc}") from exc
    try:
        config = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Failed to parse Claude config: {exc}") from exc
    if not isinstance(config, dict) or not isinstance(config.get("mcpServers", {}), dict):
        raise ConfigError("Failed to parse Claude config: expected a JSON object")
    return config


def _write_claude_config(path: Path, config: dict[str, Any]) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigError(f"Failed to create Claude config directory: {exc}") from exc
    try:
        path.write_text(json.dumps(config, indent=2), encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to write Claude config: {exc}") from exc


@app.command()
def setup(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", help="Overwrite an existing Vector entry."),
) -> None:
    """Add the Vector MCP server to Claude Desktop."""
    token = get_api_key(load_credentials())
    if not token:
        raise UnauthorizedError(NOT_LOGGED_IN)

    path = claude_config_path()
    config = _load_claude_config(path)
    servers = config.setdefault("mcpServers", {})

    exists = SERVER_NAME in servers
    if exists and not force:
        raise ConfigError("Vector MCP server already configured. Use --force to overwrite.")

    servers[SERVER_NAME] = server_entry(token)
    _write_claude_config(path, config)
    log.debug("wrote MCP server entry to %s", path)

    action = "updated" if exists else "added"
    if get_format(ctx) is OutputFormat.JSON:
        print_json(
            {
                "success": True,
                "action": action,
                "config_path": str(path),
                "message": f"Vector MCP server {action} in Claude Desktop config",
            }
        )
        return
    print_message(f"Vector MCP server {action} in Claude Desktop config.")
    print_message(f"Config written to: {path}")
    print_message("\nRestart Claude Desktop to apply changes.")
