"""CLI configuration: invocation state, stored settings and the API client factory."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

import typer
from pydantic import BaseModel
from pydantic import ValidationError as _ModelValidationError

from vector_common import (
    ENV_API_KEY,
    Config,
    Credentials,
    config_dir,
    config_file,
    credentials_file,
)
from vector_common.constants import CONFIG_DIR_MODE, CREDENTIALS_FILE_MODE

from vector_cli.errors import ConfigError, UnauthorizedError
from vector_cli.output import OutputFormat
from vector_cli.services.api_client import ApiClient

NOT_LOGGED_IN = "Not logged in. Run 'vector auth login' to authenticate."

_M = TypeVar("_M", bound=BaseModel)


@dataclass(frozen=True)
class AppState:
    """Global options, resolved in the root callback and refined by per-command flags."""

    format: OutputFormat = OutputFormat.JSON
    json_flag: bool = False
    no_json_flag: bool = False

    @classmethod
    def from_flags(cls, json_flag: bool, no_json_flag: bool) -> AppState:
        return cls(OutputFormat.detect(json_flag, no_json_flag), json_flag, no_json_flag)

    def with_flags(self, json_flag: bool = False, no_json_flag: bool = False) -> AppState:
        """Merge flags given after a subcommand; ``--json`` still wins."""
        return AppState.from_flags(self.json_flag or json_flag, self.no_json_flag or no_json_flag)


def get_state(ctx: typer.Context) -> AppState:
    """Return the AppState stored on the root context."""
    state = ctx.find_root().obj
    if isinstance(state, AppState):
        return state
    return AppState()


def get_format(ctx: typer.Context) -> OutputFormat:
    return get_state(ctx).format


# ---------------------------------------------------------------------------
# Stored settings
# ---------------------------------------------------------------------------


def _load(model: type[_M], path: Path, label: str) -> _M:
    if not path.exists():
        return model()
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read {label}: {exc}") from exc
    try:
        return model.model_validate_json(content)
    except _ModelValidationError as exc:
        raise ConfigError(f"Failed to parse {label}: {exc}") from exc


def _ensure_config_dir() -> Path:
    directory = config_dir()
    if not directory.exists():
        try:
            directory.mkdir(parents=True)
            if os.name == "posix":
                directory.chmod(CONFIG_DIR_MODE)
        except OSError as exc:
            raise ConfigError(f"Failed to create config directory: {exc}") from exc
    return directory


def _save(model: BaseModel, path: Path, label: str, mode: int) -> None:
    """Write ``model`` to ``path``, created with ``mode`` so it is never wider."""
    _ensure_config_dir()
    content = model.model_dump_json(indent=2, exclude_none=True)
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(content)
        # O_CREAT leaves the mode of an existing file alone
        if os.name == "posix":
            os.chmod(path, mode)
    except OSError as exc:
        raise ConfigError(f"Failed to write {label}: {exc}") from exc


def load_config() -> Config:
    return _load(Config, config_file(), "config")


def load_credentials() -> Credentials:
    return _load(Credentials, credentials_file(), "credentials")


def save_credentials(creds: Credentials) -> None:
    """Persist credentials, readable by the owner only."""
    _save(creds, credentials_file(), "credentials", CREDENTIALS_FILE_MODE)


def clear_credentials(creds: Credentials) -> None:
    creds.api_key = None
    save_credentials(creds)


# ---------------------------------------------------------------------------
# Client factory
# ---------------------------------------------------------------------------


def get_api_key(creds: Credentials) -> str | None:
    """Resolve the API token: ``VECTOR_API_KEY`` first, then stored credentials."""
    return os.environ.get(ENV_API_KEY) or creds.api_key


def get_client() -> ApiClient:
    """Build an authenticated client from stored settings."""
    config = load_config()
    creds = load_credentials()
    token = get_api_key(creds)
    if not token:
        raise UnauthorizedError(NOT_LOGGED_IN)
    return ApiClient(config.api_url, token)
