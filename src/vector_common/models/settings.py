"""On-disk configuration and credentials."""

from __future__ import annotations

from pydantic import BaseModel


class Config(BaseModel):
    """``config.json``: user overrides for the API endpoint."""

    api_url: str | None = None


class Credentials(BaseModel):
    """``credentials.json``: the stored API token."""

    api_key: str | None = None
