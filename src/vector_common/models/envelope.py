"""Wire envelopes shared by every Vector API endpoint."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, Field, Strict

# JSON integers only: booleans, floats and numeric strings are rejected.
Count = Annotated[int, Strict(), Field(ge=0)]


class ErrorEnvelope(BaseModel):
    """Body of a non-2xx response."""

    message: str | None = None
    errors: dict[str, list[str]] | None = None


class PaginationMeta(BaseModel):
    """``meta`` block of a paginated list response."""

    current_page: Count
    last_page: Count
    total: Count
