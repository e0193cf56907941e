"""Shared Pydantic models."""

from vector_common.models.envelope import ErrorEnvelope, PaginationMeta
from vector_common.models.settings import Config, Credentials
from vector_common.models.user import UserData, UserResponse

__all__ = [
    "Config",
    "Credentials",
    "ErrorEnvelope",
    "PaginationMeta",
    "UserData",
    "UserResponse",
]
