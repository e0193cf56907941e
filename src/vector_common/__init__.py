"""Vector Common: shared models and constants for the Vector CLI."""

from vector_common.config import config_dir, config_file, credentials_file
from vector_common.constants import (
    API_PREFIX,
    DEFAULT_BASE_URL,
    DEFAULT_PAGE,
    DEFAULT_PER_PAGE,
    DIRECT_IMPORT_MAX_BYTES,
    ENV_API_KEY,
    ENV_CONFIG_DIR,
    MCP_SERVER_URL,
)
from vector_common.models import (
    Config,
    Credentials,
    ErrorEnvelope,
    PaginationMeta,
    UserData,
    UserResponse,
)

__all__ = [
    "API_PREFIX",
    "Config",
    "Credentials",
    "DEFAULT_BASE_URL",
    "DEFAULT_PAGE",
    "DEFAULT_PER_PAGE",
    "DIRECT_IMPORT_MAX_BYTES",
    "ENV_API_KEY",
    "ENV_CONFIG_DIR",
    "MCP_SERVER_URL",
    "ErrorEnvelope",
    "PaginationMeta",
    "UserData",
    "UserResponse",
    "config_dir",
    "config_file",
    "credentials_file",
]
