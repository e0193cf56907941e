"""Shared constants for the Vector CLI."""

# API
DEFAULT_BASE_URL = "https://api.builtfast.com"
API_PREFIX = "/api/v1/vector"
MCP_SERVER_URL = "https://api.builtfast.com/mcp/vector"

# Local storage
APP_NAME = "vector"
CONFIG_FILE = "config.json"
CREDENTIALS_FILE = "credentials.json"
CONFIG_DIR_MODE = 0o700
CREDENTIALS_FILE_MODE = 0o600

# Environment overrides
ENV_API_KEY = "VECTOR_API_KEY"
ENV_CONFIG_DIR = "VECTOR_CONFIG_DIR"

# Direct database imports are capped; larger dumps go through import sessions.
DIRECT_IMPORT_MAX_BYTES = 50 * 1024 * 1024

# Listing defaults
DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 15
