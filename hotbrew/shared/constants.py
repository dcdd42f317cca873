"""Shared constants used across hotbrew."""
from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# Application version (reported by ``hotbrew version``) of the installed distribution
try:
    VERSION: str = version("hotbrew")
except PackageNotFoundError:
    VERSION = "0.0.0+unknown"

SERVICE_NAME: str = "hotbrew"
SERVER_SERVICE_NAME: str = "hotbrew-server"

TAGLINE: str = "Your morning, piping hot."
DIGEST_TITLE: str = "Hotbrew Digest"

# Database settings
DB_BUSY_TIMEOUT_MS: int = 30000
DB_FILE_MODE: int = 0o600
TOKEN_FILE_MODE: int = 0o600
DB_DIR_MODE: int = 0o700

# Remote server
DEFAULT_SERVER_URL: str = "https://hotbrew.dev"
DEFAULT_SERVE_ADDR: str = ":8080"

# HTTP
USER_AGENT: str = "hotbrew/1.0"
HTTP_TIMEOUT_SECONDS: float = 15.0
SYNC_TIMEOUT_SECONDS: float = 60.0
MAX_CONCURRENT_SOURCES: int = 4

# Digest defaults
DEFAULT_DIGEST_WINDOW_HOURS: int = 24
DEFAULT_DIGEST_MAX: int = 25
DEFAULT_SYNC_INTERVAL_MINUTES: int = 30
DEFAULT_PROFILE: str = "default"

STARTUP_LINE: str = "command -v hotbrew &>/dev/null && hotbrew"

CAVEATS: str = (
    "☕ hotbrew installed!\n"
    "Run 'hotbrew' to start your morning digest.\n"
    "To show hotbrew every time you open a terminal, add to your ~/.zshrc:\n"
    f"  {STARTUP_LINE}\n"
    "Config file: ~/.config/hotbrew/hotbrew.yaml"
)
