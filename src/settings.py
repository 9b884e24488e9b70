"""Static configuration for autotagger.

Host-side settings (database, paging, users, logging) live in a single JSON
file for quick edits without touching Python. The tagging options themselves
are kept in the settings store, not here.
"""

import json
import os

from dotenv import load_dotenv

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

CONFIG_PATH = os.environ.get("AUTOTAGGER_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _resolve_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


load_dotenv()

_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Where to store the SQLite database (settings, posts, tags).
DB_PATH = _resolve_path(_CONFIG.get("database", {}).get("path", "autotagger.db"))

# Target content type and backfill page size. The page size bounds how long a
# single backfill request runs.
_tagging = _CONFIG.get("tagging", {})
TARGET_POST_TYPE = _tagging.get("target_post_type", "post")
PAGE_SIZE = int(_tagging.get("page_size", 200))

# Continuation tokens are signed with AUTOTAGGER_SECRET from the environment.
TOKEN_SECRET = os.getenv("AUTOTAGGER_SECRET")
TOKEN_LIFETIME_SECONDS = int(_CONFIG.get("tokens", {}).get("lifetime_seconds", 86400))

# HTTP control surface.
_server = _CONFIG.get("server", {})
SERVER_HOST = _server.get("host", "127.0.0.1")
SERVER_PORT = int(_server.get("port", 8765))

# Known users and their roles, keyed by the X-Autotagger-User header value.
USERS: dict[str, str] = dict(_CONFIG.get("users", {}))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
