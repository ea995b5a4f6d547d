# =============================================================================
# alfa_core/config.py - Process-wide Configuration
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Resolves the gateway's settings once, at process start, into a frozen
#   AlfaConfig value.  That value is handed to the upstream client and the
#   MCP server constructors; request-handling code never reads os.environ.
#
# SETTINGS (environment variables, optionally loaded from .env):
#   ALFA_CRAWLER_API_BASE_URL  → base URL of the Alfa Crawler API
#   ALFA_API_KEY               → bearer token (optional)
#   DEFAULT_MINIMUM_TOKENS     → floor for the get-library-docs token budget
#   ALFA_REQUEST_TIMEOUT       → per-request timeout in seconds (optional;
#                                unset means "rely on the transport")
#
# KEY PERSISTENCE:
#   save_api_key() writes ALFA_API_KEY into the .env file with
#   python-dotenv's set_key, replacing an existing line or appending one.
# =============================================================================

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional
from urllib.parse import urlsplit

from dotenv import set_key

logger = logging.getLogger(__name__)

DEFAULT_MINIMUM_TOKENS = 5000

API_KEY_VAR = "ALFA_API_KEY"
BASE_URL_VAR = "ALFA_CRAWLER_API_BASE_URL"
MINIMUM_TOKENS_VAR = "DEFAULT_MINIMUM_TOKENS"
TIMEOUT_VAR = "ALFA_REQUEST_TIMEOUT"

# The .env file lives next to main.py, one level above this package.
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_ENV_PATH = PROJECT_ROOT / ".env"


@dataclass(frozen=True)
class AlfaConfig:
    """Immutable settings shared by every tool call."""

    base_url: Optional[str] = None         # e.g. "https://crawler.alfa.dev/api"
    api_key: Optional[str] = None          # sent as "Authorization: Bearer <key>"
    minimum_tokens: int = DEFAULT_MINIMUM_TOKENS
    request_timeout: Optional[float] = None  # seconds; None = no local timeout

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)


def load_config(environ: Optional[Mapping[str, str]] = None) -> AlfaConfig:
    """Build an AlfaConfig from environment variables.

    Invalid numeric values are logged and replaced by their defaults, so a
    typo in the environment degrades the server instead of stopping it.

    Args:
        environ: Mapping to read from.  Defaults to os.environ; tests pass
            a plain dict.

    Returns:
        A frozen AlfaConfig.
    """
    env = os.environ if environ is None else environ

    base_url = env.get(BASE_URL_VAR) or None
    if base_url is None:
        logger.error(f"{BASE_URL_VAR} environment variable is not set.")
    elif urlsplit(base_url).scheme not in ("http", "https"):
        logger.error(f"{BASE_URL_VAR} ({base_url}) must start with http:// or https://.")

    api_key = env.get(API_KEY_VAR) or None
    if api_key is None:
        logger.warning(f"{API_KEY_VAR} environment variable is not set. API calls may fail.")

    return AlfaConfig(
        base_url=base_url,
        api_key=api_key,
        minimum_tokens=_parse_minimum_tokens(env.get(MINIMUM_TOKENS_VAR)),
        request_timeout=_parse_timeout(env.get(TIMEOUT_VAR)),
    )


def _parse_minimum_tokens(raw: Optional[str]) -> int:
    if not raw:
        return DEFAULT_MINIMUM_TOKENS
    try:
        value = int(raw, 10)
    except ValueError:
        value = 0
    if value <= 0:
        logger.warning(
            f"Invalid {MINIMUM_TOKENS_VAR} ({raw}). Using default: {DEFAULT_MINIMUM_TOKENS}"
        )
        return DEFAULT_MINIMUM_TOKENS
    return value


def _parse_timeout(raw: Optional[str]) -> Optional[float]:
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        value = 0.0
    if value <= 0:
        logger.warning(f"Invalid {TIMEOUT_VAR} ({raw}). Requests will not time out locally.")
        return None
    return value


def save_api_key(env_path: Path, api_key: str) -> None:
    """Persist ALFA_API_KEY into a .env file.

    The file is created if it does not exist yet.  Any failure surfaces as
    OSError; the caller decides whether that is fatal.
    """
    env_path = Path(env_path)
    env_path.touch(exist_ok=True)
    success, _, _ = set_key(str(env_path), API_KEY_VAR, api_key)
    if not success:
        raise OSError(f"Could not write {API_KEY_VAR} to {env_path}")
