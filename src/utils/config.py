import logging
import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_API_URL = "http://localhost:8080/api"
DEFAULT_DB_PATH = "data/market.sqlite"
DEFAULT_HTTP_TIMEOUT = 10.0


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        # logger module imports this one, so use the bare logging module here
        logging.getLogger(__name__).warning(
            f"Ignoring invalid {name}={raw!r}, using {default}."
        )
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class Settings:
    """
    Runtime configuration, read from the environment once at start-up.

    Fields:
      - api_url: base path every API request is resolved against
      - db_path: sqlite file holding the credential and cart snapshot
      - http_timeout: seconds before a request is abandoned
      - log_file: when set, logs are written here instead of the terminal
      - debug: enables DEBUG level logging
    """

    api_url: str = DEFAULT_API_URL
    db_path: str = DEFAULT_DB_PATH
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    log_file: Optional[str] = None
    debug: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            api_url=os.getenv("MARKET_API_URL") or DEFAULT_API_URL,
            db_path=os.getenv("MARKET_DB_PATH") or DEFAULT_DB_PATH,
            http_timeout=_float_env("MARKET_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
            log_file=os.getenv("MARKET_LOG_FILE") or None,
            debug=bool(os.getenv("DEBUG")),
        )
