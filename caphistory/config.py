import os
from dataclasses import dataclass
from typing import Optional

from endpoints import DEFAULT_PORT


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value in ("1", "true", "TRUE")


@dataclass
class Settings:
    port: int = DEFAULT_PORT
    timeout: float = 30.0
    debug: bool = False
    # Clusters ship self-signed certificates, so verification is opt-in.
    verify_tls: bool = False
    http_log_path: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            port=_env_int("CAPHISTORY_PORT", DEFAULT_PORT),
            timeout=_env_float("CAPHISTORY_TIMEOUT", 30.0),
            debug=_env_bool("CAPHISTORY_DEBUG"),
            verify_tls=_env_bool("CAPHISTORY_VERIFY_TLS"),
            http_log_path=os.getenv("CAPHISTORY_HTTP_LOG") or None,
        )
