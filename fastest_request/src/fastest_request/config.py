from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from . import __version__

# Provider URL templates; "{id}" is replaced by the (quoted) identifier.
DEFAULT_PROVIDER_URLS = (
    "https://cdn.apicep.com/file/apicep/{id}.json",
    "http://viacep.com.br/ws/{id}/json/",
)


def _env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    return value if value is not None else default


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return int(value)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_list(s: str) -> Tuple[str, ...]:
    """Split a comma or semicolon separated env value into its non-empty parts."""
    return tuple(p.strip() for p in s.replace(";", ",").split(",") if p.strip())


def _env_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    value = os.getenv(name)
    parts = _parse_list(value) if value is not None else ()
    return parts or default


@dataclass(frozen=True)
class RaceConfig:
    provider_urls: Tuple[str, ...] = _env_list("FR_PROVIDER_URLS", DEFAULT_PROVIDER_URLS)
    default_timeout: str = _env_str("FR_DEFAULT_TIMEOUT", "1s")
    # Off by default: any HTTP response, whatever its status, wins the race.
    fail_on_http_error: bool = _env_bool("FR_FAIL_ON_HTTP_ERROR", False)
    user_agent: str = _env_str("FR_USER_AGENT", f"fastest-request/{__version__}")
    log_level: str = _env_str("FR_LOG_LEVEL", "ERROR")

    def headers(self) -> Dict[str, str]:
        return {"User-Agent": self.user_agent}


@dataclass(frozen=True)
class ServerConfig:
    host: str = _env_str("FR_HOST", "0.0.0.0")
    port: int = _env_int("FR_PORT", 8080)
    log_level: str = _env_str("FR_LOG_LEVEL", "INFO")
