import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from dotenv import load_dotenv

load_dotenv()

UPLOAD_USER_AGENT = "Sora/1.2026.007 (Android 15; 24122RKC7C; build 2600700)"

CORS_HEADERS: Mapping[str, str] = MappingProxyType(
    {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type, Authorization",
        "Access-Control-Max-Age": "86400",
    }
)


def _optional_float(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    return float(raw)


@dataclass(frozen=True)
class Settings:
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_json: bool = os.getenv("LOG_JSON", "true").lower() == "true"
    upstream_timeout_seconds: float | None = _optional_float(os.getenv("UPSTREAM_TIMEOUT_SECONDS"))
    route_prefix: str = os.getenv("RELAY_ROUTE_PREFIX", "").rstrip("/")
    enable_generic_proxy: bool = os.getenv("ENABLE_GENERIC_PROXY", "true").lower() == "true"


@dataclass(frozen=True)
class RelayConfig:
    """Constants handed to the relay operations when the app is built.

    The upload User-Agent is matched by the upstream to a known mobile client,
    so it is deliberately not read from the environment.
    """

    upload_user_agent: str = UPLOAD_USER_AGENT
    cors_headers: Mapping[str, str] = field(default_factory=lambda: CORS_HEADERS)


settings = Settings()
