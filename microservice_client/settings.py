"""Environment-driven configuration utilities for the microservice client."""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from microservice_client.microservice import Microservice


def _require(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise ValueError(f"{name} is required but was not provided.")
    return value


def _positive_float(name: str, default: str) -> float:
    raw = os.getenv(name, "").strip() or default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a numeric value.") from exc
    if value <= 0:
        raise ValueError(f"{name} must be greater than zero.")
    return value


def _positive_int(name: str, default: str) -> int:
    raw = os.getenv(name, "").strip() or default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer.") from exc
    if value <= 0:
        raise ValueError(f"{name} must be greater than zero.")
    return value


@dataclass(frozen=True, slots=True)
class Settings:
    """Container for runtime configuration."""

    auth_service_url: str
    login_email: str
    login_password: str = field(repr=False)
    microservice_urls: dict[Microservice, str] = field(default_factory=dict)
    api_timeout: float = 30.0
    auth_token_ttl: float = 3600.0
    mcp_sse_port: int = 8000

    @classmethod
    def load(cls) -> "Settings":
        """
        Load configuration from environment variables.

        Python-dotenv is used so developers can rely on a local .env file without
        exporting variables globally. Each microservice base URL is read from
        ``<MEMBER>_SERVICE_URL``; services without one are left unconfigured.
        """
        load_dotenv()

        microservice_urls = {}
        for microservice in Microservice:
            if microservice is Microservice.NONE:
                continue
            url = os.getenv(microservice.settings_key, "").strip()
            if url:
                microservice_urls[microservice] = url

        return cls(
            auth_service_url=_require("AUTH_SERVICE_URL"),
            login_email=_require("AUTH_LOGIN_EMAIL"),
            login_password=_require("AUTH_LOGIN_PASSWORD"),
            microservice_urls=microservice_urls,
            api_timeout=_positive_float("API_TIMEOUT", "30"),
            auth_token_ttl=_positive_float("AUTH_TOKEN_TTL", "3600"),
            mcp_sse_port=_positive_int("MCP_SSE_PORT", "8000"),
        )
