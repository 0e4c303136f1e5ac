"""
Authentication service client used to obtain bearer tokens.

Login failures of any kind surface as ``AuthenticationError`` so the request
pipeline can abort the outgoing call without guessing at transport details.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from microservice_client.http_client import create_authentication_client
from microservice_client.settings import Settings

logger = logging.getLogger(__name__)

LOGIN_PATH = "/api/login"


class AuthenticationError(RuntimeError):
    """Represents failures while logging in against the authentication service."""


@dataclass(frozen=True, slots=True)
class LoginCredentials:
    email: str
    password: str = field(repr=False)


@dataclass(frozen=True, slots=True)
class AuthenticatedUser:
    token: str = field(repr=False)


@dataclass(slots=True)
class AuthenticationService:
    """Typed wrapper around the AsyncClient pointed at the authentication service."""

    _client: httpx.AsyncClient

    @classmethod
    def from_settings(cls, settings: Settings) -> "AuthenticationService":
        """Factory that builds the service from Settings."""
        return cls(create_authentication_client(settings))

    async def aclose(self) -> None:
        """Close the underlying HTTP resources."""
        await self._client.aclose()

    async def login(self, credentials: LoginCredentials) -> AuthenticatedUser:
        """Log in with the given credentials and return the issued token."""
        payload = {"email": credentials.email, "password": credentials.password}

        def _login_error(message: str, *, exc: Exception | None = None) -> AuthenticationError:
            logger.error(message, extra={"path": LOGIN_PATH}, exc_info=exc)
            return AuthenticationError(message)

        try:
            response = await self._client.post(LOGIN_PATH, json=payload)
        except httpx.TimeoutException as exc:
            raise _login_error("Authentication request timed out.", exc=exc) from exc
        except httpx.RequestError as exc:
            raise _login_error(f"Authentication request failed: {exc!s}", exc=exc) from exc

        if response.is_error:
            snippet = response.text.strip()
            if len(snippet) > 512:
                snippet = f"{snippet[:512]}..."
            logger.warning(
                "Authentication service responded with error",
                extra={"status_code": response.status_code, "content": snippet},
            )
            raise AuthenticationError(
                f"Authentication failed ({response.status_code}): {snippet or 'no body provided.'}"
            )

        try:
            data: dict[str, Any] = response.json()
        except ValueError as exc:
            raise _login_error("Authentication service returned invalid JSON.", exc=exc) from exc

        token = data.get("token") if isinstance(data, dict) else None
        if not isinstance(token, str):
            raise _login_error("Authentication response did not include a token.")

        logger.debug("Authentication succeeded", extra={"email": credentials.email})
        return AuthenticatedUser(token=token)
