"""
Authenticating transport for outgoing microservice requests.

``MicroserviceAuthTransport`` wraps another httpx transport. For every request it
resolves the calling enterprise from the session header and the target
microservice from the client header, then attaches a cached bearer token,
logging in first when none is cached. A 401 on the first send triggers one more
login and one more send; the response of that retry is returned whatever its
status.
"""

import logging
import uuid

import httpx

from microservice_client.auth_cache import MicroserviceAuthCache, MicroserviceAuthentication
from microservice_client.authentication import AuthenticationService, LoginCredentials
from microservice_client.headers import AUTHORIZATION_HEADER, CLIENT_HEADER, SESSION_HEADER
from microservice_client.microservice import Microservice
from microservice_client.session_data import EMPTY_SESSION_ID, SessionDataStore

logger = logging.getLogger(__name__)

ANONYMOUS_ENTERPRISE_ID = 0


def _first_header(request: httpx.Request, name: str) -> str | None:
    values = request.headers.get_list(name)
    return values[0] if values else None


def resolve_session_id(request: httpx.Request) -> uuid.UUID:
    """Parse the correlation id header, falling back to the empty id."""
    raw = _first_header(request, SESSION_HEADER)
    if not raw:
        return EMPTY_SESSION_ID
    try:
        return uuid.UUID(raw.strip())
    except ValueError:
        logger.debug("Ignoring malformed session header", extra={"value": raw})
        return EMPTY_SESSION_ID


def resolve_microservice(request: httpx.Request) -> Microservice:
    return Microservice.parse(_first_header(request, CLIENT_HEADER))


class MicroserviceAuthTransport(httpx.AsyncBaseTransport):
    """Transport that injects bearer authentication and retries once on 401."""

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport,
        *,
        authentication_service: AuthenticationService,
        credentials: LoginCredentials,
        auth_cache: MicroserviceAuthCache,
        session_data: SessionDataStore,
    ) -> None:
        self._transport = transport
        self._authentication_service = authentication_service
        self._credentials = credentials
        self._auth_cache = auth_cache
        self._session_data = session_data

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        # Buffer the body so the retry can replay it.
        await request.aread()

        session_id = resolve_session_id(request)
        enterprise_id = await self._session_data.get_logged_enterprise(session_id) or ANONYMOUS_ENTERPRISE_ID
        microservice = resolve_microservice(request)
        log_extra = {
            "enterprise_id": enterprise_id,
            "microservice": microservice.value,
            "method": request.method,
            "url": str(request.url),
        }

        authentication = await self._auth_cache.try_get_valid_auth(enterprise_id, microservice)
        if authentication is not None:
            _set_bearer_token(request, authentication)
            response = await self._transport.handle_async_request(request)
            if response.status_code != httpx.codes.UNAUTHORIZED:
                return response
            logger.info("Microservice rejected credentials, re-authenticating", extra=log_extra)
            await response.aclose()

        await self._authenticate(enterprise_id, microservice)

        # Single retry: its response is returned whatever the status.
        _set_bearer_token(request, await self._auth_cache.try_get_valid_auth(enterprise_id, microservice))
        return await self._transport.handle_async_request(request)

    async def _authenticate(self, enterprise_id: int, microservice: Microservice) -> None:
        if enterprise_id == ANONYMOUS_ENTERPRISE_ID:
            return

        user = await self._authentication_service.login(self._credentials)
        await self._auth_cache.add_or_update_auth(
            enterprise_id,
            microservice,
            MicroserviceAuthentication(token=user.token),
        )
        logger.info(
            "Authenticated against microservice",
            extra={"enterprise_id": enterprise_id, "microservice": microservice.value},
        )

    async def aclose(self) -> None:
        await self._transport.aclose()


def _set_bearer_token(
    request: httpx.Request,
    authentication: MicroserviceAuthentication | None,
) -> None:
    if authentication is not None and authentication.token:
        request.headers[AUTHORIZATION_HEADER] = f"Bearer {authentication.token}"
