"""
Typed endpoint clients for the downstream microservices.

Each client resolves its operations from the route table and sends them through
an AsyncClient whose transport handles authentication. Responses are returned as
``ApiResponse`` values whatever their status; only transport failures raise.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, ClassVar

import httpx

from microservice_client.auth_cache import MicroserviceAuthCache
from microservice_client.auth_transport import MicroserviceAuthTransport
from microservice_client.authentication import AuthenticationService, LoginCredentials
from microservice_client.headers import SESSION_HEADER
from microservice_client.http_client import create_microservice_client
from microservice_client.microservice import Microservice
from microservice_client.routes import MicroserviceRoutes, routes_for
from microservice_client.session_data import SessionDataStore
from microservice_client.settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ApiResponse:
    """Raw string payload plus status returned by a microservice endpoint."""

    status_code: int
    content: str
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiResponse":
        return cls(
            status_code=response.status_code,
            content=response.text,
            headers=dict(response.headers),
        )


@dataclass(slots=True)
class MicroserviceApiClient:
    """Wrapper around an authenticated AsyncClient for one microservice."""

    microservice: ClassVar[Microservice] = Microservice.NONE

    _client: httpx.AsyncClient
    routes: MicroserviceRoutes = field(init=False)

    def __post_init__(self) -> None:
        self.routes = routes_for(self.microservice)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        authentication_service: AuthenticationService,
        auth_cache: MicroserviceAuthCache,
        session_data: SessionDataStore,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "MicroserviceApiClient":
        """Factory that builds the client and its authenticating transport from Settings."""
        auth_transport = MicroserviceAuthTransport(
            transport or httpx.AsyncHTTPTransport(),
            authentication_service=authentication_service,
            credentials=LoginCredentials(email=settings.login_email, password=settings.login_password),
            auth_cache=auth_cache,
            session_data=session_data,
        )
        return cls(create_microservice_client(settings, cls.microservice, transport=auth_transport))

    async def aclose(self) -> None:
        """Close the underlying HTTP resources."""
        await self._client.aclose()

    async def call(
        self,
        endpoint_name: str,
        *,
        session_id: uuid.UUID | str | None = None,
        **kwargs: Any,
    ) -> ApiResponse:
        """Send the named operation and wrap whatever comes back."""
        route = self.routes.endpoint(endpoint_name)
        headers = dict(kwargs.pop("headers", None) or {})
        if session_id:
            headers[SESSION_HEADER] = str(session_id)

        try:
            response = await self._client.request(route.method, route.path, headers=headers, **kwargs)
        except httpx.RequestError:
            logger.error(
                "Microservice request failed",
                extra={
                    "microservice": self.microservice.value,
                    "method": route.method,
                    "path": route.path,
                },
                exc_info=True,
            )
            raise

        if response.is_error:
            logger.warning(
                "Microservice responded with error",
                extra={
                    "microservice": self.microservice.value,
                    "method": route.method,
                    "path": route.path,
                    "status_code": response.status_code,
                },
            )
        return ApiResponse.from_response(response)


@dataclass(slots=True)
class DrugTraffickingApi(MicroserviceApiClient):
    microservice: ClassVar[Microservice] = Microservice.DRUG_TRAFFICKING

    async def drug_trafficking(self, *, session_id: uuid.UUID | str | None = None) -> ApiResponse:
        """GET /api/DrugTrafficking."""
        return await self.call("drug_trafficking", session_id=session_id)
