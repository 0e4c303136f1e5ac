"""
Core server bootstrap for the microservice client.

Wires the FastMCP instance to the session store, the shared auth cache and the
authenticated microservice clients.
"""

import asyncio
import logging

from fastmcp import FastMCP  # type: ignore[import-not-found]

from microservice_client.auth_cache import MicroserviceAuthCache
from microservice_client.authentication import AuthenticationService
from microservice_client.client import DrugTraffickingApi
from microservice_client.settings import Settings
from microservice_client.tools import MicroserviceToolDependencies, register_microservice_tools


class ServerApp:
    """Server container owning the shared collaborators and HTTP clients."""

    def __init__(self, settings: Settings) -> None:
        self._logger = logging.getLogger(__name__)
        self._settings = settings
        self._auth_cache = MicroserviceAuthCache(ttl=settings.auth_token_ttl)
        self._authentication_service: AuthenticationService | None = None
        self._drug_trafficking_client: DrugTraffickingApi | None = None
        self._tool_dependencies = MicroserviceToolDependencies()
        self._mcp_app = FastMCP(
            name="Microservice Client",
            instructions=(
                "Open a session for an enterprise, then call downstream microservices on its behalf."
            ),
        )
        register_microservice_tools(self._mcp_app, self._tool_dependencies)

    def startup(self) -> None:
        """Prepare resources required to launch the SSE server."""
        self._logger.info("Starting server bootstrap")
        self._authentication_service = AuthenticationService.from_settings(self._settings)
        self._drug_trafficking_client = DrugTraffickingApi.from_settings(
            self._settings,
            authentication_service=self._authentication_service,
            auth_cache=self._auth_cache,
            session_data=self._tool_dependencies.session_data,
        )
        self._tool_dependencies.attach_client(self._drug_trafficking_client)

    def shutdown(self) -> None:
        """Release acquired resources."""
        asyncio.run(self.ashutdown())

    async def ashutdown(self) -> None:
        """Release acquired resources from within a running event loop."""
        self._logger.info("Shutting down server bootstrap")
        if self._drug_trafficking_client is not None:
            await self._drug_trafficking_client.aclose()
            self._drug_trafficking_client = None
        if self._authentication_service is not None:
            await self._authentication_service.aclose()
            self._authentication_service = None
        self._tool_dependencies.detach_client()

    def serve_forever(self) -> None:
        """Run the FastMCP SSE server until interrupted."""
        host = "0.0.0.0"
        port = self._settings.mcp_sse_port
        self._logger.info("Starting SSE transport", extra={"host": host, "port": port})
        self._mcp_app.run(transport="sse", host=host, port=port)

    async def serve_sse_async(self, host: str = "0.0.0.0") -> None:
        """Async helper for running the SSE transport (used by smoke tests)."""
        await self._mcp_app.run_http_async(
            transport="sse",
            host=host,
            port=self._settings.mcp_sse_port,
        )

    @property
    def mcp(self) -> FastMCP:
        """Expose the configured FastMCP instance."""
        return self._mcp_app


def build_server(settings: Settings) -> ServerApp:
    """Factory used by main.py to create the configured server instance."""
    return ServerApp(settings)
