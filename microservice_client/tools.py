"""MCP tool registrations that expose the microservice endpoints."""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Annotated, Awaitable, Callable

import httpx
from fastmcp import Context, FastMCP
from fastmcp.server.dependencies import get_http_headers
from pydantic import Field

from microservice_client.authentication import AuthenticationError
from microservice_client.client import DrugTraffickingApi
from microservice_client.headers import SESSION_HEADER
from microservice_client.session_data import SessionDataStore

logger = logging.getLogger(__name__)


@dataclass
class MicroserviceToolDependencies:
    """Runtime dependencies required by the MCP tools."""

    session_data: SessionDataStore = field(default_factory=SessionDataStore)
    drug_trafficking_client: DrugTraffickingApi | None = None

    def attach_client(self, client: DrugTraffickingApi) -> None:
        self.drug_trafficking_client = client

    def detach_client(self) -> None:
        self.drug_trafficking_client = None

    def require_client(self) -> DrugTraffickingApi:
        if self.drug_trafficking_client is None:
            raise RuntimeError("DrugTrafficking client is not initialized.")
        return self.drug_trafficking_client


def _inbound_session_id() -> str:
    """Correlation id from the HTTP request that carried the tool call, if any."""
    headers = get_http_headers(include_all=True)
    return headers.get(SESSION_HEADER.lower(), "").strip()


def register_microservice_tools(
    mcp: FastMCP,
    dependencies: MicroserviceToolDependencies,
) -> None:
    """Register MCP tools that proxy to the downstream microservices."""

    def _log_tool_event(tool_name: str, event: str, **fields: object) -> None:
        logger.info(
            "microservice_tool_event",
            extra={"tool": tool_name, "event": event, **fields},
        )

    async def _with_error_handling(
        tool_name: str,
        action: Callable[[], Awaitable[dict[str, str]]],
    ) -> dict[str, str]:
        try:
            return await action()
        except AuthenticationError as exc:
            logger.warning("%s failed to authenticate", tool_name, exc_info=True)
            _log_tool_event(tool_name, "auth_error", error=str(exc))
            return {"error": str(exc)}
        except httpx.RequestError as exc:
            logger.warning("%s failed due to transport error", tool_name, exc_info=True)
            _log_tool_event(tool_name, "transport_error", error=str(exc))
            return {"error": f"Microservice request failed: {exc}"}
        except Exception as exc:  # noqa: BLE001
            logger.exception("%s failed unexpectedly", tool_name)
            _log_tool_event(tool_name, "unexpected_error", error=str(exc))
            return {"error": f"Unexpected error: {exc}"}

    @mcp.tool(
        name="open_session",
        description="Registers a logged-in enterprise and returns a 'session_id' to pass to subsequent microservice calls (or to send as the GuidSessionDataRequest header).",
    )
    async def open_session(
        enterprise_id: Annotated[int, Field(description="The identifier of the enterprise that is logging in.", gt=0)],
    ) -> dict[str, str]:
        """Open a session for the enterprise and return its correlation id."""

        session_id = await dependencies.session_data.open_session(enterprise_id)
        _log_tool_event("open_session", "success", enterprise_id=enterprise_id)
        return {"session_id": str(session_id), "enterprise_id": str(enterprise_id)}

    @mcp.tool(
        name="close_session",
        description="Ends a session previously opened with open_session.",
    )
    async def close_session(
        session_id: Annotated[str, Field(description="The session identifier returned by open_session.")],
    ) -> dict[str, str]:
        try:
            correlation_id = uuid.UUID(session_id.strip())
        except ValueError:
            return {"error": "session_id must be a valid UUID."}
        await dependencies.session_data.close_session(correlation_id)
        _log_tool_event("close_session", "success")
        return {"session_id": str(correlation_id), "status": "CLOSED"}

    @mcp.tool(
        name="get_drug_trafficking",
        description="Calls the DrugTrafficking microservice and returns its raw payload and HTTP status. Calls made without a session are sent unauthenticated.",
    )
    async def get_drug_trafficking(
        ctx: Context,
        session_id: Annotated[str, Field(description="Optional session identifier; defaults to the GuidSessionDataRequest header of the incoming request.")] = "",
    ) -> dict[str, str]:
        """Proxy the DrugTrafficking operation for the calling session."""

        client = dependencies.require_client()
        session_value = session_id.strip() or _inbound_session_id()

        async def _call() -> dict[str, str]:
            response = await client.drug_trafficking(session_id=session_value or None)
            result = {
                "status_code": str(response.status_code),
                "content": response.content,
            }
            if not response.is_success:
                await ctx.warning(f"DrugTrafficking responded with {response.status_code}.")
            _log_tool_event(
                "get_drug_trafficking",
                "success",
                status_code=response.status_code,
            )
            return result

        return await _with_error_handling("get_drug_trafficking", _call)

    logger.info("Microservice MCP tools registered.")
