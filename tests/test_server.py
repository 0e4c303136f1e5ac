import pytest
from fastmcp import Client
from fastmcp.exceptions import ToolError

from microservice_client.microservice import Microservice
from microservice_client.server import build_server
from microservice_client.settings import Settings


def _settings() -> Settings:
    return Settings(
        auth_service_url="http://auth.local",
        login_email="caller@example.test",
        login_password="secret",
        microservice_urls={Microservice.DRUG_TRAFFICKING: "http://drug.local"},
    )


@pytest.mark.anyio
async def test_server_registers_microservice_tools() -> None:
    server = build_server(_settings())

    async with Client(server.mcp) as client:
        tools = await client.list_tools()

    assert {tool.name for tool in tools} == {"open_session", "close_session", "get_drug_trafficking"}


@pytest.mark.anyio
async def test_shutdown_detaches_the_microservice_client() -> None:
    server = build_server(_settings())
    server.startup()
    await server.ashutdown()

    async with Client(server.mcp) as client:
        session = await client.call_tool("open_session", {"enterprise_id": 42})
        assert session.data["enterprise_id"] == "42"
        with pytest.raises(ToolError):
            await client.call_tool("get_drug_trafficking", {"session_id": session.data["session_id"]})
