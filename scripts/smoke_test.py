"""
Integration smoke test for the microservice client MCP server.

This script spins up:
1. A mock downstream (Starlette) exposing the authentication service's
   /api/login and the DrugTrafficking microservice's /api/DrugTrafficking, which
   only answers 200 to callers presenting the issued bearer token.
2. The MCP SSE server (running in-process via FastMCP's HTTP transport).
3. A FastMCP client that connects over SSE, opens a session, and calls the
   DrugTrafficking tool both anonymously and with the session.

Usage:
    uv run python scripts/smoke_test.py

The script prints the tool outputs and exits with code 0 if the end-to-end flow
works. Use Ctrl+C to abort.
"""

import asyncio
import contextlib
import os
from dataclasses import dataclass

import uvicorn
from fastmcp.client import Client
from fastmcp.client.transports import SSETransport
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.routing import Route

from microservice_client.server import build_server
from microservice_client.settings import Settings

MOCK_SERVICE_HOST = "127.0.0.1"
MOCK_SERVICE_PORT = 9070
SSE_HOST = "127.0.0.1"
SSE_PORT = 18080
SMOKE_EMAIL = "smoke@example.test"
SMOKE_PASSWORD = "smoke-password"


@dataclass
class MockAuthState:
    """Counts logins so the output shows when the pipeline authenticated."""

    token: str = "smoke-token"
    logins: int = 0


async def login_endpoint(request: Request) -> JSONResponse:
    payload = await request.json()
    if payload.get("email") != SMOKE_EMAIL or payload.get("password") != SMOKE_PASSWORD:
        return JSONResponse({"error": "user not found"}, status_code=400)
    state: MockAuthState = request.app.state.auth
    state.logins += 1
    return JSONResponse({"token": state.token})


async def drug_trafficking_endpoint(request: Request) -> PlainTextResponse:
    state: MockAuthState = request.app.state.auth
    if request.headers.get("authorization") != f"Bearer {state.token}":
        return PlainTextResponse("unauthorized", status_code=401)
    return PlainTextResponse(f"DrugTrafficking report for {request.headers.get('x-refit-client')}")


def build_mock_service() -> Starlette:
    app = Starlette(
        routes=[
            Route("/api/login", login_endpoint, methods=["POST"]),
            Route("/api/DrugTrafficking", drug_trafficking_endpoint, methods=["GET"]),
        ],
    )
    app.state.auth = MockAuthState()
    return app


async def run_uvicorn_app(app: Starlette, host: str, port: int) -> uvicorn.Server:
    config = uvicorn.Config(app, host=host, port=port, log_level="error")
    server = uvicorn.Server(config)

    async def _serve() -> None:
        await server.serve()

    asyncio.create_task(_serve())
    # Give the server a moment to bind the port.
    await asyncio.sleep(0.3)
    return server


async def run_smoke_flow() -> None:
    print("Starting mock downstream services...")
    mock_app = build_mock_service()
    mock_server = await run_uvicorn_app(mock_app, MOCK_SERVICE_HOST, MOCK_SERVICE_PORT)

    mock_url = f"http://{MOCK_SERVICE_HOST}:{MOCK_SERVICE_PORT}"
    os.environ["AUTH_SERVICE_URL"] = mock_url
    os.environ["DRUG_TRAFFICKING_SERVICE_URL"] = mock_url
    os.environ["AUTH_LOGIN_EMAIL"] = SMOKE_EMAIL
    os.environ["AUTH_LOGIN_PASSWORD"] = SMOKE_PASSWORD
    os.environ["MCP_SSE_PORT"] = str(SSE_PORT)
    settings = Settings.load()

    app_server = build_server(settings)
    app_server.startup()

    async def _run_sse() -> None:
        await app_server.serve_sse_async(host=SSE_HOST)

    print("Starting MCP SSE server...")
    sse_task = asyncio.create_task(_run_sse())
    await asyncio.sleep(0.5)

    client = Client(SSETransport(f"http://{SSE_HOST}:{SSE_PORT}/sse"), name="smoke-client")

    try:
        async with client:
            print("Calling get_drug_trafficking without a session...")
            anonymous = await client.call_tool("get_drug_trafficking", {})
            print("anonymous result:", anonymous.data)

            session = await client.call_tool("open_session", {"enterprise_id": 42})
            print("open_session result:", session.data)
            session_id = session.data["session_id"]

            authenticated = await client.call_tool("get_drug_trafficking", {"session_id": session_id})
            print("authenticated result:", authenticated.data)

            cached = await client.call_tool("get_drug_trafficking", {"session_id": session_id})
            print("cached result:", cached.data)
            print("logins performed:", mock_app.state.auth.logins)

            await client.call_tool("close_session", {"session_id": session_id})
            print("Smoke test succeeded")
    finally:
        print("Stopping MCP SSE server...")
        sse_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sse_task
        await app_server.ashutdown()

        print("Stopping mock downstream services...")
        mock_server.should_exit = True
        await asyncio.sleep(0.2)


if __name__ == "__main__":
    try:
        asyncio.run(run_smoke_flow())
    except KeyboardInterrupt:
        print("Smoke test interrupted.")
