"""Run the microservice client as an MCP SSE server."""

import logging
import os

from microservice_client.server import build_server
from microservice_client.settings import Settings

logger = logging.getLogger("microservice-client")

EXIT_CONFIG_ERROR = 2


def _configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def main() -> int:
    """Load settings, start the clients and serve until interrupted."""
    _configure_logging()
    try:
        settings = Settings.load()
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return EXIT_CONFIG_ERROR

    server = build_server(settings)
    server.startup()
    logger.info(
        "Serving %d configured microservice(s) at http://localhost:%s/sse",
        len(settings.microservice_urls),
        settings.mcp_sse_port,
    )
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutdown requested (Ctrl+C).")
    finally:
        server.shutdown()
        logger.info("Server shutdown complete.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
