"""HTTP client factories for the authentication service and the microservices."""

import httpx

from microservice_client.headers import CLIENT_HEADER
from microservice_client.microservice import Microservice
from microservice_client.settings import Settings


def create_authentication_client(
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Build an AsyncClient configured for the authentication service."""
    return httpx.AsyncClient(
        base_url=settings.auth_service_url,
        timeout=settings.api_timeout,
        transport=transport,
    )


def create_microservice_client(
    settings: Settings,
    microservice: Microservice,
    *,
    transport: httpx.AsyncBaseTransport,
) -> httpx.AsyncClient:
    """
    Build an AsyncClient configured for one downstream microservice.

    Every request carries the microservice tag so the transport can pick the
    matching credential. ``transport`` is normally the authenticating transport
    wrapping the network transport.
    """
    base_url = settings.microservice_urls.get(microservice)
    if not base_url:
        raise ValueError(
            f"{microservice.settings_key} is required to call {microservice.value} but was not provided."
        )
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=settings.api_timeout,
        headers={CLIENT_HEADER: microservice.value},
        transport=transport,
    )
