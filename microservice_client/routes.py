"""
Route table for the downstream microservices.

Each microservice registers its operations here once, at import time, instead
of being discovered from annotated interfaces.
"""

from dataclasses import dataclass

from microservice_client.microservice import Microservice


@dataclass(frozen=True, slots=True)
class EndpointRoute:
    """One request-producing operation of a downstream service."""

    name: str
    method: str
    path: str


@dataclass(frozen=True, slots=True)
class MicroserviceRoutes:
    microservice: Microservice
    endpoints: tuple[EndpointRoute, ...]

    def endpoint(self, name: str) -> EndpointRoute:
        for route in self.endpoints:
            if route.name == name:
                return route
        raise KeyError(f"{self.microservice.value} has no endpoint named {name!r}.")


def _build_route_table(*entries: MicroserviceRoutes) -> dict[Microservice, MicroserviceRoutes]:
    table: dict[Microservice, MicroserviceRoutes] = {}
    for entry in entries:
        if entry.microservice is Microservice.NONE:
            raise ValueError("Routes cannot be registered for Microservice.NONE.")
        if entry.microservice in table:
            raise ValueError(f"Duplicate route registration for {entry.microservice.value}.")
        table[entry.microservice] = entry
    return table


ROUTE_TABLE = _build_route_table(
    MicroserviceRoutes(
        microservice=Microservice.DRUG_TRAFFICKING,
        endpoints=(
            EndpointRoute(name="drug_trafficking", method="GET", path="/api/DrugTrafficking"),
        ),
    ),
)


def routes_for(microservice: Microservice) -> MicroserviceRoutes:
    """Return the registered routes for a microservice."""
    try:
        return ROUTE_TABLE[microservice]
    except KeyError as exc:
        raise LookupError(f"No routes registered for microservice {microservice.value}.") from exc
