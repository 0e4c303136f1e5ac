"""Identifiers for the downstream microservices reachable through this client."""

from enum import Enum


class Microservice(str, Enum):
    """Downstream service tag carried on each outgoing request."""

    NONE = "None"
    DRUG_TRAFFICKING = "DrugTrafficking"

    @classmethod
    def parse(cls, raw: str | None) -> "Microservice":
        """Resolve a wire name, falling back to NONE for missing or unknown values."""
        if raw is None:
            return cls.NONE
        try:
            return cls(raw.strip())
        except ValueError:
            return cls.NONE

    @property
    def settings_key(self) -> str:
        # DRUG_TRAFFICKING -> DRUG_TRAFFICKING_SERVICE_URL
        return f"{self.name}_SERVICE_URL"
