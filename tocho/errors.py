"""Exception hierarchy shared by the gateway, the services and the web layer."""
from __future__ import annotations


class LeagueError(Exception):
    """Base class for every error raised by the league console."""


class ValidationError(LeagueError, ValueError):
    """Raised before any persistence call when submitted data is malformed."""


class GatewayError(LeagueError):
    """Raised when the document store cannot complete an operation."""


class NotFoundError(GatewayError):
    """Raised when a referenced document does not exist."""

    def __init__(self, collection: str, entity_id: str) -> None:
        super().__init__(f"{collection} con id {entity_id} no encontrado")
        self.collection = collection
        self.entity_id = entity_id
