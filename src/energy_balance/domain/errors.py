"""Error taxonomy for the energy balance engine."""

from uuid import UUID


class EnergyBalanceError(Exception):
    """Base class for errors raised by the engine."""


class ProfileValidationError(EnergyBalanceError):
    """Raised when a profile or log input fails validation."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class NotFoundError(EnergyBalanceError):
    """Raised when an operation references an entity that does not exist."""

    def __init__(self, entity: str, entity_id: UUID | str) -> None:
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class InconsistentStateError(EnergyBalanceError):
    """Raised on internal invariant violations; indicates a programming defect."""
