"""Domain error taxonomy for repeater reconciliation and projection."""

from __future__ import annotations

from formsync.config.errors import ConfigurationError


class UnknownEntityTypeError(ConfigurationError):
    """Raised when a repeater points at an entity type or association nobody registered."""


class MissingRepeaterMetadataError(ConfigurationError):
    """Raised when a repeater has no rendering metadata in the catalog."""


class NotFoundError(LookupError):
    """Raised when an update targets a row that does not exist (or was soft-deleted)."""


class ValidationError(ValueError):
    """Base class for rejected field data."""


class InvalidPayloadError(ValidationError):
    """Raised when a submitted repeater item cannot be read at all."""


class PersistenceValidationError(ValidationError):
    """Raised when the store rejects field data (constraint violations and the like)."""
