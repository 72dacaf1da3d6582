"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import AssociationRepository, RepeaterRepository, RepositoryProvider
from .unit_of_work import UnitOfWork

__all__ = [
    "AssociationRepository",
    "RepeaterRepository",
    "RepositoryProvider",
    "UnitOfWork",
]
