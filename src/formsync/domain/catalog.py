"""Lookup of repeater rendering metadata (component, title, title field)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from formsync.domain.errors import MissingRepeaterMetadataError
from formsync.domain.types import RepeaterMetadata


@runtime_checkable
class RepeaterCatalog(Protocol):
    """Read access to the registered repeater components."""

    def lookup(self, name: str) -> RepeaterMetadata: ...


@dataclass(slots=True)
class InMemoryRepeaterCatalog:
    """Repeater components registered at startup, keyed by repeater name."""

    _entries: dict[str, RepeaterMetadata] = field(default_factory=dict)

    def register(self, name: str, metadata: RepeaterMetadata) -> None:
        self._entries[name] = metadata

    def lookup(self, name: str) -> RepeaterMetadata:
        try:
            return self._entries[name]
        except KeyError:
            raise MissingRepeaterMetadataError(f"No repeater registered under {name!r}") from None
