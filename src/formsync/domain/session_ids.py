"""Session-scoped mapping from client-side temporary ids to persisted ids.

A form may reference a repeater row that only got created earlier in the same
request chain (for example a nested repeater pointing at its freshly created
parent). The client only knows its own placeholder token, so every creation
registers ``token -> id`` here and later lookups translate the token back.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from formsync.domain.types import RecordId

log = logging.getLogger(__name__)


@dataclass(slots=True)
class SessionIdentifierRegistry:
    """Write-once token registry shared by every reconciliation of one editing session."""

    _ids: dict[str, RecordId] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def register(self, token: str, record_id: RecordId) -> None:
        """Remember that ``token`` now stands for ``record_id``.

        Re-registering the same pair is a no-op. A token is never re-pointed: a
        conflicting registration keeps the first id and logs a warning.
        """

        with self._lock:
            existing = self._ids.get(token)
            if existing is None:
                self._ids[token] = record_id
                return
        if existing != record_id:
            log.warning(
                "Ignoring re-registration of client id %r: already mapped to %s, got %s",
                token,
                existing,
                record_id,
            )

    def resolve(self, token: str | None) -> RecordId | None:
        """Return the id registered for ``token``, or ``None`` when there is none."""

        if token is None:
            return None
        return self._ids.get(token)
