"""Unit-of-work abstraction bounding one submission's persistence calls."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from formsync.domain.ports.persistence import RepositoryProvider


@runtime_checkable
class UnitOfWork(Protocol):
    """Transaction boundary: everything inside commits together or not at all."""

    @property
    def repositories(self) -> RepositoryProvider: ...

    def __enter__(self) -> UnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
