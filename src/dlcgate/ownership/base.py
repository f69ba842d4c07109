from __future__ import annotations

from abc import ABC, abstractmethod


class EntitlementBackend(ABC):
    """Pluggable ownership oracle.

    ``check_ownership`` returns ``True`` when the content is owned. Absence of
    ownership is always signalled by raising :class:`~dlcgate.errors.NotOwnedError`;
    the bundled backends never return ``False``. An outage raises
    :class:`~dlcgate.errors.BackendUnavailableError` and any other fault
    :class:`~dlcgate.errors.BackendFailedError`.

    Backends are borrowed by the content that uses them: a backend must outlive
    every :class:`~dlcgate.content.PurchasableContent` pointing at it, or those
    references must be cleared first.
    """

    backend_id: str = "unknown"

    @abstractmethod
    def check_ownership(self, content_id: str) -> bool:
        raise NotImplementedError

    def refresh(self) -> None:
        """Refresh cached ownership data. Idempotent; no-op by default."""

    def get_backend_id(self) -> str:
        return self.backend_id

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.backend_id!r}>"
