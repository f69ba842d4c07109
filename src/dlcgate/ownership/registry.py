from __future__ import annotations

import logging
from typing import Dict, Iterator, Optional

from .base import EntitlementBackend

logger = logging.getLogger(__name__)


class BackendRegistry:
    """Backends keyed by the ``ownership_method`` name used in content manifests."""

    def __init__(self, default: Optional[str] = None) -> None:
        self._backends: Dict[str, EntitlementBackend] = {}
        self.default = default

    def register(self, backend: EntitlementBackend, name: Optional[str] = None) -> None:
        key = name or backend.get_backend_id()
        self._backends[key] = backend
        logger.debug("Backend registered: %s -> %r", key, backend)

    def unregister(self, name: str) -> None:
        self._backends.pop(name, None)

    def get(self, name: Optional[str]) -> Optional[EntitlementBackend]:
        """Return the backend for ``name``, falling back to the default backend."""
        if name and name in self._backends:
            return self._backends[name]
        if name:
            logger.warning("No backend registered for ownership method '%s'", name)
        if self.default is not None:
            return self._backends.get(self.default)
        return None

    def refresh_all(self) -> None:
        for backend in self._backends.values():
            backend.refresh()

    def __contains__(self, name: object) -> bool:
        return name in self._backends

    def __iter__(self) -> Iterator[str]:
        return iter(self._backends)
