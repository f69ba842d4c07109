from __future__ import annotations

import logging
from typing import Dict, Optional, Protocol

from ..errors import BackendFailedError, BackendUnavailableError, NotOwnedError
from .base import EntitlementBackend

logger = logging.getLogger(__name__)


class PlatformService(Protocol):
    """Handle to a platform store service (Steam client, console SDK, ...).

    Only the calls the entitlement layer needs are described here; the
    concrete SDK binding lives outside this package.
    """

    def is_available(self) -> bool:
        ...

    def run_callbacks(self) -> None:
        ...

    def owns_product(self, product_id: int) -> bool:
        ...


class PlatformStoreBackend(EntitlementBackend):
    """Ownership checked against a platform store service.

    Each content id must be mapped to the store's product id with
    :meth:`register` before it can be checked. The service handle is borrowed;
    swap it with :meth:`set_platform_service`, passing ``None`` before tearing
    the service down.
    """

    backend_id = "platform"

    def __init__(self, service: Optional[PlatformService] = None) -> None:
        self._service = service
        self._products: Dict[str, int] = {}

    @property
    def service(self) -> Optional[PlatformService]:
        return self._service

    def set_platform_service(self, service: Optional[PlatformService]) -> None:
        self._service = service
        logger.debug("Platform service %s", "attached" if service is not None else "cleared")

    def register(self, content_id: str, product_id: int) -> None:
        if not content_id:
            raise ValueError("content_id must be non-empty")
        self._products[content_id] = int(product_id)
        logger.debug("Registered %s -> product %s", content_id, product_id)

    def unregister(self, content_id: str) -> None:
        self._products.pop(content_id, None)

    def product_id_for(self, content_id: str) -> Optional[int]:
        return self._products.get(content_id)

    def _available_service(self) -> PlatformService:
        service = self._service
        if service is None:
            raise BackendUnavailableError("No platform service attached")
        try:
            available = service.is_available()
        except Exception as e:
            raise BackendFailedError(f"Platform service availability check failed: {e}") from e
        if not available:
            raise BackendUnavailableError("Platform service is not initialized")
        return service

    def check_ownership(self, content_id: str) -> bool:
        service = self._available_service()
        product_id = self._products.get(content_id)
        if product_id is None:
            raise NotOwnedError(content_id, f"Content '{content_id}' has no registered product id")
        try:
            owned = service.owns_product(product_id)
        except Exception as e:
            logger.warning("Platform ownership query for %s failed: %s", content_id, e)
            raise BackendFailedError(f"Ownership query for '{content_id}' failed: {e}") from e
        if owned:
            return True
        raise NotOwnedError(content_id)

    def refresh(self) -> None:
        if self._service is None:
            return
        self._service.run_callbacks()
