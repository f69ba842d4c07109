from __future__ import annotations

import logging
from typing import List, Optional

from ..errors import EntitlementError, NotOwnedError
from ..events import EventBus, OwnershipChanged, PurchasePrompted
from ..launcher import UriLauncher, launch_store_url
from ..ownership.base import EntitlementBackend
from .models import STORE_URL_TEMPLATE, ContentManifest, ContentType, OwnershipState, StoreMetadata

logger = logging.getLogger(__name__)


class PurchasableContent:
    """A content pack whose accessibility depends on verified ownership.

    ``ownership_state`` starts as UNKNOWN and only changes through
    :meth:`verify_ownership`. The backend is borrowed: it must outlive this
    object or be cleared with ``set_backend(None)`` before it is torn down.

    Events (emitted on ``event_bus`` after the state is updated):
      - OwnershipChanged when verification moves to a different state
      - PurchasePrompted when a sub-content check is denied
    """

    store_url_template = STORE_URL_TEMPLATE

    def __init__(
        self,
        content_id: str,
        content_type: ContentType = ContentType.EXPANSION,
        *,
        name: Optional[str] = None,
        store: Optional[StoreMetadata] = None,
        trial_enabled: bool = False,
        trial_content_ids: Optional[List[str]] = None,
        backend: Optional[EntitlementBackend] = None,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        if not content_id:
            raise ValueError("content_id must be non-empty")
        self.content_id = content_id
        self.content_type = ContentType.parse(content_type)
        self.name = name or content_id
        self.store = store or StoreMetadata()
        self.trial_enabled = bool(trial_enabled)
        self._trial_ids: List[str] = []
        for tid in trial_content_ids or []:
            self.add_trial_content_id(tid)
        self._backend = backend
        self._state = OwnershipState.UNKNOWN
        self.event_bus = event_bus or EventBus()

    @classmethod
    def from_manifest(
        cls,
        manifest: ContentManifest,
        backend: Optional[EntitlementBackend] = None,
        event_bus: Optional[EventBus] = None,
    ) -> "PurchasableContent":
        return cls(
            manifest.id,
            manifest.dlc_type,
            name=manifest.name,
            store=manifest.store_metadata(),
            trial_enabled=manifest.trial_enabled,
            trial_content_ids=manifest.trial_content_ids,
            backend=backend,
            event_bus=event_bus,
        )

    def __repr__(self) -> str:
        return f"<PurchasableContent {self.content_id!r} {self.content_type.value} {self._state.value}>"

    # Backend

    @property
    def backend(self) -> Optional[EntitlementBackend]:
        return self._backend

    def set_backend(self, backend: Optional[EntitlementBackend]) -> None:
        self._backend = backend

    # Ownership

    @property
    def ownership_state(self) -> OwnershipState:
        return self._state

    def verify_ownership(self) -> OwnershipState:
        """Ask the backend about ownership and update the state.

        Without a backend the content is treated as owned. Backend outages and
        faults move the state to ERROR and the backend's exception is re-raised
        once listeners have been notified.
        """
        failure: Optional[EntitlementError] = None
        if self._backend is None:
            new_state = OwnershipState.OWNED
        else:
            try:
                owned = self._backend.check_ownership(self.content_id)
            except NotOwnedError:
                new_state = OwnershipState.TRIAL if self.trial_enabled else OwnershipState.NOT_OWNED
            except EntitlementError as e:
                logger.warning("Ownership check for %s failed via %s: %s", self.content_id, self._backend.get_backend_id(), e)
                new_state = OwnershipState.ERROR
                failure = e
            else:
                new_state = OwnershipState.OWNED if owned else OwnershipState.NOT_OWNED

        old_state = self._state
        self._state = new_state
        if old_state != new_state:
            logger.debug("Ownership of %s: %s -> %s", self.content_id, old_state.value, new_state.value)
            self.event_bus.emit(OwnershipChanged(content_id=self.content_id, old_state=old_state, new_state=new_state))
        if failure is not None:
            raise failure
        return new_state

    def is_owned(self) -> bool:
        return self._state in (OwnershipState.OWNED, OwnershipState.TRIAL)

    # Trial content

    @property
    def trial_content_ids(self) -> List[str]:
        return list(self._trial_ids)

    def add_trial_content_id(self, content_id: str) -> None:
        if not content_id:
            raise ValueError("content_id must be non-empty")
        if content_id not in self._trial_ids:
            self._trial_ids.append(content_id)

    def remove_trial_content_id(self, content_id: str) -> None:
        if content_id in self._trial_ids:
            self._trial_ids.remove(content_id)

    def is_content_accessible(self, sub_content_id: str) -> bool:
        """Whether a piece of this pack's content may be used right now.

        Denials emit PurchasePrompted so a UI can offer the store page.
        """
        if self._state == OwnershipState.OWNED:
            return True
        if self._state == OwnershipState.TRIAL and sub_content_id in self._trial_ids:
            return True
        self.event_bus.emit(PurchasePrompted(content_id=self.content_id, sub_content_id=sub_content_id))
        return False

    # Store

    def get_store_url(self) -> Optional[str]:
        return self.store.build_store_url(self.store_url_template)

    def open_store_page(self, launcher: Optional[UriLauncher] = None) -> None:
        launch_store_url(self.get_store_url(), launcher)
