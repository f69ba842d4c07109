from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Iterable, List, Optional, Set

from ..errors import ContentGatedError
from ..events import ContentBlocked, DemoEnded, EventBus, TimeWarning
from ..launcher import UriLauncher, launch_store_url
from .gatable import Gatable

logger = logging.getLogger(__name__)


class DemoEndReason(str, Enum):
    TIME_LIMIT = "time_limit"
    UPGRADED = "upgraded"
    MANUAL = "manual"


class DemoSessionManager:
    """Controls demo mode: the session timer, content gating and demo saves.

    Construct one per process and pass it to the systems that need it. The
    manager never schedules itself; call :meth:`update` once per frame and
    :meth:`check_upgrade` whenever an upgrade may have happened (each frame or
    on focus regain).

    Events (emitted on ``event_bus``, after state changes):
      - DemoEnded(reason, elapsed) when a running session stops
      - TimeWarning(seconds_remaining) once per threshold per session
      - ContentBlocked(content_id, message) when access is denied
    """

    def __init__(self, event_bus: Optional[EventBus] = None) -> None:
        self.event_bus = event_bus or EventBus()
        self._demo_mode = False
        self._running = False
        self._elapsed = 0.0
        self._time_limit = 0.0
        self._warning_times: List[float] = []
        self._next_warning = 0
        self._gated: Set[str] = set()
        self._demo_saves: Set[str] = set()
        self._purchase_url: Optional[str] = None
        self._upgrade_check: Optional[Callable[[], bool]] = None

    # Mode

    @property
    def demo_mode(self) -> bool:
        return self._demo_mode

    def set_demo_mode(self, enabled: bool) -> None:
        enabled = bool(enabled)
        if self._demo_mode != enabled:
            self._demo_mode = enabled
            logger.debug("Demo mode %s", "enabled" if enabled else "disabled")

    # Session

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def elapsed(self) -> float:
        return self._elapsed

    def start(self) -> None:
        """Start, or restart, the demo session timer."""
        self._running = True
        self._elapsed = 0.0
        self._next_warning = 0
        logger.info("Demo session started")

    def stop(self, reason: DemoEndReason = DemoEndReason.MANUAL) -> None:
        if not self._running:
            return
        self._running = False
        logger.info("Demo session ended (reason: %s, elapsed: %.1fs)", reason.value, self._elapsed)
        self.event_bus.emit(DemoEnded(reason=reason, elapsed=self._elapsed))

    def update(self, delta: float) -> None:
        if not (self._demo_mode and self._running):
            return
        self._elapsed += delta
        if self._time_limit <= 0:
            return
        remaining = self._time_limit - self._elapsed
        while self._next_warning < len(self._warning_times) and remaining <= self._warning_times[self._next_warning]:
            self._next_warning += 1
            logger.debug("Demo time warning: %.1fs remaining", remaining)
            self.event_bus.emit(TimeWarning(seconds_remaining=remaining))
        if remaining <= 0:
            self.stop(DemoEndReason.TIME_LIMIT)

    # Time limit and warnings

    @property
    def time_limit(self) -> float:
        return self._time_limit

    def set_time_limit(self, seconds: float) -> None:
        """Set the session length in seconds; 0 means unlimited."""
        seconds = float(seconds)
        if seconds < 0:
            raise ValueError("time limit must be >= 0")
        self._time_limit = seconds

    @property
    def time_remaining(self) -> float:
        """Seconds left in the session, or -1 when there is no limit."""
        if self._time_limit <= 0:
            return -1.0
        return max(0.0, self._time_limit - self._elapsed)

    @property
    def warning_times(self) -> List[float]:
        return list(self._warning_times)

    def set_warning_times(self, seconds: Iterable[float]) -> None:
        self._warning_times = sorted((float(s) for s in seconds or ()), reverse=True)
        self._next_warning = 0

    # Gating

    def gate(self, content_id: str) -> None:
        if not content_id:
            raise ValueError("content_id must be non-empty")
        self._gated.add(content_id)
        logger.debug("Gated content: %s", content_id)

    def ungate(self, content_id: str) -> None:
        self._gated.discard(content_id)

    def is_gated(self, content_id: str) -> bool:
        return content_id in self._gated

    @property
    def gated_content(self) -> List[str]:
        return sorted(self._gated)

    def clear_gated_content(self) -> None:
        self._gated.clear()

    def check_access(self, gatable: Gatable) -> bool:
        """Return True when ``gatable`` may be used, else raise ContentGatedError.

        Only ids explicitly gated are restricted, and only while demo mode is
        on. A denial emits ContentBlocked before raising.
        """
        if not self._demo_mode:
            return True
        content_id = gatable.get_content_id()
        if not content_id:
            return True
        if gatable.is_demo_content():
            return True
        if content_id not in self._gated:
            return True
        message = gatable.get_unlock_message()
        logger.debug("Blocked demo access to %s", content_id)
        self.event_bus.emit(ContentBlocked(content_id=content_id, message=message))
        raise ContentGatedError(content_id, message)

    def can_access(self, gatable: Gatable) -> bool:
        """Non-raising form of :meth:`check_access`."""
        try:
            return self.check_access(gatable)
        except ContentGatedError:
            return False

    # Demo saves

    def mark_save_as_demo(self, save_id: str) -> None:
        if not save_id:
            raise ValueError("save_id must be non-empty")
        self._demo_saves.add(save_id)

    def is_demo_save(self, save_id: str) -> bool:
        return save_id in self._demo_saves

    @property
    def demo_saves(self) -> List[str]:
        return sorted(self._demo_saves)

    def convert_demo_save(self, save_id: str) -> None:
        """Drop the demo tag from a save. There is no way back."""
        if save_id in self._demo_saves:
            self._demo_saves.discard(save_id)
            logger.info("Converted demo save: %s", save_id)

    def restore_demo_saves(self, save_ids: Iterable[str]) -> None:
        """Re-apply tags loaded by the save system after a restart."""
        for save_id in save_ids:
            self.mark_save_as_demo(save_id)

    # Purchase redirect

    @property
    def purchase_url(self) -> Optional[str]:
        return self._purchase_url

    def set_purchase_url(self, url: Optional[str]) -> None:
        self._purchase_url = url or None

    def open_purchase_url(self, launcher: Optional[UriLauncher] = None) -> None:
        launch_store_url(self._purchase_url, launcher)

    # Upgrade detection

    def set_upgrade_check_func(self, func: Optional[Callable[[], bool]]) -> None:
        self._upgrade_check = func

    def check_upgrade(self) -> bool:
        """Poll the upgrade predicate once; on upgrade leave demo mode."""
        if self._upgrade_check is None:
            return False
        upgraded = bool(self._upgrade_check())
        if upgraded:
            logger.info("User upgraded to full version")
            self.set_demo_mode(False)
            self.stop(DemoEndReason.UPGRADED)
        return upgraded
