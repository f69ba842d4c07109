"""Application entry-point helpers.

Core classes never reach for globals; the game's bootstrap code builds one
DemoSessionManager and passes it around. For small games that prefer a
process-wide accessor, :func:`get_demo_manager` lazily builds one from the
user's demo config.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .config import DemoConfig
from .demo import DemoSessionManager
from .events import EventBus

logger = logging.getLogger(__name__)

_DEFAULT_MANAGER: Optional[DemoSessionManager] = None


def build_demo_manager(config: Optional[DemoConfig] = None, event_bus: Optional[EventBus] = None) -> DemoSessionManager:
    manager = DemoSessionManager(event_bus=event_bus)
    (config or DemoConfig.load()).apply(manager)
    return manager


def get_demo_manager(config_path: Optional[Path] = None) -> DemoSessionManager:
    """Return the process-wide manager, creating it on first access."""
    global _DEFAULT_MANAGER
    if _DEFAULT_MANAGER is None:
        _DEFAULT_MANAGER = build_demo_manager(DemoConfig.load(user_path=config_path))
        logger.debug("Created default DemoSessionManager")
    return _DEFAULT_MANAGER


def reset_demo_manager() -> None:
    global _DEFAULT_MANAGER
    _DEFAULT_MANAGER = None
