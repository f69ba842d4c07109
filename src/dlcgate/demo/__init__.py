from .gatable import DEFAULT_UNLOCK_MESSAGE, Gatable, GatableContent
from .manager import DemoEndReason, DemoSessionManager

__all__ = [
    "DEFAULT_UNLOCK_MESSAGE",
    "DemoEndReason",
    "DemoSessionManager",
    "Gatable",
    "GatableContent",
]
