from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

DEFAULT_UNLOCK_MESSAGE = "This content is only available in the full version."


class Gatable(ABC):
    """Capability that lets any content take part in demo gating.

    Only :meth:`get_content_id` is required. Levels, areas or bosses can
    implement this without being purchasable content.
    """

    @abstractmethod
    def get_content_id(self) -> Optional[str]:
        raise NotImplementedError

    def is_demo_content(self) -> bool:
        """True when the content is part of the demo and never restricted."""
        return True

    def get_unlock_message(self) -> str:
        return DEFAULT_UNLOCK_MESSAGE


@dataclass
class GatableContent(Gatable):
    """Plain gatable record for content that has no class of its own."""

    content_id: str
    demo_content: bool = True
    unlock_message: Optional[str] = None

    def get_content_id(self) -> Optional[str]:
        return self.content_id

    def is_demo_content(self) -> bool:
        return self.demo_content

    def get_unlock_message(self) -> str:
        return self.unlock_message or DEFAULT_UNLOCK_MESSAGE
