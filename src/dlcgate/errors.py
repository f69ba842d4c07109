from __future__ import annotations

from typing import Optional


class DlcGateError(Exception):
    """Base error for dlcgate domain exceptions."""


class EntitlementError(DlcGateError):
    """Raised by an entitlement backend when ownership cannot be confirmed."""

    transient = False


class NotOwnedError(EntitlementError):
    """The backend answered, and the content is not owned."""

    def __init__(self, content_id: str, message: Optional[str] = None) -> None:
        self.content_id = content_id
        super().__init__(message or f"Content '{content_id}' is not owned")


class BackendUnavailableError(EntitlementError):
    """The backend could not be reached. Callers should retry rather than deny."""

    transient = True


class BackendFailedError(EntitlementError):
    """Generic backend fault."""


class ContentGatedError(DlcGateError):
    """Raised when content is not available in demo mode."""

    def __init__(self, content_id: str, unlock_message: Optional[str] = None) -> None:
        self.content_id = content_id
        self.unlock_message = unlock_message
        super().__init__(f"Content '{content_id}' is not available in demo mode")


class PurchaseError(DlcGateError):
    """Base error for store redirect failures."""


class NoPurchaseUrlConfigured(PurchaseError):
    """Raised when a store redirect is requested but no URL is known."""


class LaunchFailedError(PurchaseError):
    """Raised when the URI launcher could not open the purchase page."""


class ContentLoadError(DlcGateError):
    """Raised when the content loader refuses to admit a content pack."""

    def __init__(self, content_id: str, reason: str) -> None:
        self.content_id = content_id
        self.reason = reason
        super().__init__(f"Cannot load '{content_id}': {reason}")


class ManifestError(DlcGateError):
    """Raised when a manifest, license or config file cannot be read or validated."""


PROMPT_PURCHASE = "purchase"
PROMPT_RETRY = "retry"
PROMPT_ERROR = "error"


def describe_error(exc: BaseException) -> str:
    """Map an error to the kind of prompt a UI should show for it.

    - ``"purchase"``: hard denial, show the unlock message and a store link
    - ``"retry"``: transient outage, show "try again"
    - ``"error"``: anything else
    """
    if isinstance(exc, (NotOwnedError, ContentGatedError)):
        return PROMPT_PURCHASE
    if isinstance(exc, ContentLoadError) and isinstance(exc.__cause__, NotOwnedError):
        return PROMPT_PURCHASE
    if getattr(exc, "transient", False):
        return PROMPT_RETRY
    return PROMPT_ERROR
