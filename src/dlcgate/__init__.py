"""
dlcgate: entitlement verification and demo-mode content gating.

This package provides headless logic a game uses to decide what the player may
load or enter:
- Pluggable ownership backends (simulated manifest, platform store, license file)
- PurchasableContent with an ownership state machine and trial allowlist
- ContentLoader that only admits owned content
- DemoSessionManager with a timed session, warnings, gating and demo saves

UI layers should subscribe to the emitted events and drive store prompts.
"""
from importlib.metadata import PackageNotFoundError, version

from .content import ContentLoader, ContentManifest, ContentType, OwnershipState, PurchasableContent, StoreMetadata
from .demo import DemoEndReason, DemoSessionManager, Gatable, GatableContent
from .errors import (
    BackendFailedError,
    BackendUnavailableError,
    ContentGatedError,
    ContentLoadError,
    DlcGateError,
    EntitlementError,
    LaunchFailedError,
    ManifestError,
    NoPurchaseUrlConfigured,
    NotOwnedError,
    describe_error,
)
from .events import ContentBlocked, DemoEnded, EventBus, OwnershipChanged, PurchasePrompted, TimeWarning
from .ownership import (
    BackendRegistry,
    EntitlementBackend,
    LicenseFileBackend,
    ManifestBackend,
    PlatformStoreBackend,
)

try:
    __version__ = version("dlcgate")
except PackageNotFoundError:  # pragma: no cover - during tests without packaging
    __version__ = "0.0.0"

__all__ = [
    "__version__",
    "BackendFailedError",
    "BackendRegistry",
    "BackendUnavailableError",
    "ContentBlocked",
    "ContentGatedError",
    "ContentLoadError",
    "ContentLoader",
    "ContentManifest",
    "ContentType",
    "DemoEndReason",
    "DemoEnded",
    "DemoSessionManager",
    "DlcGateError",
    "EntitlementBackend",
    "EntitlementError",
    "EventBus",
    "Gatable",
    "GatableContent",
    "LaunchFailedError",
    "LicenseFileBackend",
    "ManifestBackend",
    "ManifestError",
    "NoPurchaseUrlConfigured",
    "NotOwnedError",
    "OwnershipChanged",
    "OwnershipState",
    "PlatformStoreBackend",
    "PurchasableContent",
    "PurchasePrompted",
    "StoreMetadata",
    "TimeWarning",
    "describe_error",
]
