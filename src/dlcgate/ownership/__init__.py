"""Pluggable ownership oracles.

- EntitlementBackend: the contract every backend implements
- ManifestBackend: in-memory (optionally file/URL sourced) simulation
- PlatformStoreBackend: adapter over a platform store service handle
- LicenseFileBackend: local plain-text license file
- BackendRegistry: lookup by manifest ``ownership_method``
"""
from .base import EntitlementBackend
from .license import LicenseFileBackend
from .manifest import ManifestBackend, parse_owned_document
from .platform import PlatformService, PlatformStoreBackend
from .registry import BackendRegistry

__all__ = [
    "EntitlementBackend",
    "ManifestBackend",
    "PlatformService",
    "PlatformStoreBackend",
    "LicenseFileBackend",
    "BackendRegistry",
    "parse_owned_document",
]
