from .loader import ContentLoader, load_manifest
from .models import ContentManifest, ContentType, OwnershipState, StoreMetadata, parse_version
from .purchasable import PurchasableContent

__all__ = [
    "ContentLoader",
    "ContentManifest",
    "ContentType",
    "OwnershipState",
    "PurchasableContent",
    "StoreMetadata",
    "load_manifest",
    "parse_version",
]
