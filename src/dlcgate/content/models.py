from __future__ import annotations

from datetime import date
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator


class OwnershipState(str, Enum):
    UNKNOWN = "unknown"
    NOT_OWNED = "not_owned"
    OWNED = "owned"
    TRIAL = "trial"
    ERROR = "error"


class ContentType(str, Enum):
    EXPANSION = "expansion"
    COSMETIC = "cosmetic"
    QUEST = "quest"
    ITEM = "item"
    CHARACTER = "character"
    MAP = "map"

    @classmethod
    def parse(cls, value: "str | ContentType") -> "ContentType":
        if isinstance(value, ContentType):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown content type: {value!r}") from None


STORE_URL_TEMPLATE = "https://store.steampowered.com/app/{product_id}"


class StoreMetadata(BaseModel):
    """Store-facing details of a purchasable content pack."""

    price: Optional[str] = Field(default=None, description="Display price, e.g. '$9.99'")
    currency: Optional[str] = Field(default=None, description="ISO currency code")
    platform_product_id: int = Field(default=0, ge=0, description="Platform store product id; 0 means none")
    store_url: Optional[str] = Field(default=None, description="Explicit store page URL override")
    release_date: Optional[date] = None
    min_version: Optional[str] = Field(default=None, description="Minimum game version required")

    def build_store_url(self, template: str = STORE_URL_TEMPLATE) -> Optional[str]:
        if self.platform_product_id:
            return template.format(product_id=self.platform_product_id)
        if self.store_url:
            return self.store_url
        return None


class ContentManifest(BaseModel):
    """Manifest describing one content pack, as found on disk next to its assets."""

    id: str = Field(..., description="Unique content id")
    name: Optional[str] = None
    version: str = "1.0.0"
    is_dlc: bool = False
    dlc_type: ContentType = ContentType.EXPANSION
    steam_app_id: int = Field(default=0, ge=0)
    store_id: Optional[str] = None
    price: Optional[str] = None
    currency: Optional[str] = None
    release_date: Optional[date] = None
    min_game_version: Optional[str] = None
    ownership_method: Optional[str] = None
    trial_enabled: bool = False
    trial_content_ids: List[str] = Field(default_factory=list)

    @field_validator("id")
    @classmethod
    def id_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("id must not be empty")
        return v

    @field_validator("dlc_type", mode="before")
    @classmethod
    def coerce_dlc_type(cls, v):
        if isinstance(v, str):
            return ContentType.parse(v)
        return v

    @field_validator("trial_content_ids")
    @classmethod
    def dedupe_trial_ids(cls, v: List[str]) -> List[str]:
        ids = [s.strip() for s in v or []]
        if any(not s for s in ids):
            raise ValueError("trial_content_ids must not contain empty ids")
        # Keep first occurrence order
        return list(dict.fromkeys(ids))

    def store_metadata(self) -> StoreMetadata:
        return StoreMetadata(
            price=self.price,
            currency=self.currency,
            platform_product_id=self.steam_app_id,
            store_url=self.store_id,
            release_date=self.release_date,
            min_version=self.min_game_version,
        )


def parse_version(version: str) -> Tuple[int, ...]:
    """Parse a dotted version like '1.2.0' into a comparable tuple.

    Non-numeric suffixes on a component ('3rc1') are ignored.
    """
    parts = []
    for piece in str(version).strip().split("."):
        digits = ""
        for ch in piece:
            if not ch.isdigit():
                break
            digits += ch
        parts.append(int(digits) if digits else 0)
    while len(parts) > 1 and parts[-1] == 0:
        parts.pop()
    return tuple(parts)
