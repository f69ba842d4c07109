from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import yaml
from pydantic import ValidationError

from ..errors import ContentLoadError, EntitlementError, ManifestError, NotOwnedError
from ..events import EventBus
from ..ownership.registry import BackendRegistry
from .models import ContentManifest, ContentType, OwnershipState, parse_version
from .purchasable import PurchasableContent

logger = logging.getLogger(__name__)

MANIFEST_FILE_NAME = "manifest.yaml"


def load_manifest(path: Path) -> ContentManifest:
    """Read and validate one content manifest file."""
    try:
        with Path(path).open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise ManifestError(f"Cannot read manifest {path}: {e}") from e
    if not isinstance(data, dict):
        raise ManifestError(f"Manifest {path} must be a mapping")
    try:
        return ContentManifest.model_validate(data)
    except ValidationError as e:
        raise ManifestError(f"Invalid manifest {path}: {e}") from e


class ContentLoader:
    """Discovers content packs and admits them into the active set.

    Admission is gated on ownership: :meth:`admit` verifies the pack first and
    refuses packs that are not owned. Packs are built for manifests flagged
    ``is_dlc``; plain mods are ignored here.
    """

    def __init__(
        self,
        registry: Optional[BackendRegistry] = None,
        *,
        game_version: Optional[str] = None,
        event_bus: Optional[EventBus] = None,
        strict_backends: bool = False,
    ) -> None:
        self.registry = registry or BackendRegistry()
        self.game_version = game_version
        self.strict_backends = strict_backends
        self.event_bus = event_bus or EventBus()
        self._search_paths: List[Path] = []
        self._contents: Dict[str, PurchasableContent] = {}
        self._active: List[str] = []

    # Discovery

    def add_search_path(self, path: Path) -> None:
        p = Path(path)
        if p not in self._search_paths:
            self._search_paths.append(p)

    @property
    def search_paths(self) -> List[Path]:
        return list(self._search_paths)

    def _manifest_files(self) -> Iterable[Path]:
        for root in self._search_paths:
            if not root.is_dir():
                logger.warning("Content search path does not exist: %s", root)
                continue
            for child in sorted(root.iterdir()):
                if child.is_file() and child.suffix in (".yaml", ".yml"):
                    yield child
                elif child.is_dir() and (child / MANIFEST_FILE_NAME).is_file():
                    yield child / MANIFEST_FILE_NAME

    def discover(self) -> int:
        """Scan search paths and register every DLC manifest found.

        Invalid manifests and duplicate ids are logged and skipped. Returns
        the number of newly registered packs.

        A manifest whose ``ownership_method`` resolves to no backend (not
        registered and no registry default) gets no backend, so it verifies
        as OWNED. With ``strict_backends`` such manifests are skipped instead.
        """
        added = 0
        for path in self._manifest_files():
            try:
                manifest = load_manifest(path)
            except ManifestError as e:
                logger.warning("Skipping manifest: %s", e)
                continue
            if not manifest.is_dlc:
                continue
            if manifest.id in self._contents:
                logger.warning("Duplicate content id '%s' in %s; keeping the first", manifest.id, path)
                continue
            backend = self.registry.get(manifest.ownership_method)
            if backend is None and manifest.ownership_method:
                if self.strict_backends:
                    logger.warning(
                        "Skipping %s: no backend for ownership method '%s'", manifest.id, manifest.ownership_method
                    )
                    continue
                logger.warning("Content %s has no ownership backend and will verify as owned", manifest.id)
            try:
                content = PurchasableContent.from_manifest(manifest, backend=backend, event_bus=self.event_bus)
            except ValueError as e:
                logger.warning("Skipping manifest %s: %s", path, e)
                continue
            self.add_content(content)
            added += 1
        logger.info("Discovered %d content packs (%d total)", added, len(self._contents))
        return added

    def add_content(self, content: PurchasableContent) -> None:
        if content.content_id in self._contents:
            raise ValueError(f"Content '{content.content_id}' already registered")
        self._contents[content.content_id] = content

    # Queries

    @property
    def contents(self) -> List[PurchasableContent]:
        return list(self._contents.values())

    def get_content(self, content_id: str) -> Optional[PurchasableContent]:
        return self._contents.get(content_id)

    def by_type(self, content_type: ContentType) -> List[PurchasableContent]:
        ct = ContentType.parse(content_type)
        return [c for c in self._contents.values() if c.content_type == ct]

    @property
    def active(self) -> List[str]:
        return list(self._active)

    def is_active(self, content_id: str) -> bool:
        return content_id in self._active

    # Load gate

    def admit(self, content: PurchasableContent) -> None:
        """Verify ownership and add the pack to the active set.

        NOT_OWNED raises ContentLoadError; a backend failure propagates the
        backend's own error; OWNED and TRIAL are admitted.
        """
        if self.game_version and content.store.min_version:
            if parse_version(content.store.min_version) > parse_version(self.game_version):
                raise ContentLoadError(
                    content.content_id,
                    f"requires game version {content.store.min_version} (running {self.game_version})",
                )
        state = content.verify_ownership()
        if state == OwnershipState.NOT_OWNED:
            raise ContentLoadError(content.content_id, "not owned") from NotOwnedError(content.content_id)
        if content.content_id not in self._active:
            self._active.append(content.content_id)
            logger.info("Admitted %s (%s)", content.content_id, state.value)

    def load(self, content_id: str) -> PurchasableContent:
        content = self._contents.get(content_id)
        if content is None:
            raise ContentLoadError(content_id, "unknown content id")
        self.admit(content)
        return content

    def unload(self, content_id: str) -> None:
        if content_id in self._active:
            self._active.remove(content_id)
            logger.info("Unloaded %s", content_id)

    def verify_all(self) -> Dict[str, EntitlementError]:
        """Verify every known pack, collecting backend failures instead of raising."""
        failures: Dict[str, EntitlementError] = {}
        for content in self._contents.values():
            try:
                content.verify_ownership()
            except EntitlementError as e:
                failures[content.content_id] = e
        return failures
