from __future__ import annotations

import logging
from pathlib import Path
from typing import FrozenSet, Optional

import yaml

from ..errors import BackendFailedError, BackendUnavailableError, ManifestError, NotOwnedError
from ..paths import AppPaths
from .base import EntitlementBackend
from .manifest import parse_owned_document

logger = logging.getLogger(__name__)


class LicenseFileBackend(EntitlementBackend):
    """Ownership read from a local license file.

    The file is plain YAML (no signature checking) in the same shape the
    manifest backend accepts, e.g.::

        owned:
          - expansion-1
          - cosmetic-skins

    It is read lazily on the first check and re-read on :meth:`refresh`.
    """

    backend_id = "license"

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path else AppPaths().license_file
        self._owned: Optional[FrozenSet[str]] = None

    def _read(self) -> FrozenSet[str]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise BackendUnavailableError(f"License file not found: {self.path}") from e
        except OSError as e:
            raise BackendUnavailableError(f"License file unreadable: {self.path}: {e}") from e
        except UnicodeDecodeError as e:
            raise BackendFailedError(f"License file {self.path} is not valid UTF-8: {e}") from e
        try:
            owned = parse_owned_document(yaml.safe_load(text))
        except (yaml.YAMLError, ManifestError) as e:
            raise BackendFailedError(f"Invalid license file {self.path}: {e}") from e
        ids = frozenset(k for k, v in owned.items() if v)
        logger.info("License file %s grants %d content ids", self.path, len(ids))
        return ids

    def check_ownership(self, content_id: str) -> bool:
        if self._owned is None:
            self._owned = self._read()
        if content_id in self._owned:
            return True
        raise NotOwnedError(content_id)

    def refresh(self) -> None:
        self._owned = self._read()
