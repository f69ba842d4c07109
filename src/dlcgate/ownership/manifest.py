from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import requests
import yaml

from ..errors import BackendFailedError, BackendUnavailableError, ManifestError, NotOwnedError
from .base import EntitlementBackend

logger = logging.getLogger(__name__)


def parse_owned_document(data: Any) -> Dict[str, bool]:
    """Normalize an ownership document into an id -> owned map.

    Accepted shapes::

        owned: {expansion-1: true, skins: false}
        owned: [expansion-1, skins]
        {expansion-1: true}
        [expansion-1, skins]
    """
    if data is None:
        return {}
    if isinstance(data, dict) and "owned" in data:
        data = data["owned"]
    if isinstance(data, dict):
        owned: Dict[str, bool] = {}
        for k, v in data.items():
            if not isinstance(v, bool):
                raise ManifestError(f"Ownership of '{k}' must be true or false, got {v!r}")
            owned[str(k)] = v
        return owned
    if isinstance(data, (list, tuple)):
        return {str(k): True for k in data}
    raise ManifestError(f"Unsupported ownership document: {type(data).__name__}")


def _parse_or_fail(data: Any, source: str) -> Dict[str, bool]:
    try:
        return parse_owned_document(data)
    except ManifestError as e:
        raise BackendFailedError(f"{source}: {e}") from e


class ManifestBackend(EntitlementBackend):
    """Ownership simulated from an in-memory map.

    Missing and false entries raise NotOwnedError, never BackendUnavailableError,
    which makes this backend deterministic for tests and offline play. The map
    can optionally be sourced from a YAML file or a JSON URL, in which case
    ``refresh()`` reloads it.
    """

    backend_id = "manifest"

    def __init__(
        self,
        owned: Optional[Dict[str, bool]] = None,
        *,
        source_path: Optional[Path] = None,
        source_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 5.0,
    ) -> None:
        self._owned: Dict[str, bool] = dict(owned or {})
        self.source_path = Path(source_path) if source_path else None
        self.source_url = source_url
        self.timeout = timeout
        self._session = session or requests.Session()
        self._owns_session = session is None

    @classmethod
    def from_file(cls, path: Path) -> "ManifestBackend":
        backend = cls(source_path=path)
        backend.refresh()
        return backend

    @classmethod
    def from_url(cls, url: str, session: Optional[requests.Session] = None, timeout: float = 5.0) -> "ManifestBackend":
        backend = cls(source_url=url, session=session, timeout=timeout)
        backend.refresh()
        return backend

    # Simulation API

    def set_owned(self, content_id: str, owned: bool) -> None:
        self._owned[content_id] = bool(owned)
        logger.debug("Manifest ownership set: %s=%s", content_id, owned)

    def is_owned(self, content_id: str) -> bool:
        return self._owned.get(content_id, False)

    def clear(self) -> None:
        self._owned.clear()

    def close(self) -> None:
        """Close the HTTP session if this backend created it."""
        if self._owns_session:
            self._session.close()

    @property
    def owned_ids(self) -> Iterable[str]:
        return sorted(k for k, v in self._owned.items() if v)

    # EntitlementBackend

    def check_ownership(self, content_id: str) -> bool:
        if self._owned.get(content_id, False):
            return True
        raise NotOwnedError(content_id)

    def refresh(self) -> None:
        if self.source_path is not None:
            self._owned = self._load_path(self.source_path)
        elif self.source_url is not None:
            self._owned = self._load_url(self.source_url)

    def _load_path(self, path: Path) -> Dict[str, bool]:
        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise BackendUnavailableError(f"Ownership manifest not found: {path}") from e
        except OSError as e:
            raise BackendUnavailableError(f"Ownership manifest unreadable: {path}: {e}") from e
        except UnicodeDecodeError as e:
            raise BackendFailedError(f"Ownership manifest {path} is not valid UTF-8: {e}") from e
        except yaml.YAMLError as e:
            raise BackendFailedError(f"Invalid ownership manifest {path}: {e}") from e
        owned = _parse_or_fail(data, str(path))
        logger.info("Loaded %d ownership entries from %s", len(owned), path)
        return owned

    def _load_url(self, url: str) -> Dict[str, bool]:
        try:
            resp = self._session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Ownership manifest fetch failed: %s", e)
            raise BackendUnavailableError(f"Cannot reach ownership manifest at {url}") from e
        if resp.status_code >= 500:
            raise BackendUnavailableError(f"Ownership manifest server error {resp.status_code}")
        if resp.status_code >= 400:
            raise BackendFailedError(f"Ownership manifest request failed {resp.status_code}: {resp.text}")
        try:
            data = resp.json()
        except ValueError as e:
            raise BackendFailedError(f"Ownership manifest at {url} is not JSON") from e
        owned = _parse_or_fail(data, url)
        logger.info("Fetched %d ownership entries from %s", len(owned), url)
        return owned
