from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import List, Optional

import yaml

from ..errors import ManifestError

logger = logging.getLogger(__name__)

ENV_DEMO_MODE = "DLCGATE_DEMO_MODE"
ENV_TIME_LIMIT = "DLCGATE_TIME_LIMIT"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class DemoConfig:
    demo_mode: bool = False
    time_limit: float = 0.0
    warning_times: List[float] = field(default_factory=lambda: [300.0, 60.0, 10.0])
    purchase_url: Optional[str] = None
    gated_content: List[str] = field(default_factory=list)

    @staticmethod
    def _load_yaml(path: Path) -> dict:
        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ManifestError(f"Invalid demo config {path}: {e}") from e
        if not isinstance(data, dict):
            raise ManifestError(f"Demo config {path} must be a mapping")
        return data

    @classmethod
    def _from_dict(cls, data: dict) -> "DemoConfig":
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning("Ignoring unknown demo config keys: %s", ", ".join(sorted(unknown)))
        try:
            time_limit = float(data.get("time_limit") or 0.0)
            warning_times = [float(x) for x in (data.get("warning_times") or [])]
            gated_content = [str(x) for x in (data.get("gated_content") or [])]
        except (TypeError, ValueError) as e:
            raise ManifestError(f"Invalid demo config value: {e}") from e
        if time_limit < 0:
            raise ManifestError("time_limit must be >= 0")
        return cls(
            demo_mode=bool(data.get("demo_mode", False)),
            time_limit=time_limit,
            warning_times=warning_times,
            purchase_url=data.get("purchase_url") or None,
            gated_content=gated_content,
        )

    @staticmethod
    def _env_overrides() -> dict:
        out: dict = {}
        mode = os.getenv(ENV_DEMO_MODE)
        if mode is not None:
            out["demo_mode"] = mode.strip().lower() in _TRUTHY
        limit = os.getenv(ENV_TIME_LIMIT)
        if limit:
            try:
                out["time_limit"] = float(limit)
            except ValueError:
                logger.warning("Ignoring non-numeric %s=%r", ENV_TIME_LIMIT, limit)
        return out

    @classmethod
    def load(cls, user_path: Optional[Path] = None) -> "DemoConfig":
        """Load packaged defaults, overlay an optional user file, then env overrides."""
        try:
            with resources.files("dlcgate.config").joinpath("default_demo.yaml").open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.warning("Default demo config not found; falling back to dataclass defaults.")
            data = dataclasses.asdict(DemoConfig())

        if user_path is not None:
            if user_path.exists():
                data.update(cls._load_yaml(user_path))
                logger.info("Loaded user demo config from %s", user_path)
            else:
                logger.warning("User demo config not found: %s", user_path)

        data.update(cls._env_overrides())
        config = cls._from_dict(data)
        logger.debug("Demo config: %s", config)
        return config

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(dataclasses.asdict(self), f, sort_keys=False)
        logger.info("Saved demo config to %s", path)

    def apply(self, manager) -> None:
        """Push this configuration into a DemoSessionManager."""
        manager.set_demo_mode(self.demo_mode)
        manager.set_time_limit(self.time_limit)
        manager.set_warning_times(self.warning_times)
        manager.set_purchase_url(self.purchase_url)
        for content_id in self.gated_content:
            manager.gate(content_id)


__all__ = ["DemoConfig", "ENV_DEMO_MODE", "ENV_TIME_LIMIT"]
