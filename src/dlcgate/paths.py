from __future__ import annotations

import logging
import os
from pathlib import Path

from platformdirs import PlatformDirs

logger = logging.getLogger(__name__)

APP_NAME = "dlcgate"

# Environment variable overrides (useful for tests and packaged builds)
ENV_CONFIG_DIR = "DLCGATE_CONFIG_DIR"
ENV_DATA_DIR = "DLCGATE_DATA_DIR"

LICENSE_FILE_NAME = "license.yaml"
DEMO_CONFIG_FILE_NAME = "demo.yaml"


class AppPaths:
    """Resolve platform-appropriate directories for entitlement data.

    - config_dir: user configuration (demo settings overrides)
    - data_dir: user data (license file, ownership manifests)
    """

    def __init__(self, app_name: str = APP_NAME) -> None:
        self._dirs = PlatformDirs(appname=app_name, appauthor=False)
        self._config_dir = self._compute_dir(ENV_CONFIG_DIR, Path(self._dirs.user_config_dir))
        self._data_dir = self._compute_dir(ENV_DATA_DIR, Path(self._dirs.user_data_dir))

    @staticmethod
    def _compute_dir(env_var: str, default: Path) -> Path:
        override = os.getenv(env_var)
        if override:
            return Path(override).expanduser().resolve()
        return Path(default).expanduser().resolve()

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def license_file(self) -> Path:
        return self._data_dir / LICENSE_FILE_NAME

    @property
    def demo_config_file(self) -> Path:
        return self._config_dir / DEMO_CONFIG_FILE_NAME

    def ensure_dirs(self) -> None:
        for d in (self.config_dir, self.data_dir):
            d.mkdir(parents=True, exist_ok=True)
        logger.debug("Ensured app dirs: %s, %s", self.config_dir, self.data_dir)
