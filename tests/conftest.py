import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))


class FakePlatformService:
    """In-memory stand-in for a platform store client."""

    def __init__(self, owned=(), available=True):
        self.owned = set(owned)
        self.available = available
        self.callback_runs = 0
        self.fail_with = None

    def is_available(self):
        return self.available

    def run_callbacks(self):
        self.callback_runs += 1

    def owns_product(self, product_id):
        if self.fail_with is not None:
            raise self.fail_with
        return product_id in self.owned


class RecordingLauncher:
    def __init__(self, result=True):
        self.result = result
        self.opened = []

    def open(self, uri):
        self.opened.append(uri)
        return self.result


@pytest.fixture()
def platform_service():
    return FakePlatformService()


@pytest.fixture()
def launcher():
    return RecordingLauncher()


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path):
    for var in ("DLCGATE_DEMO_MODE", "DLCGATE_TIME_LIMIT", "DLCGATE_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("DLCGATE_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.setenv("DLCGATE_DATA_DIR", str(tmp_path / "data"))
