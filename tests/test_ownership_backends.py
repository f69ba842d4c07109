from pathlib import Path

import pytest
import requests
import responses

from dlcgate.content import OwnershipState, PurchasableContent
from dlcgate.errors import BackendFailedError, BackendUnavailableError, ManifestError, NotOwnedError
from dlcgate.ownership import (
    BackendRegistry,
    EntitlementBackend,
    LicenseFileBackend,
    ManifestBackend,
    PlatformStoreBackend,
    parse_owned_document,
)


def test_manifest_backend_owned_and_missing():
    backend = ManifestBackend()
    backend.set_owned("dlc-1", True)

    assert backend.check_ownership("dlc-1") is True
    with pytest.raises(NotOwnedError) as exc:
        backend.check_ownership("dlc-unknown")
    assert exc.value.content_id == "dlc-unknown"

    backend.set_owned("dlc-1", False)
    with pytest.raises(NotOwnedError):
        backend.check_ownership("dlc-1")
    assert backend.get_backend_id() == "manifest"


def test_manifest_backend_owned_ids_and_clear():
    backend = ManifestBackend({"b": True, "a": True, "c": False})
    assert list(backend.owned_ids) == ["a", "b"]
    assert backend.is_owned("a")
    backend.clear()
    assert not backend.is_owned("a")
    # refresh without a source keeps the in-memory map untouched
    backend.set_owned("x", True)
    backend.refresh()
    assert backend.is_owned("x")


@pytest.mark.parametrize(
    "doc,expected",
    [
        ({"owned": {"a": True, "b": False}}, {"a": True, "b": False}),
        ({"owned": ["a", "b"]}, {"a": True, "b": True}),
        ({"a": True}, {"a": True}),
        (["a"], {"a": True}),
        (None, {}),
    ],
)
def test_parse_owned_document_shapes(doc, expected):
    assert parse_owned_document(doc) == expected


@pytest.mark.parametrize("doc", ["nope", {"a": 1}, {"owned": {"a": "false"}}, {"owned": {"a": None}}])
def test_parse_owned_document_rejects_bad_values(doc):
    with pytest.raises(ManifestError):
        parse_owned_document(doc)


def test_manifest_backend_string_flag_is_a_failure(tmp_path: Path):
    f = tmp_path / "owned.yaml"
    f.write_text("owned:\n  expansion-1: \"false\"\n", encoding="utf-8")
    with pytest.raises(BackendFailedError):
        ManifestBackend.from_file(f)


def test_manifest_backend_from_file_and_refresh(tmp_path: Path):
    f = tmp_path / "owned.yaml"
    f.write_text("owned:\n  expansion-1: true\n", encoding="utf-8")
    backend = ManifestBackend.from_file(f)
    assert backend.check_ownership("expansion-1")

    f.write_text("owned:\n  expansion-1: false\n  skins: true\n", encoding="utf-8")
    backend.refresh()
    assert backend.check_ownership("skins")
    with pytest.raises(NotOwnedError):
        backend.check_ownership("expansion-1")


def test_manifest_backend_missing_file_keeps_previous_map(tmp_path: Path):
    f = tmp_path / "owned.yaml"
    f.write_text("- a\n", encoding="utf-8")
    backend = ManifestBackend.from_file(f)
    f.unlink()
    with pytest.raises(BackendUnavailableError):
        backend.refresh()
    assert backend.check_ownership("a")


def test_manifest_backend_invalid_yaml(tmp_path: Path):
    f = tmp_path / "owned.yaml"
    f.write_text("owned: [unclosed\n", encoding="utf-8")
    with pytest.raises(BackendFailedError):
        ManifestBackend.from_file(f)


@responses.activate
def test_manifest_backend_from_url():
    responses.add(responses.GET, "https://example.test/owned.json", json={"owned": ["exp-1"]}, status=200)
    backend = ManifestBackend.from_url("https://example.test/owned.json")
    assert backend.check_ownership("exp-1")

    responses.replace(responses.GET, "https://example.test/owned.json", json={"owned": []}, status=200)
    backend.refresh()
    with pytest.raises(NotOwnedError):
        backend.check_ownership("exp-1")


@responses.activate
def test_manifest_backend_url_errors():
    url = "https://example.test/owned.json"
    responses.add(responses.GET, url, status=503)
    with pytest.raises(BackendUnavailableError):
        ManifestBackend.from_url(url)

    responses.replace(responses.GET, url, status=404, body="missing")
    with pytest.raises(BackendFailedError):
        ManifestBackend.from_url(url)

    responses.replace(responses.GET, url, body=requests.ConnectionError("down"))
    with pytest.raises(BackendUnavailableError):
        ManifestBackend.from_url(url)


def test_platform_backend_without_service_is_unavailable():
    backend = PlatformStoreBackend()
    backend.register("exp-1", 42)
    with pytest.raises(BackendUnavailableError) as exc:
        backend.check_ownership("exp-1")
    assert exc.value.transient is True
    assert backend.get_backend_id() == "platform"


def test_platform_backend_uninitialized_service(platform_service):
    platform_service.available = False
    backend = PlatformStoreBackend(platform_service)
    backend.register("exp-1", 42)
    with pytest.raises(BackendUnavailableError):
        backend.check_ownership("exp-1")


def test_platform_backend_register_and_check(platform_service):
    platform_service.owned.add(42)
    backend = PlatformStoreBackend()
    backend.set_platform_service(platform_service)
    backend.register("exp-1", 42)
    backend.register("exp-2", 43)

    assert backend.product_id_for("exp-1") == 42
    assert backend.check_ownership("exp-1") is True
    with pytest.raises(NotOwnedError):
        backend.check_ownership("exp-2")
    with pytest.raises(NotOwnedError):
        backend.check_ownership("never-registered")

    backend.unregister("exp-1")
    backend.unregister("exp-1")
    assert backend.product_id_for("exp-1") is None
    with pytest.raises(NotOwnedError):
        backend.check_ownership("exp-1")


def test_platform_backend_service_fault(platform_service):
    platform_service.fail_with = RuntimeError("sdk exploded")
    backend = PlatformStoreBackend(platform_service)
    backend.register("exp-1", 1)
    with pytest.raises(BackendFailedError):
        backend.check_ownership("exp-1")


def test_platform_backend_refresh_pumps_callbacks(platform_service):
    backend = PlatformStoreBackend()
    backend.refresh()  # no service: no-op
    backend.set_platform_service(platform_service)
    backend.refresh()
    backend.refresh()
    assert platform_service.callback_runs == 2


def test_platform_backend_register_requires_id():
    with pytest.raises(ValueError):
        PlatformStoreBackend().register("", 1)


def test_license_backend(tmp_path: Path):
    lic = tmp_path / "license.yaml"
    backend = LicenseFileBackend(lic)
    assert backend.get_backend_id() == "license"
    with pytest.raises(BackendUnavailableError):
        backend.check_ownership("exp-1")

    lic.write_text("owned:\n  - exp-1\n", encoding="utf-8")
    assert backend.check_ownership("exp-1")
    with pytest.raises(NotOwnedError):
        backend.check_ownership("exp-2")

    lic.write_text("owned:\n  - exp-1\n  - exp-2\n", encoding="utf-8")
    backend.refresh()
    assert backend.check_ownership("exp-2")


def test_license_backend_default_path_uses_data_dir(tmp_path: Path):
    backend = LicenseFileBackend()
    assert backend.path == (tmp_path / "data").resolve() / "license.yaml"


def test_license_backend_garbage_file(tmp_path: Path):
    lic = tmp_path / "license.yaml"
    lic.write_text("42\n", encoding="utf-8")
    with pytest.raises(BackendFailedError):
        LicenseFileBackend(lic).check_ownership("exp-1")


def test_default_refresh_is_noop():
    class AlwaysOwned(EntitlementBackend):
        backend_id = "always"

        def check_ownership(self, content_id):
            return True

    backend = AlwaysOwned()
    backend.refresh()
    backend.refresh()
    assert backend.check_ownership("x")
    assert "always" in repr(backend)


def test_backend_registry_lookup_and_default():
    manifest = ManifestBackend()
    platform = PlatformStoreBackend()
    registry = BackendRegistry(default="manifest")
    registry.register(manifest)
    registry.register(platform, name="steam")

    assert registry.get("steam") is platform
    assert registry.get("manifest") is manifest
    assert registry.get(None) is manifest
    assert registry.get("unknown") is manifest
    assert "steam" in registry
    assert sorted(registry) == ["manifest", "steam"]

    registry.unregister("manifest")
    assert registry.get(None) is None


def test_license_backend_undecodable_file_is_a_failure(tmp_path: Path):
    lic = tmp_path / "license.yaml"
    lic.write_bytes(b"owned:\n  - \xff\xfe\n")
    content = PurchasableContent("exp-1", backend=LicenseFileBackend(lic))

    with pytest.raises(BackendFailedError):
        content.verify_ownership()
    assert content.ownership_state == OwnershipState.ERROR


def test_manifest_backend_unreadable_sources(tmp_path: Path):
    with pytest.raises(BackendUnavailableError):
        ManifestBackend.from_file(tmp_path)

    f = tmp_path / "owned.yaml"
    f.write_bytes(b"owned:\n  - \xff\xfe\n")
    with pytest.raises(BackendFailedError):
        ManifestBackend.from_file(f)


class CountingSession(requests.Session):
    def __init__(self):
        super().__init__()
        self.gets = 0
        self.closed = False

    def get(self, url, **kwargs):
        self.gets += 1
        return super().get(url, **kwargs)

    def close(self):
        self.closed = True
        super().close()


@responses.activate
def test_manifest_backend_reuses_session_across_refreshes():
    url = "https://example.test/owned.json"
    responses.add(responses.GET, url, json=["exp-1"], status=200)
    session = CountingSession()
    backend = ManifestBackend.from_url(url, session=session)
    backend.refresh()
    backend.refresh()
    assert session.gets == 3

    # caller-supplied sessions are left open
    backend.close()
    assert session.closed is False


def test_manifest_backend_closes_its_own_session(monkeypatch):
    created = []

    def make_session():
        s = CountingSession()
        created.append(s)
        return s

    monkeypatch.setattr("dlcgate.ownership.manifest.requests.Session", make_session)
    backend = ManifestBackend(source_url="https://example.test/owned.json")
    backend.close()
    assert len(created) == 1
    assert created[0].closed is True
