from __future__ import annotations

import socket
from pathlib import Path

import pytest
from hypothesis import settings
from hypothesis.database import DirectoryBasedExampleDatabase

_MARKERS = ("unit", "integration", "slow")
_ENV_OVERRIDES = ("LHCI_BASELINE_STRATEGY", "PERFDIFF_LOG_JSON", "RUN_ID")

_ROOT = Path(__file__).resolve().parents[1]
_HYPOTHESIS_DB = _ROOT / "artifacts/.hypothesis/examples"
_HYPOTHESIS_DB.parent.mkdir(parents=True, exist_ok=True)
settings.register_profile("perfdiff", database=DirectoryBasedExampleDatabase(_HYPOTHESIS_DB), deadline=None)
settings.load_profile("perfdiff")


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if not any(item.get_closest_marker(name) for name in _MARKERS):
            item.add_marker("unit")


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def no_network_for_unit(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch) -> None:
    if request.node.get_closest_marker("integration") or request.node.get_closest_marker("slow"):
        return

    def _refuse(*_args: object, **_kwargs: object) -> None:
        raise RuntimeError("network disabled in unit tests")

    monkeypatch.setattr(socket, "create_connection", _refuse)
    monkeypatch.setattr(socket.socket, "connect", _refuse)


@pytest.fixture
def reports_dir(tmp_path: Path) -> Path:
    path = tmp_path / ".lighthouseci"
    path.mkdir()
    return path
