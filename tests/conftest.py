from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import httpx
import pytest

from evaterm.config import API_BASE_URL_ENV, initialize_project_config, resolve_project_config_root

TEST_BASE_URL = "http://eva.test"


class RecordingHost:
    """Session host that records every side effect."""

    def __init__(self) -> None:
        self.calls: List[tuple] = []

    def names(self) -> List[str]:
        return [call[0] for call in self.calls]

    def open_url(self, url: str) -> None:
        self.calls.append(("open_url", url))

    def navigate(self, path: str) -> None:
        self.calls.append(("navigate", path))

    def set_theme(self, theme_id: str) -> None:
        self.calls.append(("set_theme", theme_id))

    def set_reduce_motion(self, enabled: bool) -> None:
        self.calls.append(("set_reduce_motion", enabled))

    def open_onepager(self) -> None:
        self.calls.append(("open_onepager",))

    def copy_to_clipboard(self, text: str) -> None:
        self.calls.append(("copy_to_clipboard", text))

    def open_reel(self, items) -> None:
        self.calls.append(("open_reel", list(items)))


def make_fetch(routes: Dict[str, Any]):
    """Build a ``fetch(path)`` stub.

    Route values may be an exception (raised), an ``httpx.Response``, or a
    ``(status, payload)`` tuple turned into a JSON response. Unknown paths 404.
    """

    calls: List[str] = []

    async def fetch(path: str) -> httpx.Response:
        calls.append(path)
        request = httpx.Request("GET", TEST_BASE_URL + path)
        value = routes.get(path)
        if value is None:
            return httpx.Response(404, json={"error": "not found"}, request=request)
        if isinstance(value, Exception):
            raise value
        if isinstance(value, httpx.Response):
            return value
        status, payload = value
        return httpx.Response(status, json=payload, request=request)

    fetch.calls = calls  # type: ignore[attr-defined]
    return fetch


def sequential_ids():
    counter = {"value": 0}

    def next_id() -> str:
        counter["value"] += 1
        return "line-{0}".format(counter["value"])

    return next_id


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    workspace = tmp_path / "workspace"
    workspace.mkdir(parents=True, exist_ok=True)

    monkeypatch.chdir(workspace)
    monkeypatch.delenv(API_BASE_URL_ENV, raising=False)
    initialize_project_config(workspace_dir=workspace)

    return {
        "workspace": workspace,
        "config_root": resolve_project_config_root(workspace),
    }


@pytest.fixture
def recording_host() -> RecordingHost:
    return RecordingHost()


@pytest.fixture
def fetch_factory():
    return make_fetch


@pytest.fixture
def id_factory():
    return sequential_ids()
