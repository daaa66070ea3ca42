from __future__ import annotations

import asyncio
import json

from evaterm.config import API_BASE_URL_ENV, load_settings
from evaterm.kernel.runtime import Runtime


def _close(runtime: Runtime) -> None:
    asyncio.run(runtime.aclose())


def test_runtime_without_project_config_writes_no_logs(tmp_path, monkeypatch):
    monkeypatch.delenv(API_BASE_URL_ENV, raising=False)
    settings = load_settings(workspace_dir=tmp_path)

    runtime = Runtime(settings)
    status = runtime.status()
    _close(runtime)

    assert status["logs_enabled"] is False
    assert status["logs"]["enabled"] is False
    assert list(tmp_path.iterdir()) == []


def test_runtime_logs_under_initialized_config(isolated_env):
    settings = load_settings(workspace_dir=isolated_env["workspace"])

    runtime = Runtime(settings)
    _close(runtime)

    log_file = isolated_env["config_root"] / "logs" / "session.log.jsonl"
    kinds = [json.loads(row)["kind"] for row in log_file.read_text(encoding="utf-8").splitlines()]
    assert kinds[0] == "runtime.start"
    assert kinds[-1] == "runtime.stop"


def test_streaming_override_leaves_settings_untouched(tmp_path, monkeypatch):
    monkeypatch.delenv(API_BASE_URL_ENV, raising=False)
    settings = load_settings(workspace_dir=tmp_path)
    assert settings.config.streaming is True

    runtime = Runtime(settings, streaming=False)
    _close(runtime)

    assert runtime.session.streaming_enabled is False
    assert settings.config.streaming is True
