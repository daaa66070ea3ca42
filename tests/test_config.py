from __future__ import annotations

import pytest

from evaterm.config import (
    API_BASE_URL_ENV,
    DEFAULT_API_BASE_URL,
    DEFAULT_BASE_CPS,
    DEFAULT_LOGS_MAX_FILE_BYTES,
    ProjectConfigError,
    initialize_project_config,
    load_project_config,
    load_settings,
    project_config_exists,
)


def test_init_config_writes_defaults(tmp_path):
    config_root = initialize_project_config(workspace_dir=tmp_path)
    config_text = (config_root / "config.toml").read_text(encoding="utf-8")
    config = load_project_config(workspace_dir=tmp_path)

    assert project_config_exists(tmp_path)
    assert (config_root / "logs").is_dir()
    assert "[api]" in config_text
    assert 'base_url = "http://localhost:3000"' in config_text
    assert "[typewriter]" in config_text
    assert "base_cps = 52" in config_text
    assert "[runtime.logs]" in config_text
    assert 'theme = "eoe"' in config_text

    assert config.api_base_url == DEFAULT_API_BASE_URL
    assert config.typewriter.base_cps == DEFAULT_BASE_CPS
    assert config.streaming is True
    assert config.logs_max_file_bytes == DEFAULT_LOGS_MAX_FILE_BYTES


def test_init_refuses_existing_directory_without_force(tmp_path):
    initialize_project_config(workspace_dir=tmp_path)

    with pytest.raises(ProjectConfigError):
        initialize_project_config(workspace_dir=tmp_path)

    config_root = initialize_project_config(workspace_dir=tmp_path, force=True)
    assert (config_root / "config.toml").is_file()


def test_missing_config_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv(API_BASE_URL_ENV, raising=False)
    settings = load_settings(workspace_dir=tmp_path)

    assert settings.api_base_url == DEFAULT_API_BASE_URL
    assert settings.logs_dir == tmp_path.resolve() / ".evaterm_config" / "logs"
    assert settings.config.theme == "eoe"


def test_bad_values_fall_back_to_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv(API_BASE_URL_ENV, raising=False)
    config_root = initialize_project_config(workspace_dir=tmp_path)
    (config_root / "config.toml").write_text(
        "\n".join(
            [
                "[api]",
                'base_url = "ftp://nope"',
                "timeout_sec = -4",
                "",
                "[typewriter]",
                'base_cps = "fast"',
                "max_step = 4",
                "",
                "[session]",
                'streaming = "off"',
                'theme = "eva99"',
                "reduce_motion = 1",
                "",
                "[runtime.logs]",
                'redaction = "paranoid"',
                "",
            ]
        ),
        encoding="utf-8",
    )

    settings = load_settings(workspace_dir=tmp_path)
    config = settings.config

    assert config.api_base_url == DEFAULT_API_BASE_URL
    assert config.api_timeout_sec == 10
    assert config.typewriter.base_cps == DEFAULT_BASE_CPS
    assert config.typewriter.max_step == 4
    assert config.streaming is False
    assert config.theme == "eoe"
    assert config.reduce_motion is True
    assert config.logs_redaction == "default"


def test_invalid_toml_raises(tmp_path):
    config_root = initialize_project_config(workspace_dir=tmp_path)
    (config_root / "config.toml").write_text("[api\nbase_url = ", encoding="utf-8")

    with pytest.raises(ProjectConfigError):
        load_project_config(workspace_dir=tmp_path)


def test_api_base_url_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv(API_BASE_URL_ENV, "https://eva.example/")
    assert load_settings(workspace_dir=tmp_path).api_base_url == "https://eva.example"

    explicit = load_settings(workspace_dir=tmp_path, api_base_url="http://127.0.0.1:3000")
    assert explicit.api_base_url == "http://127.0.0.1:3000"

    ignored = load_settings(workspace_dir=tmp_path, api_base_url="not a url")
    assert ignored.api_base_url == "https://eva.example"
