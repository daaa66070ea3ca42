"""Configuration loading and directory resolution for eva-terminal."""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

try:  # pragma: no cover - exercised on Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for Python 3.9/3.10
    import tomli as tomllib  # type: ignore[no-redef]

CONFIG_DIR_NAME = ".evaterm_config"
CONFIG_FILE_NAME = "config.toml"
LOGS_DIR_NAME = "logs"
API_BASE_URL_ENV = "EVATERM_API_BASE_URL"

DEFAULT_API_BASE_URL = "http://localhost:3000"
DEFAULT_API_TIMEOUT_SEC = 10

# Typing cadence defaults; tuned to feel brisk without stutter.
DEFAULT_BASE_CPS = 52
DEFAULT_MAX_STEP = 8
DEFAULT_MIN_DELAY_MS = 18
DEFAULT_FAST_MULTIPLIER = 5

DEFAULT_STREAMING = True
DEFAULT_THEME = "eoe"
DEFAULT_REDUCE_MOTION = False

DEFAULT_LOGS_ENABLED = True
DEFAULT_LOGS_MAX_FILE_BYTES = 2 * 1024 * 1024
DEFAULT_LOGS_MAX_FILES = 3
DEFAULT_LOGS_REDACTION = "default"
ALLOWED_LOG_REDACTION = ("default", "none", "strict")

THEME_IDS = ("eoe", "eva01", "eva02", "eva00")


class ProjectConfigError(RuntimeError):
    """Raised when project configuration is missing or invalid."""


@dataclass
class TypewriterConfig:
    base_cps: int = DEFAULT_BASE_CPS
    max_step: int = DEFAULT_MAX_STEP
    min_delay_ms: int = DEFAULT_MIN_DELAY_MS
    fast_multiplier: int = DEFAULT_FAST_MULTIPLIER

    @property
    def default_delay_ms(self) -> float:
        return 1000.0 / self.base_cps


@dataclass
class ProjectConfig:
    api_base_url: str = DEFAULT_API_BASE_URL
    api_timeout_sec: int = DEFAULT_API_TIMEOUT_SEC
    typewriter: TypewriterConfig = field(default_factory=TypewriterConfig)
    streaming: bool = DEFAULT_STREAMING
    theme: str = DEFAULT_THEME
    reduce_motion: bool = DEFAULT_REDUCE_MOTION
    logs_enabled: bool = DEFAULT_LOGS_ENABLED
    logs_max_file_bytes: int = DEFAULT_LOGS_MAX_FILE_BYTES
    logs_max_files: int = DEFAULT_LOGS_MAX_FILES
    logs_redaction: str = DEFAULT_LOGS_REDACTION


@dataclass
class Settings:
    """Resolved runtime settings for one CLI invocation."""

    project_root: Path
    config_root: Path
    config: ProjectConfig

    @property
    def api_base_url(self) -> str:
        return self.config.api_base_url

    @property
    def api_timeout_sec(self) -> int:
        return self.config.api_timeout_sec

    @property
    def typewriter(self) -> TypewriterConfig:
        return self.config.typewriter

    @property
    def logs_dir(self) -> Path:
        return self.config_root / LOGS_DIR_NAME


def resolve_project_root(workspace_dir: Optional[Path] = None) -> Path:
    return (workspace_dir or Path.cwd()).resolve()


def resolve_project_config_root(workspace_dir: Optional[Path] = None) -> Path:
    return resolve_project_root(workspace_dir) / CONFIG_DIR_NAME


def project_config_exists(workspace_dir: Optional[Path] = None) -> bool:
    config_root = resolve_project_config_root(workspace_dir)
    return config_root.is_dir() and (config_root / CONFIG_FILE_NAME).is_file()


def _safe_positive_int(value: object, default: int) -> int:
    try:
        converted = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    if converted <= 0:
        return default
    return converted


def _safe_bool(value: object, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
    return default


def _safe_redaction(value: object, default: str) -> str:
    normalized = str(value or default).strip().lower()
    if normalized not in ALLOWED_LOG_REDACTION:
        return default
    return normalized


def _safe_theme(value: object, default: str) -> str:
    normalized = str(value or default).strip().lower()
    if normalized not in THEME_IDS:
        return default
    return normalized


def _safe_base_url(value: object, default: str) -> str:
    text = str(value or "").strip()
    if not text.lower().startswith(("http://", "https://")):
        return default
    return text.rstrip("/")


def _section(data: Dict[str, object], key: str) -> Dict[str, object]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _parse_project_config_data(data: Dict[str, object]) -> ProjectConfig:
    api = _section(data, "api")
    typewriter = _section(data, "typewriter")
    session = _section(data, "session")
    runtime = _section(data, "runtime")
    logs = _section(runtime, "logs")

    return ProjectConfig(
        api_base_url=_safe_base_url(api.get("base_url"), DEFAULT_API_BASE_URL),
        api_timeout_sec=_safe_positive_int(api.get("timeout_sec"), DEFAULT_API_TIMEOUT_SEC),
        typewriter=TypewriterConfig(
            base_cps=_safe_positive_int(typewriter.get("base_cps"), DEFAULT_BASE_CPS),
            max_step=_safe_positive_int(typewriter.get("max_step"), DEFAULT_MAX_STEP),
            min_delay_ms=_safe_positive_int(typewriter.get("min_delay_ms"), DEFAULT_MIN_DELAY_MS),
            fast_multiplier=_safe_positive_int(
                typewriter.get("fast_multiplier"),
                DEFAULT_FAST_MULTIPLIER,
            ),
        ),
        streaming=_safe_bool(session.get("streaming"), DEFAULT_STREAMING),
        theme=_safe_theme(session.get("theme"), DEFAULT_THEME),
        reduce_motion=_safe_bool(session.get("reduce_motion"), DEFAULT_REDUCE_MOTION),
        logs_enabled=_safe_bool(logs.get("enabled"), DEFAULT_LOGS_ENABLED),
        logs_max_file_bytes=_safe_positive_int(
            logs.get("max_file_bytes"),
            DEFAULT_LOGS_MAX_FILE_BYTES,
        ),
        logs_max_files=_safe_positive_int(logs.get("max_files"), DEFAULT_LOGS_MAX_FILES),
        logs_redaction=_safe_redaction(logs.get("redaction"), DEFAULT_LOGS_REDACTION),
    )


def _render_project_config(config: ProjectConfig) -> str:
    typewriter = config.typewriter
    lines: List[str] = [
        "[api]",
        'base_url = "{0}"'.format(config.api_base_url),
        "timeout_sec = {0}".format(config.api_timeout_sec),
        "",
        "[typewriter]",
        "base_cps = {0}".format(typewriter.base_cps),
        "max_step = {0}".format(typewriter.max_step),
        "min_delay_ms = {0}".format(typewriter.min_delay_ms),
        "fast_multiplier = {0}".format(typewriter.fast_multiplier),
        "",
        "[session]",
        "streaming = {0}".format(str(bool(config.streaming)).lower()),
        'theme = "{0}"'.format(config.theme),
        "reduce_motion = {0}".format(str(bool(config.reduce_motion)).lower()),
        "",
        "[runtime.logs]",
        "enabled = {0}".format(str(bool(config.logs_enabled)).lower()),
        "max_file_bytes = {0}".format(config.logs_max_file_bytes),
        "max_files = {0}".format(config.logs_max_files),
        'redaction = "{0}"'.format(_safe_redaction(config.logs_redaction, DEFAULT_LOGS_REDACTION)),
        "",
    ]
    return "\n".join(lines)


def initialize_project_config(workspace_dir: Optional[Path] = None, force: bool = False) -> Path:
    project_root = resolve_project_root(workspace_dir)
    config_root = resolve_project_config_root(project_root)

    if config_root.exists():
        if not force:
            raise ProjectConfigError(
                "configuration directory already exists: {0}".format(config_root)
            )
        shutil.rmtree(config_root)

    (config_root / LOGS_DIR_NAME).mkdir(parents=True, exist_ok=True)
    (config_root / CONFIG_FILE_NAME).write_text(
        _render_project_config(ProjectConfig()),
        encoding="utf-8",
    )
    return config_root


def load_project_config(
    config_root: Optional[Path] = None,
    workspace_dir: Optional[Path] = None,
) -> ProjectConfig:
    root = config_root or resolve_project_config_root(workspace_dir)
    config_file = root / CONFIG_FILE_NAME
    if not config_file.is_file():
        return ProjectConfig()

    try:
        with config_file.open("rb") as fp:
            data = tomllib.load(fp)
    except tomllib.TOMLDecodeError as exc:
        raise ProjectConfigError("invalid config file {0}: {1}".format(config_file, exc)) from exc
    return _parse_project_config_data(data)


def load_settings(
    workspace_dir: Optional[Path] = None,
    api_base_url: Optional[str] = None,
) -> Settings:
    project_root = resolve_project_root(workspace_dir)
    config_root = resolve_project_config_root(project_root)
    config = load_project_config(config_root=config_root)

    env_base_url = os.getenv(API_BASE_URL_ENV)
    if env_base_url:
        config.api_base_url = _safe_base_url(env_base_url, config.api_base_url)
    if api_base_url:
        config.api_base_url = _safe_base_url(api_base_url, config.api_base_url)

    return Settings(project_root=project_root, config_root=config_root, config=config)
