"""Runtime container wiring settings, debug log and terminal session."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Optional

from evaterm.config import Settings, project_config_exists
from evaterm.kernel.debug_log import DebugLogWriter
from evaterm.terminal.host import SessionHost
from evaterm.terminal.registry import Fetch
from evaterm.terminal.session import TerminalSession


class Runtime:
    core_version = "0.3.0"

    def __init__(
        self,
        settings: Settings,
        host: Optional[SessionHost] = None,
        fetch: Optional[Fetch] = None,
        streaming: Optional[bool] = None,
    ) -> None:
        self.settings = settings
        # Logs live under the project config root; never create it implicitly.
        logs_enabled = settings.config.logs_enabled and project_config_exists(
            settings.project_root
        )
        self.config: Dict[str, Any] = {
            "api_base_url": settings.api_base_url,
            "api_timeout_sec": settings.api_timeout_sec,
            "logs": {
                "enabled": logs_enabled,
                "max_file_bytes": settings.config.logs_max_file_bytes,
                "max_files": settings.config.logs_max_files,
                "redaction": settings.config.logs_redaction,
            },
        }
        session_config = settings.config
        if streaming is not None:
            session_config = replace(session_config, streaming=bool(streaming))

        self.debug_log = DebugLogWriter(
            logs_dir=settings.logs_dir if logs_enabled else None,
            enabled=logs_enabled,
            max_file_bytes=settings.config.logs_max_file_bytes,
            max_files=settings.config.logs_max_files,
            redaction=settings.config.logs_redaction,
        )
        self.session = TerminalSession(
            config=session_config,
            host=host,
            fetch=fetch,
            debug_log=self.debug_log,
        )
        self.debug_log.write_entry(
            level="info",
            component="runtime",
            kind="runtime.start",
            message="runtime started",
            data={
                "core_version": self.core_version,
                "api_base_url": settings.api_base_url,
                "streaming": session_config.streaming,
            },
            session_id=self.session.session_id,
        )

    def status(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "core_version": self.core_version,
            "project_root": str(self.settings.project_root),
            "config_root": str(self.settings.config_root),
            "registry_status": self.session.registry_status.value,
        }
        payload.update(self.config)
        payload.update(self.debug_log.status())
        return payload

    async def aclose(self) -> None:
        await self.session.aclose()
        self.debug_log.write_entry(
            level="info",
            component="runtime",
            kind="runtime.stop",
            message="runtime stopped",
            session_id=self.session.session_id,
        )
