"""Numbered terminal modules and the registry that binds them to ids.

Every handler follows the same shape: announce progress, fetch one API
endpoint, validate the JSON with a pydantic model, then append either the
rendered lines or a deterministic error block. Handlers never raise; the
``guard_handler`` wrapper is the last line of defence for anything the
handler itself did not anticipate.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from evaterm.config import DEFAULT_API_BASE_URL, DEFAULT_API_TIMEOUT_SEC
from evaterm.kernel.debug_log import DebugLogWriter
from evaterm.terminal.commands.bio import build_bio_lines
from evaterm.terminal.commands.contact import build_contact_error_lines, build_contact_lines
from evaterm.terminal.commands.currently import (
    build_currently_error_lines,
    build_currently_lines,
    build_fallback_snapshot,
)
from evaterm.terminal.commands.cv import (
    build_cv_error_lines,
    build_cv_initializing_lines,
    build_cv_success_lines,
)
from evaterm.terminal.commands.investments import (
    build_investments_error_lines,
    build_investments_lines,
)
from evaterm.terminal.commands.layout import pluralize
from evaterm.terminal.commands.links import (
    FALLBACK_NOTE as LINKS_FALLBACK_NOTE,
    build_links_error_lines,
    build_links_initializing_lines,
    build_links_success_lines,
)
from evaterm.terminal.commands.projects import (
    build_projects_error_lines,
    build_projects_initializing_lines,
    build_projects_success_lines,
)
from evaterm.terminal.commands.reel import (
    build_reel_error_lines,
    build_reel_prompt_lines,
    fallback_items,
)
from evaterm.terminal.commands.repo import build_repo_lines
from evaterm.terminal.commands.writing import (
    FALLBACK_NOTE as WRITING_FALLBACK_NOTE,
    build_writing_list_lines,
)
from evaterm.terminal.constants import REEL_ANCHOR
from evaterm.terminal.host import NullHost, SessionHost
from evaterm.terminal.schemas import (
    BioSnapshot,
    ContactInfo,
    CurrentlySnapshot,
    CvMetadata,
    InvestmentResponse,
    LinksResponse,
    ProjectsResponse,
    ReelItem,
    ReelResponse,
    WritingListResponse,
)
from evaterm.terminal.types import CommandRegistry, CommandResponse, Handler, ResponseLine, line

Fetch = Callable[[str], Awaitable[httpx.Response]]
AnchorRegistrar = Callable[[str, Callable[[], None]], None]
ModelT = TypeVar("ModelT", bound=BaseModel)


class ModuleLoadError(RuntimeError):
    """Raised when the numbered command registry cannot be built."""


@dataclass
class CommandDependencies:
    append_response: Callable[[CommandResponse], None]
    set_last_interaction: Callable[[str], None]
    reel_viewer: Callable[[Sequence[ReelItem]], None]
    fetch: Fetch
    flush_typing: Optional[Callable[[], None]] = None
    host: SessionHost = field(default_factory=NullHost)
    register_anchor: Optional[AnchorRegistrar] = None
    site_url: str = DEFAULT_API_BASE_URL
    debug_log: DebugLogWriter = field(default_factory=DebugLogWriter.disabled)


class HttpFetcher:
    """``fetch(path)`` backed by one shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout_sec: float = DEFAULT_API_TIMEOUT_SEC,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout_sec,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __call__(self, path: str) -> httpx.Response:
        return await self._client.get(path)

    async def aclose(self) -> None:
        await self._client.aclose()


def extract_api_error(response: httpx.Response, service: str) -> str:
    """Prefer the API's ``{"error": ...}`` message, then the HTTP reason."""

    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        message = payload.get("error")
        if isinstance(message, str) and message.strip():
            return message
    reason = response.reason_phrase
    if reason:
        return reason
    return "{0} responded with status {1}.".format(service, response.status_code)


def _describe(exc: Exception, default: str) -> str:
    text = str(exc).strip()
    return text or default


def _parse(model: Type[ModelT], payload: Any) -> Optional[ModelT]:
    try:
        return model.model_validate(payload)
    except ValidationError:
        return None


def guard_handler(
    handler: Callable[[], Awaitable[None]],
    deps: CommandDependencies,
    label: str,
) -> Handler:
    """Wrap ``handler`` so that no exception escapes to the session."""

    @functools.wraps(handler)
    async def guarded() -> None:
        try:
            await handler()
        except Exception as exc:
            deps.debug_log.write_entry(
                level="error",
                component="registry",
                kind="handler.crash",
                message="module {0} raised {1}".format(label, type(exc).__name__),
                data={"module": label, "error": str(exc)},
            )
            deps.append_response(
                CommandResponse(
                    lines=[
                        line("{0} module failed unexpectedly.".format(label), "error"),
                        line(_describe(exc, type(exc).__name__), "muted"),
                    ]
                )
            )
            deps.set_last_interaction("{0} failed".format(label))

    return guarded


class ModuleHandlers:
    """Async handlers for menu options 1 through 10."""

    def __init__(self, deps: CommandDependencies) -> None:
        self._deps = deps

    def _emit(
        self,
        lines: Sequence[ResponseLine],
        side_effect: Optional[Callable[[], None]] = None,
    ) -> None:
        self._deps.append_response(CommandResponse(lines=list(lines), side_effect=side_effect))

    def _status(self, value: str) -> None:
        self._deps.set_last_interaction(value)

    async def bio(self) -> None:
        self._status("Bio dossier loading")
        try:
            response = await self._deps.fetch("/api/bio")
            if not response.is_success:
                message = extract_api_error(response, "Bio service")
                self._emit(build_bio_lines(None, error_message=message))
                self._status("Bio dossier failed")
                return
            snapshot = _parse(BioSnapshot, response.json())
        except (httpx.HTTPError, ValueError) as exc:
            message = _describe(exc, "Unexpected client error reaching bio endpoint.")
            self._emit(build_bio_lines(None, error_message=message))
            self._status("Bio dossier failed")
            return

        if snapshot is None:
            message = "Bio payload was invalid. Verify the API response shape and retry."
            self._emit(build_bio_lines(None, error_message=message))
            self._status("Bio dossier failed")
            return
        self._emit(build_bio_lines(snapshot))
        self._status("Bio dossier rendered")

    async def cv(self) -> None:
        self._emit(build_cv_initializing_lines())
        self._status("CV retrieval in progress")
        try:
            response = await self._deps.fetch("/api/cv")
            if not response.is_success:
                self._emit(build_cv_error_lines(extract_api_error(response, "CV service")))
                self._status("CV retrieval failed")
                return
            meta = _parse(CvMetadata, response.json())
        except (httpx.HTTPError, ValueError) as exc:
            self._emit(
                build_cv_error_lines(
                    _describe(exc, "Unexpected client error reaching CV endpoint.")
                )
            )
            self._status("CV retrieval failed")
            return

        if meta is None or not meta.download_url:
            self._emit(
                build_cv_error_lines(
                    "CV metadata did not include a download URL. "
                    "Configure the admin singleton and retry."
                )
            )
            self._status("CV retrieval failed")
            return

        if self._deps.flush_typing is not None:
            self._deps.flush_typing()
        download_url = meta.download_url
        self._emit(
            build_cv_success_lines(meta),
            side_effect=lambda: self._deps.host.open_url(download_url),
        )
        self._status("CV download ready")

    async def links(self) -> None:
        self._emit(build_links_initializing_lines())
        self._status("Links retrieval in progress")
        try:
            response = await self._deps.fetch("/api/links")
            if not response.is_success:
                self._emit(build_links_error_lines(extract_api_error(response, "Links service")))
                self._status("Links retrieval failed")
                return
            parsed = _parse(LinksResponse, response.json())
        except (httpx.HTTPError, ValueError) as exc:
            self._emit(
                build_links_error_lines(
                    _describe(exc, "Unexpected client error reaching links endpoint.")
                )
            )
            self._status("Links retrieval failed")
            return

        if parsed is None:
            self._emit(
                build_links_error_lines(
                    "Links payload was invalid. Verify the API response shape and retry."
                )
            )
            self._status("Links retrieval failed")
            return

        links = parsed.links
        is_fallback = parsed.meta is not None and parsed.meta.source == "fallback"
        lines = build_links_success_lines(links)
        if is_fallback:
            lines.append(line(LINKS_FALLBACK_NOTE, "muted"))
        self._emit(lines)
        if links:
            self._status(
                "Rendered {0}{1}".format(
                    pluralize(len(links), "link"),
                    " (fallback)" if is_fallback else "",
                )
            )
        else:
            self._status("Link matrix empty")

    async def projects(self) -> None:
        self._emit(build_projects_initializing_lines())
        self._status("Projects retrieval in progress")
        try:
            response = await self._deps.fetch("/api/projects")
            if not response.is_success:
                self._emit(
                    build_projects_error_lines(extract_api_error(response, "Projects service"))
                )
                self._status("Projects retrieval failed")
                return
            parsed = _parse(ProjectsResponse, response.json())
        except (httpx.HTTPError, ValueError) as exc:
            self._emit(
                build_projects_error_lines(
                    _describe(exc, "Unexpected client error reaching projects endpoint.")
                )
            )
            self._status("Projects retrieval failed")
            return

        if parsed is None:
            self._emit(
                build_projects_error_lines(
                    "Projects payload was invalid. Verify the API response shape and retry."
                )
            )
            self._status("Projects retrieval failed")
            return

        projects = parsed.projects
        self._emit(build_projects_success_lines(projects))
        if projects:
            self._status("Loaded {0}".format(pluralize(len(projects), "project")))
        else:
            self._status("Projects archive empty")

    async def writing(self) -> None:
        self._status("Writing list loading")
        try:
            response = await self._deps.fetch("/api/writing")
            if not response.is_success:
                self._emit([line("Unable to load writing modules.", "error")])
                self._status("Writing list failed")
                return
            parsed = _parse(WritingListResponse, response.json())
        except (httpx.HTTPError, ValueError) as exc:
            self._emit(
                [
                    line("Writing archive request failed.", "error"),
                    line(
                        _describe(exc, "Unexpected client error reaching writing endpoint."),
                        "muted",
                    ),
                ]
            )
            self._status("Writing list failed")
            return

        if parsed is None:
            self._emit([line("Writing payload was invalid. Retry after refreshing.", "error")])
            self._status("Writing list failed")
            return

        articles = parsed.articles
        is_fallback = parsed.meta.source == "fallback"
        lines = build_writing_list_lines(articles, self._deps.site_url)
        if is_fallback:
            lines.append(line(WRITING_FALLBACK_NOTE, "muted"))
        self._emit(lines)
        if articles:
            self._status(
                "Loaded {0}{1}".format(
                    pluralize(len(articles), "article"),
                    " (fallback)" if is_fallback else "",
                )
            )
        else:
            self._status("Writing archive empty")

    async def investments(self) -> None:
        self._status("Investments retrieval in progress")
        try:
            response = await self._deps.fetch("/api/investments")
            if not response.is_success:
                self._emit(build_investments_error_lines(response.text))
                self._status("Investments retrieval failed")
                return
            parsed = _parse(InvestmentResponse, response.json())
        except (httpx.HTTPError, ValueError) as exc:
            self._emit(
                [
                    line("Investments request failed.", "error"),
                    line(
                        _describe(exc, "Unexpected client error reaching investments endpoint."),
                        "muted",
                    ),
                ]
            )
            self._status("Investments retrieval failed")
            return

        if parsed is None:
            self._emit([line("Investments payload invalid. Seed data via /admin.", "error")])
            self._status("Investments retrieval failed")
            return

        investments = parsed.investments
        self._emit(build_investments_lines(investments))
        if investments:
            self._status("Loaded {0}".format(pluralize(len(investments), "investment")))
        else:
            self._status("Investments list empty")

    async def currently(self) -> None:
        self._status("Currently sync in progress")
        try:
            response = await self._deps.fetch("/api/currently")
            if not response.is_success:
                self._emit(
                    build_currently_error_lines(extract_api_error(response, "Currently service"))
                )
                self._status("Currently sync failed")
                return
            snapshot = _parse(CurrentlySnapshot, response.json())
        except (httpx.HTTPError, ValueError) as exc:
            self._emit(
                build_currently_error_lines(
                    _describe(exc, "Unexpected client error reaching currently endpoint.")
                )
            )
            self._status("Currently sync failed")
            return

        if snapshot is None:
            self._emit(
                build_currently_error_lines(
                    "Currently payload was invalid. Verify the API response shape and retry."
                )
            )
            self._status("Currently sync failed")
            return

        use_fallback = not snapshot.sections
        if use_fallback:
            snapshot = build_fallback_snapshot(snapshot)
        self._emit(build_currently_lines(snapshot))
        self._status(
            "Currently panel rendered (fallback)" if use_fallback else "Currently panel rendered"
        )

    async def contact(self) -> None:
        self._status("Contact info loading")
        try:
            response = await self._deps.fetch("/api/contact")
            if not response.is_success:
                self._emit(
                    build_contact_error_lines(
                        "Contact endpoint responded with {0}".format(response.status_code)
                    )
                )
                self._status("Contact info failed")
                return
            info = _parse(ContactInfo, response.json())
        except (httpx.HTTPError, ValueError) as exc:
            self._emit(
                build_contact_error_lines(
                    _describe(exc, "Unexpected error reaching contact endpoint.")
                )
            )
            self._status("Contact info failed")
            return

        if info is None:
            self._emit(build_contact_error_lines("Contact payload invalid. Configure via /admin."))
            self._status("Contact info failed")
            return

        email = info.email
        self._emit(
            build_contact_lines(info),
            side_effect=lambda: self._deps.host.copy_to_clipboard(email),
        )
        self._status("Contact info rendered")

    async def reel(self) -> None:
        self._status("Reel loading")
        try:
            response = await self._deps.fetch("/api/reel")
            if not response.is_success:
                self._emit(
                    build_reel_error_lines(
                        "Reel endpoint responded with {0}".format(response.status_code)
                    )
                )
                self._status("Reel failed")
                return
            parsed = _parse(ReelResponse, response.json())
        except (httpx.HTTPError, ValueError) as exc:
            self._emit(build_reel_error_lines(_describe(exc, "Unexpected error reaching reel endpoint.")))
            self._status("Reel failed")
            return

        if parsed is None:
            self._emit(build_reel_error_lines("Reel payload invalid. Upload images via /admin."))
            self._status("Reel failed")
            return

        fallback_used = not parsed.images
        items: List[ReelItem] = fallback_items() if fallback_used else list(parsed.images)

        def register_viewer() -> None:
            if self._deps.register_anchor is not None:
                self._deps.register_anchor(REEL_ANCHOR, lambda: self._deps.reel_viewer(items))

        self._emit(build_reel_prompt_lines(), side_effect=register_viewer)
        self._status("Reel opened (fallback)" if fallback_used else "Reel opened")

    async def repo(self) -> None:
        self._emit(build_repo_lines())
        self._status("Repo link rendered")


_MODULE_LABELS = (
    (1, "bio", "Bio"),
    (2, "cv", "CV"),
    (3, "links", "Links"),
    (4, "projects", "Projects"),
    (5, "writing", "Writing"),
    (6, "investments", "Investments"),
    (7, "currently", "Currently"),
    (8, "contact", "Contact"),
    (9, "reel", "Reel"),
    (10, "repo", "Repo"),
)


def create_command_registry(deps: CommandDependencies) -> CommandRegistry:
    handlers = ModuleHandlers(deps)
    return {
        command_id: guard_handler(getattr(handlers, attr), deps, label)
        for command_id, attr, label in _MODULE_LABELS
    }


async def load_command_registry(deps: CommandDependencies) -> CommandRegistry:
    """Default asynchronous loader used by sessions."""

    try:
        registry = create_command_registry(deps)
    except Exception as exc:
        raise ModuleLoadError("failed to build command registry: {0}".format(exc)) from exc
    if not registry:
        raise ModuleLoadError("command registry is empty")
    return registry
