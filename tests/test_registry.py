from __future__ import annotations

import asyncio
from typing import List

import httpx
import pytest

from evaterm.terminal.constants import REEL_ANCHOR
from evaterm.terminal.registry import (
    CommandDependencies,
    HttpFetcher,
    create_command_registry,
    extract_api_error,
    load_command_registry,
)
from evaterm.terminal.types import CommandResponse


class Recorder:
    def __init__(self) -> None:
        self.responses: List[CommandResponse] = []
        self.statuses: List[str] = []
        self.flushes = 0
        self.anchors = {}
        self.reels = []

    def append(self, response: CommandResponse) -> None:
        self.responses.append(response)
        if response.side_effect is not None:
            response.side_effect()

    def flush(self) -> None:
        self.flushes += 1

    def texts(self) -> List[str]:
        return [entry.text for response in self.responses for entry in response.lines]

    def kinds(self) -> List[str]:
        return [entry.kind for response in self.responses for entry in response.lines]


def _deps(recorder: Recorder, fetch, host) -> CommandDependencies:
    return CommandDependencies(
        append_response=recorder.append,
        set_last_interaction=recorder.statuses.append,
        reel_viewer=recorder.reels.append,
        fetch=fetch,
        flush_typing=recorder.flush,
        host=host,
        register_anchor=recorder.anchors.__setitem__,
        site_url="http://eva.test",
    )


def _run(command_id: int, routes, recording_host, fetch_factory) -> Recorder:
    recorder = Recorder()
    registry = create_command_registry(_deps(recorder, fetch_factory(routes), recording_host))
    asyncio.run(registry[command_id]())
    return recorder


def test_registry_covers_all_menu_ids(recording_host, fetch_factory):
    recorder = Recorder()
    registry = asyncio.run(load_command_registry(_deps(recorder, fetch_factory({}), recording_host)))
    assert sorted(registry) == list(range(1, 11))


def test_network_failure_yields_one_error_and_one_detail(recording_host, fetch_factory):
    routes = {"/api/writing": httpx.ConnectError("connection refused")}
    recorder = _run(5, routes, recording_host, fetch_factory)

    assert recorder.kinds() == ["error", "muted"]
    assert recorder.texts() == ["Writing archive request failed.", "connection refused"]
    assert recorder.statuses == ["Writing list loading", "Writing list failed"]


def test_unexpected_handler_crash_is_contained(recording_host, fetch_factory):
    routes = {"/api/investments": RuntimeError("boom")}
    recorder = _run(6, routes, recording_host, fetch_factory)

    assert recorder.kinds() == ["error", "muted"]
    assert recorder.texts() == ["Investments module failed unexpectedly.", "boom"]
    assert recorder.statuses[-1] == "Investments failed"


def test_bio_renders_stat_sheet_and_bullets(recording_host, fetch_factory):
    payload = {
        "sections": [
            {
                "title": "Profile",
                "items": [
                    {"kind": "field", "label": "Name", "value": "Asuka Langley"},
                    {"kind": "bullet", "text": "Second Child"},
                ],
            },
            {"title": "Skills", "items": []},
        ]
    }
    recorder = _run(1, {"/api/bio": (200, payload)}, recording_host, fetch_factory)

    assert recorder.texts() == [
        "MAGI ADMIN CREDENTIALS:",
        "NAME: Asuka Langley",
        "—",
        "PROFILE:",
        "• Second Child",
        "SKILLS:",
        "No entries found. Add content in the admin console.",
    ]
    assert recorder.statuses[-1] == "Bio dossier rendered"


def test_bio_http_error_prefers_api_message(recording_host, fetch_factory):
    recorder = _run(1, {"/api/bio": (503, {"error": "Supabase offline"})}, recording_host, fetch_factory)

    assert "Supabase offline" in recorder.texts()
    assert recorder.statuses[-1] == "Bio dossier failed"


def test_cv_flushes_typing_and_opens_download(recording_host, fetch_factory):
    payload = {
        "downloadUrl": "https://cdn.eva.test/cv.pdf",
        "fileName": "cv.pdf",
        "lastUpdated": "2025-11-15T12:00:00Z",
    }
    recorder = _run(2, {"/api/cv": (200, payload)}, recording_host, fetch_factory)

    assert recorder.flushes == 1
    assert recorder.texts()[-3:] == ["DOCUMENT REQUESTED", "FILE: cv.pdf", "UPDATED: Nov 15, 2025"]
    assert all(entry.instant for entry in recorder.responses[-1].lines)
    assert recording_host.calls == [("open_url", "https://cdn.eva.test/cv.pdf")]
    assert recorder.statuses[-1] == "CV download ready"


def test_cv_without_download_url_fails(recording_host, fetch_factory):
    recorder = _run(2, {"/api/cv": (200, {"fileName": "cv.pdf"})}, recording_host, fetch_factory)

    assert "CV archive is offline - unable to retrieve download coordinates." in recorder.texts()
    assert recording_host.calls == []
    assert recorder.statuses[-1] == "CV retrieval failed"


def test_links_group_by_category_and_note_fallback(recording_host, fetch_factory):
    payload = {
        "links": [
            {"id": "3", "category": "other", "label": "Blog", "url": "https://blog.eva.test"},
            {"id": "1", "category": "social", "label": "GitHub", "url": "https://github.com/eva"},
            {"id": "2", "category": "site", "label": "Home", "url": "https://eva.test"},
        ],
        "meta": {"source": "fallback"},
    }
    recorder = _run(3, {"/api/links": (200, payload)}, recording_host, fetch_factory)

    texts = recorder.texts()
    assert texts[0] == "RETRIEVING LINK MATRIX..."
    assert texts[1:4] == [
        "GitHub: https://github.com/eva",
        "Home: https://eva.test",
        "Blog: https://blog.eva.test",
    ]
    assert texts[-1] == "Links are using fallback data while Supabase is offline."
    segments = recorder.responses[-1].lines[0].segments
    assert segments[1].href == "https://github.com/eva"
    assert recorder.statuses[-1] == "Rendered 3 links (fallback)"


def test_links_invalid_payload(recording_host, fetch_factory):
    recorder = _run(3, {"/api/links": (200, {"links": "nope"})}, recording_host, fetch_factory)

    assert recorder.kinds()[-2:] == ["error", "muted"]
    assert recorder.statuses[-1] == "Links retrieval failed"


def test_projects_render_links_and_case_study(recording_host, fetch_factory):
    payload = {
        "projects": [
            {
                "id": "p1",
                "slug": "magi",
                "title": "MAGI",
                "blurb": "Tri-brain consensus engine.",
                "tags": ["python", "asyncio"],
                "actions": [
                    {"kind": "external", "href": "https://magi.test", "label": "Live"},
                    {"kind": "internal", "href": "/projects/magi", "label": "Read"},
                ],
                "hasCaseStudy": True,
            },
            {
                "id": "p2",
                "slug": None,
                "title": "Dummy Plug",
                "blurb": "",
                "tags": [],
                "actions": [],
            },
        ]
    }
    recorder = _run(4, {"/api/projects": (200, payload)}, recording_host, fetch_factory)

    assert recorder.texts()[1:] == [
        "01. MAGI",
        "Tri-brain consensus engine.",
        "Tags:",
        "python · asyncio",
        "Link:",
        "https://magi.test",
        "Case Study:",
        "/projects/magi",
        "-----",
        "02. Dummy Plug",
        "Status: Narrative upload pending.",
        "Tags:",
        "Not provided.",
        "Link:",
        "Not provided.",
    ]
    assert recorder.statuses[-1] == "Loaded 2 projects"


def test_writing_links_articles_to_site(recording_host, fetch_factory):
    payload = {
        "articles": [
            {
                "id": "a1",
                "slug": "instrumentality",
                "title": "On Instrumentality",
                "subtitle": "Notes",
                "publishedAt": "2025-01-05T09:00:00Z",
            }
        ],
        "meta": {"source": "supabase"},
    }
    recorder = _run(5, {"/api/writing": (200, payload)}, recording_host, fetch_factory)

    assert recorder.texts() == [
        "RETRIEVING ARTICLE DOSSIER...",
        "01. On Instrumentality",
        "Notes",
        "Updated: Jan 5, 2025",
    ]
    title_segment = recorder.responses[-1].lines[1].segments[1]
    assert title_segment.href == "http://eva.test/articles/instrumentality"
    assert recorder.statuses[-1] == "Loaded 1 article"


def test_investments_colour_by_performance(recording_host, fetch_factory):
    base = {
        "order": 1,
        "provider": "stooq",
        "providerSymbol": None,
        "source": "cache",
    }
    payload = {
        "investments": [
            dict(base, id="1", ticker="nvda", label="NVIDIA", perf6mPercent=42.4,
                 perfLastFetched="2025-11-15T14:30:00Z"),
            dict(base, id="2", ticker="tsla", label=None, perf6mPercent=-3.456,
                 perfLastFetched="2025-11-14T10:00:00Z"),
            dict(base, id="3", ticker="vt", label="World", perf6mPercent=None,
                 perfLastFetched=None),
        ]
    }
    recorder = _run(6, {"/api/investments": (200, payload)}, recording_host, fetch_factory)

    texts = recorder.texts()
    assert texts[:2] == ["RETRIEVING INVESTMENTS MODULE:", "Last sync: Nov 15, 02:30 PM"]
    assert "NVDA: NVIDIA" in texts
    assert "6M: +42%" in texts
    assert "TSLA: tsla" in texts
    assert "6M: -3.46%" in texts
    assert "6M: Pending data" in texts
    perf_kinds = [
        entry.segments[1].kind
        for entry in recorder.responses[-1].lines
        if entry.text.startswith("6M:")
    ]
    assert perf_kinds == ["gain", "loss", "muted"]
    assert recorder.statuses[-1] == "Loaded 3 investments"


def test_currently_falls_back_when_empty(recording_host, fetch_factory):
    recorder = _run(7, {"/api/currently": (200, {"sections": []})}, recording_host, fetch_factory)

    texts = recorder.texts()
    assert "| PLAYING" in texts[0]
    assert any("Armored Core VI" in text for text in texts)
    assert recorder.statuses[-1] == "Currently panel rendered (fallback)"


def test_contact_copies_email(recording_host, fetch_factory):
    payload = {"email": "misato@nerv.test", "phone": "+81 000"}
    recorder = _run(8, {"/api/contact": (200, payload)}, recording_host, fetch_factory)

    assert recording_host.calls == [("copy_to_clipboard", "misato@nerv.test")]
    email_line = recorder.responses[-1].lines[2]
    assert email_line.segments[1].href == "mailto:misato@nerv.test"
    assert recorder.statuses[-1] == "Contact info rendered"


def test_contact_rejects_invalid_email(recording_host, fetch_factory):
    recorder = _run(8, {"/api/contact": (200, {"email": "not-an-email"})}, recording_host, fetch_factory)

    assert recorder.texts() == ["Contact module failed to load.", "Contact payload invalid. Configure via /admin."]
    assert recording_host.calls == []


def test_reel_registers_viewer_anchor_with_fallback(recording_host, fetch_factory):
    recorder = _run(9, {"/api/reel": (200, {"images": []})}, recording_host, fetch_factory)

    assert REEL_ANCHOR in recorder.anchors
    assert recorder.reels == []
    recorder.anchors[REEL_ANCHOR]()
    assert len(recorder.reels) == 1
    assert [item.id for item in recorder.reels[0]] == ["fallback-01", "fallback-02"]
    assert recorder.statuses[-1] == "Reel opened (fallback)"


def test_repo_needs_no_network(recording_host, fetch_factory):
    fetch = fetch_factory({})
    recorder = Recorder()
    registry = create_command_registry(_deps(recorder, fetch, recording_host))
    asyncio.run(registry[10]())

    assert fetch.calls == []
    assert recorder.texts()[1] == "https://github.com/Hxnnyy/eva-terminal"
    assert recorder.statuses == ["Repo link rendered"]


def test_extract_api_error_fallbacks():
    request = httpx.Request("GET", "http://eva.test/api/bio")
    with_message = httpx.Response(500, json={"error": "db down"}, request=request)
    without_body = httpx.Response(502, text="<html>", request=request)

    assert extract_api_error(with_message, "Bio service") == "db down"
    assert extract_api_error(without_body, "Bio service") == "Bad Gateway"


@pytest.mark.parametrize("status", [200, 404])
def test_http_fetcher_uses_base_url(status):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(status, json={"ok": True})

    async def scenario():
        fetcher = HttpFetcher(base_url="http://eva.test", transport=httpx.MockTransport(handler))
        try:
            return await fetcher("/api/contact")
        finally:
            await fetcher.aclose()

    response = asyncio.run(scenario())
    assert response.status_code == status
    assert seen == ["http://eva.test/api/contact"]
