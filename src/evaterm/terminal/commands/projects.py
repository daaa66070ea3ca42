from __future__ import annotations

from typing import List, Sequence

from evaterm.terminal.schemas import ProjectSummary
from evaterm.terminal.types import ResponseLine, Segment, line

ENTRY_SEPARATOR = "-----"
TAG_JOINER = " · "


def build_projects_initializing_lines() -> List[ResponseLine]:
    return [line("RETRIEVING SELECTED PROJECTS...", "system")]


def build_projects_error_lines(message: str) -> List[ResponseLine]:
    return [
        line("Project archive responded with an error signal.", "error"),
        line(message, "muted"),
    ]


def _link_line(href: str) -> ResponseLine:
    return line(href, "output", segments=[Segment(text=href, href=href)])


def build_projects_success_lines(projects: Sequence[ProjectSummary]) -> List[ResponseLine]:
    if not projects:
        return [line("No projects are available yet. Populate them via /admin.", "muted")]

    lines: List[ResponseLine] = []
    for index, project in enumerate(projects):
        lines.append(line("{0:02d}. {1}".format(index + 1, project.title), "output"))
        lines.append(line(project.blurb.strip() or "Status: Narrative upload pending.", "muted"))

        lines.append(line("Tags:", "accent"))
        if project.tags:
            lines.append(line(TAG_JOINER.join(project.tags), "output"))
        else:
            lines.append(line("Not provided.", "muted"))

        lines.append(line("Link:", "accent"))
        external = [action for action in project.actions if action.kind == "external"]
        if external:
            lines.extend(_link_line(action.href) for action in external)
        else:
            lines.append(line("Not provided.", "muted"))

        if project.has_case_study and project.slug:
            lines.append(line("Case Study:", "accent"))
            lines.append(_link_line("/projects/{0}".format(project.slug)))

        if index < len(projects) - 1:
            lines.append(line(ENTRY_SEPARATOR, "system"))

    return lines
