"""
Report aggregation.

Regroups parsed KRs by project and renders the result back to markdown.
Aggregation never validates; all grammar checks happen in the parser.
"""

from dataclasses import dataclass, field
from typing import Iterable

from okrlint.lib.types import KR, TimeEntry, WorkItem


@dataclass
class Project:
    """A project and its KRs, in first-seen order."""
    title: str
    krs: list[KR] = field(default_factory=list)

    def index_of(self, key: str) -> int | None:
        for index, kr in enumerate(self.krs):
            if kr.key == key:
                return index
        return None


@dataclass
class Report:
    """KRs from one or more reports, grouped by project."""
    projects: list[Project] = field(default_factory=list)

    def project(self, title: str) -> Project | None:
        for project in self.projects:
            if project.title == title:
                return project
        return None

    def to_markdown(self, section: str | None = None, footer: str | None = None) -> str:
        """Render as an OKR report that parses back to the same KRs."""
        lines = []
        if section:
            lines.extend([f"# {section}", ""])

        for project in self.projects:
            lines.extend([f"## {project.title}", ""])
            for kr in project.krs:
                lines.append(f"- {kr.title}")
                lines.append(f"  - {format_time_entry(kr.time)}")
                for item in kr.work:
                    lines.extend(_format_work_item(item, depth=1))
            lines.append("")

        if footer:
            lines.extend([footer.rstrip(), ""])

        return "\n".join(lines)


def format_days(days: float) -> str:
    unit = "day" if days == 1 else "days"
    return f"{days:g} {unit}"


def format_time_entry(time: TimeEntry) -> str:
    """Format as "@alice (2 days), @bob (1 day)"."""
    return ", ".join(f"@{name} ({format_days(days)})" for name, days in time.entries)


def _format_work_item(item: WorkItem, depth: int) -> list[str]:
    indent = "  " * depth
    lines = [f"{indent}- {item.text}"]
    for child in item.children:
        lines.extend(_format_work_item(child, depth + 1))
    return lines


def _merge_time(first: TimeEntry, second: TimeEntry) -> TimeEntry:
    totals: dict[str, float] = {}
    for name, days in first.entries + second.entries:
        totals[name] = totals.get(name, 0.0) + days
    return TimeEntry(entries=list(totals.items()))


def _merge_kr(existing: KR, kr: KR) -> KR:
    return KR(
        section=existing.section,
        project=existing.project,
        title=existing.title,
        id=existing.id,
        time=_merge_time(existing.time, kr.time),
        work=existing.work + kr.work,
    )


def _copy_kr(kr: KR) -> KR:
    return KR(
        section=kr.section,
        project=kr.project,
        title=kr.title,
        id=kr.id,
        time=TimeEntry(entries=list(kr.time.entries)),
        work=list(kr.work),
    )


def aggregate(krs: Iterable[KR]) -> Report:
    """Group KRs by project title, preserving first-seen order.

    KRs of the same project sharing an ID (or a title, when there is no ID)
    are merged: days are summed per person and work items concatenated.
    The input KRs are not modified.
    """
    report = Report()
    for kr in krs:
        project = report.project(kr.project)
        if project is None:
            project = Project(title=kr.project)
            report.projects.append(project)

        index = project.index_of(kr.key)
        if index is None:
            project.krs.append(_copy_kr(kr))
        else:
            project.krs[index] = _merge_kr(project.krs[index], kr)
    return report
