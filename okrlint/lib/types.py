"""
Shared data types for okrlint.

Dataclasses used by the parser, the aggregator and the lint orchestrator,
kept here to avoid circular imports.
"""

from dataclasses import dataclass, field
from enum import Enum


class ErrorKind(Enum):
    """Every way a report can fail to lint. Exactly one per failed run."""
    FORMAT_ERROR = "Format_error"
    NO_TIME_FOUND = "No_time_found"
    INVALID_TIME = "Invalid_time"
    MULTIPLE_TIME_ENTRIES = "Multiple_time_entries"
    NO_WORK_FOUND = "No_work_found"
    NO_KR_ID_FOUND = "No_KR_ID_found"
    NO_PROJECT_FOUND = "No_project_found"
    NOT_ALL_INCLUDES = "Not_all_includes"


@dataclass
class WorkItem:
    """A free-text bullet under a KR, inline markdown preserved."""
    text: str
    children: list["WorkItem"] = field(default_factory=list)


@dataclass
class TimeEntry:
    """Person-days reported against a single KR.

    Entries keep the order they were written in, e.g.
    "@alice (2 days), @bob (0.5 days)" -> [("alice", 2.0), ("bob", 0.5)].
    """
    entries: list[tuple[str, float]] = field(default_factory=list)


@dataclass
class KR:
    """A parsed key result together with where it was found."""
    section: str  # "" for content before the first section heading
    project: str
    title: str
    id: str | None  # None for "New KR" / "No KR" placeholders
    time: TimeEntry
    work: list[WorkItem] = field(default_factory=list)

    @property
    def key(self) -> str:
        """Identity used when merging KRs of the same project."""
        return self.id if self.id else self.title
