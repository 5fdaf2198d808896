"""
Lint orchestration for OKR reports.

Runs the line-level format checks while reading a document, then (only if
the document is clean) the structural parser. Parser exceptions are turned
into LintError values positioned on the first line mentioning the failing KR.

Usage:
    from okrlint.lib.lint import lint_string, format_error

    error = lint_string(text)
    if error:
        print(format_error(error))

Each document goes through a small state machine:

    scanning --format_failed--> format_invalid
    scanning --start_parse----> parsing --parse_ok-----> valid
                                        --parse_failed-> structural_invalid
"""

import logging
from dataclasses import dataclass
from typing import Iterable, TextIO

from transitions import Machine

from okrlint.lib.format_check import check_line, sort_violations, split_lines
from okrlint.lib.parser import NotAllIncludes, ParseError, parse_text
from okrlint.lib.sections import SectionFilter
from okrlint.lib.types import KR, ErrorKind

logger = logging.getLogger(__name__)


STATES = [
    "scanning",
    "format_invalid",
    "parsing",
    "valid",
    "structural_invalid",
]

TRANSITIONS = [
    {"trigger": "format_failed", "source": "scanning", "dest": "format_invalid"},
    {"trigger": "start_parse", "source": "scanning", "dest": "parsing"},
    {"trigger": "parse_ok", "source": "parsing", "dest": "valid"},
    {"trigger": "parse_failed", "source": "parsing", "dest": "structural_invalid"},
]

TERMINAL_STATES = ("format_invalid", "valid", "structural_invalid")

# Explanations shown under 'In KR "...":'
ERROR_DETAILS = {
    ErrorKind.NO_TIME_FOUND:
        "No time entry found. Each KR must be followed by '- @... (x days)'",
    ErrorKind.INVALID_TIME:
        "Invalid time entry found. Format is '- @eng1 (x days), @eng2 (x days)'",
    ErrorKind.MULTIPLE_TIME_ENTRIES:
        "Multiple time entries found. Only one time entry should follow immediately after the KR.",
    ErrorKind.NO_WORK_FOUND:
        "No work items found. This may indicate an unreported parsing error. "
        "Remove the KR if it is without work.",
    ErrorKind.NO_KR_ID_FOUND:
        "No KR ID found. KRs should be in the format \"This is a KR (PLAT123)\", "
        "where PLAT123 is the KR ID. For KRs that don't have an ID yet, use \"New KR\" "
        "and for work without a KR use \"No KR\".",
    ErrorKind.NO_PROJECT_FOUND:
        "No project found (starting with '#')",
}

SHORT_MESSAGES = {
    ErrorKind.NO_TIME_FOUND: "No time found in \"{}\"",
    ErrorKind.INVALID_TIME: "Invalid time in \"{}\"",
    ErrorKind.MULTIPLE_TIME_ENTRIES: "Multiple time entries for \"{}\"",
    ErrorKind.NO_WORK_FOUND: "No work found for \"{}\"",
    ErrorKind.NO_KR_ID_FOUND: "No KR ID found for \"{}\"",
    ErrorKind.NO_PROJECT_FOUND: "No project found for \"{}\"",
}


@dataclass(frozen=True)
class LintError:
    """The single error found in a document.

    violations is only set for FORMAT_ERROR, missing only for
    NOT_ALL_INCLUDES; every other kind carries the KR title as context.
    """
    kind: ErrorKind
    context: str = ""
    line: int | None = None  # 1-based, best effort
    violations: tuple[tuple[int, str], ...] = ()
    missing: tuple[str, ...] = ()

    @property
    def display_line(self) -> int:
        return self.line if self.line is not None else 1


def find_line(context: str, lines: list[str]) -> int | None:
    """First 1-based line containing context, ignoring case."""
    needle = context.lower()
    for lineno, line in enumerate(lines, 1):
        if needle in line.lower():
            return lineno
    return None


def error_from_exception(exc: ParseError, lines: list[str]) -> LintError:
    """Attach a best-effort line number to a parser exception."""
    if isinstance(exc, NotAllIncludes):
        return LintError(kind=exc.kind, context=exc.context, missing=tuple(exc.missing))
    return LintError(kind=exc.kind, context=exc.context, line=find_line(exc.context, lines))


class LintRun:
    """Lint state for one document.

    Feed lines with feed(), then call finish() once. After a successful run
    the parsed KRs are available as .krs.
    """

    def __init__(self, sections: SectionFilter | None = None, name: str = "input stream"):
        self.sections = sections or SectionFilter()
        self.name = name
        self.lines: list[str] = []
        self.violations: list[tuple[int, str]] = []
        self.error: LintError | None = None
        self.krs: list[KR] = []

        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial="scanning",
            auto_transitions=False,
            send_event=True,
            after_state_change="on_state_change",
        )

    def on_state_change(self, event) -> None:
        logger.debug(
            f"[LINT] {self.name}: {event.transition.source} -> "
            f"{event.transition.dest} ({event.event.name})"
        )

    @property
    def done(self) -> bool:
        return self.state in TERMINAL_STATES

    def feed(self, line: str) -> None:
        """Record one line (without its newline) and format-check it."""
        if self.state != "scanning":
            raise RuntimeError(f"Cannot feed lines in state '{self.state}'")
        lineno = len(self.lines) + 1
        self.violations.extend(check_line(line, lineno))
        self.lines.append(line)

    def finish(self) -> LintError | None:
        """Parse the accumulated text unless format checks already failed."""
        if self.violations:
            self.error = LintError(
                kind=ErrorKind.FORMAT_ERROR,
                violations=tuple(sort_violations(self.violations)),
            )
            self.format_failed()
            return self.error

        self.start_parse()
        text = "".join(line + "\n" for line in self.lines)
        try:
            krs = parse_text(text, self.sections)
        except ParseError as e:
            self.error = error_from_exception(e, self.lines)
            self.parse_failed()
            return self.error

        self.krs = krs
        self.parse_ok()
        return None


def run_lines(
    lines: Iterable[str],
    sections: SectionFilter | None = None,
    name: str = "input stream",
) -> LintRun:
    """Lint lines and return the finished run."""
    run = LintRun(sections, name)
    for line in lines:
        run.feed(line.rstrip("\r\n"))
    run.finish()
    return run


def lint_lines(lines: Iterable[str], sections: SectionFilter | None = None) -> LintError | None:
    return run_lines(lines, sections).error


def lint_string(text: str, sections: SectionFilter | None = None) -> LintError | None:
    return run_lines(split_lines(text), sections).error


def lint(stream: TextIO, sections: SectionFilter | None = None, name: str = "input stream") -> LintError | None:
    """Lint a readable stream. The caller owns (and closes) the stream."""
    return run_lines(stream, sections, name).error


def format_error(error: LintError) -> str:
    """Human readable, multi-line description of a lint error."""
    if error.kind == ErrorKind.FORMAT_ERROR:
        lines = [f"Line {lineno}: {message}" for lineno, message in error.violations]
        lines.append(f"{len(error.violations)} formatting errors found. Parsing aborted.")
        return "\n".join(lines) + "\n"

    if error.kind == ErrorKind.NOT_ALL_INCLUDES:
        return f"Missing includes section: {', '.join(error.missing)}\n"

    return (
        f"Line {error.display_line}: In KR \"{error.context}\":\n"
        f"  {ERROR_DETAILS[error.kind]}\n"
    )


def short_messages(error: LintError, name: str) -> list[str]:
    """One "name:line:message" string per problem, for editors and CI."""
    if error.kind == ErrorKind.FORMAT_ERROR:
        return [f"{name}:{lineno}:{message}" for lineno, message in error.violations]

    if error.kind == ErrorKind.NOT_ALL_INCLUDES:
        return [f"{name}:{error.display_line}:Missing includes section: {', '.join(error.missing)}"]

    message = SHORT_MESSAGES[error.kind].format(error.context)
    return [f"{name}:{error.display_line}:{message}"]
