"""
Structural parser for OKR reports.

Walks the mistune token tree of a report and rebuilds its KRs:

    # Section                     level 1 heading
    ## Project                    level 2 heading (or a **bold** line)
    - KR title (KR123)            list item under a project
      - @alice (2 days)           exactly one time entry
      - Work item                 one or more work items
    ### KR title (KR124)          a deeper heading is a KR too; its items
    - @bob (1 day)                come from the list(s) that follow it
    - Work item

Titles, projects and work items are kept as written, inline markup
included. KR IDs, placeholders and time entries are read from the plain
text, so "**Improve latency (PLAT1)**" has the ID PLAT1.

The first grammar violation aborts parsing with a ParseError subclass that
carries the offending KR title. Line numbers are not tracked here; the lint
orchestrator recovers them from the source text.
"""

import logging
import re

from okrlint.lib.markdown import (
    SourceText,
    block_plain_text,
    block_text,
    heading_level,
    is_bold_line,
    parse_markdown,
)
from okrlint.lib.sections import SectionFilter
from okrlint.lib.types import KR, ErrorKind, TimeEntry, WorkItem

logger = logging.getLogger(__name__)

PLACEHOLDER_TITLES = ("new kr", "no kr")
EMPTY_KR_TITLE = "no kr"

KR_ID_RE = re.compile(r'\(([^()]+)\)\s*$')
KR_ID_TOKEN_RE = re.compile(r'^[^\s()]+$')
TIME_PART_RE = re.compile(
    r'^@(?P<name>[^\s(),@]+)\s*\(\s*(?P<days>\d+(?:\.\d+)?|\.\d+)\s+days?\s*\)$',
    re.IGNORECASE,
)


class ParseError(Exception):
    """A report does not follow the OKR grammar."""
    kind: ErrorKind

    def __init__(self, context: str):
        self.context = context
        super().__init__(f"{self.kind.value}: {context}")


class NoTimeFound(ParseError):
    kind = ErrorKind.NO_TIME_FOUND


class InvalidTime(ParseError):
    kind = ErrorKind.INVALID_TIME


class MultipleTimeEntries(ParseError):
    kind = ErrorKind.MULTIPLE_TIME_ENTRIES


class NoWorkFound(ParseError):
    kind = ErrorKind.NO_WORK_FOUND


class NoKRIDFound(ParseError):
    kind = ErrorKind.NO_KR_ID_FOUND


class NoProjectFound(ParseError):
    kind = ErrorKind.NO_PROJECT_FOUND


class NotAllIncludes(ParseError):
    """Sections requested with include_sections never appeared."""
    kind = ErrorKind.NOT_ALL_INCLUDES

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(", ".join(self.missing))


def is_placeholder(title: str) -> bool:
    """True for "New KR" / "No KR", bare or as the parenthesized ID."""
    text = title.strip().lower()
    if text in PLACEHOLDER_TITLES:
        return True
    match = KR_ID_RE.search(text)
    return bool(match) and match.group(1).strip() in PLACEHOLDER_TITLES


def parse_kr_id(title: str, context: str | None = None) -> str | None:
    """Return the KR ID embedded in a title, None for placeholders.

    title should be plain text; markup around the ID hides it. context is
    the title reported in the error (defaults to title).

    Raises:
        NoKRIDFound: if the title has neither an ID nor a placeholder
    """
    if is_placeholder(title):
        return None
    match = KR_ID_RE.search(title)
    if match:
        token = match.group(1).strip()
        if KR_ID_TOKEN_RE.match(token):
            return token
    raise NoKRIDFound(context if context is not None else title)


def parse_time_entry(text: str) -> TimeEntry | None:
    """Parse "@eng1 (1 day), @eng2 (2.5 days)"; None if malformed."""
    entries = []
    for part in text.split(','):
        match = TIME_PART_RE.match(part.strip())
        if not match:
            return None
        entries.append((match.group('name'), float(match.group('days'))))
    return TimeEntry(entries=entries)


def _list_items(node: dict) -> list[dict]:
    return [c for c in node.get('children', []) if c['type'] == 'list_item']


class _ReportWalker:
    """Single-pass walk over the block tokens of one report.

    Titles and item texts are looked up in the source as they are reached,
    which keeps the lookups in document order.
    """

    def __init__(self, sections: SectionFilter, source: SourceText):
        self.sections = sections
        self.source = source
        self.section = ""
        self.visiting = sections.visits("")
        self.seen_sections: set[str] = set()
        self.project: str | None = None
        # KR introduced by a heading as (text, plain text), waiting for its items
        self.pending_title: tuple[str, str] | None = None
        self.pending_items: list[dict] = []
        self.krs: list[KR] = []

    def walk(self, tokens: list[dict]) -> list[KR]:
        for node in tokens:
            kind = node['type']
            if kind == 'heading':
                self._heading(node)
            elif not self.visiting:
                continue
            elif kind == 'list':
                self._list(node)
            elif is_bold_line(node):
                self._flush_pending()
                self.project = self.source.bold_line(node)
            # Free text, code blocks and rules carry no KR data

        self._flush_pending()

        missing = self.sections.missing_includes(self.seen_sections)
        if missing:
            raise NotAllIncludes(missing)
        return self.krs

    def _item(self, item: dict) -> tuple[str, str, list[dict]]:
        """Source text, plain text and nested list items of a list item."""
        blocks = []
        nested = []
        for child in item.get('children', []):
            if child['type'] == 'list':
                nested.extend(_list_items(child))
            elif child['type'] in ('block_text', 'paragraph'):
                blocks.append(child)

        if len(blocks) == 1:
            text = self.source.list_item(blocks[0])
        else:
            text = ' '.join(t for t in map(block_text, blocks) if t)
        plain = ' '.join(t for t in map(block_plain_text, blocks) if t)
        return text, plain, nested

    def _work_item(self, text: str, nested: list[dict]) -> WorkItem:
        children = []
        for item in nested:
            child_text, _, grandchildren = self._item(item)
            children.append(self._work_item(child_text, grandchildren))
        return WorkItem(text=text, children=children)

    def _heading(self, node: dict) -> None:
        self._flush_pending()
        level = heading_level(node)

        if level == 1:
            name = block_plain_text(node)
            self.section = name
            self.seen_sections.add(name)
            self.visiting = self.sections.visits(name)
            self.project = None
            if not self.visiting:
                logger.debug(f"Skipping section '{name}'")
            return

        if not self.visiting:
            return

        text = self.source.heading(node)
        if level == 2:
            self.project = text
        else:
            self._require_project(text)
            self.pending_title = (text, block_plain_text(node))
            self.pending_items = []

    def _list(self, node: dict) -> None:
        if self.pending_title is not None:
            self.pending_items.extend(_list_items(node))
            return
        for item in _list_items(node):
            title, plain, children = self._item(item)
            self._add_kr(title, plain, children)

    def _flush_pending(self) -> None:
        if self.pending_title is None:
            return
        (title, plain), items = self.pending_title, self.pending_items
        self.pending_title = None
        self.pending_items = []
        self._add_kr(title, plain, items)

    def _require_project(self, title: str) -> None:
        if not self.project:
            raise NoProjectFound(title)

    def _add_kr(self, title: str, plain: str, children: list[dict]) -> None:
        self._require_project(title)
        kr_id = parse_kr_id(plain, context=title)

        time = None
        work = []
        for child in children:
            text, child_plain, nested = self._item(child)
            if text.startswith('@'):
                entry = parse_time_entry(child_plain)
                if entry is None:
                    raise InvalidTime(title)
                if time is not None:
                    raise MultipleTimeEntries(title)
                time = entry
            else:
                work.append(self._work_item(text, nested))

        if time is None:
            raise NoTimeFound(title)
        if not work and plain.lower() != EMPTY_KR_TITLE:
            raise NoWorkFound(title)

        logger.debug(f"Parsed KR '{title}' under '{self.project}' ({len(work)} work items)")
        self.krs.append(KR(
            section=self.section,
            project=self.project,
            title=title,
            id=kr_id,
            time=time,
            work=work,
        ))


def parse_report(
    tokens: list[dict],
    sections: SectionFilter | None = None,
    source: SourceText | None = None,
) -> list[KR]:
    """Parse a report's token tree into KRs, in document order.

    Args:
        tokens: Block tokens from parse_markdown()
        sections: Which sections to parse (default: all but "OKR updates")
        source: Text the tokens came from; without it, titles and work
            items are re-rendered from the tokens

    Raises:
        ParseError: on the first grammar violation
    """
    return _ReportWalker(sections or SectionFilter(), source or SourceText()).walk(tokens)


def parse_text(text: str, sections: SectionFilter | None = None) -> list[KR]:
    """Parse report markdown text. See parse_report()."""
    return parse_report(parse_markdown(text), sections, SourceText(text))
