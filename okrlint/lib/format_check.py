"""
Line-level format checks for OKR reports.

Rejects markup that the markdown parser would read ambiguously. Runs before
any structural parsing: if a document has format violations it is not parsed.
"""

import re

FORMAT_PATTERNS = [
    (re.compile(r'\t'), "tabs not allowed, use spaces"),
    (re.compile(r'^\s*- {2,}'), "ambiguous double space after bullet"),
    (re.compile(r'^ -'), "single-space indentation is ambiguous"),
    (re.compile(r'^ *\*(\s|$)'), "asterisk bullets not allowed, use `-`"),
    (re.compile(r'^ *\+(\s|$)'), "plus bullets not allowed, use `-`"),
    (re.compile(r'^[ \t]+#'), "headings must start at column 0"),
]


def check_line(line: str, lineno: int) -> list[tuple[int, str]]:
    """Return one (lineno, message) pair per pattern the line matches."""
    return [(lineno, message) for pattern, message in FORMAT_PATTERNS if pattern.search(line)]


def split_lines(text: str) -> list[str]:
    """Split text into lines the way editors number them.

    Only "\\n" ends a line; unlike str.splitlines(), form feeds and other
    separators stay inside the line. A trailing newline adds no line.
    """
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def check_text(text: str) -> list[tuple[int, str]]:
    """Check every line of text, sorted by line number (1-based)."""
    violations = []
    for lineno, line in enumerate(split_lines(text), 1):
        violations.extend(check_line(line, lineno))
    return sort_violations(violations)


def sort_violations(violations: list[tuple[int, str]]) -> list[tuple[int, str]]:
    # Stable sort keeps pattern order within a line
    return sorted(violations, key=lambda v: v[0])
