"""
Markdown tree helpers.

Wraps mistune v3's AST renderer. The structural parser consumes the token
tree produced here; block tokens are dicts with a "type" key and, depending on
the type, "children", "attrs" or "raw".

The AST carries no source positions, so SourceText maps blocks back to the
lines they were written on. Titles and work items keep the author's own
markup that way (`_x_` stays `_x_` instead of coming back as `*x*`).
"""

import re

import mistune

_markdown = mistune.create_markdown(renderer='ast')

LIST_ITEM_LINE_RE = re.compile(r'^\s*(?:[-*+]|\d{1,9}[.)])\s+(?P<text>\S.*?)\s*$')
HEADING_LINE_RE = re.compile(r'^#{1,6}\s+(?P<text>.*?)(?:\s+#+)?\s*$')
BOLD_LINE_RE = re.compile(r'^\s*(?P<text>(\*\*|__).*\2)\s*$')


def parse_markdown(text: str) -> list[dict]:
    """Convert markdown text into mistune's list of block tokens."""
    return _markdown(text)


def inline_text(children: list[dict]) -> str:
    """Render inline tokens back to markdown source text.

    Used when a block can't be found in the source; emphasis always comes
    back as `*`/`**`. Soft and hard line breaks become single spaces.
    """
    parts = []
    for node in children:
        kind = node['type']
        if kind in ('text', 'inline_html'):
            parts.append(node.get('raw', ''))
        elif kind == 'codespan':
            parts.append(f"`{node.get('raw', '')}`")
        elif kind == 'strong':
            parts.append(f"**{inline_text(node.get('children', []))}**")
        elif kind == 'emphasis':
            parts.append(f"*{inline_text(node.get('children', []))}*")
        elif kind == 'link':
            url = node.get('attrs', {}).get('url', '')
            parts.append(f"[{inline_text(node.get('children', []))}]({url})")
        elif kind == 'image':
            url = node.get('attrs', {}).get('url', '')
            parts.append(f"![{inline_text(node.get('children', []))}]({url})")
        elif kind in ('softbreak', 'linebreak'):
            parts.append(' ')
        elif 'children' in node:
            parts.append(inline_text(node['children']))
        else:
            parts.append(node.get('raw', ''))
    return ''.join(parts).strip()


def plain_text(children: list[dict]) -> str:
    """Text of inline tokens with all markup removed.

    "**Improve _latency_ (PLAT1)**" -> "Improve latency (PLAT1)"
    """
    parts = []
    for node in children:
        if node['type'] in ('softbreak', 'linebreak'):
            parts.append(' ')
        elif 'children' in node:
            parts.append(plain_text(node['children']))
        else:
            parts.append(node.get('raw', ''))
    return ''.join(parts).strip()


def block_text(node: dict) -> str:
    """Text of a paragraph-like block (paragraph, block_text, heading)."""
    return inline_text(node.get('children', []))


def block_plain_text(node: dict) -> str:
    return plain_text(node.get('children', []))


def _bold_child(node: dict) -> dict | None:
    if node['type'] != 'paragraph':
        return None
    children = [
        c for c in node.get('children', [])
        if not (c['type'] == 'text' and not c.get('raw', '').strip())
    ]
    if len(children) == 1 and children[0]['type'] == 'strong':
        return children[0]
    return None


def is_bold_line(node: dict) -> bool:
    """True for a paragraph whose only content is bold text ("**Project**")."""
    return _bold_child(node) is not None


def heading_level(node: dict) -> int:
    return node.get('attrs', {}).get('level', 0)


class SourceText:
    """The lines of a document, for recovering blocks as written.

    Blocks must be looked up in document order: each lookup searches forward
    from the line after the previous match, comparing plain text, so repeated
    texts map to successive lines. Blocks spanning several lines, or with no
    matching line, fall back to inline_text().
    """

    def __init__(self, text: str = ""):
        self.lines = text.split("\n")
        self.cursor = 0
        self._plain_cache: dict[str, str] = {}

    def _plain(self, raw: str) -> str:
        if raw not in self._plain_cache:
            self._plain_cache[raw] = plain_text(parse_markdown(raw))
        return self._plain_cache[raw]

    def _match(self, pattern: re.Pattern, plain: str) -> str | None:
        for index in range(self.cursor, len(self.lines)):
            match = pattern.match(self.lines[index])
            if match and self._plain(match.group('text')) == plain:
                self.cursor = index + 1
                return match.group('text')
        return None

    def _verbatim(self, pattern: re.Pattern, children: list[dict]) -> str:
        found = self._match(pattern, plain_text(children))
        return found if found is not None else inline_text(children)

    def list_item(self, block: dict) -> str:
        """Source of a list item's text block, without the bullet."""
        return self._verbatim(LIST_ITEM_LINE_RE, block.get('children', []))

    def heading(self, node: dict) -> str:
        """Source of a heading, without the leading (and closing) #s."""
        return self._verbatim(HEADING_LINE_RE, node.get('children', []))

    def bold_line(self, node: dict) -> str:
        """Source inside a bold-only line, without the outer markers."""
        strong = _bold_child(node)
        if strong is None:
            return ''
        found = self._match(BOLD_LINE_RE, plain_text(strong['children']))
        if found is None:
            return inline_text(strong['children'])
        return found[2:-2].strip()
