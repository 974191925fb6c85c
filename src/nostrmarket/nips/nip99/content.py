"""Markdown-lite listing content: rendering and recovery.

The listing content is generated text with a fixed layout. Only the
description, notes, and contact line are read back out of it; every other
field lives in tags. The contact line prefix is load-bearing because
[extract_contact()][nostrmarket.nips.nip99.content.extract_contact]
recovers it from otherwise unstructured text.
"""

from __future__ import annotations

import re
from typing import NamedTuple


CONTACT_PREFIX = "📞 Contacto:"
NOTES_HEADING = "## Notas adicionales"
WEBSITE_LABEL = "🌐 Sitio web"

_CONTACT_RE = re.compile(re.escape(CONTACT_PREFIX) + r"[ \t]*(.*)")
_MARKDOWN_LINK_RE = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")
_WEBSITE_LINE_PREFIX = f"[{WEBSITE_LABEL}]("


class ParsedContent(NamedTuple):
    """Fields recovered from listing content."""

    description: str
    notes: str
    contact_info: str


def render_content(
    title: str,
    description: str,
    contact_info: str,
    *,
    notes: str = "",
    website: str | None = None,
) -> str:
    """Render listing content.

    Layout: H1 title, description, optional notes section, optional website
    link, then the contact line. Blocks are separated by blank lines.
    """
    blocks = [f"# {title}", description.strip()]
    if notes.strip():
        blocks.append(f"{NOTES_HEADING}\n{notes.strip()}")
    if website:
        blocks.append(_website_line(website))
    blocks.append(f"{CONTACT_PREFIX} {contact_info}")
    return "\n\n".join(blocks)


def extract_contact(content: str) -> str:
    """Return the text after the last contact prefix, or ``""`` if absent.

    The rendered contact line is always the final block, so the last
    occurrence wins over any mention of the prefix in the description.
    """
    matches = _CONTACT_RE.findall(content)
    return matches[-1].strip() if matches else ""


def strip_markdown_links(text: str) -> str:
    """Reduce ``[label](url)`` and ``![alt](url)`` to their label text."""
    return _MARKDOWN_LINK_RE.sub(r"\1", text)


def _website_line(website: str) -> str:
    return f"{_WEBSITE_LINE_PREFIX}{website})"


def _trim_blank(lines: list[str], start: int, end: int) -> int:
    while end > start and not lines[end - 1].strip():
        end -= 1
    return end


def parse_content(content: str, *, website: str | None = None) -> ParsedContent:
    """Split listing content back into description, notes, and contact line.

    Sections are peeled off from the end, in the reverse of the order
    [render_content()][nostrmarket.nips.nip99.content.render_content]
    appends them, so description lines that look like section markers stay
    in the description. The website line is removed only when it links to
    *website* (the listing's ``website`` tag).

    Content that does not follow the layout (for example, a listing written
    by another client) is returned whole as the description.
    """
    lines = content.splitlines()
    start = 1 if lines and lines[0].startswith("# ") else 0
    end = _trim_blank(lines, start, len(lines))

    if end > start and lines[end - 1].lstrip().startswith(CONTACT_PREFIX):
        contact_info = extract_contact(lines[end - 1])
        end = _trim_blank(lines, start, end - 1)
    else:
        contact_info = extract_contact(content)

    if website and end > start and lines[end - 1].strip() == _website_line(website):
        end = _trim_blank(lines, start, end - 1)

    notes = ""
    heading = next(
        (i for i in range(end - 1, start - 1, -1) if lines[i].strip() == NOTES_HEADING),
        None,
    )
    if heading is not None:
        notes = "\n".join(lines[heading + 1 : end]).strip()
        end = heading

    description = "\n".join(lines[start:end]).strip()
    return ParsedContent(
        description=strip_markdown_links(description),
        notes=notes,
        contact_info=contact_info,
    )
