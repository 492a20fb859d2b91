"""
Markdown body scanning.

Finds fenced code blocks, links, images and reference definitions in a post
body without rendering it. Line numbers are 1-based and relative to the body.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_FENCE_OPEN = re.compile(r"^(?P<indent>\s*)(?P<run>`{3,}|~{3,})(?P<info>.*)$")
_REFERENCE_DEFINITION = re.compile(
    r"^ {0,3}\[(?P<label>[^\]]+)\]:[ \t]*(?P<url><[^>]*>|\S*)"
)
_CODE_SPAN = re.compile(r"(?P<ticks>`+)(?P<code>.+?)(?P=ticks)", re.DOTALL)
_NON_NEWLINE = re.compile(r"[^\n]")
_LINK_TEXT = r"\[(?P<text>(?:[^\[\]]|\[[^\[\]]*\])*)\]"
_INLINE_LINK = re.compile(
    r"(?P<bang>!?)" + _LINK_TEXT + r"\(\s*(?P<url><[^>\n]*>|[^\s()]*(?:\([^\s()]*\)[^\s()]*)*)"
    r"(?:\s+(?P<title>\"[^\"]*\"|'[^']*'|\([^)]*\)))?\s*\)"
)
_REFERENCE_LINK = re.compile(
    r"(?P<bang>!?)" + _LINK_TEXT + r"\[(?P<label>[^\[\]]*)\]"
)
_SHORTCUT_LINK = re.compile(r"(?P<bang>!?)\[(?P<label>[^\[\]]+)\](?![\[(:])")


@dataclass(frozen=True)
class CodeFence:
    """A fenced code block; ``end_line`` is None when it is never closed."""

    marker: str
    length: int
    info: str
    start_line: int
    end_line: Optional[int]

    @property
    def is_closed(self) -> bool:
        return self.end_line is not None


@dataclass(frozen=True)
class MarkdownLink:
    """A link or image occurrence in the body."""

    text: str
    line: int
    is_image: bool
    url: Optional[str] = None
    label: Optional[str] = None

    @property
    def kind(self) -> str:
        return "reference" if self.label is not None else "inline"


@dataclass(frozen=True)
class ReferenceDefinition:
    """A ``[label]: url`` line."""

    label: str
    url: str
    line: int


def normalize_label(label: str) -> str:
    """Normalise a reference label: case-insensitive, collapsed whitespace."""
    return " ".join(label.split()).casefold()


def _strip_angle_brackets(url: str) -> str:
    if url.startswith("<") and url.endswith(">"):
        return url[1:-1]
    return url


def _closes(line: str, fence: CodeFence) -> bool:
    stripped = line.strip()
    if not stripped or stripped[0] != fence.marker:
        return False
    run = len(stripped) - len(stripped.lstrip(fence.marker))
    return run >= fence.length and not stripped[run:].strip()


def scan_code_fences(body: str) -> list[CodeFence]:
    """
    Find fenced code blocks.

    A fence opens with three or more backticks or tildes and closes with a
    line of the same character at least as long. Backtick info strings
    cannot contain backticks, so ```` ```foo` ```` is not a fence.
    """
    fences: list[CodeFence] = []
    open_fence: Optional[CodeFence] = None

    for number, line in enumerate(body.splitlines(), 1):
        if open_fence is not None:
            if _closes(line, open_fence):
                fences.append(
                    CodeFence(
                        marker=open_fence.marker,
                        length=open_fence.length,
                        info=open_fence.info,
                        start_line=open_fence.start_line,
                        end_line=number,
                    )
                )
                open_fence = None
            continue

        match = _FENCE_OPEN.match(line)
        if match is None:
            continue
        run = match.group("run")
        info = match.group("info").strip()
        if run[0] == "`" and "`" in info:
            continue
        open_fence = CodeFence(
            marker=run[0],
            length=len(run),
            info=info,
            start_line=number,
            end_line=None,
        )

    if open_fence is not None:
        fences.append(open_fence)
    return fences


def find_unclosed_fences(body: str) -> list[CodeFence]:
    """Fences opened in the body and never closed."""
    return [fence for fence in scan_code_fences(body) if not fence.is_closed]


def _prose_blocks(body: str) -> list[tuple[int, str]]:
    """
    Runs of non-blank lines outside fenced code, as ``(first line, text)``.

    Lines inside a run are joined with ``\\n`` so that links and code spans
    may wrap. Code spans are blanked to spaces, keeping the newlines.
    """
    fenced: set[int] = set()
    for fence in scan_code_fences(body):
        last = fence.end_line if fence.end_line is not None else len(body.splitlines())
        fenced.update(range(fence.start_line, last + 1))

    blocks: list[tuple[int, str]] = []
    current: list[str] = []
    start = 0

    def flush() -> None:
        if current:
            text = "\n".join(current)
            blocks.append((start, _CODE_SPAN.sub(lambda m: _NON_NEWLINE.sub(" ", m.group(0)), text)))
            current.clear()

    for number, line in enumerate(body.splitlines(), 1):
        if number in fenced or not line.strip():
            flush()
            continue
        if not current:
            start = number
        current.append(line)
    flush()
    return blocks


def _prose_lines(body: str) -> list[tuple[int, str]]:
    """Non-blank body lines outside fenced code, with code spans blanked."""
    return [
        (start + offset, line)
        for start, text in _prose_blocks(body)
        for offset, line in enumerate(text.split("\n"))
    ]


def extract_reference_definitions(body: str) -> dict[str, ReferenceDefinition]:
    """
    Collect ``[label]: url`` definitions outside code.

    Footnote definitions (``[^1]: text``) are skipped. When a label is
    defined twice the first definition wins.
    """
    definitions: dict[str, ReferenceDefinition] = {}
    for number, line in _prose_lines(body):
        match = _REFERENCE_DEFINITION.match(line)
        if match is None or match.group("label").startswith("^"):
            continue
        key = normalize_label(match.group("label"))
        if key not in definitions:
            definitions[key] = ReferenceDefinition(
                label=match.group("label"),
                url=_strip_angle_brackets(match.group("url")),
                line=number,
            )
    return definitions


def _links_in_text(
    text: str,
    first_line: int,
    definitions: dict[str, ReferenceDefinition],
) -> list[MarkdownLink]:
    links: list[MarkdownLink] = []
    consumed: list[tuple[int, int]] = []

    def overlaps(start: int, end: int) -> bool:
        return any(start < c_end and c_start < end for c_start, c_end in consumed)

    def line_at(position: int) -> int:
        return first_line + text.count("\n", 0, position)

    for match in _INLINE_LINK.finditer(text):
        consumed.append(match.span())
        links.append(
            MarkdownLink(
                text=match.group("text"),
                line=line_at(match.start()),
                is_image=bool(match.group("bang")),
                url=_strip_angle_brackets(match.group("url")).strip(),
            )
        )
        links.extend(_links_in_text(match.group("text"), line_at(match.start("text")), definitions))

    for match in _REFERENCE_LINK.finditer(text):
        if overlaps(*match.span()):
            continue
        consumed.append(match.span())
        label = match.group("label") or match.group("text")
        links.append(
            MarkdownLink(
                text=match.group("text"),
                line=line_at(match.start()),
                is_image=bool(match.group("bang")),
                label=label,
            )
        )
        links.extend(_links_in_text(match.group("text"), line_at(match.start("text")), definitions))

    for match in _SHORTCUT_LINK.finditer(text):
        if overlaps(*match.span()):
            continue
        label = match.group("label")
        if label.startswith("^") or normalize_label(label) not in definitions:
            continue
        links.append(
            MarkdownLink(
                text=label,
                line=line_at(match.start()),
                is_image=bool(match.group("bang")),
                label=label,
            )
        )

    links.sort(key=lambda link: link.line)
    return links


def extract_links(body: str) -> list[MarkdownLink]:
    """
    Collect links and images outside code, in document order.

    Link text and code spans may wrap across lines within a paragraph; a
    link's ``line`` is the line its opening bracket is on. Reference-style
    links carry a ``label`` and no ``url``; use ``resolve_links`` to pair
    them with their definitions. Autolinks (``<https://...>``) are never
    empty and are not collected.
    """
    definitions = extract_reference_definitions(body)
    links: list[MarkdownLink] = []
    for first_line, text in _prose_blocks(body):
        text = "\n".join(
            " " * len(line) if _REFERENCE_DEFINITION.match(line) else line
            for line in text.split("\n")
        )
        links.extend(_links_in_text(text, first_line, definitions))
    return links


def resolve_links(body: str) -> list[tuple[MarkdownLink, Optional[str]]]:
    """
    Pair every link with its destination URL.

    Inline links resolve to their own URL; reference links resolve through
    the definitions and map to None when the label is undefined.
    """
    definitions = extract_reference_definitions(body)
    resolved: list[tuple[MarkdownLink, Optional[str]]] = []
    for link in extract_links(body):
        if link.label is None:
            resolved.append((link, link.url))
            continue
        definition = definitions.get(normalize_label(link.label))
        resolved.append((link, definition.url if definition else None))
    return resolved
