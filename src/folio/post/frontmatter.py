"""
YAML front-matter codec.

A post file is a ``---`` line, a YAML mapping, a closing ``---`` (or ``...``)
line, and the Markdown body. Parsing keeps the exact original text of the
block so that rendering an unmodified document reproduces the input
byte-for-byte. Appending to a list splices new lines into that text; any
other change to the metadata re-dumps the block.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, NamedTuple, Optional

import yaml

from folio.post.exceptions import FrontMatterError

BOM = "\ufeff"
OPENING_DELIMITER = "---"
CLOSING_DELIMITERS = ("---", "...")


class FrontMatterLoader(yaml.SafeLoader):
    """Safe loader that keeps impossible dates such as 2017-02-30 as strings."""


def _construct_timestamp(loader: FrontMatterLoader, node: yaml.Node) -> Any:
    try:
        return yaml.SafeLoader.construct_yaml_timestamp(loader, node)
    except ValueError:
        return loader.construct_scalar(node)


FrontMatterLoader.add_constructor("tag:yaml.org,2002:timestamp", _construct_timestamp)


class DocumentParts(NamedTuple):
    """Exact substrings of a post file; joining them yields the input."""

    opening: str
    raw: str
    closing: str
    body: str

    @property
    def body_line_offset(self) -> int:
        """Number of lines preceding the body."""
        return 2 + len(self.raw.splitlines())


def _strip_line(line: str) -> str:
    return line.rstrip("\r\n").rstrip(" \t")


def split_document(text: str) -> DocumentParts:
    """
    Split a post file into its front-matter block and body.

    Raises:
        FrontMatterError: If the file does not start with a front-matter
            block or the block is never closed.
    """
    prefix = BOM if text.startswith(BOM) else ""
    lines = text[len(prefix):].splitlines(keepends=True)

    if not lines or _strip_line(lines[0]) != OPENING_DELIMITER:
        raise FrontMatterError(
            "File does not start with a front-matter block",
            line=1,
            error_code=FrontMatterError.MISSING,
        )

    for index in range(1, len(lines)):
        if _strip_line(lines[index]) in CLOSING_DELIMITERS:
            return DocumentParts(
                opening=prefix + lines[0],
                raw="".join(lines[1:index]),
                closing=lines[index],
                body="".join(lines[index + 1:]),
            )

    raise FrontMatterError(
        "Front-matter block is never closed",
        line=1,
        error_code=FrontMatterError.UNCLOSED,
    )


def load_front_matter(raw: str, line_offset: int = 1) -> dict[str, Any]:
    """
    Load the YAML text of a front-matter block.

    Args:
        raw: YAML text between the delimiters.
        line_offset: Lines preceding ``raw`` in the file, for error positions.

    Raises:
        FrontMatterError: On YAML syntax errors or a non-mapping root.
    """
    try:
        data = yaml.load(raw, Loader=FrontMatterLoader)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        line = mark.line + 1 + line_offset if mark is not None else None
        problem = getattr(e, "problem", None) or str(e)
        raise FrontMatterError(
            f"Front matter is not valid YAML: {problem}",
            line=line,
            error_code=FrontMatterError.INVALID_YAML,
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise FrontMatterError(
            f"Front matter must be a mapping, got {type(data).__name__}",
            line=line_offset + 1,
            error_code=FrontMatterError.NOT_A_MAPPING,
        )
    return data


def dump_front_matter(metadata: dict[str, Any]) -> str:
    """Serialize metadata as block-style YAML, keeping key order."""
    if not metadata:
        return ""
    return yaml.safe_dump(
        metadata,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=4096,
    )


def _last_line(node: yaml.Node) -> int:
    """Index of the last raw line holding part of ``node``."""
    if isinstance(node, yaml.ScalarNode):
        mark = node.end_mark
        # literal and folded scalars end after their last line break
        if node.style in ("|", ">") and mark.line > node.start_mark.line:
            return mark.line - 1
        return mark.line
    if isinstance(node, yaml.SequenceNode):
        children = list(node.value)
    else:
        children = [child for pair in node.value for child in pair]
    return max((_last_line(child) for child in children), default=node.end_mark.line)


def _dump_list_item(item: Any, dash_column: int, item_column: int, newline: str) -> str:
    text = yaml.safe_dump(
        item,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=4096,
    )
    first = " " * dash_column + "-" + " " * max(1, item_column - dash_column - 1)
    rest = " " * len(first)
    return "".join(
        (first if index == 0 else rest) + line + newline
        for index, line in enumerate(text.splitlines())
    )


def splice_list_item(raw: str, key: str, item: Any) -> Optional[str]:
    """
    Return ``raw`` with ``item`` appended to the top-level list ``key``.

    Only the new lines are added; every other byte of ``raw`` is kept. The
    list may be missing, empty (``key:`` with no value) or in block style.
    Returns None for anything else, such as a flow-style ``[...]`` list.
    """
    try:
        root = yaml.compose(raw, Loader=FrontMatterLoader)
    except yaml.YAMLError:
        return None
    newline = "\r\n" if "\r\n" in raw else "\n"

    if root is None:
        mappings: list[tuple[yaml.Node, yaml.Node]] = []
    elif isinstance(root, yaml.MappingNode):
        mappings = root.value
    else:
        return None

    for key_node, value_node in mappings:
        if not isinstance(key_node, yaml.ScalarNode) or key_node.value != key:
            continue
        if isinstance(value_node, yaml.SequenceNode) and not value_node.flow_style and value_node.value:
            dash_column = value_node.start_mark.column
            first = value_node.value[0]
            item_column = first.start_mark.column if isinstance(first, yaml.MappingNode) else dash_column + 2
            after = _last_line(value_node)
        elif (
            isinstance(value_node, yaml.ScalarNode)
            and value_node.tag == "tag:yaml.org,2002:null"
            and value_node.value == ""
        ):
            dash_column = key_node.start_mark.column
            item_column = dash_column + 2
            after = key_node.end_mark.line
        else:
            return None

        lines = raw.splitlines(keepends=True)
        head = "".join(lines[: after + 1])
        if not head.endswith(("\n", "\r")):
            head += newline
        block = _dump_list_item(item, dash_column, item_column, newline)
        return head + block + "".join(lines[after + 1:])

    if raw and not raw.endswith(("\n", "\r")):
        raw += newline
    return raw + f"{key}:{newline}" + _dump_list_item(item, 0, 2, newline)


@dataclass
class FrontMatterDocument:
    """
    A parsed post file.

    ``metadata`` and ``body`` are meant to be edited in place; ``render``
    decides whether the original block text can be reused.
    """

    metadata: dict[str, Any]
    body: str
    parts: Optional[DocumentParts] = None
    _snapshot: Optional[dict[str, Any]] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.parts is not None and self._snapshot is None:
            self._snapshot = copy.deepcopy(self.metadata)

    @classmethod
    def from_metadata(cls, metadata: dict[str, Any], body: str = "") -> FrontMatterDocument:
        """Build a new document that has no original text."""
        return cls(metadata=dict(metadata), body=body)

    @property
    def is_modified(self) -> bool:
        """Whether the metadata differs from what was parsed."""
        return self.parts is None or self.metadata != self._snapshot

    @property
    def body_line_offset(self) -> int:
        """Number of file lines before the first body line."""
        if self.parts is not None and not self.is_modified:
            return self.parts.body_line_offset
        return 2 + len(dump_front_matter(self.metadata).splitlines())

    def append_to_list(self, key: str, item: Any) -> None:
        """
        Append ``item`` to the top-level list ``key``, creating it if absent.

        An unmodified document gets the item spliced into its original block
        text, so quoting, comments and unquoted ``H:MM`` values elsewhere in
        the block are written back unchanged. Otherwise only ``metadata``
        changes and ``render`` re-dumps the block.
        """
        values = [*(self.metadata.get(key) or []), item]

        raw = None
        if self.parts is not None and not self.is_modified:
            raw = splice_list_item(self.parts.raw, key, item)

        self.metadata[key] = values
        if raw is None or self.parts is None:
            return
        try:
            spliced = load_front_matter(raw)
        except FrontMatterError:
            return
        if spliced == self.metadata:
            self.parts = self.parts._replace(raw=raw)
            self._snapshot = copy.deepcopy(self.metadata)

    def render(self) -> str:
        """Render the document back to file text."""
        if self.parts is not None and not self.is_modified:
            return self.parts.opening + self.parts.raw + self.parts.closing + self.body
        return (
            f"{OPENING_DELIMITER}\n"
            f"{dump_front_matter(self.metadata)}"
            f"{OPENING_DELIMITER}\n"
            f"{self.body}"
        )


def parse_document(text: str) -> FrontMatterDocument:
    """
    Parse post file text into a FrontMatterDocument.

    Raises:
        FrontMatterError: If the block is missing, unclosed, invalid YAML,
            or not a mapping.
    """
    parts = split_document(text)
    metadata = load_front_matter(parts.raw)
    return FrontMatterDocument(metadata=metadata, body=parts.body, parts=parts)
