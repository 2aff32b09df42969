"""
Heuristic reconstruction of Markdown structure from plain text lines.

Each line is classified once, in order, as blank, heading, tabular/code or
plain text. Heading detection always runs before the tabular check, so a
short all-caps line inside an aligned block is still promoted to a heading.
"""

import logging
import re
from typing import List, Sequence

from .types import FencedBlock, Heading, MarkdownBlock, Paragraph

logger = logging.getLogger(__name__)

MAX_HEADING_LENGTH = 80

_ALL_CAPS = re.compile(r"^[A-Z\s\d\W]*[A-Z][A-Z\s\d\W]*$", re.ASCII)
_DIGITS_ONLY = re.compile(r"^\d+$")
_SENTENCE_END = re.compile(r"[.,;:!?]$")
_SPACED_WORDS = re.compile(r"\S\s{2,}\S")
_COLUMN_SPLIT = re.compile(r"\s{2,}")
_EXCESS_BLANKS = re.compile(r"\n{3,}")


def is_all_caps_line(line: str) -> bool:
    return (
        2 < len(line) < MAX_HEADING_LENGTH
        and _ALL_CAPS.match(line) is not None
        and _DIGITS_ONLY.match(line) is None
    )


def is_short_title_line(line: str, next_is_blank: bool) -> bool:
    return (
        1 < len(line) < MAX_HEADING_LENGTH
        and _SENTENCE_END.search(line) is None
        and next_is_blank
    )


def is_tabular_line(line: str) -> bool:
    if _SPACED_WORDS.search(line):
        return True
    return len(_COLUMN_SPLIT.split(line)) > 2 and len(line) > 10


class _BlockBuilder:
    """Accumulates paragraph and fenced-block lines and flushes them into blocks."""

    def __init__(self) -> None:
        self.blocks: List[MarkdownBlock] = []
        self._paragraph: List[str] = []
        self._fenced: List[str] = []

    def add_paragraph_line(self, line: str) -> None:
        self.flush_fenced()
        self._paragraph.append(line)

    def add_fenced_line(self, line: str) -> None:
        self.flush_paragraph()
        self._fenced.append(line)

    def add_heading(self, text: str) -> None:
        self.flush()
        self.blocks.append(Heading(text))

    def flush_paragraph(self) -> None:
        if self._paragraph:
            self.blocks.append(Paragraph(" ".join(self._paragraph).strip()))
            self._paragraph = []

    def flush_fenced(self) -> None:
        if not self._fenced:
            return
        if len(self._fenced) >= 2:
            self.blocks.append(FencedBlock(tuple(line.rstrip() for line in self._fenced)))
        else:
            # a single aligned line is not a table
            self.blocks.append(Paragraph(" ".join(self._fenced).strip()))
        self._fenced = []

    def flush(self) -> None:
        self.flush_fenced()
        self.flush_paragraph()


def reconstruct(text: str) -> List[MarkdownBlock]:
    """
    Classify the lines of normalized text into Markdown blocks.

    Args:
        text: Normalized text, one visual line per ``\\n``.

    Returns:
        The ordered block sequence. It is empty only when the text has no
        non-blank content.
    """
    lines = text.split("\n")
    builder = _BlockBuilder()

    i = 0
    while i < len(lines):
        raw = lines[i]
        line = raw.strip()

        if not line:
            builder.flush()
            i += 1
            continue

        next_is_blank = i + 1 == len(lines) or not lines[i + 1].strip()
        if is_all_caps_line(line) or is_short_title_line(line, next_is_blank):
            builder.add_heading(line)
            # The separating blank line belongs to the heading
            if i + 1 < len(lines) and not lines[i + 1].strip():
                i += 1
        elif is_tabular_line(raw):
            builder.add_fenced_line(raw)
        else:
            builder.add_paragraph_line(line)
        i += 1

    builder.flush()
    logger.debug(f"Reconstructed {len(builder.blocks)} blocks from {len(lines)} lines")
    return builder.blocks


def render(blocks: Sequence[MarkdownBlock]) -> str:
    """Serialize blocks with one blank line between them."""
    markdown = "\n\n".join(block.to_markdown() for block in blocks)
    markdown = "\n".join(line.rstrip() for line in markdown.split("\n"))
    return _EXCESS_BLANKS.sub("\n\n", markdown).strip()


def to_markdown(text: str) -> str:
    return render(reconstruct(text))
