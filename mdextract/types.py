import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Pattern, Tuple, Union


@dataclass
class ConversionOutput:
    completion_time: float
    markdown_file: str
    markdown: str
    mode: str
    pages: int
    rewritten: bool


@dataclass
class ModelResult:
    content: str
    prompt_tokens: int
    completion_tokens: int
    cost: float


@dataclass(frozen=True)
class ProgressReport:
    """A single notification emitted by the pipeline at a stage transition."""
    stage: str
    message: str
    current_page: Optional[int] = None
    total_pages: Optional[int] = None
    progress: Optional[float] = None
    error: Optional[BaseException] = None


@dataclass(frozen=True)
class NormalizationRule:
    """
    Find/replace rule applied to the whole text.

    ``match`` may be a compiled pattern or a pattern string; ``replacement``
    follows ``re.sub`` template syntax (``\\1`` for groups).
    """
    match: Union[str, Pattern[str]]
    replacement: str

    def compile(self) -> Pattern[str]:
        if isinstance(self.match, re.Pattern):
            return self.match
        return re.compile(self.match)


@dataclass(frozen=True)
class TextFragment:
    """A positioned run of text on a page, as returned by the renderer."""
    text: str
    x: float
    baseline: float
    width: float
    height: float
    has_eol: bool = False


class EngineState(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    BUSY = "busy"
    UNLOADED = "unloaded"


@dataclass(frozen=True)
class Heading:
    text: str

    def to_markdown(self) -> str:
        return f"# {self.text}"


@dataclass(frozen=True)
class Paragraph:
    text: str

    def to_markdown(self) -> str:
        return self.text


@dataclass(frozen=True)
class FencedBlock:
    lines: Tuple[str, ...]

    def to_markdown(self) -> str:
        return "\n".join(["```", *self.lines, "```"])


MarkdownBlock = Union[Heading, Paragraph, FencedBlock]

# Keyword options handed to an engine unchanged
EngineOptions = Dict[str, Any]
