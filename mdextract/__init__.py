"""
mdextract - PDF to Markdown conversion with heuristic structure reconstruction.

Extract text from a PDF's text layer or with Tesseract OCR, normalize it,
rebuild headings, paragraphs and aligned blocks as Markdown, and optionally
rewrite the result with a local or hosted LLM.
"""

__version__ = "0.1.0"

from .mdextract import mdextract
from .converter import MarkdownConverter
from .types import ConversionOutput, NormalizationRule, ProgressReport

__all__ = ["mdextract", "MarkdownConverter", "ConversionOutput", "NormalizationRule", "ProgressReport"]
