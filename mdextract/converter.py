import asyncio
import logging
from typing import Any, Callable, Dict, Optional, Sequence

from .config import ConverterConfig, PDFRenderConfig
from .errors import InvalidInputError
from .extraction import extract_text, extract_text_ocr
from .markdown import to_markdown
from .ocr import OCRWorkerFactory, TesseractWorkerFactory
from .pdf_processing import DocumentRenderer, PdfRenderer
from .progress import ProgressCallback, ProgressReporter
from .rewrite import EngineFactory, GenerativeRewriter, PromptBuilder
from .rules import RuleEngine, prepare_text
from .llm_processors.text_rewriter import TextRewriter
from .types import EngineOptions, NormalizationRule

logger = logging.getLogger(__name__)


class MarkdownConverter:
    """
    Converts PDF documents to Markdown and optionally rewrites the result.

    Entry points on one instance run one at a time: a second call waits for
    the first to finish, so the OCR worker and the generative engine are
    never shared between in-flight calls.
    """

    def __init__(
        self,
        post_process_rules: Optional[Sequence[NormalizationRule]] = None,
        tesseract_language: str = ConverterConfig.TESSERACT_LANGUAGE,
        tesseract_options: Optional[Dict[str, Any]] = None,
        split_pascal_case: bool = False,
        keep_column_spacing: bool = False,
        model_id: str = ConverterConfig.DEFAULT_MODEL,
        model_base_url: Optional[str] = None,
        progress_callback: Optional[ProgressCallback] = None,
        renderer_factory: Callable[[], DocumentRenderer] = PdfRenderer,
        ocr_factory: Optional[OCRWorkerFactory] = None,
        engine_factory: EngineFactory = TextRewriter,
    ) -> None:
        self.rule_engine = RuleEngine(
            post_process_rules,
            split_pascal_case=split_pascal_case,
            keep_column_spacing=keep_column_spacing,
        )
        self.tesseract_language = tesseract_language
        self.tesseract_options: Dict[str, Any] = dict(tesseract_options or {})
        self.renderer_factory = renderer_factory
        self.ocr_factory = ocr_factory or TesseractWorkerFactory()

        self.reporter = ProgressReporter(progress_callback)
        self.rewriter = GenerativeRewriter(
            self.reporter,
            default_model=model_id,
            model_base_url=model_base_url,
            engine_factory=engine_factory,
        )
        self._lock = asyncio.Lock()

    def _validate_payload(self, data: Any, stage: str) -> bytes:
        if isinstance(data, (bytes, bytearray, memoryview)) and len(data) > 0:
            return bytes(data)
        error = InvalidInputError(
            f"Invalid input: expected non-empty PDF bytes, got {type(data).__name__}"
        )
        self.reporter.fail(stage, str(error), error)
        raise error

    def _finish(
        self,
        raw_text: str,
        post_process_rules: Optional[Sequence[NormalizationRule]],
        suffix: str,
        source: str,
    ) -> str:
        self.reporter.emit(f"postprocess_{suffix}", f"Post-processing {source} text...")
        cleaned = prepare_text(self.rule_engine.normalize(raw_text, post_process_rules))

        self.reporter.emit(f"markdown_{suffix}", "Converting to Markdown...")
        return to_markdown(cleaned)

    async def quick_convert(
        self,
        data: bytes,
        post_process_rules: Optional[Sequence[NormalizationRule]] = None,
    ) -> str:
        """Convert using the document's embedded text layer."""
        async with self._lock:
            payload = self._validate_payload(data, "quick_error")
            self.reporter.emit("start_quick", "Starting quick conversion...")

            raw_text = await extract_text(self.renderer_factory(), payload, self.reporter)
            markdown = self._finish(raw_text, post_process_rules, "quick", "extracted")

            self.reporter.emit("complete_quick", "Quick conversion complete.")
            return markdown

    async def high_accuracy_convert(
        self,
        data: bytes,
        post_process_rules: Optional[Sequence[NormalizationRule]] = None,
        tesseract_language: Optional[str] = None,
        tesseract_options: Optional[Dict[str, Any]] = None,
        render_scale: Optional[float] = None,
    ) -> str:
        """
        Convert by rendering every page and running OCR on it.

        Call-level language and options override the instance defaults;
        options are merged over the instance options.
        """
        async with self._lock:
            payload = self._validate_payload(data, "ocr_error")
            self.reporter.emit("start_ocr", "Starting high-accuracy OCR conversion...")

            language = tesseract_language or self.tesseract_language
            options = {**self.tesseract_options, **(tesseract_options or {})}
            scale = render_scale or PDFRenderConfig.DEFAULT_SCALE

            raw_text = await extract_text_ocr(
                self.renderer_factory(),
                payload,
                self.reporter,
                self.ocr_factory,
                language,
                options,
                scale,
            )
            markdown = self._finish(raw_text, post_process_rules, "ocr", "OCR")

            self.reporter.emit("complete_ocr", "High-accuracy conversion complete.")
            return markdown

    async def rewrite(
        self,
        text: str,
        model_id: Optional[str] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        engine_options: Optional[EngineOptions] = None,
    ) -> str:
        """Rewrite text with the generative engine, loading it if needed."""
        async with self._lock:
            return await self.rewriter.rewrite(text, model_id, prompt_builder, engine_options)

    async def unload(self) -> None:
        async with self._lock:
            await self.rewriter.unload()
