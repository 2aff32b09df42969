import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

from .config import PDFRenderConfig
from .errors import EngineInitError, InvalidInputError, RecognitionError
from .ocr import OCRWorker, OCRWorkerFactory, ocr_worker
from .pdf_processing import DocumentRenderer
from .progress import ProgressReporter
from .types import TextFragment

logger = logging.getLogger(__name__)

# Fragments may overlap slightly without being separate words
GAP_TOLERANCE = -0.5
SAME_LINE_HEIGHT_RATIO = 0.5


def _needs_space(current: TextFragment, following: TextFragment) -> bool:
    if not current.text or not following.text:
        return False
    if current.text.endswith(" ") or following.text.startswith(" "):
        return False
    if abs(current.baseline - following.baseline) >= current.height * SAME_LINE_HEIGHT_RATIO:
        return False
    gap = following.x - (current.x + current.width)
    return gap > GAP_TOLERANCE


def join_fragments(fragments: Sequence[TextFragment]) -> str:
    """
    Concatenate a page's fragments, restoring the word and line breaks lost
    by naive concatenation.
    """
    page_text = ""
    for i, fragment in enumerate(fragments):
        page_text += fragment.text
        if fragment.has_eol:
            if not page_text.endswith("\n"):
                page_text += "\n"
        elif i < len(fragments) - 1 and _needs_space(fragment, fragments[i + 1]):
            page_text += " "

    if page_text.strip() and not page_text.endswith("\n"):
        page_text += "\n"
    return page_text


async def _open_document(renderer: DocumentRenderer, data: bytes, reporter: ProgressReporter) -> int:
    try:
        return await asyncio.to_thread(renderer.open, data)
    except InvalidInputError as e:
        reporter.fail("pdf_load_error", f"Failed to load PDF: {e}", e)
        raise
    except Exception as e:
        reporter.fail("pdf_load_error", f"Failed to load PDF: {e}", e)
        raise EngineInitError(f"Failed to load PDF: {e}") from e


async def extract_text(renderer: DocumentRenderer, data: bytes, reporter: ProgressReporter) -> str:
    """
    Pull the text layer of every page, in page order.

    Args:
        renderer: Rendering engine used to open the document and read fragments.
        data: Raw PDF bytes.
        reporter: Progress channel.

    Returns:
        The raw text of the whole document.
    """
    reporter.emit("pdf_load", "Loading PDF for text extraction...")
    num_pages = await _open_document(renderer, data, reporter)

    try:
        pages: List[str] = []
        for page_num in range(1, num_pages + 1):
            reporter.emit(
                "pdf_page",
                f"Extracting text from page {page_num}/{num_pages}...",
                current_page=page_num,
                total_pages=num_pages,
            )
            try:
                fragments = await asyncio.to_thread(renderer.get_page_fragments, page_num - 1)
            except Exception as e:
                reporter.fail("pdf_page_error", f"Failed to extract text from page {page_num}: {e}", e)
                raise InvalidInputError(f"Failed to extract text from page {page_num}: {e}") from e
            pages.append(join_fragments(fragments))
    finally:
        renderer.close()

    reporter.emit("pdf_extract_complete", "PDF text extraction complete.")
    full_text = "".join(pages)
    logger.debug(f"Extracted {len(full_text):,} characters from {num_pages} pages")
    return full_text


async def _recognize_pages(
    renderer: DocumentRenderer,
    worker: OCRWorker,
    num_pages: int,
    reporter: ProgressReporter,
    scale: float,
) -> str:
    accumulated: List[str] = []
    for page_num in range(1, num_pages + 1):
        reporter.emit(
            "ocr_render_page",
            f"Rendering page {page_num}/{num_pages} for OCR...",
            current_page=page_num,
            total_pages=num_pages,
        )
        try:
            image = await asyncio.to_thread(renderer.render_page, page_num - 1, scale)
        except Exception as e:
            reporter.fail("ocr_page_error", f"Failed to render page {page_num}: {e}", e)
            raise RecognitionError(f"Failed to render page {page_num} for OCR: {e}") from e

        reporter.emit(
            "ocr_recognize_page",
            f"OCR processing page {page_num}/{num_pages}...",
            current_page=page_num,
            total_pages=num_pages,
        )
        try:
            page_text = await worker.recognize(image)
        except Exception as e:
            reporter.fail("ocr_page_error", f"OCR failed on page {page_num}: {e}", e)
            raise RecognitionError(f"OCR failed on page {page_num}: {e}") from e
        finally:
            image.close()

        logger.info(f"✅ Page {page_num} recognized: {len(page_text):,} characters")
        accumulated.append(page_text + "\n")
    return "".join(accumulated)


async def extract_text_ocr(
    renderer: DocumentRenderer,
    data: bytes,
    reporter: ProgressReporter,
    ocr_factory: OCRWorkerFactory,
    language: str,
    ocr_options: Optional[Dict[str, Any]] = None,
    scale: float = PDFRenderConfig.DEFAULT_SCALE,
) -> str:
    """
    Render every page to a raster and run OCR on it, in page order.

    The OCR worker is started before the document is opened, serves every
    page and is terminated on every exit path. Larger ``scale`` values trade
    time for recognition accuracy.
    """
    reporter.emit("ocr_worker_init", f"Initializing Tesseract OCR worker ({language})...")
    worker_started = False
    try:
        async with ocr_worker(ocr_factory, language, ocr_options) as worker:
            worker_started = True
            try:
                num_pages = await _open_document(renderer, data, reporter)
                return await _recognize_pages(renderer, worker, num_pages, reporter, scale)
            finally:
                reporter.emit("ocr_terminate_worker", "Terminating Tesseract worker...")
    except EngineInitError as e:
        # document load failures are already reported as pdf_load_error
        if not worker_started:
            reporter.fail("ocr_worker_error", str(e), e)
        raise
    finally:
        renderer.close()
