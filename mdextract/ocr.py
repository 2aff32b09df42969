import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional, Protocol

import pytesseract
from PIL import Image

from .errors import EngineInitError

logger = logging.getLogger(__name__)


class OCRWorker(Protocol):
    async def recognize(self, image: Image.Image) -> str:
        ...

    async def terminate(self) -> None:
        ...


class OCRWorkerFactory(Protocol):
    async def create_worker(self, language: str, options: Dict[str, Any]) -> OCRWorker:
        ...


class TesseractWorker:
    """
    A Tesseract OCR handle bound to one language and option set.

    Recognition runs in a worker thread. Once terminated the handle cannot be
    used again.
    """

    def __init__(self, language: str, options: Optional[Dict[str, Any]] = None) -> None:
        options = options or {}
        self.language = language
        self.config = self._build_config(options)
        self.timeout = options.get("timeout", 0)
        self._terminated = False

    @staticmethod
    def _build_config(options: Dict[str, Any]) -> str:
        parts = []
        if options.get("psm") is not None:
            parts.append(f"--psm {int(options['psm'])}")
        if options.get("oem") is not None:
            parts.append(f"--oem {int(options['oem'])}")
        if options.get("config"):
            parts.append(str(options["config"]))
        return " ".join(parts)

    def check(self) -> None:
        """Verify that the Tesseract binary and every requested language pack are available."""
        version = pytesseract.get_tesseract_version()
        available = set(pytesseract.get_languages(config=""))
        missing = [lang for lang in self.language.split("+") if lang not in available]
        if missing:
            raise ValueError(
                f"Tesseract language data not installed: {', '.join(missing)} "
                f"(available: {', '.join(sorted(available)) or 'none'})"
            )
        logger.debug(f"Tesseract {version} ready (lang={self.language}, config='{self.config}')")

    @property
    def terminated(self) -> bool:
        return self._terminated

    async def recognize(self, image: Image.Image) -> str:
        if self._terminated:
            raise RuntimeError("OCR worker has been terminated")
        return await asyncio.to_thread(
            pytesseract.image_to_string,
            image,
            lang=self.language,
            config=self.config,
            timeout=self.timeout,
        )

    async def terminate(self) -> None:
        self._terminated = True


class TesseractWorkerFactory:
    async def create_worker(self, language: str, options: Dict[str, Any]) -> TesseractWorker:
        worker = TesseractWorker(language, options)
        await asyncio.to_thread(worker.check)
        return worker


@asynccontextmanager
async def ocr_worker(
    factory: OCRWorkerFactory,
    language: str,
    options: Optional[Dict[str, Any]] = None,
) -> AsyncIterator[OCRWorker]:
    """
    Create an OCR worker for the duration of one conversion.

    The worker is terminated on every exit path, including a failure on any
    page. Creation failures surface as EngineInitError.
    """
    try:
        worker = await factory.create_worker(language, dict(options or {}))
    except Exception as e:
        raise EngineInitError(f"Failed to initialize OCR worker for language '{language}': {e}") from e

    try:
        yield worker
    finally:
        await worker.terminate()
        logger.debug("OCR worker terminated")
