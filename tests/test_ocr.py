"""
Tests for the Tesseract OCR worker and its lifecycle.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from mdextract.errors import EngineInitError
from mdextract.ocr import TesseractWorker, TesseractWorkerFactory, ocr_worker


@pytest.mark.parametrize("options,expected", [
    ({}, ""),
    ({"psm": 6}, "--psm 6"),
    ({"psm": "4", "oem": 1}, "--psm 4 --oem 1"),
    ({"config": "-c preserve_interword_spaces=1"}, "-c preserve_interword_spaces=1"),
    ({"psm": None, "oem": 3, "config": "--dpi 300"}, "--oem 3 --dpi 300"),
])
def test_config_string(options, expected):
    assert TesseractWorker("eng", options).config == expected


def test_check_rejects_missing_language():
    worker = TesseractWorker("eng+deu")
    with patch("mdextract.ocr.pytesseract") as mock_tesseract:
        mock_tesseract.get_tesseract_version.return_value = "5.3.0"
        mock_tesseract.get_languages.return_value = ["eng", "osd"]
        with pytest.raises(ValueError, match="deu"):
            worker.check()


def test_check_accepts_installed_languages():
    worker = TesseractWorker("eng+deu")
    with patch("mdextract.ocr.pytesseract") as mock_tesseract:
        mock_tesseract.get_tesseract_version.return_value = "5.3.0"
        mock_tesseract.get_languages.return_value = ["deu", "eng"]
        worker.check()


@pytest.mark.asyncio
async def test_recognize_passes_language_and_config():
    worker = TesseractWorker("eng", {"psm": 6, "timeout": 30})
    image = MagicMock()
    with patch("mdextract.ocr.pytesseract") as mock_tesseract:
        mock_tesseract.image_to_string.return_value = "Recognized text"
        result = await worker.recognize(image)

    assert result == "Recognized text"
    mock_tesseract.image_to_string.assert_called_once_with(
        image, lang="eng", config="--psm 6", timeout=30
    )


@pytest.mark.asyncio
async def test_recognize_after_terminate_fails():
    worker = TesseractWorker("eng")
    await worker.terminate()
    assert worker.terminated
    with pytest.raises(RuntimeError, match="terminated"):
        await worker.recognize(MagicMock())


@pytest.mark.asyncio
async def test_factory_checks_installation():
    with patch.object(TesseractWorker, "check") as mock_check:
        worker = await TesseractWorkerFactory().create_worker("fra", {"oem": 1})

    mock_check.assert_called_once()
    assert worker.language == "fra"
    assert worker.config == "--oem 1"


@pytest.mark.asyncio
async def test_ocr_worker_terminates_on_error():
    worker = MagicMock()
    worker.terminate = AsyncMock()
    factory = MagicMock()
    factory.create_worker = AsyncMock(return_value=worker)

    with pytest.raises(RuntimeError):
        async with ocr_worker(factory, "eng", {"psm": 3}):
            raise RuntimeError("page failed")

    factory.create_worker.assert_awaited_once_with("eng", {"psm": 3})
    worker.terminate.assert_awaited_once()


@pytest.mark.asyncio
async def test_ocr_worker_terminates_on_success():
    worker = MagicMock()
    worker.terminate = AsyncMock()
    factory = MagicMock()
    factory.create_worker = AsyncMock(return_value=worker)

    async with ocr_worker(factory, "eng") as active:
        assert active is worker

    worker.terminate.assert_awaited_once()


@pytest.mark.asyncio
async def test_ocr_worker_creation_failure_is_init_error():
    factory = MagicMock()
    factory.create_worker = AsyncMock(side_effect=OSError("tesseract is not installed"))

    with pytest.raises(EngineInitError, match="eng"):
        async with ocr_worker(factory, "eng"):
            pass
