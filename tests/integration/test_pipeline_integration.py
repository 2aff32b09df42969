"""
Integration tests running the real engines on a generated invoice PDF.

Quick mode needs only PyMuPDF. OCR mode also needs the tesseract and
pdftocairo binaries and is skipped without them.
"""

import shutil

import fitz
import pytest

from mdextract.mdextract import mdextract

needs_ocr_binaries = pytest.mark.skipif(
    shutil.which("tesseract") is None or shutil.which("pdftocairo") is None,
    reason="tesseract and poppler are required for OCR mode",
)


@pytest.fixture
def invoice_pdf(tmp_path):
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), "INVOICE", fontsize=24)
    page.insert_text((72, 120), "Thank you for your business.", fontsize=12)
    doc.new_page().insert_text((72, 72), "Payment is due within 30 days.", fontsize=12)
    path = tmp_path / "invoice.pdf"
    doc.save(str(path))
    doc.close()
    return path


@pytest.mark.asyncio
async def test_quick_mode_writes_markdown(invoice_pdf, tmp_path):
    stages = []
    output_dir = tmp_path / "out"

    result = await mdextract(
        str(invoice_pdf),
        output_dir=str(output_dir),
        progress_callback=lambda report: stages.append(report.stage),
    )

    assert result.markdown == (
        "# INVOICE\n\nThank you for your business. Payment is due within 30 days."
    )
    assert result.pages == 2
    assert (output_dir / "invoice.md").read_text(encoding="utf-8") == result.markdown + "\n"
    assert stages[0] == "start_quick"
    assert stages[-1] == "complete_quick"


@needs_ocr_binaries
@pytest.mark.asyncio
async def test_ocr_mode_recognizes_text(invoice_pdf, tmp_path):
    result = await mdextract(str(invoice_pdf), mode="ocr", output_dir=str(tmp_path))

    assert result.mode == "ocr"
    assert "INVOICE" in result.markdown
    assert "30 days" in result.markdown
