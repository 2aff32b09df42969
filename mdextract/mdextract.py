import os
import logging
from typing import Any, Dict, Optional, Sequence
from datetime import datetime
import tempfile

from .config import ConverterConfig
from .converter import MarkdownConverter
from .progress import ProgressCallback
from .rewrite import PromptBuilder
from .types import ConversionOutput, EngineOptions, NormalizationRule
from .common import fetch_document, read_file_bytes, write_markdown
from .errors import PDFFileNotFoundError, MarkdownFileWriteError

logger = logging.getLogger(__name__)

MODES = ("quick", "ocr")


async def mdextract(
    pdf_path: str,
    mode: str = "quick",
    output_dir: Optional[str] = None,
    rewrite: bool = False,
    model_id: Optional[str] = None,
    model_base_url: Optional[str] = None,
    prompt_builder: Optional[PromptBuilder] = None,
    engine_options: Optional[EngineOptions] = None,
    tesseract_language: Optional[str] = None,
    tesseract_options: Optional[Dict[str, Any]] = None,
    render_scale: Optional[float] = None,
    post_process_rules: Optional[Sequence[NormalizationRule]] = None,
    split_pascal_case: bool = False,
    keep_column_spacing: bool = False,
    progress_callback: Optional[ProgressCallback] = None,
    converter: Optional[MarkdownConverter] = None,
) -> ConversionOutput:
    """
    Convert a PDF to markdown by:
      1. Fetching the document (local path or URL).
      2. Extracting its text, from the text layer (``quick``) or by OCR (``ocr``).
      3. Normalizing the text and reconstructing Markdown structure.
      4. Optionally rewriting the Markdown with a generative model.
      5. Writing the result to ``<output_dir>/<name>.md``.

    ## Args
    - `pdf_path` (str): **Required.** Path or http(s) URL of the input PDF.
    - `mode` (str, optional): `quick` or `ocr`. Defaults to `"quick"`.
    - `output_dir` (str, optional): Directory for the Markdown file. Defaults to `./output`.
    - `rewrite` (bool, optional): Whether to run the generative rewrite pass. Defaults to False.
    - `model_id` (str, optional): Model used by the rewrite pass. Defaults to the converter's model.
    - `model_base_url` (str, optional): Where the model is served; required for non-default models.
    - `prompt_builder` (callable, optional): Builds the rewrite prompt from the Markdown.
    - `engine_options` (dict, optional): Passed to the generative engine.
    - `tesseract_language` (str, optional): Tesseract language code(s), e.g. `eng` or `eng+deu`. Defaults to the converter's language.
    - `tesseract_options` (dict, optional): `psm`, `oem`, `config`, `timeout`.
    - `render_scale` (float, optional): Page render scale for OCR. Defaults to 2.5.
    - `post_process_rules` (list, optional): Extra normalization rules appended after the built-ins.
    - `split_pascal_case` (bool, optional): Split glued PascalCase/camelCase words.
    - `keep_column_spacing` (bool, optional): Keep runs of spaces so aligned columns become fenced blocks.
    - `progress_callback` (callable, optional): Receives every `ProgressReport`.
    - `converter` (MarkdownConverter, optional): Reuse an existing converter (and its loaded engine). Unset
      `model_id`, `tesseract_language` and `render_scale` fall back to its settings.

    Returns:
        ConversionOutput: Completion time, markdown file path and content.
    """
    if mode not in MODES:
        raise ValueError("mode must be one of 'quick', or 'ocr'")

    if converter is None:
        converter = MarkdownConverter(
            post_process_rules=post_process_rules,
            tesseract_language=tesseract_language or ConverterConfig.TESSERACT_LANGUAGE,
            tesseract_options=tesseract_options,
            split_pascal_case=split_pascal_case,
            keep_column_spacing=keep_column_spacing,
            model_id=model_id or ConverterConfig.DEFAULT_MODEL,
            model_base_url=model_base_url,
            progress_callback=progress_callback,
        )

    with tempfile.TemporaryDirectory() as temp_directory:
        local_path = await fetch_document(pdf_path, temp_directory)
        if not local_path:
            raise PDFFileNotFoundError(f"Failed to access or download PDF from: {pdf_path}")

        if not output_dir:
            output_dir = os.path.join(os.getcwd(), "output")
        os.makedirs(output_dir, exist_ok=True)

        logger.info(f"📄 Processing PDF: {os.path.basename(pdf_path)} → {os.path.basename(output_dir)}")

        start_time = datetime.now()
        data = await read_file_bytes(local_path)

    extraction_start = datetime.now()
    if mode == "quick":
        markdown_content = await converter.quick_convert(data)
    else:
        markdown_content = await converter.high_accuracy_convert(
            data,
            tesseract_language=tesseract_language,
            tesseract_options=tesseract_options,
            render_scale=render_scale,
        )
    extraction_time = (datetime.now() - extraction_start).total_seconds()
    logger.debug(f"{mode} conversion completed in {extraction_time:.2f} seconds")

    rewrite_model = model_id or converter.rewriter.default_model
    rewritten = False
    if rewrite and markdown_content.strip():
        logger.info(f"✨ Rewrite enabled - passing Markdown through {rewrite_model}...")
        rewrite_start = datetime.now()
        markdown_content = await converter.rewrite(
            markdown_content,
            model_id=model_id,
            prompt_builder=prompt_builder,
            engine_options=engine_options,
        )
        rewritten = True
        logger.info(f"✅ Rewrite completed in {(datetime.now() - rewrite_start).total_seconds():.2f}s")
    elif rewrite:
        logger.warning("Rewrite requested but no content to process")

    pages = converter.reporter.total_pages or 0

    completion_time = (datetime.now() - start_time).total_seconds()

    base_name = os.path.splitext(os.path.basename(pdf_path))[0] or "document"
    output_filename = await write_markdown(f"{base_name}.md", output_dir, markdown_content)
    if not output_filename:
        raise MarkdownFileWriteError(f"Failed to write markdown file for: {pdf_path}")

    summary_lines = [
        "🎉 mdextract completed successfully!",
        f"  📄 Output file      : {output_filename}",
        f"  ⏱️  Completion time  : {completion_time:.2f} seconds",
        f"  📊 Pages processed  : {pages}",
        f"  🎯 Mode             : {mode}",
        f"  📝 Content length   : {len(markdown_content):,} characters",
    ]
    if rewritten:
        summary_lines.append(f"  ✨ Rewritten with   : {rewrite_model}")
    logger.info("\n".join(summary_lines))

    return ConversionOutput(
        completion_time=completion_time,
        markdown_file=output_filename,
        markdown=markdown_content,
        mode=mode,
        pages=pages,
        rewritten=rewritten,
    )
