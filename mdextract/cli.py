import argparse
import asyncio
import logging
import os
import sys

from .config import ConverterConfig, PDFRenderConfig
from .errors import ConversionError
from .mdextract import mdextract, MODES
from .types import ProgressReport
from .utils.env import get_env_var_for_model


def _print_progress(report: ProgressReport) -> None:
    if report.progress is not None:
        logging.info(f"{report.message} ({report.progress * 100:.0f}%)")
    elif report.current_page is not None:
        logging.info(report.message)


async def _run(args: argparse.Namespace) -> int:
    try:
        await mdextract(
            pdf_path=args.pdf_path,
            mode=args.mode,
            output_dir=args.output_dir,
            rewrite=args.rewrite,
            model_id=args.model,
            model_base_url=args.model_base_url,
            tesseract_language=args.lang,
            render_scale=args.scale,
            split_pascal_case=args.split_pascal_case,
            keep_column_spacing=args.keep_columns,
            progress_callback=_print_progress,
        )
    except ConversionError as e:
        logging.error(f"Conversion failed: {e}")
        return 1
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Convert a PDF file to Markdown"
    )
    parser.add_argument("pdf_path", nargs="?", help="Path or URL of a PDF file")

    parser.add_argument(
        "--mode",
        type=str,
        choices=list(MODES),
        default="quick",
        help="quick: use the embedded text layer; ocr: render pages and run Tesseract",
    )
    parser.add_argument(
        "--lang",
        type=str,
        default=ConverterConfig.TESSERACT_LANGUAGE,
        help="Tesseract language code(s) for OCR mode, e.g. eng or eng+deu",
    )
    parser.add_argument(
        "--scale",
        type=float,
        default=PDFRenderConfig.DEFAULT_SCALE,
        help="Page render scale for OCR mode (higher is slower and more accurate)",
    )
    parser.add_argument(
        "--rewrite",
        action="store_true",
        help="Rewrite the Markdown with a generative model",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=ConverterConfig.DEFAULT_MODEL,
        help="Model name to use with LiteLLM for --rewrite",
    )
    parser.add_argument(
        "--model-base-url",
        type=str,
        help="Base URL serving the model (required for non-default models)",
    )
    parser.add_argument(
        "--split-pascal-case",
        action="store_true",
        help="Insert spaces into glued PascalCase/camelCase words",
    )
    parser.add_argument(
        "--keep-columns",
        action="store_true",
        help="Keep runs of spaces so aligned columns are emitted as fenced blocks",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        help="Directory to save the output markdown file (defaults to ./output/)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        help="Set the logging level",
    )

    args = parser.parse_args()

    if not args.pdf_path:
        parser.print_help()
        return

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s - %(levelname)s - %(message)s")

    if args.rewrite:
        env_var = get_env_var_for_model(args.model)
        if env_var and not os.environ.get(env_var):
            logging.error(
                f"{env_var} is not defined. "
                "Please set it as an environment variable. "
                f"For example: export {env_var}='YOUR_API_KEY'"
            )
            sys.exit(1)

    # Suppress LiteLLM logging to reduce noise
    logging.getLogger("LiteLLM").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    sys.exit(asyncio.run(_run(args)))

if __name__ == "__main__":
    main()
