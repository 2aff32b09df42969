import asyncio
import argparse
import logging
import os
import sys

from mdextract import MarkdownConverter, NormalizationRule, mdextract

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

# Invoices often print the currency glued to the amount
CUSTOM_RULES = [NormalizationRule(r"(\d)(USD|EUR)\b", r"\1 \2")]


def log_progress(report):
    if report.current_page is not None:
        logging.info(f"[{report.stage}] page {report.current_page}/{report.total_pages}")


async def main(pdf_path=None, directory=None, mode="quick"):
    # Shared by every file in the batch
    converter = MarkdownConverter(post_process_rules=CUSTOM_RULES, progress_callback=log_progress)

    if directory:
        logging.info(f"Processing all PDF files in directory: {directory}")
        for file_name in sorted(os.listdir(directory)):
            if file_name.lower().endswith(".pdf"):
                file_path = os.path.join(directory, file_name)
                result = await mdextract(pdf_path=file_path, mode=mode, converter=converter)
                logging.info(f"{file_name}: {result.pages} pages -> {result.markdown_file}")
    elif pdf_path:
        logging.info(f"Processing single PDF file: {pdf_path}")
        await mdextract(pdf_path=pdf_path, mode=mode, converter=converter)
    else:
        logging.error("No valid input provided. Use --help for usage information.")
        sys.exit(1)

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run mdextract on a PDF file or all PDF files in a directory.")
    parser.add_argument("--pdf_path", type=str, help="Path to a single PDF file")
    parser.add_argument("--directory", type=str, help="Path to a directory containing PDF files")
    parser.add_argument("--mode", type=str, choices=["quick", "ocr"], default="quick", help="Extraction mode")

    if len(sys.argv) == 1:
        parser.print_help()
        sys.exit(1)

    args = parser.parse_args()

    asyncio.run(main(pdf_path=args.pdf_path, directory=args.directory, mode=args.mode))
