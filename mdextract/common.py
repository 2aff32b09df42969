import logging
import aiohttp
import aiofiles  # type: ignore
from typing import Optional
from pathlib import Path
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

_DOWNLOAD_TIMEOUT = aiohttp.ClientTimeout(total=120)


def is_url(source: str) -> bool:
    return urlparse(source).scheme in ("http", "https")


async def fetch_document(source: str, destination_dir: str) -> Optional[str]:
    """
    Make a document available as a local file.

    Args:
        source (str): http(s) URL or local file path.
        destination_dir (str): Directory downloaded documents are stored in.

    Returns:
        Optional[str]: Local file path, or None if the document cannot be
        reached.
    """
    if is_url(source):
        filename = Path(urlparse(source).path).name or "document.pdf"
        local_path = Path(destination_dir) / filename
        local_path.parent.mkdir(parents=True, exist_ok=True)

        logger.debug(f"Downloading document from URL: {source}")
        try:
            async with aiohttp.ClientSession(timeout=_DOWNLOAD_TIMEOUT) as session:
                async with session.get(source) as response:
                    if response.status != 200:
                        logger.error(f"Failed to download {source}: status {response.status}")
                        return None
                    async with aiofiles.open(local_path, mode="wb") as f:
                        await f.write(await response.read())
        except aiohttp.ClientError as e:
            logger.error(f"Failed to download {source}: {e}")
            return None

        logger.debug(f"Document downloaded to {local_path}")
        return str(local_path)

    scheme = urlparse(source).scheme
    # Single letter schemes are Windows drive letters
    if scheme not in ("", "file") and len(scheme) > 1:
        logger.error(f"Unsupported document location: {source}")
        return None

    local_path = Path(urlparse(source).path if scheme == "file" else source).resolve()
    if not local_path.is_file():
        logger.error(f"File not found: {source}")
        return None
    logger.debug(f"Using local file {local_path}")
    return str(local_path)


async def read_file_bytes(file_path: str) -> bytes:
    """Read a whole local file."""
    async with aiofiles.open(file_path, mode="rb") as f:
        data = await f.read()
    logger.debug(f"Read {len(data):,} bytes from {file_path}")
    return data


async def write_markdown(filename: str, output_dir: str, markdown: str) -> Optional[str]:
    """
    Write Markdown into ``output_dir``, creating it if needed.

    Returns:
        Optional[str]: Full path to the written file, or None when no
        filename or directory was given.
    """
    if not filename or not output_dir:
        logger.error("Filename or output directory not provided")
        return None

    output_path = Path(output_dir) / filename
    output_path.parent.mkdir(parents=True, exist_ok=True)

    async with aiofiles.open(output_path, mode="w", encoding="utf-8") as f:
        await f.write(markdown if markdown.endswith("\n") or not markdown else markdown + "\n")
    logger.debug(f"Wrote {len(markdown):,} characters to {output_path}")

    return str(output_path)
