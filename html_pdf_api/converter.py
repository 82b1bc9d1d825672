"""
Conversion pipeline shared by the HTTP API and the CLI.

normalize -> resolve options -> render. The API streams the resulting
bytes back to the caller; the CLI writes them to an output path.
"""

import asyncio
import logging
import time
from contextlib import AsyncExitStack
from pathlib import Path
from typing import Optional, Union

from .options import RenderOptionsOverrides, resolve_options
from .renderer import render_pdf
from .sources import ConversionRequest, normalize

logger = logging.getLogger(__name__)


async def convert(
    request: ConversionRequest,
    overrides: Optional[RenderOptionsOverrides] = None,
    *,
    headless: bool = True,
    limiter: Optional[asyncio.Semaphore] = None,
) -> bytes:
    """
    Convert one request to PDF bytes.

    Args:
        request: HtmlInput, FileInput or UrlInput
        overrides: Validated partial render options (None for defaults)
        headless: Launch Chromium headless
        limiter: Optional semaphore bounding concurrent renders

    Returns:
        PDF bytes

    Raises:
        InputNotFound: File input does not exist
        RenderFailed: The rendering engine failed or timed out
    """
    source = normalize(request)
    options = resolve_options(overrides)

    logger.info(
        f"Starting PDF render ({source.describe()}, format={options.format.value}, "
        f"orientation={options.orientation.value})"
    )
    started = time.monotonic()

    async with AsyncExitStack() as stack:
        if limiter is not None:
            await stack.enter_async_context(limiter)
        pdf_bytes = await render_pdf(source, options, headless=headless)

    logger.info(
        f"PDF render completed: {len(pdf_bytes)} bytes in {time.monotonic() - started:.2f}s"
    )
    return pdf_bytes


async def convert_to_file(
    request: ConversionRequest,
    output_path: Union[str, Path],
    overrides: Optional[RenderOptionsOverrides] = None,
    *,
    headless: bool = True,
) -> Path:
    """
    Convert one request and write the PDF to ``output_path``.

    The output directory is created if it does not exist.

    Returns:
        Resolved path of the written PDF
    """
    output_path = Path(output_path).resolve()
    output_path.parent.mkdir(parents=True, exist_ok=True)

    pdf_bytes = await convert(request, overrides, headless=headless)
    output_path.write_bytes(pdf_bytes)
    return output_path
