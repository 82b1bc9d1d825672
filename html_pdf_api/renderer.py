"""
Render session - one headless Chromium per conversion.

A RenderSession owns a Playwright instance and a launched browser. It is an
async context manager: the browser is closed and Playwright stopped on every
exit path, including render errors and timeouts.
"""

import asyncio
import logging
from contextlib import AsyncExitStack
from typing import Optional

from .errors import RenderFailed
from .options import RenderOptions
from .sources import ContentSource

logger = logging.getLogger(__name__)

# Required to run Chromium as an unprivileged user inside containers
CHROMIUM_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]


class RenderSession:
    """
    Lifecycle of a single rendering-engine instance.

    Usage:
        async with RenderSession() as session:
            pdf_bytes = await session.render(source, options)

    A session renders one document at a time and is opened and closed
    exactly once.
    """

    def __init__(self, headless: bool = True):
        self.headless = headless
        self._stack: Optional[AsyncExitStack] = None
        self._browser = None
        self._opened = False
        self._closed = False
        self._rendering = False

    @property
    def is_open(self) -> bool:
        return self._browser is not None and not self._closed

    async def __aenter__(self) -> "RenderSession":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        await self.close()
        return False

    async def open(self) -> None:
        """
        Start Playwright and launch Chromium.

        Raises:
            RenderFailed: If the browser cannot be launched
            RuntimeError: If the session was already opened
        """
        if self._opened:
            raise RuntimeError("RenderSession can only be opened once")
        self._opened = True

        # Import here to avoid loading Playwright on startup
        from playwright.async_api import async_playwright

        stack = AsyncExitStack()
        try:
            playwright = await stack.enter_async_context(async_playwright())
            self._browser = await playwright.chromium.launch(
                headless=self.headless,
                args=CHROMIUM_ARGS,
            )
        except Exception as e:
            await stack.aclose()
            self._closed = True
            logger.error(f"Chromium launch failed: {e}")
            raise RenderFailed(f"Browser launch failed: {e}") from e

        self._stack = stack
        logger.debug(f"Chromium launched (headless={self.headless})")

    async def close(self) -> None:
        """
        Close the browser and stop Playwright. Safe to call more than once.

        Teardown errors are logged, never raised, so they cannot mask a
        render failure or discard a finished PDF.
        """
        if self._closed:
            return
        self._closed = True

        browser, self._browser = self._browser, None
        stack, self._stack = self._stack, None
        if browser is not None:
            try:
                await browser.close()
            except Exception as e:
                logger.warning(f"Chromium close failed: {e}", exc_info=True)
        if stack is not None:
            try:
                await stack.aclose()
            except Exception as e:
                logger.warning(f"Playwright shutdown failed: {e}", exc_info=True)
        logger.debug("Chromium closed")

    async def render(self, source: ContentSource, options: RenderOptions) -> bytes:
        """
        Load the source and print it to PDF.

        The whole load-and-print is bounded by ``options.timeout``.

        Args:
            source: Literal HTML or a URL to navigate to
            options: Resolved render options

        Returns:
            PDF bytes

        Raises:
            RenderFailed: On any engine error, timeout or empty output
            RuntimeError: If the session is not open or already rendering
        """
        if not self.is_open:
            raise RuntimeError("RenderSession is not open")
        if self._rendering:
            raise RuntimeError("RenderSession already has a conversion in flight")

        self._rendering = True
        try:
            pdf_bytes = await asyncio.wait_for(
                self._load_and_print(source, options),
                timeout=options.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(f"PDF rendering timed out after {options.timeout}ms")
            raise RenderFailed(f"Rendering timed out after {options.timeout}ms")
        except Exception as e:
            logger.error(f"PDF rendering failed: {e}")
            raise RenderFailed(f"PDF creation failed: {e}") from e
        finally:
            self._rendering = False

        if not pdf_bytes:
            raise RenderFailed("PDF creation failed: renderer returned an empty document")
        return pdf_bytes

    async def _load_and_print(self, source: ContentSource, options: RenderOptions) -> bytes:
        page = await self._browser.new_page()

        if source.is_url:
            await page.goto(source.value, wait_until="networkidle", timeout=options.timeout)
        else:
            await page.set_content(source.value, wait_until="networkidle", timeout=options.timeout)

        return await page.pdf(**options.to_pdf_kwargs())


async def render_pdf(
    source: ContentSource,
    options: RenderOptions,
    headless: bool = True,
) -> bytes:
    """Render one document in a fresh session that is torn down afterwards."""
    async with RenderSession(headless=headless) as session:
        return await session.render(source, options)
