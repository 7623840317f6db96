"""
Headless browser session management.

The section search on the catalog is a client-side rendered form, so it is
driven through Playwright. Everything above this module talks to the page
through the small BrowserPage interface, which keeps the term selection and
result parsing testable against a fake page.

One browser process is launched per call and always closed on the way out.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional, Protocol

from playwright.async_api import Page, async_playwright

from catalogsync.config import SERVERLESS_BROWSER_ARGS, Settings, load_settings

logger = logging.getLogger(__name__)


class BrowserPage(Protocol):
    async def goto(self, url: str) -> None: ...

    async def wait_for_selector(self, selector: str) -> None: ...

    async def select_option(self, selector: str, value: str) -> None: ...

    async def type(self, selector: str, text: str) -> None: ...

    async def click(self, selector: str) -> None: ...

    async def click_and_wait(self, click_selector: str, wait_selector: str) -> None: ...

    async def content(self) -> str: ...


class PlaywrightPage:
    """
    BrowserPage backed by a real Playwright page.
    """

    def __init__(self, page: Page) -> None:
        self._page = page

    async def goto(self, url: str) -> None:
        await self._page.goto(url)

    async def wait_for_selector(self, selector: str) -> None:
        await self._page.wait_for_selector(selector)

    async def select_option(self, selector: str, value: str) -> None:
        await self._page.select_option(selector, value)

    async def type(self, selector: str, text: str) -> None:
        await self._page.locator(selector).press_sequentially(text)

    async def click(self, selector: str) -> None:
        await self._page.click(selector)

    async def click_and_wait(self, click_selector: str, wait_selector: str) -> None:
        # the wait has to observe the DOM change caused by this click
        wait = asyncio.ensure_future(self._page.wait_for_selector(wait_selector))
        try:
            await self._page.click(click_selector)
        except BaseException:
            wait.cancel()
            await asyncio.gather(wait, return_exceptions=True)
            raise
        await wait

    async def content(self) -> str:
        return await self._page.content()


def launch_options(settings: Settings) -> Dict[str, Any]:
    """
    Keyword arguments for chromium.launch() for the configured launch mode.
    """
    options: Dict[str, Any] = {"headless": True}

    if settings.is_serverless:
        options["args"] = list(SERVERLESS_BROWSER_ARGS)
        if settings.executable_path:
            options["executable_path"] = settings.executable_path
    elif settings.browser_channel:
        options["channel"] = settings.browser_channel

    return options


@asynccontextmanager
async def browser_page(settings: Optional[Settings] = None) -> AsyncIterator[BrowserPage]:
    """
    Launch a headless browser, yield one page, and close the browser on exit.
    """
    settings = settings or load_settings()
    options = launch_options(settings)

    async with async_playwright() as pw:
        logger.debug("Launching chromium (%s mode)", settings.launch_mode)
        browser = await pw.chromium.launch(**options)
        try:
            page = await browser.new_page()
            yield PlaywrightPage(page)
        finally:
            await browser.close()
