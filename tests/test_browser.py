"""
Unit tests for the Playwright page adapter.

click_and_wait contract:
- the wait for the result selector is started before the click
- a failing click propagates and leaves no pending wait behind
"""

from __future__ import annotations

import asyncio
import unittest

from catalogsync.browser import PlaywrightPage


class StubPlaywrightPage:
    """
    Stands in for playwright's Page; only click and wait_for_selector.
    """

    def __init__(self, click_error: Exception | None = None) -> None:
        self.click_error = click_error
        self.rendered = asyncio.Event()
        self.calls: list[str] = []
        self.wait_cancelled = False

    async def click(self, selector: str) -> None:
        self.calls.append(f"click {selector}")
        # let the pending wait start
        await asyncio.sleep(0)
        if self.click_error is not None:
            raise self.click_error
        self.rendered.set()

    async def wait_for_selector(self, selector: str) -> None:
        self.calls.append(f"wait {selector}")
        try:
            await self.rendered.wait()
        except asyncio.CancelledError:
            self.wait_cancelled = True
            raise


class TestClickAndWait(unittest.IsolatedAsyncioTestCase):
    async def test_waits_for_results_after_click(self) -> None:
        stub = StubPlaywrightPage()
        page = PlaywrightPage(stub)

        await asyncio.wait_for(page.click_and_wait("#search-button", ".result"), timeout=1)

        self.assertEqual(stub.calls, ["click #search-button", "wait .result"])
        self.assertFalse(stub.wait_cancelled)

    async def test_failed_click_cancels_wait(self) -> None:
        stub = StubPlaywrightPage(click_error=RuntimeError("element detached"))
        page = PlaywrightPage(stub)

        with self.assertRaisesRegex(RuntimeError, "element detached"):
            await asyncio.wait_for(page.click_and_wait("#search-button", ".result"), timeout=1)

        self.assertTrue(stub.wait_cancelled)


if __name__ == "__main__":
    unittest.main()
