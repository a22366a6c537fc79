import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional, Protocol, Sequence

from playwright.async_api import ElementHandle, Page, async_playwright
from playwright.async_api import Error as PlaywrightError

from config import AppConfig
from core.errors import CriticalStartupError
from core.waiting import Predicate, await_condition

logger = logging.getLogger(__name__)


class InterfaceDriver(Protocol):
    """The narrow surface the entry bot needs from a browser binding."""

    @property
    def url(self) -> str:
        ...

    async def locate_all(self, selector: str) -> Sequence[Any]:
        ...

    async def locate_within(self, handle: Any, selector: str) -> Sequence[Any]:
        ...

    async def wait_until(self, predicate: Predicate, timeout_ms: int, description: str) -> Any:
        ...

    async def is_visible(self, handle: Any) -> bool:
        ...

    async def click(self, handle: Any) -> None:
        ...

    async def type(self, handle: Any, text: str) -> None:
        ...

    async def clear(self, handle: Any) -> None:
        ...

    async def read_attribute(self, handle: Any, name: str) -> Optional[str]:
        ...

    async def select_option(self, handle: Any, value: str) -> None:
        ...

    async def navigate(self, url: str) -> None:
        ...

    async def wait_for_url_contains(self, fragment: str, timeout_ms: int) -> None:
        ...


class PlaywrightDriver:
    """InterfaceDriver over a Playwright page. Handles are ElementHandles."""

    def __init__(self, page: Page, poll_interval_ms: int = 100, navigation_timeout: int = 30000):
        self.page = page
        self.poll_interval_ms = poll_interval_ms
        self.navigation_timeout = navigation_timeout

    @property
    def url(self) -> str:
        return self.page.url

    async def locate_all(self, selector: str) -> Sequence[ElementHandle]:
        return await self.page.query_selector_all(selector)

    async def locate_within(self, handle: ElementHandle, selector: str) -> Sequence[ElementHandle]:
        return await handle.query_selector_all(selector)

    async def wait_until(self, predicate: Predicate, timeout_ms: int, description: str) -> Any:
        return await await_condition(
            predicate,
            timeout_ms=timeout_ms,
            poll_interval_ms=self.poll_interval_ms,
            description=description,
        )

    async def is_visible(self, handle: ElementHandle) -> bool:
        return await handle.is_visible()

    async def click(self, handle: ElementHandle) -> None:
        await handle.click()

    async def type(self, handle: ElementHandle, text: str) -> None:
        await handle.type(text)

    async def clear(self, handle: ElementHandle) -> None:
        await handle.fill("")

    async def read_attribute(self, handle: ElementHandle, name: str) -> Optional[str]:
        # get_attribute("value") returns the markup attribute, not the live
        # selection of a <select> or the typed text of an <input>
        if name == "value":
            return await handle.input_value()
        return await handle.get_attribute(name)

    async def select_option(self, handle: ElementHandle, value: str) -> None:
        await handle.select_option(value=value)

    async def navigate(self, url: str) -> None:
        await self.page.goto(url, wait_until="load", timeout=self.navigation_timeout)

    async def wait_for_url_contains(self, fragment: str, timeout_ms: int) -> None:
        await self.wait_until(
            lambda: fragment in self.page.url,
            timeout_ms,
            f"URL did not contain '{fragment}'",
        )


@asynccontextmanager
async def launch_browser(app_config: AppConfig) -> AsyncIterator[PlaywrightDriver]:
    """
    Launches the configured browser for the whole batch and always closes it.

    Yields:
        A PlaywrightDriver bound to a fresh page.

    Raises:
        CriticalStartupError: If the browser or its first page cannot be started.
    """
    settings = app_config.general_settings
    async with async_playwright() as p:
        browser_type = getattr(p, settings.browser)
        logger.info(f"Launching {settings.browser} (headless={settings.browser_headless})")
        try:
            browser = await browser_type.launch(headless=settings.browser_headless)
        except PlaywrightError as e:
            raise CriticalStartupError(f"Could not launch {settings.browser}: {e}", cause=e) from e
        try:
            try:
                # no_viewport lets the page follow the OS window size (maximised)
                context = await browser.new_context(no_viewport=True)
                page = await context.new_page()
            except PlaywrightError as e:
                raise CriticalStartupError(f"Could not open a {settings.browser} page: {e}", cause=e) from e
            yield PlaywrightDriver(
                page,
                poll_interval_ms=app_config.performance.poll_interval_ms,
                navigation_timeout=app_config.performance.navigation_timeout,
            )
        finally:
            if settings.keep_browser_open_ms and not settings.browser_headless:
                await asyncio.sleep(settings.keep_browser_open_ms / 1000.0)
            logger.info("Closing browser...")
            await browser.close()
