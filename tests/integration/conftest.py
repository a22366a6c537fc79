import pytest_asyncio
from playwright.async_api import async_playwright

from core.driver import PlaywrightDriver


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def browser():
    """One headless chromium for the whole integration run."""
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True)
        yield browser
        await browser.close()


@pytest_asyncio.fixture(scope="function", loop_scope="session")
async def page(browser):
    """A fresh page per test, sized like the bot's own context."""
    context = await browser.new_context(no_viewport=True)
    page = await context.new_page()
    yield page
    await context.close()


@pytest_asyncio.fixture(scope="function", loop_scope="session")
async def driver(page):
    """PlaywrightDriver over the test page, polling faster than the default."""
    return PlaywrightDriver(page, poll_interval_ms=20, navigation_timeout=5000)
