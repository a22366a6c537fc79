from unittest.mock import AsyncMock

import pytest
from playwright.async_api import Error as PlaywrightError

from actions.login import bootstrap_session, navigate_with_retry
from config import LoginConfig
from core.errors import CriticalStartupError
from core.selectors import selectors
from tests.fakes import FakeDriver, FakeElement


class FakeBackOffice:
    """Login page, dashboard and products-entry module behind a FakeDriver."""

    def __init__(self, driver: FakeDriver, redirect: bool = True, tab_appears: bool = True):
        self.driver = driver
        self.module_logged_in = False
        self.materials_opened = False
        self.fields = {
            name: FakeElement(attrs={"id": name})
            for name in ("login_username", "login_password", "module_login_username", "module_login_password")
        }

        def submit_login():
            if redirect:
                driver.current_url = driver.current_url.replace("/auth/employees/login", "/dashboard")

        def submit_module_login():
            self.module_logged_in = tab_appears

        def open_materials():
            self.materials_opened = True

        self.materials_tab = FakeElement(attrs={"id": "materials"}, on_click=open_materials)
        self.add_button = FakeElement(attrs={"id": "add"})

        for name, element in self.fields.items():
            driver.register(selectors[name], [element])
        driver.register(selectors["login_submit"], [FakeElement(attrs={"id": "login"}, on_click=submit_login)])
        driver.register(selectors["products_entry_tile"], [FakeElement(attrs={"id": "tile"})])
        driver.register(
            selectors["module_login_submit"], [FakeElement(attrs={"id": "module-login"}, on_click=submit_module_login)]
        )
        driver.register(selectors["materials_tab"], lambda: [self.materials_tab] if self.module_logged_in else [])
        driver.register(selectors["add_material_button"], lambda: [self.add_button] if self.materials_opened else [])


class TestBootstrapSession:

    @pytest.mark.asyncio
    async def test_logs_in_twice_and_opens_materials_tab(self, session, fake_driver):
        office = FakeBackOffice(fake_driver)

        await bootstrap_session(session, "pos.example.com")

        assert ("navigate", "https://pos.example.com/auth/employees/login") in fake_driver.calls
        assert fake_driver.current_url == "https://pos.example.com/dashboard"
        assert office.fields["login_username"].value == "chef@example.com"
        assert office.fields["login_password"].value == "s3cret"
        assert office.fields["module_login_username"].value == "chef@example.com"
        assert office.fields["module_login_password"].value == "s3cret"
        assert office.materials_tab.clicks == 1

    @pytest.mark.asyncio
    async def test_missing_redirect_is_not_fatal(self, session, fake_driver):
        office = FakeBackOffice(fake_driver, redirect=False)

        await bootstrap_session(session, "pos.example.com")

        assert office.materials_opened

    @pytest.mark.asyncio
    async def test_missing_credentials(self, session, fake_driver):
        session.app_config.login = LoginConfig(POS_USERNAME="", POS_PASSWORD="")

        with pytest.raises(CriticalStartupError, match="POS_USERNAME and POS_PASSWORD"):
            await bootstrap_session(session, "pos.example.com")
        assert fake_driver.calls == []

    @pytest.mark.asyncio
    async def test_materials_tab_never_appears(self, session, fake_driver):
        FakeBackOffice(fake_driver, tab_appears=False)

        with pytest.raises(CriticalStartupError, match="Session bootstrap failed") as exc_info:
            await bootstrap_session(session, "pos.example.com")
        assert "'materials' tab did not appear" in str(exc_info.value)


class TestNavigateWithRetry:

    @pytest.mark.asyncio
    async def test_retries_network_errors(self, session, fake_driver, monkeypatch):
        navigate = AsyncMock(side_effect=[PlaywrightError("net::ERR_CONNECTION_RESET"), None])
        monkeypatch.setattr(fake_driver, "navigate", navigate)

        await navigate_with_retry(session, "https://pos.example.com/auth/employees/login")

        assert navigate.await_count == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, session, fake_driver, monkeypatch):
        navigate = AsyncMock(side_effect=PlaywrightError("net::ERR_NAME_NOT_RESOLVED"))
        monkeypatch.setattr(fake_driver, "navigate", navigate)

        with pytest.raises(PlaywrightError):
            await navigate_with_retry(session, "https://nowhere.invalid/")
        assert navigate.await_count == 3

    @pytest.mark.asyncio
    async def test_bootstrap_wraps_navigation_failure(self, session, fake_driver, monkeypatch):
        monkeypatch.setattr(fake_driver, "navigate", AsyncMock(side_effect=PlaywrightError("offline")))

        with pytest.raises(CriticalStartupError) as exc_info:
            await bootstrap_session(session, "pos.example.com")
        assert isinstance(exc_info.value.cause, PlaywrightError)
