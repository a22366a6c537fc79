"""Unit tests for main.py functions."""

import json
import logging
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from openpyxl import Workbook
from playwright.async_api import Error as PlaywrightError

from core.errors import CriticalStartupError
from main import main, resolve_domain, run_batch, validate_bot_mode
from records import load_records
from tests.fakes import FakeMaterialPage

HEADER = ["Name_AR", "Name_EN", "Material_Form", "Order_Limit", "Order_Unit", "Buying_Cost", "Cost_Unit"]


@pytest.fixture
def workbook_path(tmp_path):
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(HEADER)
    sheet.append(["طحين", "Flour", "solid", 10, "kilogram", 2.5, "tonne"])
    sheet.append(["حليب", "Milk", "liquid", None, None, 1.2, "gallon"])
    path = tmp_path / "materials.xlsx"
    workbook.save(path)
    return path


@pytest.fixture
def run_config(app_config, workbook_path, tmp_path):
    app_config.records.excel_path = workbook_path
    app_config.logging.metrics_file_path = tmp_path / "metrics.json"
    app_config.site.domain = "pos.example.com"
    return app_config


class TestValidateBotMode:
    """Tests for validate_bot_mode function."""

    def test_valid_mode(self) -> None:
        validate_bot_mode("validate", ["submit", "validate"])

    def test_invalid_mode_raises_value_error(self) -> None:
        with pytest.raises(ValueError, match="Invalid BOT_MODE: 'full_run'"):
            validate_bot_mode("full_run", ["submit", "validate"])


class TestResolveDomain:

    def test_configured_domain(self, app_config) -> None:
        app_config.site.domain = " pos.example.com "
        assert resolve_domain(app_config) == "pos.example.com"

    @patch("core.utils.ask_user", return_value="backoffice.example.com")
    def test_prompts_when_not_configured(self, mock_ask_user, app_config) -> None:
        app_config.site.domain = ""
        assert resolve_domain(app_config) == "backoffice.example.com"
        mock_ask_user.assert_called_once()

    @patch("core.utils.ask_user", return_value="")
    def test_empty_answer_is_fatal(self, mock_ask_user, app_config) -> None:
        app_config.site.domain = ""
        with pytest.raises(CriticalStartupError, match="No site domain"):
            resolve_domain(app_config)


class TestMain:

    @pytest.mark.asyncio
    async def test_validate_mode_never_opens_browser(self, run_config, caplog):
        run_config.bot_mode.mode = "validate"

        with patch("main.run_batch", new_callable=AsyncMock) as mock_run_batch, caplog.at_level(logging.INFO):
            exit_code = await main(run_config)

        assert exit_code == 0
        mock_run_batch.assert_not_awaited()
        assert "All rows passed validation." in caplog.text
        assert "Done! All materials processed." in caplog.text

    @pytest.mark.asyncio
    async def test_submit_mode_runs_batch(self, run_config):
        run_config.bot_mode.mode = "submit"

        with patch("main.run_batch", new_callable=AsyncMock) as mock_run_batch:
            exit_code = await main(run_config)

        assert exit_code == 0
        mock_run_batch.assert_awaited_once()
        app_config, records, domain = mock_run_batch.await_args.args
        assert app_config is run_config
        assert [r.name_en for r in records] == ["Flour", "Milk"]
        assert domain == "pos.example.com"

    @pytest.mark.asyncio
    async def test_missing_workbook_exits_with_status_one(self, run_config, tmp_path, caplog):
        run_config.records.excel_path = tmp_path / "absent.xlsx"

        with caplog.at_level(logging.INFO):
            exit_code = await main(run_config)

        assert exit_code == 1
        assert "Fatal error: Excel file not found" in caplog.text
        assert "Done! All materials processed." in caplog.text

    @pytest.mark.asyncio
    async def test_invalid_mode_exits_with_status_one(self, run_config):
        run_config.bot_mode.mode = "bogus"
        assert await main(run_config) == 1

    @pytest.mark.asyncio
    async def test_startup_failure_during_bootstrap(self, run_config):
        failure = CriticalStartupError("Session bootstrap failed: login page unreachable")

        with patch("main.run_batch", new=AsyncMock(side_effect=failure)):
            assert await main(run_config) == 1

    @pytest.mark.asyncio
    async def test_browser_launch_failure_exits_with_status_one(self, run_config, caplog):
        run_config.general_settings.browser = "webkit"
        playwright = MagicMock()
        playwright.webkit.launch = AsyncMock(side_effect=PlaywrightError("Executable doesn't exist"))
        manager = MagicMock()
        manager.__aenter__ = AsyncMock(return_value=playwright)
        manager.__aexit__ = AsyncMock(return_value=False)

        with patch("core.driver.async_playwright", return_value=manager), caplog.at_level(logging.INFO):
            exit_code = await main(run_config)

        assert exit_code == 1
        assert "Fatal error: Could not launch webkit: Executable doesn't exist" in caplog.text
        assert "Done! All materials processed." in caplog.text

    @pytest.mark.asyncio
    async def test_page_failure_closes_browser_and_exits_with_status_one(self, run_config, caplog):
        browser = MagicMock()
        browser.new_context = AsyncMock(side_effect=PlaywrightError("Target closed"))
        browser.close = AsyncMock()
        playwright = MagicMock()
        playwright.chromium.launch = AsyncMock(return_value=browser)
        run_config.general_settings.browser = "chromium"
        manager = MagicMock()
        manager.__aenter__ = AsyncMock(return_value=playwright)
        manager.__aexit__ = AsyncMock(return_value=False)

        with patch("core.driver.async_playwright", return_value=manager), caplog.at_level(logging.INFO):
            exit_code = await main(run_config)

        assert exit_code == 1
        assert "Fatal error: Could not open a chromium page: Target closed" in caplog.text
        browser.close.assert_awaited_once()


class TestRunBatch:

    @pytest.mark.asyncio
    async def test_runs_records_through_the_entry_form(self, run_config, fake_driver):
        page = FakeMaterialPage(fake_driver)
        fake_driver.page = MagicMock()

        @asynccontextmanager
        async def fake_launch(app_config):
            yield fake_driver

        records = load_records(run_config.records.excel_path)

        with patch("core.driver.launch_browser", fake_launch), patch(
            "actions.login.bootstrap_session", new_callable=AsyncMock
        ) as mock_bootstrap:
            report = await run_batch(run_config, records, "pos.example.com")

        mock_bootstrap.assert_awaited_once()
        assert mock_bootstrap.await_args.args[1] == "pos.example.com"
        assert report.submitted == 2
        assert [s["units"] for s in page.submissions] == [["2", "3"], ["5", "6"]]
        metrics = json.loads(run_config.logging.metrics_file_path.read_text(encoding="utf-8"))
        assert metrics["records"]["submitted"] == 2
