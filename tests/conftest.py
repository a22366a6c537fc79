import pytest

from config import (
    AppConfig,
    GeneralSettingsConfig,
    LoginConfig,
    PerformanceConfig,
    ResilienceConfig,
)
from core.session import SessionContext
from tests.fakes import FakeDriver, FakeMaterialPage


@pytest.fixture
def app_config() -> AppConfig:
    """Configuration with short deadlines so that timeouts resolve quickly."""
    return AppConfig(
        login=LoginConfig(POS_USERNAME="chef@example.com", POS_PASSWORD="s3cret"),
        performance=PerformanceConfig(
            poll_interval_ms=5,
            selector_timeout=300,
            navigation_timeout=1000,
            dashboard_redirect_timeout=50,
            entry_open_timeout=300,
            form_units_timeout=300,
            unit_select_timeout=300,
            unit_confirm_timeout=300,
            toggle_timeout=300,
            modal_close_timeout=300,
        ),
        resilience=ResilienceConfig(navigation_max_attempts=3, initial_wait=0.01, max_wait=0.02),
        general_settings=GeneralSettingsConfig(browser_headless=True, keep_browser_open_ms=0),
    )


@pytest.fixture
def fake_driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def session(fake_driver: FakeDriver, app_config: AppConfig) -> SessionContext:
    return SessionContext(driver=fake_driver, app_config=app_config)


@pytest.fixture
def material_page(fake_driver: FakeDriver) -> FakeMaterialPage:
    return FakeMaterialPage(fake_driver)
