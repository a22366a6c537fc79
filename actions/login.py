import logging

from playwright.async_api import Error as PlaywrightError
from tenacity import (
    AsyncRetrying,
    after_log,
    before_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from core.errors import CriticalStartupError, LocatorTimeout
from core.selectors import selectors
from core.session import SessionContext

logger = logging.getLogger(__name__)


async def navigate_with_retry(session: SessionContext, url: str) -> None:
    """Loads ``url``, retrying network-level failures with exponential backoff."""
    resilience = session.app_config.resilience
    retrying = AsyncRetrying(
        stop=stop_after_attempt(resilience.navigation_max_attempts),
        wait=wait_exponential(
            multiplier=resilience.initial_wait,
            min=resilience.initial_wait,
            max=resilience.max_wait,
            exp_base=resilience.exponential_base,
        ),
        retry=retry_if_exception_type(PlaywrightError),
        reraise=True,
        before=before_log(logger, logging.DEBUG),
        after=after_log(logger, logging.DEBUG),
    )
    await retrying(session.driver.navigate, url)


async def _type_into(session: SessionContext, selector_name: str, text: str) -> None:
    handle = await session.accessor.locate_one(selectors[selector_name], label=f"login:{selector_name}")
    await session.driver.clear(handle)
    await session.driver.type(handle, text)


async def _click(session: SessionContext, selector_name: str) -> None:
    handle = await session.accessor.locate_one(selectors[selector_name], label=f"login:{selector_name}")
    await session.driver.click(handle)


async def bootstrap_session(session: SessionContext, domain: str) -> None:
    """Log in and open the materials tab of the products-entry module.

    Leaves the page where the "add a new ingredient" button is reachable.

    Args:
        session: Session context of the run.
        domain: Host of the back-office application, without scheme.

    Raises:
        CriticalStartupError: If credentials are missing or any step fails.
    """
    app_config = session.app_config
    credentials = app_config.login
    if not credentials.username or not credentials.password:
        raise CriticalStartupError("POS_USERNAME and POS_PASSWORD must be set.")

    try:
        logger.info("Logging in...")
        await navigate_with_retry(session, app_config.site.build_url(app_config.site.login_path, domain))
        await _type_into(session, "login_username", credentials.username)
        await _type_into(session, "login_password", credentials.password)
        await _click(session, "login_submit")

        try:
            await session.driver.wait_for_url_contains(
                app_config.site.dashboard_fragment,
                app_config.performance.dashboard_redirect_timeout,
            )
        except LocatorTimeout as e:
            logger.debug(f"Dashboard redirect not observed, continuing: {e}")

        logger.info("Clicking 'Products entry'...")
        await _click(session, "products_entry_tile")

        logger.info("Second login...")
        await _type_into(session, "module_login_username", credentials.username)
        await _type_into(session, "module_login_password", credentials.password)
        await _click(session, "module_login_submit")
        await session.accessor.locate_one(
            selectors["materials_tab"],
            description="'materials' tab did not appear after the second login",
            label="materials_tab",
        )
        logger.info("Second login successful")

        logger.info("Clicking 'Materials' tab...")
        await _click(session, "materials_tab")
        await session.accessor.locate_one(
            selectors["add_material_button"],
            description="'add a new ingredient' button did not appear",
            label="add_material_button",
        )
        logger.info("Materials tab opened")
    except Exception as e:
        raise CriticalStartupError(f"Session bootstrap failed: {e}", cause=e) from e
