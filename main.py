import asyncio
import logging
import sys
from typing import List, Optional

# It's important to set up logging before other imports that might use it.
from core.logger import setup_logging
from config import AppConfig, config

setup_logging()
logger = logging.getLogger(__name__)


def validate_bot_mode(bot_mode: str, valid_modes: list[str]) -> None:
    """
    Validates that the provided BOT_MODE is in the list of valid modes.

    Args:
        bot_mode: Current bot operating mode
        valid_modes: List of valid mode strings

    Raises:
        ValueError: If bot_mode is not in valid_modes
    """
    if bot_mode not in valid_modes:
        raise ValueError(
            f"Invalid BOT_MODE: '{bot_mode}'. "
            f"Valid modes are: {', '.join(valid_modes)}"
        )


def resolve_domain(app_config: AppConfig) -> str:
    """Domain of the back office, from the configuration or asked interactively."""
    from core.errors import CriticalStartupError
    from core.utils import ask_user

    domain = app_config.site.domain.strip()
    if not domain:
        domain = ask_user("Enter the site domain (e.g. pos.example.com): ")
    if not domain:
        raise CriticalStartupError("No site domain given.")
    return domain


async def run_batch(app_config: AppConfig, records: List, domain: str):
    """Opens the browser, logs in and submits every record."""
    from actions.login import bootstrap_session
    from core.driver import launch_browser
    from core.session import SessionContext
    from diagnostics import DiagnosticContext, DiagnosticOptions, capture_on_failure
    from phases.submission import BatchSubmissionController

    diagnostic_options = DiagnosticOptions.from_config(app_config)

    async with launch_browser(app_config) as driver:
        session = SessionContext(driver=driver, app_config=app_config)

        async def on_failure(record, error) -> None:
            await capture_on_failure(
                driver.page,
                diagnostic_options,
                DiagnosticContext(
                    record_index=record.index,
                    record_name=record.display_name,
                    stage=error.stage,
                    error=error.cause,
                ),
            )

        await bootstrap_session(session, domain)
        controller = BatchSubmissionController(session, on_failure=on_failure)
        report = await controller.run(records)
        session.metrics.export_to_file(app_config.logging.metrics_file_path)
        return report


# --- Main Orchestrator ---
async def main(app_config: Optional[AppConfig] = None) -> int:
    """Main orchestrator function for the materials entry bot. Returns the exit code."""
    from core.errors import CriticalStartupError
    from records import load_records, validate_batch

    app_config = app_config or config

    try:
        validate_bot_mode(app_config.bot_mode.mode, app_config.bot_mode.valid_modes)
    except ValueError as e:
        logger.error(str(e))
        return 1

    logger.info(f"Bot starting in mode: {app_config.bot_mode.mode}")
    exit_code = 0
    try:
        records = load_records(app_config.records.excel_path)
        validate_batch(records)

        if app_config.bot_mode.mode == "validate":
            logger.info("Validate mode: nothing will be submitted.")
        else:
            domain = resolve_domain(app_config)
            await run_batch(app_config, records, domain)
    except CriticalStartupError as e:
        logger.critical(f"Fatal error: {e.message}", exc_info=True)
        exit_code = 1
    finally:
        logger.info("Done! All materials processed.")
    return exit_code


def cli() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
