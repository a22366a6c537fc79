from __future__ import annotations

import logging
import re
import shutil
from datetime import datetime
from pathlib import Path
from typing import Optional

from playwright.async_api import Error as PlaywrightError, Page

from .masking import mask_secrets
from .types import DiagnosticContext, DiagnosticOptions

logger = logging.getLogger(__name__)


def build_artifact_dir(base: Path, dctx: DiagnosticContext) -> Path:
    ts = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    row = f"row{dctx.record_index + 1}" if dctx.record_index is not None else "norow"
    error_key = type(dctx.error).__name__ if dctx.error else "UnknownError"
    stage = re.sub(r"[^A-Za-z0-9_]+", "_", dctx.stage)
    return base / f"{ts}_{row}_{stage}_{error_key}"


def enforce_limit(base: Path, max_items: int) -> None:
    """Deletes the oldest artifact directories beyond ``max_items``."""
    if not base.exists():
        return
    items = sorted(p for p in base.iterdir() if p.is_dir())
    overflow = len(items) - max_items
    for old in items[: max(0, overflow)]:
        shutil.rmtree(old, ignore_errors=True)


async def capture_on_failure(
    page: Optional[Page],
    options: DiagnosticOptions,
    dctx: DiagnosticContext,
) -> Optional[Path]:
    """
    Saves a screenshot and the masked page HTML for a failed record.

    Best-effort: capture problems are logged and never interrupt the batch.
    """
    if not options.enable_on_failure or page is None:
        return None

    base = Path(options.output_dir)
    out_dir = build_artifact_dir(base, dctx)
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning(f"Could not create diagnostics directory {out_dir}: {e}")
        return None

    if options.capture_screenshot:
        try:
            await page.screenshot(path=str(out_dir / "screenshot.png"), full_page=True)
        except PlaywrightError as e:
            logger.debug(f"Screenshot capture failed: {e}")
    if options.capture_html:
        try:
            html = await page.content()
            (out_dir / "page.html").write_text(mask_secrets(html, options.secrets), encoding="utf-8")
        except (PlaywrightError, OSError) as e:
            logger.debug(f"HTML capture failed: {e}")

    enforce_limit(base, options.max_artifacts_per_run)
    logger.info(f"Diagnostics for '{dctx.record_name}' saved to {out_dir}")
    return out_dir
