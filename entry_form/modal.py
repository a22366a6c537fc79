import logging
from enum import Enum
from typing import Optional

from core.errors import LocatorTimeout
from core.selectors import selectors
from core.session import SessionContext
from core.waiting import TRANSIENT_ERRORS

logger = logging.getLogger(__name__)


class ModalState(Enum):
    OPEN = "open"
    CLOSED = "closed"


class ModalTracker:
    """Observes the floating entry overlay; it never owns the dialog's state."""

    def __init__(self, session: SessionContext, overlay_selector: Optional[str] = None):
        self.session = session
        self.overlay_selector = overlay_selector or selectors["entry_overlay"]

    async def observe(self) -> ModalState:
        overlays = await self.session.accessor.locate_all(self.overlay_selector)
        for overlay in overlays:
            try:
                if await self.session.driver.is_visible(overlay):
                    return ModalState.OPEN
            except TRANSIENT_ERRORS:
                # detached between lookup and check: gone from the DOM
                continue
        return ModalState.CLOSED

    async def await_closed(self, timeout_ms: Optional[int] = None) -> bool:
        """
        Waits for the Open -> Closed transition.

        Returns:
            True once the overlay is absent or hidden, False when the deadline
            passed first. A timeout is logged, never raised.
        """
        if timeout_ms is None:
            timeout_ms = self.session.timeouts.modal_close_timeout

        async def closed() -> bool:
            return await self.observe() is ModalState.CLOSED

        try:
            await self.session.wait_engine.until(
                closed,
                timeout_ms,
                "Modal overlay did not close in time",
                label="modal_closed",
            )
            return True
        except LocatorTimeout as e:
            logger.warning(f"Modal close wait timed out: {e}")
            return False
