import logging
from typing import Any, List, Optional

from core.driver import InterfaceDriver
from core.waiting import WaitEngine

logger = logging.getLogger(__name__)


class ResilientElementAccessor:
    """
    Element lookups that never outlive a render.

    Nothing is cached: each call queries the live document again, so a caller
    that mutates the form (click, selection, typing that triggers a re-render)
    simply asks the accessor again instead of reusing a handle.
    """

    def __init__(self, driver: InterfaceDriver, wait_engine: WaitEngine, default_timeout_ms: int = 10000):
        self.driver = driver
        self.wait_engine = wait_engine
        self.default_timeout_ms = default_timeout_ms

    async def locate_all(self, selector: str) -> List[Any]:
        """Returns every current match in document order, possibly none."""
        return list(await self.driver.locate_all(selector))

    async def count(self, selector: str) -> int:
        return len(await self.locate_all(selector))

    async def locate_one(
        self,
        selector: str,
        timeout_ms: Optional[int] = None,
        position: int = 0,
        description: Optional[str] = None,
        label: str = "locate_visible",
    ) -> Any:
        """
        Waits until the match at ``position`` exists and is visible, then returns it.

        ``label`` names the wait in metrics; it must not vary per record.

        Raises:
            LocatorTimeout: If no visible match appeared before the deadline.
        """
        if timeout_ms is None:
            timeout_ms = self.default_timeout_ms

        async def visible_match() -> Any:
            handles = await self.locate_all(selector)
            handle = handles[position]
            if await self.driver.is_visible(handle):
                return handle
            return None

        return await self.wait_engine.until(
            visible_match,
            timeout_ms,
            description or f"No visible element for '{selector}' at position {position}",
            label=label,
        )
