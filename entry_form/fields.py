import logging
from typing import Any, Optional

from core.selectors import selectors
from core.session import SessionContext
from core.utils import xpath_literal

logger = logging.getLogger(__name__)


class FieldController:
    """
    Typed setters for the entry form.

    Each setter looks its element up again instead of receiving a handle,
    because the form re-renders between any two of them.
    """

    def __init__(self, session: SessionContext):
        self.session = session
        self.driver = session.driver
        self.accessor = session.accessor
        self.wait_engine = session.wait_engine
        self.catalog = session.catalog

    async def set_text(
        self,
        selector: str,
        value: Any,
        timeout_ms: Optional[int] = None,
        position: int = 0,
    ) -> None:
        """Waits for the input to be visible, clears it and types ``value``."""
        handle = await self.accessor.locate_one(selector, timeout_ms, position=position, label="text_input")
        await self.driver.clear(handle)
        await self.driver.type(handle, str(value))

    async def select_value(
        self,
        selector: str,
        code: str,
        timeout_ms: Optional[int] = None,
        position: int = 0,
        confirm_timeout_ms: Optional[int] = None,
        what: Optional[str] = None,
    ) -> str:
        """
        Selects the option ``code`` of the ``<select>`` at ``position`` and
        waits until the control reports it as its current value.

        The option list may still be repopulating after an earlier selection,
        so the option is awaited first. The ``<select>`` is fetched again right
        before the selection and on every confirmation poll.
        """
        timeouts = self.session.timeouts
        if timeout_ms is None:
            timeout_ms = timeouts.unit_select_timeout
        if confirm_timeout_ms is None:
            confirm_timeout_ms = timeouts.unit_confirm_timeout
        what = what or f"select[{position}] '{selector}'"
        option_selector = selectors["option_by_value"].format(value=code)

        async def option_rendered() -> bool:
            select = (await self.accessor.locate_all(selector))[position]
            return len(await self.driver.locate_within(select, option_selector)) > 0

        await self.wait_engine.until(
            option_rendered,
            timeout_ms,
            f'Option value="{code}" not found in {what}',
            label="select_option_rendered",
        )

        select = await self.accessor.locate_one(selector, timeout_ms, position=position, label="select_control")
        await self.driver.select_option(select, code)

        async def value_committed() -> bool:
            fresh = (await self.accessor.locate_all(selector))[position]
            return await self.driver.read_attribute(fresh, "value") == code

        await self.wait_engine.until(
            value_committed,
            confirm_timeout_ms,
            f'{what} did not update to value="{code}"',
            label="select_value_committed",
        )
        return code

    async def select_choice(
        self,
        category_selector: str,
        target_category: str,
        unit_name: str,
        timeout_ms: Optional[int] = None,
        position: int = 0,
    ) -> str:
        """Resolves ``unit_name`` within ``target_category`` and selects its code."""
        code = self.catalog.resolve(target_category, unit_name)
        return await self.select_value(
            category_selector,
            code,
            timeout_ms=timeout_ms,
            position=position,
            what=f"unit select[{position}] for form=\"{target_category}\"",
        )

    async def wait_for_category_options(
        self,
        target_category: str,
        unit_selector: Optional[str] = None,
        timeout_ms: Optional[int] = None,
    ) -> None:
        """Waits until the unit selectors were repopulated for ``target_category``."""
        unit_selector = unit_selector or selectors["unit_selects"]
        if timeout_ms is None:
            timeout_ms = self.session.timeouts.form_units_timeout
        first_code = self.catalog.first_code(target_category)
        option_selector = selectors["option_by_value"].format(value=first_code)

        async def options_loaded() -> bool:
            first_select = (await self.accessor.locate_all(unit_selector))[0]
            return len(await self.driver.locate_within(first_select, option_selector)) > 0

        await self.wait_engine.until(
            options_loaded,
            timeout_ms,
            f'Unit options for form="{target_category}" did not load in time',
            label="unit_options_loaded",
        )

    async def toggle_switch(self, label_text: str, timeout_ms: Optional[int] = None) -> None:
        """
        Clicks the on/off switch next to ``label_text`` exactly once.

        The switch state is not read; two calls flip it twice.
        """
        if timeout_ms is None:
            timeout_ms = self.session.timeouts.toggle_timeout
        selector = selectors["toggle_by_label"].format(label=xpath_literal(label_text))
        handle = await self.accessor.locate_one(
            selector,
            timeout_ms,
            description=f"Toggle '{label_text}' not found or not visible",
            label="toggle_switch",
        )
        await self.driver.click(handle)
