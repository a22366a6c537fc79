"""
Batch submission of raw materials.

Each record is driven through the entry form one stage at a time:

    idle -> entry_opened -> name_filled -> form_selected -> units_confirmed
         -> toggles_set -> submitted -> modal_closed

Field-level failures are logged as warnings and the record carries on.
A failure to open the form or to submit it abandons the record; the batch
always moves on to the next record.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

from core.errors import RecordStepError
from core.logger import bind_context, get_structured_logger
from core.selectors import selectors
from core.session import SessionContext
from core.units import FORM_CODES
from entry_form import FieldController, ModalState, ModalTracker, UnitRole, UnitSlot, resolve_unit_roles
from records.models import MaterialRecord

logger = logging.getLogger(__name__)
structured_logger = get_structured_logger(__name__)


class RecordStage(str, Enum):
    IDLE = "idle"
    ENTRY_OPENED = "entry_opened"
    NAME_FILLED = "name_filled"
    FORM_SELECTED = "form_selected"
    UNITS_CONFIRMED = "units_confirmed"
    TOGGLES_SET = "toggles_set"
    SUBMITTED = "submitted"
    MODAL_CLOSED = "modal_closed"


@dataclass
class RecordResult:
    """How far one record got."""

    index: int
    name: str
    stage: RecordStage = RecordStage.IDLE
    warnings: List[str] = field(default_factory=list)
    error: Optional[str] = None
    failed_stage: Optional[str] = None

    @property
    def submitted(self) -> bool:
        return self.stage in (RecordStage.SUBMITTED, RecordStage.MODAL_CLOSED)

    @property
    def modal_closed(self) -> bool:
        return self.stage is RecordStage.MODAL_CLOSED


@dataclass
class BatchReport:
    results: List[RecordResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def submitted(self) -> int:
        return sum(1 for result in self.results if result.submitted)

    @property
    def failed(self) -> int:
        return self.total - self.submitted


FailureHook = Callable[[MaterialRecord, RecordStepError], Awaitable[None]]


class BatchSubmissionController:
    """Enters every record of a batch, in order, through the entry form."""

    def __init__(
        self,
        session: SessionContext,
        fields: Optional[FieldController] = None,
        modal: Optional[ModalTracker] = None,
        on_failure: Optional[FailureHook] = None,
    ):
        self.session = session
        self.fields = fields or FieldController(session)
        self.modal = modal or ModalTracker(session)
        self.on_failure = on_failure
        self.timeouts = session.timeouts
        self.settings = session.app_config.general_settings

    async def run(self, records: Sequence[MaterialRecord]) -> BatchReport:
        """Submits ``records`` one after another; never raises for a single record."""
        report = BatchReport()
        total = len(records)
        for position, record in enumerate(records, start=1):
            logger.info(f"Adding material {position}/{total}: {record.display_name}")
            result = await self.submit_record(record)
            report.results.append(result)
            self.session.metrics.record_outcome(
                submitted=result.submitted,
                failed_stage=result.failed_stage,
                modal_closed=result.modal_closed,
                field_warnings=len(result.warnings),
            )
        logger.info(
            f"Batch finished: {report.submitted}/{report.total} submitted, {report.failed} failed."
        )
        return report

    async def submit_record(self, record: MaterialRecord) -> RecordResult:
        result = RecordResult(index=record.index, name=record.display_name)
        record_logger = bind_context(
            structured_logger, record_index=record.index, record_name=record.display_name
        )

        steps: Sequence[tuple] = (
            (RecordStage.ENTRY_OPENED, self._open_entry),
            (RecordStage.NAME_FILLED, self._fill_names),
            (RecordStage.FORM_SELECTED, self._select_form),
            (RecordStage.UNITS_CONFIRMED, self._fill_quantities),
            (RecordStage.TOGGLES_SET, self._set_toggles),
            (RecordStage.SUBMITTED, self._submit),
        )
        for stage, step in steps:
            try:
                await step(record, result)
            except Exception as e:
                error = RecordStepError(stage.value, record.display_name, e)
                result.error = str(e)
                result.failed_stage = stage.value
                logger.error(f'Failed to add material "{record.display_name}" at {stage.value}: {e}')
                record_logger.error("record_abandoned", stage=stage.value, error_type=type(e).__name__)
                await self._handle_failure(record, error)
                return result
            result.stage = stage

        if await self.modal.await_closed(self.timeouts.modal_close_timeout):
            result.stage = RecordStage.MODAL_CLOSED
            logger.info("  Material saved successfully")
        else:
            logger.warning(f'  Entry dialog for "{record.display_name}" did not close; continuing.')
        return result

    async def _attempt_field(self, result: RecordResult, label: str, operation: Callable[[], Awaitable[object]]) -> bool:
        try:
            await operation()
            return True
        except Exception as e:
            result.warnings.append(f"{label}: {e}")
            logger.warning(f"  Could not set {label}: {e}")
            return False

    async def _open_entry(self, record: MaterialRecord, result: RecordResult) -> None:
        add_button = await self.session.accessor.locate_one(
            selectors["add_material_button"],
            description="'add a new ingredient' button not available",
            label="add_material_button",
        )
        await self.session.driver.click(add_button)
        await self.session.accessor.locate_one(
            selectors["name_inputs"],
            self.timeouts.entry_open_timeout,
            description="Entry form did not open (no name inputs)",
            label="entry_form_opened",
        )

    async def _fill_names(self, record: MaterialRecord, result: RecordResult) -> None:
        name_selector = selectors["name_inputs"]
        if record.name_ar:
            if await self._attempt_field(
                result, "Arabic name", lambda: self.fields.set_text(name_selector, record.name_ar, position=0)
            ):
                logger.info(f"  Arabic name: {record.name_ar}")
        if record.name_en:
            if await self._attempt_field(
                result, "English name", lambda: self.fields.set_text(name_selector, record.name_en, position=1)
            ):
                logger.info(f"  English name: {record.name_en}")

    async def _select_form(self, record: MaterialRecord, result: RecordResult) -> None:
        if not record.material_form:
            return
        category = self.session.catalog.category_for(record.material_form)

        async def select_and_wait() -> None:
            await self.fields.select_value(
                selectors["material_form_select"],
                FORM_CODES[category],
                timeout_ms=self.timeouts.selector_timeout,
                what="material form select",
            )
            await self.fields.wait_for_category_options(category)

        if await self._attempt_field(result, "material form", select_and_wait):
            logger.info(f"  Material form: {category}")

    async def _resolve_slots(self, result: RecordResult) -> Dict[UnitRole, UnitSlot]:
        try:
            return await resolve_unit_roles(self.session)
        except Exception as e:
            result.warnings.append(f"unit selectors: {e}")
            logger.warning(f"  Could not locate unit selectors: {e}")
            return {}

    async def _fill_quantities(self, record: MaterialRecord, result: RecordResult) -> None:
        catalog = self.session.catalog
        category = catalog.category_for(record.material_form)
        slots = await self._resolve_slots(result)

        quantities = (
            ("order limit", selectors["order_limit_input"], record.order_limit, UnitRole.ORDER_UNIT, record.order_unit),
            ("buying cost", selectors["buying_cost_input"], record.buying_cost, UnitRole.COST_UNIT, record.cost_unit),
        )
        for label, input_selector, amount, role, unit in quantities:
            if amount is not None and str(amount).strip() != "":
                if await self._attempt_field(
                    result, label, lambda: self.fields.set_text(input_selector, amount)
                ):
                    logger.info(f"  {label.capitalize()}: {amount}")

            unit_name = catalog.unit_or_default(category, unit)
            slot = slots.get(role)
            if slot is None:
                result.warnings.append(f"{role.value}: unit selector not resolved")
                continue
            if await self._attempt_field(
                result,
                role.value.replace("_", " "),
                lambda: self.fields.select_choice(
                    slot.selector,
                    category,
                    unit_name,
                    timeout_ms=self.timeouts.unit_select_timeout,
                    position=slot.position,
                ),
            ):
                logger.info(f"  {role.value.replace('_', ' ').capitalize()}: {unit_name}")

    async def _set_toggles(self, record: MaterialRecord, result: RecordResult) -> None:
        for label in self.settings.toggles:
            if await self._attempt_field(
                result, f"'{label}' toggle", lambda: self.fields.toggle_switch(label, self.timeouts.toggle_timeout)
            ):
                logger.info(f"  {label}: ON")

    async def _submit(self, record: MaterialRecord, result: RecordResult) -> None:
        create_button = await self.session.accessor.locate_one(
            selectors["create_button"],
            description="'create' button not available",
            label="create_button",
        )
        await self.session.driver.click(create_button)

    async def _handle_failure(self, record: MaterialRecord, error: RecordStepError) -> None:
        if self.settings.abandon_policy == "dismiss":
            await self._dismiss_entry()
        else:
            logger.warning(f'  Leaving the entry form of "{record.display_name}" as it is.')

        if self.on_failure is not None:
            try:
                await self.on_failure(record, error)
            except Exception as e:
                logger.warning(f"  Failure hook raised: {e}")

    async def _dismiss_entry(self) -> None:
        """Closes an entry dialog that a failed record left open."""
        try:
            if await self.modal.observe() is ModalState.CLOSED:
                return
            dismiss = await self.session.accessor.locate_one(
                selectors["entry_dismiss_button"],
                self.timeouts.toggle_timeout,
                description="Entry dialog has no visible dismiss control",
                label="entry_dismiss_button",
            )
            await self.session.driver.click(dismiss)
            if await self.modal.await_closed(self.timeouts.modal_close_timeout):
                logger.info("  Abandoned entry dialog closed.")
        except Exception as e:
            logger.warning(f"  Could not dismiss the abandoned entry dialog: {e}")
