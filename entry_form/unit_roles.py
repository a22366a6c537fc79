import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence

from core.selectors import selectors
from core.session import SessionContext

logger = logging.getLogger(__name__)


class UnitRole(Enum):
    ORDER_UNIT = "order_unit"
    COST_UNIT = "cost_unit"


# Render order of the unit selectors in the entry form.
DEFAULT_ROLE_ORDER = (UnitRole.ORDER_UNIT, UnitRole.COST_UNIT)


@dataclass(frozen=True)
class UnitSlot:
    """Where to find the ``<select>`` of one role: a selector plus ordinal."""

    role: UnitRole
    selector: str
    position: int = 0


async def resolve_unit_roles(
    session: SessionContext,
    roles: Sequence[UnitRole] = DEFAULT_ROLE_ORDER,
    unit_selector: Optional[str] = None,
    timeout_ms: Optional[int] = None,
) -> Dict[UnitRole, UnitSlot]:
    """
    Pins every unit role to its ``<select>`` once per opened form.

    Roles are taken in render order at the time of the call and bound to the
    element's ``id``, so later lookups find the same control even if the
    selectors are re-ordered by a re-render. A select without an id keeps
    ordinal addressing.
    """
    unit_selector = unit_selector or selectors["unit_selects"]
    if timeout_ms is None:
        timeout_ms = session.timeouts.form_units_timeout

    async def rendered_ids() -> Optional[List[Optional[str]]]:
        handles = await session.accessor.locate_all(unit_selector)
        if len(handles) < len(roles):
            return None
        return [await session.driver.read_attribute(handle, "id") for handle in handles[: len(roles)]]

    ids = await session.wait_engine.until(
        rendered_ids,
        timeout_ms,
        f"Expected {len(roles)} unit selectors for '{unit_selector}'",
        label="unit_roles_rendered",
    )

    slots: Dict[UnitRole, UnitSlot] = {}
    for position, (role, element_id) in enumerate(zip(roles, ids)):
        if element_id:
            slots[role] = UnitSlot(role, selectors["select_by_id"].format(id=element_id))
        else:
            logger.warning(f"Unit select for {role.value} has no id; addressing it by position {position}.")
            slots[role] = UnitSlot(role, unit_selector, position)
    return slots
