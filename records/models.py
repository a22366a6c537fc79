from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

# Column names of the materials workbook.
NAME_AR = "Name_AR"
NAME_EN = "Name_EN"
MATERIAL_FORM = "Material_Form"
ORDER_LIMIT = "Order_Limit"
ORDER_UNIT = "Order_Unit"
BUYING_COST = "Buying_Cost"
COST_UNIT = "Cost_Unit"

# Captions that template workbooks repeat under the header row.
HEADER_ECHOES = frozenset({NAME_EN, "الاسم بالإنجليزية"})


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


@dataclass(frozen=True)
class MaterialRecord:
    """One raw material to enter, as read from the workbook."""

    index: int
    raw: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, index: int, row: Mapping[str, Any]) -> "MaterialRecord":
        return cls(index=index, raw=MappingProxyType(dict(row)))

    def get(self, column: str) -> Any:
        return self.raw.get(column)

    @property
    def name_ar(self) -> str:
        return _text(self.get(NAME_AR))

    @property
    def name_en(self) -> str:
        return _text(self.get(NAME_EN))

    @property
    def display_name(self) -> str:
        return self.name_en or self.name_ar or f"row {self.index + 1}"

    @property
    def material_form(self) -> str:
        return _text(self.get(MATERIAL_FORM)).lower()

    @property
    def order_limit(self) -> Optional[Any]:
        return self.get(ORDER_LIMIT)

    @property
    def order_unit(self) -> str:
        return _text(self.get(ORDER_UNIT)).lower()

    @property
    def buying_cost(self) -> Optional[Any]:
        return self.get(BUYING_COST)

    @property
    def cost_unit(self) -> str:
        return _text(self.get(COST_UNIT)).lower()

    def is_eligible(self) -> bool:
        """A record needs a real English name to enter the batch."""
        name = self.name_en
        return bool(name) and name not in HEADER_ECHOES


@dataclass(frozen=True)
class ValidationOutcome:
    """Advisory result of the pre-flight check of one record."""

    index: int
    name: str
    violations: Tuple[str, ...] = ()

    @property
    def is_clean(self) -> bool:
        return not self.violations
