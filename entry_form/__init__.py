from .fields import FieldController
from .modal import ModalState, ModalTracker
from .unit_roles import UnitRole, UnitSlot, resolve_unit_roles

__all__ = [
    "FieldController",
    "ModalState",
    "ModalTracker",
    "UnitRole",
    "UnitSlot",
    "resolve_unit_roles",
]
