from .excel_source import load_records
from .models import MaterialRecord, ValidationOutcome
from .validation import validate, validate_batch

__all__ = [
    "load_records",
    "MaterialRecord",
    "ValidationOutcome",
    "validate",
    "validate_batch",
]
