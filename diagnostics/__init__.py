from .capture import capture_on_failure
from .types import DiagnosticContext, DiagnosticOptions

__all__ = ["capture_on_failure", "DiagnosticContext", "DiagnosticOptions"]
