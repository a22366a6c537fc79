from typing import Optional


class LocatorTimeout(TimeoutError):
    """Raised when a polled condition does not hold before its deadline."""

    def __init__(self, description: str, timeout_ms: Optional[int] = None):
        self.description = description
        self.timeout_ms = timeout_ms
        if timeout_ms is not None:
            self.message = f"{description} (timed out after {timeout_ms} ms)"
        else:
            self.message = description
        super().__init__(self.message)


class CriticalStartupError(Exception):
    """Raised when the batch cannot start: no records, no session, no browser."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.message = message
        self.cause = cause
        super().__init__(self.message)


class RecordStepError(Exception):
    """Raised when one step of a record's entry sequence fails."""

    def __init__(self, stage: str, record_name: str, cause: BaseException):
        self.stage = stage
        self.record_name = record_name
        self.cause = cause
        self.message = f"Step '{stage}' failed for '{record_name}': {cause}"
        super().__init__(self.message)
