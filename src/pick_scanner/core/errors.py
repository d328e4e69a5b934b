"""Exception types raised by the scoring core."""


class PickScannerError(Exception):
    """Base class for pick scanner errors."""


class InsufficientDataError(PickScannerError, ValueError):
    """Raised when a series is shorter than an indicator or evaluator needs."""

    def __init__(self, what: str, required: int, available: int):
        self.what = what
        self.required = required
        self.available = available
        super().__init__(f"{what} needs {required} values, got {available}")


class PersistenceError(PickScannerError):
    """Raised when the selection snapshot cannot be written."""
