from typing import Optional


class PaymentsError(Exception):
    """Base class for failures at the record source / snapshot sink boundary."""


class RecordSourceError(PaymentsError):
    """Raised when the input file cannot be opened, read or decoded as text."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class RecordDecodeError(RecordSourceError):
    """Raised when a row cannot be decoded into a transaction record."""

    def __init__(self, message: str, path: Optional[str] = None, line: Optional[int] = None):
        super().__init__(message, path)
        self.line = line

    def __str__(self) -> str:
        if self.line is None:
            return super().__str__()
        return f"line {self.line}: {super().__str__()}"


class SnapshotSinkError(PaymentsError):
    """Raised when account snapshots cannot be written out."""
