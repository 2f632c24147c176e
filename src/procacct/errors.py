"""Exception types raised by procacct."""

from pathlib import Path


class ProcfsError(Exception):
    """Base class for all procacct errors."""

    def __init__(self, msg: str = "", path: Path | str | None = None) -> None:
        self.msg = msg
        self.path = path
        super().__init__(msg)

    def __str__(self) -> str:
        if self.path is None:
            return self.msg
        return f"{self.msg} ({self.path})" if self.msg else str(self.path)


class NotFound(ProcfsError):
    """The process vanished or the file does not exist.

    Processes exit between enumeration and read all the time, so callers
    should treat this as routine.
    """


class PermissionDenied(ProcfsError):
    """The caller is not allowed to read the file."""


class ReadError(ProcfsError):
    """An I/O failure other than absence or permission."""


class MalformedRecord(ProcfsError, ValueError):
    """The file was read but its content does not have the expected format."""


class ComputationError(ProcfsError, ArithmeticError):
    """Valid inputs produced an undefined arithmetic result."""


class ConfigurationError(ProcfsError):
    """A host configuration query failed."""
