"""Field extraction from /proc/<pid>/stat."""

from procacct.errors import MalformedRecord
from procacct.models import StatTimes
from procacct.reader import RawRecordReader

# 0-indexed positions, see proc(5)
UTIME_INDEX = 13
STIME_INDEX = 14
STARTTIME_INDEX = 21
MIN_STAT_FIELDS = STARTTIME_INDEX + 1


def split_stat_fields(text: str) -> list[str]:
    """
    Split a stat line into its positional fields.

    The second field is the command name in parentheses, which may itself
    contain spaces or parentheses. It is anchored on the first '(' and the
    last ')' and kept as a single field, so the indices of every later
    field match proc(5) whatever the process is called.
    """
    start = text.find("(")
    end = text.rfind(")")
    if start == -1 or end < start:
        return text.split()
    head = text[:start].split()
    return head + [text[start : end + 1]] + text[end + 1 :].split()


def _tick_field(fields: list[str], index: int, label: str) -> int:
    token = fields[index]
    if not (token.isascii() and token.isdigit()):
        raise MalformedRecord(f"stat field {index} ({label}) is not a tick count: {token!r}")
    return int(token)


def extract_cpu_times(fields: list[str]) -> StatTimes:
    """
    Pull utime, stime and starttime out of split stat fields.

    Raises:
        MalformedRecord: Fewer than 22 fields, or a non-numeric tick count.
    """
    if len(fields) < MIN_STAT_FIELDS:
        raise MalformedRecord(
            f"stat has {len(fields)} fields, at least {MIN_STAT_FIELDS} required"
        )
    return StatTimes(
        utime=_tick_field(fields, UTIME_INDEX, "utime"),
        stime=_tick_field(fields, STIME_INDEX, "stime"),
        starttime=_tick_field(fields, STARTTIME_INDEX, "starttime"),
    )


class StatFieldExtractor:
    """Reads /proc/<pid>/stat and extracts CPU accounting fields."""

    def __init__(self, reader: RawRecordReader | None = None) -> None:
        self._reader = reader if reader is not None else RawRecordReader()

    @property
    def reader(self) -> RawRecordReader:
        """Get the underlying reader."""
        return self._reader

    def fields(self, pid: int) -> list[str]:
        """Return the positional fields of the stat file of ``pid``."""
        return split_stat_fields(self._reader.read_pid_file(pid, "stat"))

    def cpu_times(self, pid: int) -> StatTimes:
        """
        Return the CPU tick counters of ``pid``.

        Raises:
            NotFound, PermissionDenied, ReadError: The file could not be read.
            MalformedRecord: The file content is not a valid stat line.
        """
        fields = self.fields(pid)
        try:
            return extract_cpu_times(fields)
        except MalformedRecord as exc:
            raise MalformedRecord(exc.msg, self._reader.pid_path(pid, "stat")) from None
