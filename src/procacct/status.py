"""
Parser for /proc/<pid>/status.

The status file is a list of ``Key:<whitespace>Value`` lines. Which keys
appear depends on the kernel version, so the parser is lenient per field:
a missing or garbled field keeps its zero value and the problem is
reported through FieldOutcome instead of failing the whole record.
"""

import re
from collections.abc import Callable, Iterable
from enum import Enum
from types import MappingProxyType
from typing import Any

from procacct.models import FieldOutcome, ProcStatus, StatusParseResult
from procacct.reader import RawRecordReader

_INT_RE = re.compile(r"[+-]?\d+", re.ASCII)
_COUNT_RE = re.compile(r"\d+", re.ASCII)
_STATE_RE = re.compile(r"\((.*?)\)")
_UNIT_SUFFIX = "kB"


class FieldKind(Enum):
    """How a status value is converted."""

    STRING = "string"
    INT = "int"
    COUNT = "count"
    INT_LIST = "int_list"
    STATE = "state"


# kernel key -> (ProcStatus attribute, kind)
STATUS_FIELDS: dict[str, tuple[str, FieldKind]] = {
    "Name": ("name", FieldKind.STRING),
    "Umask": ("umask", FieldKind.STRING),
    "State": ("state", FieldKind.STATE),
    "Tgid": ("tgid", FieldKind.INT),
    "Ngid": ("ngid", FieldKind.INT),
    "Pid": ("pid", FieldKind.INT),
    "PPid": ("ppid", FieldKind.INT),
    "TracerPid": ("tracer_pid", FieldKind.INT),
    "Uid": ("uid", FieldKind.INT_LIST),
    "Gid": ("gid", FieldKind.INT_LIST),
    "FDSize": ("fd_size", FieldKind.COUNT),
    "Groups": ("groups", FieldKind.INT_LIST),
    "VmPeak": ("vm_peak", FieldKind.COUNT),
    "VmSize": ("vm_size", FieldKind.COUNT),
    "VmLck": ("vm_lck", FieldKind.COUNT),
    "VmPin": ("vm_pin", FieldKind.COUNT),
    "VmHWM": ("vm_hwm", FieldKind.COUNT),
    "VmRSS": ("vm_rss", FieldKind.COUNT),
    "RssAnon": ("rss_anon", FieldKind.COUNT),
    "RssFile": ("rss_file", FieldKind.COUNT),
    "RssShmem": ("rss_shmem", FieldKind.COUNT),
    "VmData": ("vm_data", FieldKind.COUNT),
    "VmStk": ("vm_stk", FieldKind.COUNT),
    "VmExe": ("vm_exe", FieldKind.COUNT),
    "VmLib": ("vm_lib", FieldKind.COUNT),
    "VmPTE": ("vm_pte", FieldKind.COUNT),
    "VmSwap": ("vm_swap", FieldKind.COUNT),
    "Threads": ("threads", FieldKind.COUNT),
}


def _convert_string(value: str) -> tuple[str, bool]:
    return value, True


def _convert_int(value: str) -> tuple[int, bool]:
    if _INT_RE.fullmatch(value):
        return int(value), True
    return 0, False


def _convert_count(value: str) -> tuple[int, bool]:
    # Memory sizes carry a unit: "VmRSS:\t  1234 kB"
    if value.endswith(_UNIT_SUFFIX):
        value = value[: -len(_UNIT_SUFFIX)].rstrip()
    if _COUNT_RE.fullmatch(value):
        return int(value), True
    return 0, False


def _convert_int_list(value: str) -> tuple[tuple[int, ...], bool]:
    numbers = []
    clean = True
    for token in value.split():
        if _INT_RE.fullmatch(token):
            numbers.append(int(token))
        else:
            clean = False
    return tuple(numbers), clean


def _convert_state(value: str) -> tuple[str, bool]:
    match = _STATE_RE.search(value)
    if match is None:
        return "", False
    return match.group(1), True


_CONVERTERS: dict[FieldKind, Callable[[str], tuple[Any, bool]]] = {
    FieldKind.STRING: _convert_string,
    FieldKind.INT: _convert_int,
    FieldKind.COUNT: _convert_count,
    FieldKind.INT_LIST: _convert_int_list,
    FieldKind.STATE: _convert_state,
}


def parse_status_lines(lines: Iterable[str]) -> StatusParseResult:
    """
    Parse the lines of a status file in a single pass.

    Args:
        lines: Lines of /proc/<pid>/status, with or without newlines.

    Returns:
        StatusParseResult with the record and one outcome per modelled key.
    """
    values: dict[str, Any] = {}
    outcomes = dict.fromkeys(STATUS_FIELDS, FieldOutcome.ABSENT)

    for line in lines:
        key, sep, raw = line.partition(":")
        if not sep:
            continue
        key = key.strip()
        spec = STATUS_FIELDS.get(key)
        if spec is None:
            continue

        attr, kind = spec
        value, ok = _CONVERTERS[kind](raw.strip())
        values[attr] = value
        outcomes[key] = FieldOutcome.PARSED if ok else FieldOutcome.MALFORMED

    return StatusParseResult(
        status=ProcStatus(**values),
        outcomes=MappingProxyType(outcomes),
    )


def parse_status_text(text: str) -> ProcStatus:
    """Parse the full text of a status file into a ProcStatus."""
    return parse_status_lines(text.splitlines()).status


class StatusFieldParser:
    """Reads and parses /proc/<pid>/status."""

    def __init__(self, reader: RawRecordReader | None = None) -> None:
        self._reader = reader if reader is not None else RawRecordReader()

    def parse(self, pid: int) -> ProcStatus:
        """
        Read the status file of ``pid``.

        Raises:
            NotFound: The process does not exist.
            PermissionDenied: The file is not readable.
            ReadError: Any other I/O failure.
        """
        return self.parse_detailed(pid).status

    def parse_detailed(self, pid: int) -> StatusParseResult:
        """Like parse(), but also report which fields were absent or garbled."""
        text = self._reader.read_pid_file(pid, "status")
        return parse_status_lines(text.splitlines())


def parse_proc_status(pid: int, reader: RawRecordReader | None = None) -> ProcStatus:
    """Read /proc/<pid>/status with a default reader."""
    return StatusFieldParser(reader).parse(pid)
