"""System clock information: tick rate and uptime."""

import math
import os
from functools import lru_cache

from procacct.errors import ConfigurationError, MalformedRecord
from procacct.reader import RawRecordReader


@lru_cache(maxsize=1)
def clock_ticks_per_second() -> int:
    """
    Return the kernel's scheduler tick rate (usually 100).

    The value is fixed for the life of the host, so the first successful
    query is cached. A failed query raises and is retried on the next call.

    Raises:
        ConfigurationError: sysconf(SC_CLK_TCK) failed or was not positive.
    """
    try:
        ticks = os.sysconf("SC_CLK_TCK")
    except (ValueError, OSError) as exc:
        raise ConfigurationError(f"cannot query SC_CLK_TCK: {exc}") from exc
    if ticks <= 0:
        raise ConfigurationError(f"SC_CLK_TCK returned {ticks}")
    return ticks


def parse_uptime(text: str) -> float:
    """
    Parse the first field of /proc/uptime as seconds since boot.

    Raises:
        MalformedRecord: No field, or the field is not a finite non-negative number.
    """
    fields = text.split()
    if not fields:
        raise MalformedRecord("uptime is empty")
    try:
        seconds = float(fields[0])
    except ValueError:
        raise MalformedRecord(f"uptime is not a number: {fields[0]!r}") from None
    if not math.isfinite(seconds) or seconds < 0:
        raise MalformedRecord(f"uptime out of range: {fields[0]!r}")
    return seconds


class SystemClockInfo:
    """Supplies the clock tick rate and the current uptime."""

    def __init__(
        self,
        reader: RawRecordReader | None = None,
        ticks_per_second: int | None = None,
    ) -> None:
        """
        Initialize SystemClockInfo.

        Args:
            reader: Reader used for /proc/uptime.
            ticks_per_second: Fixed tick rate to use instead of querying the host.
        """
        if ticks_per_second is not None and ticks_per_second <= 0:
            raise ConfigurationError(f"ticks_per_second must be positive, got {ticks_per_second}")
        self._reader = reader if reader is not None else RawRecordReader()
        self._ticks_per_second = ticks_per_second

    def clock_ticks_per_second(self) -> int:
        """Return the tick rate."""
        if self._ticks_per_second is not None:
            return self._ticks_per_second
        return clock_ticks_per_second()

    def system_uptime_seconds(self) -> float:
        """
        Return seconds since boot from /proc/uptime.

        Raises:
            NotFound, PermissionDenied, ReadError: The file could not be read.
            MalformedRecord: The content is not a valid uptime.
        """
        text = self._reader.read_system_file("uptime")
        try:
            return parse_uptime(text)
        except MalformedRecord as exc:
            raise MalformedRecord(exc.msg, self._reader.root / "uptime") from None
