"""
Lifetime-average CPU usage of a process.

The figure is total CPU time consumed divided by the time elapsed since the
process started. It is not the current rate: a process that burned CPU
for a minute an hour ago and has slept since still reports a non-zero
value.

stat and uptime are read one after the other, not atomically. The few
microseconds between the reads make process age slightly too large, so the
result is biased very slightly low. This is accepted.
"""

import math

from procacct.clock import SystemClockInfo
from procacct.errors import ComputationError
from procacct.models import LifetimeCPUUsage, MilliValue, ProgramRunSec, StatTimes
from procacct.reader import RawRecordReader
from procacct.stat import StatFieldExtractor


def compute_lifetime_usage(
    times: StatTimes,
    uptime_seconds: float,
    ticks_per_second: int,
) -> LifetimeCPUUsage:
    """
    Combine stat ticks, uptime and tick rate into a LifetimeCPUUsage.

    Raises:
        ComputationError: Process age is zero or negative, e.g. clock skew
            or a start time later than the uptime reading.
    """
    if ticks_per_second <= 0:
        raise ComputationError(f"ticks_per_second must be positive, got {ticks_per_second}")

    current_ticks = uptime_seconds * ticks_per_second
    total_cpu_ticks = times.total_ticks
    process_age_ticks = current_ticks - times.starttime
    if process_age_ticks <= 0:
        raise ComputationError(
            f"process age is {process_age_ticks} ticks "
            f"(uptime {current_ticks} ticks, start {times.starttime} ticks)"
        )

    per_mille = math.floor(total_cpu_ticks * 1000 / process_age_ticks)
    runtime = total_cpu_ticks / ticks_per_second
    return LifetimeCPUUsage(per_mille=MilliValue(per_mille), runtime_seconds=ProgramRunSec(runtime))


class CPUUsageCalculator:
    """Computes lifetime-average CPU usage from /proc."""

    def __init__(
        self,
        extractor: StatFieldExtractor | None = None,
        clock: SystemClockInfo | None = None,
    ) -> None:
        self._extractor = extractor if extractor is not None else StatFieldExtractor()
        self._clock = clock if clock is not None else SystemClockInfo(self._extractor.reader)

    def lifetime_usage(self, pid: int) -> LifetimeCPUUsage:
        """
        Return the lifetime-average CPU usage of ``pid``.

        Errors from reading stat or uptime, or from the tick rate query,
        propagate unchanged.
        """
        times = self._extractor.cpu_times(pid)
        uptime = self._clock.system_uptime_seconds()
        ticks_per_second = self._clock.clock_ticks_per_second()
        return compute_lifetime_usage(times, uptime, ticks_per_second)


def lifetime_cpu_usage(pid: int, reader: RawRecordReader | None = None) -> LifetimeCPUUsage:
    """Compute lifetime CPU usage of ``pid`` with default collaborators."""
    return CPUUsageCalculator(StatFieldExtractor(reader)).lifetime_usage(pid)
