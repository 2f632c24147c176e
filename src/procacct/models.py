"""Data models for procacct."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import NewType

MilliValue = NewType("MilliValue", int)
ProgramRunSec = NewType("ProgramRunSec", float)


@dataclass(slots=True, frozen=True)
class ProcStatus:
    """Immutable snapshot of /proc/<pid>/status.

    Memory sizes are in KiB. Fields missing from the source file keep
    their zero value.
    """

    name: str = ""
    umask: str = ""
    state: str = ""  # 'running', 'sleeping', ...
    tgid: int = 0
    ngid: int = 0
    pid: int = 0
    ppid: int = 0
    tracer_pid: int = 0
    uid: tuple[int, ...] = ()  # real, effective, saved, filesystem
    gid: tuple[int, ...] = ()
    fd_size: int = 0
    groups: tuple[int, ...] = ()
    vm_peak: int = 0
    vm_size: int = 0
    vm_lck: int = 0
    vm_pin: int = 0
    vm_hwm: int = 0
    vm_rss: int = 0
    rss_anon: int = 0
    rss_file: int = 0
    rss_shmem: int = 0
    vm_data: int = 0
    vm_stk: int = 0
    vm_exe: int = 0
    vm_lib: int = 0
    vm_pte: int = 0
    vm_swap: int = 0
    threads: int = 0


class FieldOutcome(Enum):
    """What happened to one status field during parsing."""

    PARSED = "parsed"
    ABSENT = "absent"
    MALFORMED = "malformed"


@dataclass(slots=True, frozen=True)
class StatusParseResult:
    """A parsed ProcStatus together with the outcome of every modelled key."""

    status: ProcStatus
    outcomes: Mapping[str, FieldOutcome] = field(hash=False)

    def absent(self) -> list[str]:
        """Kernel keys not present in the source file."""
        return [key for key, outcome in self.outcomes.items() if outcome is FieldOutcome.ABSENT]

    def malformed(self) -> list[str]:
        """Kernel keys present in the source file but not fully parsable."""
        return [key for key, outcome in self.outcomes.items() if outcome is FieldOutcome.MALFORMED]


@dataclass(slots=True, frozen=True)
class StatTimes:
    """CPU accounting fields of /proc/<pid>/stat, in clock ticks."""

    utime: int
    stime: int
    starttime: int

    @property
    def total_ticks(self) -> int:
        """User plus kernel ticks consumed by the process."""
        return self.utime + self.stime


@dataclass(slots=True, frozen=True)
class LifetimeCPUUsage:
    """
    Average CPU usage over the whole life of a process.

    This is total CPU time consumed divided by total time elapsed since the
    process started. It is not the current rate; two snapshots and a delta
    are needed for that.
    """

    per_mille: MilliValue  # 1000 == one full CPU
    runtime_seconds: ProgramRunSec  # user + system CPU time

    @property
    def percent(self) -> float:
        """Usage as a percentage of one CPU."""
        return self.per_mille / 10
