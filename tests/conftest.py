"""Shared fixtures: fake /proc trees built under tmp_path."""

from pathlib import Path

import pytest

from procacct.config import ProcfsConfig
from procacct.reader import RawRecordReader

SAMPLE_STATUS = """\
Name:\tbash
Umask:\t0022
State:\tS (sleeping)
Tgid:\t4242
Ngid:\t0
Pid:\t4242
PPid:\t1
TracerPid:\t0
Uid:\t1000\t1000\t1000\t1000
Gid:\t1000\t1000\t1000\t1000
FDSize:\t256
Groups:\t4 24 27 1000 
NStgid:\t4242
VmPeak:\t   11700 kB
VmSize:\t   11640 kB
VmLck:\t       0 kB
VmPin:\t       0 kB
VmHWM:\t    5412 kB
VmRSS:\t    5300 kB
RssAnon:\t    1900 kB
RssFile:\t    3400 kB
RssShmem:\t       0 kB
VmData:\t    2100 kB
VmStk:\t     132 kB
VmExe:\t     892 kB
VmLib:\t    1980 kB
VmPTE:\t      60 kB
VmSwap:\t       0 kB
HugetlbPages:\t       0 kB
Threads:\t1
SigQ:\t0/62811
Cpus_allowed_list:\t0-7
"""

# utime=100 stime=50 starttime=200
SAMPLE_STAT = (
    "4242 (bash) S 1 4242 4242 34816 4300 4194304 2000 0 0 0 "
    "100 50 0 0 20 0 1 0 200 11919360 1325 18446744073709551615\n"
)


class ProcTree:
    """Writes fake /proc files under a temporary root."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def write(self, relative: str, content: str) -> Path:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    def add_process(
        self,
        pid: int,
        status: str | None = SAMPLE_STATUS,
        stat: str | None = SAMPLE_STAT,
        children: str | None = "",
    ) -> None:
        (self.root / str(pid)).mkdir(parents=True, exist_ok=True)
        if status is not None:
            self.write(f"{pid}/status", status)
        if stat is not None:
            self.write(f"{pid}/stat", stat)
        if children is not None:
            self.write(f"{pid}/task/{pid}/children", children)

    def set_uptime(self, seconds: float, idle: float = 0.0) -> None:
        self.write("uptime", f"{seconds:.2f} {idle:.2f}\n")

    def reader(self) -> RawRecordReader:
        return RawRecordReader(ProcfsConfig(root=self.root))


@pytest.fixture
def proc_tree(tmp_path: Path) -> ProcTree:
    """An empty fake /proc with uptime 10.0s."""
    tree = ProcTree(tmp_path / "proc")
    tree.root.mkdir()
    tree.set_uptime(10.0)
    return tree
