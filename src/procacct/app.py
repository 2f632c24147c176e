"""procacct - one-shot process inspector built on Textual."""

import argparse
import dataclasses
import json
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.logging import TextualHandler
from textual.widgets import DataTable, Footer, Static

from procacct.children import ChildPIDLister
from procacct.config import ProcfsConfig
from procacct.cpu import CPUUsageCalculator
from procacct.errors import NotFound, ProcfsError
from procacct.logging_config import setup_logging
from procacct.models import LifetimeCPUUsage, ProcStatus
from procacct.reader import RawRecordReader
from procacct.stat import StatFieldExtractor
from procacct.status import StatusFieldParser

logger = logging.getLogger(__name__)

# (label, ProcStatus attribute) in display order
MEMORY_ROWS = [
    ("VmPeak", "vm_peak"),
    ("VmSize", "vm_size"),
    ("VmHWM", "vm_hwm"),
    ("VmRSS", "vm_rss"),
    ("RssAnon", "rss_anon"),
    ("RssFile", "rss_file"),
    ("RssShmem", "rss_shmem"),
    ("VmData", "vm_data"),
    ("VmStk", "vm_stk"),
    ("VmExe", "vm_exe"),
    ("VmLib", "vm_lib"),
    ("VmPTE", "vm_pte"),
    ("VmLck", "vm_lck"),
    ("VmPin", "vm_pin"),
    ("VmSwap", "vm_swap"),
]


def format_kib(size: int) -> str:
    """Format a KiB count as a human-readable string."""
    value = float(size)
    for unit in ["K", "M", "G", "T"]:
        if value < 1024:
            return f"{int(value):5d}{unit}" if unit == "K" else f"{value:5.1f}{unit}"
        value = value / 1024
    return f"{value:.1f}P"


@dataclass(slots=True)
class InspectorSnapshot:
    """Everything procacct knows about one process at one instant."""

    pid: int
    status: ProcStatus | None = None
    cpu: LifetimeCPUUsage | None = None
    children: list[int] | None = None
    errors: dict[str, str] = field(default_factory=dict)
    found: bool = True  # False once the process itself is gone


class ProcessInspector:
    """Takes InspectorSnapshots through the procacct components."""

    def __init__(self, reader: RawRecordReader | None = None) -> None:
        self._reader = reader if reader is not None else RawRecordReader()
        self._status = StatusFieldParser(self._reader)
        self._cpu = CPUUsageCalculator(StatFieldExtractor(self._reader))
        self._children = ChildPIDLister(self._reader)

    def snapshot(self, pid: int) -> InspectorSnapshot:
        """
        Read status, CPU usage and children of ``pid``.

        A failure in one section is recorded in ``errors`` and does not stop
        the other sections from being read.
        """
        snap = InspectorSnapshot(pid=pid)
        sections = [
            ("status", self._status.parse),
            ("cpu", self._cpu.lifetime_usage),
            ("children", self._children.children),
        ]
        for name, read in sections:
            try:
                setattr(snap, name, read(pid))
            except NotFound as exc:
                # Routine: the process exited or the kernel lacks the file
                logger.info("pid %d: %s unavailable: %s", pid, name, exc)
                snap.errors[name] = f"not found: {exc}"
                if name == "status":
                    snap.found = False
            except ProcfsError as exc:
                logger.warning("pid %d: reading %s failed: %s", pid, name, exc)
                snap.errors[name] = f"{type(exc).__name__}: {exc}"
        logger.debug("pid %d snapshot: %d section(s) failed", pid, len(snap.errors))
        return snap


def snapshot_to_dict(snap: InspectorSnapshot) -> dict:
    """Convert a snapshot into JSON-serializable data."""
    cpu = None
    if snap.cpu is not None:
        cpu = {
            "per_mille": snap.cpu.per_mille,
            "percent": snap.cpu.percent,
            "runtime_seconds": snap.cpu.runtime_seconds,
        }
    return {
        "pid": snap.pid,
        "status": dataclasses.asdict(snap.status) if snap.status is not None else None,
        "cpu": cpu,
        "children": snap.children,
        "errors": snap.errors,
    }


def render_json(snap: InspectorSnapshot) -> str:
    """Render a snapshot as a JSON document."""
    # surrogateescape'd names are not valid UTF-8; keep them ASCII-escaped
    return json.dumps(snapshot_to_dict(snap), indent=2, ensure_ascii=True)


class IdentityPanel(Static):
    """Header widget showing identity and CPU usage of the process."""

    DEFAULT_CSS = """
    IdentityPanel {
        height: auto;
        min-height: 5;
        padding: 1;
        background: $surface;
    }
    """

    def show(self, snap: InspectorSnapshot) -> None:
        """Render a snapshot into the panel."""
        self.update(self.describe(snap))

    @staticmethod
    def describe(snap: InspectorSnapshot) -> str:
        """Build the panel text for a snapshot."""
        if snap.status is None:
            return f"PID {snap.pid}: {snap.errors.get('status', 'no data')}"

        st = snap.status
        lines = [
            f"PID {st.pid}  {st.name}  ({st.state or '?'})",
            f"PPid {st.ppid}  Tgid {st.tgid}  Threads {st.threads}  FDSize {st.fd_size}",
            f"Uid {' '.join(map(str, st.uid))}  Gid {' '.join(map(str, st.gid))}",
        ]
        if snap.cpu is not None:
            lines.append(
                f"Lifetime CPU {snap.cpu.percent:5.1f}%  "
                f"runtime {snap.cpu.runtime_seconds:.2f}s"
            )
        else:
            lines.append(f"Lifetime CPU: {snap.errors.get('cpu', 'no data')}")
        return "\n".join(lines)


class MemoryTable(Container):
    """Container for the memory table."""

    DEFAULT_CSS = """
    MemoryTable {
        width: 1fr;
        border: solid $primary;
    }
    """

    def compose(self) -> ComposeResult:
        """Compose the memory table."""
        yield DataTable(id="memory-table")

    def on_mount(self) -> None:
        """Set up columns when mounted."""
        table = self.query_one("#memory-table", DataTable)
        table.cursor_type = "none"
        table.add_column("Field", key="field", width=10)
        table.add_column("Size", key="size", width=10)

    def show(self, status: ProcStatus | None) -> None:
        """Fill the table from a status record."""
        table = self.query_one("#memory-table", DataTable)
        table.clear()
        if status is None:
            return
        for label, attr in MEMORY_ROWS:
            table.add_row(label, format_kib(getattr(status, attr)), key=label)


class ChildTable(Container):
    """Container for the direct-children table."""

    DEFAULT_CSS = """
    ChildTable {
        width: 1fr;
        border: solid $primary;
    }
    """

    def compose(self) -> ComposeResult:
        """Compose the children table."""
        yield DataTable(id="children-table")

    def on_mount(self) -> None:
        """Set up columns when mounted."""
        table = self.query_one("#children-table", DataTable)
        table.cursor_type = "row"
        table.add_column("Child PID", key="pid", width=10)

    def show(self, children: list[int] | None) -> None:
        """Fill the table with child pids."""
        table = self.query_one("#children-table", DataTable)
        table.clear()
        for pid in children or []:
            table.add_row(str(pid), key=str(pid))


class ProcInspectorApp(App):
    """Shows one snapshot of one process; refreshes only on request."""

    TITLE = "procacct"
    SUB_TITLE = "Process Accounting Inspector"

    CSS = """
    Screen {
        layout: vertical;
    }

    #identity {
        dock: top;
    }

    Horizontal {
        height: 1fr;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("r", "refresh_snapshot", "Refresh"),
        ("u", "parent", "Parent"),
    ]

    def __init__(self, pid: int, reader: RawRecordReader | None = None) -> None:
        """
        Initialize the app.

        Args:
            pid: Process to inspect first.
            reader: Reader to use, e.g. one pointed at a fixture tree.
        """
        super().__init__()
        self._target_pid = pid
        self._inspector = ProcessInspector(reader)
        self.last_snapshot: InspectorSnapshot | None = None

    @property
    def target_pid(self) -> int:
        """Get the pid currently shown."""
        return self._target_pid

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield IdentityPanel(id="identity")
        yield Horizontal(MemoryTable(), ChildTable())
        yield Footer()

    def on_mount(self) -> None:
        """Take the first snapshot."""
        self.call_after_refresh(self.inspect, self._target_pid)

    def inspect(self, pid: int) -> None:
        """Switch to ``pid`` and take a snapshot of it."""
        self._target_pid = pid
        self.last_snapshot = self._inspector.snapshot(pid)
        self.sub_title = f"PID {pid}"

        self.query_one(IdentityPanel).show(self.last_snapshot)
        self.query_one(MemoryTable).show(self.last_snapshot.status)
        self.query_one(ChildTable).show(self.last_snapshot.children)

        if not self.last_snapshot.found:
            self.notify(f"Process {pid} not found", severity="warning")
        elif self.last_snapshot.errors:
            self.notify("; ".join(self.last_snapshot.errors.values()), severity="warning")

    def action_refresh_snapshot(self) -> None:
        """Take a new snapshot of the current pid."""
        self.inspect(self._target_pid)

    def action_parent(self) -> None:
        """Move to the parent process."""
        status = self.last_snapshot.status if self.last_snapshot is not None else None
        if status is None or status.ppid == 0:
            self.notify("No parent process")
            return
        self.inspect(status.ppid)

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        """Move to the selected child."""
        if event.data_table.id != "children-table" or event.row_key.value is None:
            return
        self.inspect(int(event.row_key.value))


def _pid_arg(value: str) -> int:
    """argparse type for a process id."""
    try:
        pid = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid pid: {value!r}") from None
    if pid < 0:
        raise argparse.ArgumentTypeError(f"pid must be non-negative, got {pid}")
    return pid


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="procacct",
        description="Inspect /proc accounting data of one process.",
    )
    parser.add_argument("pid", nargs="?", type=_pid_arg, default=os.getpid(), help="process id (default: self)")
    parser.add_argument("--proc-root", default=None, help="procfs mount point (default: $PROCACCT_PROC_ROOT or /proc)")
    parser.add_argument("--json", action="store_true", help="print one JSON snapshot and exit")
    parser.add_argument("--log-level", default="INFO", help="DEBUG, INFO, WARNING or ERROR")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the procacct command."""
    args = build_parser().parse_args(argv)

    config = ProcfsConfig.from_env()
    if args.proc_root:
        config = dataclasses.replace(config, root=Path(args.proc_root))
    reader = RawRecordReader(config)

    if args.json:
        setup_logging(args.log_level)
        snap = ProcessInspector(reader).snapshot(args.pid)
        sys.stdout.write(render_json(snap) + "\n")
        return 0 if snap.found else 1

    setup_logging(args.log_level, handler=TextualHandler())
    ProcInspectorApp(args.pid, reader).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
