"""Direct children of a process from /proc/<pid>/task/<pid>/children."""

from procacct.errors import MalformedRecord
from procacct.reader import RawRecordReader


def parse_children(text: str) -> list[int]:
    """
    Parse a children file into pids, in kernel order.

    Raises:
        MalformedRecord: A token is not a pid. There is no partial result.
    """
    pids = []
    for token in text.split():
        if not (token.isascii() and token.isdigit()):
            raise MalformedRecord(f"children entry is not a pid: {token!r}")
        pids.append(int(token))
    return pids


class ChildPIDLister:
    """Lists the direct children of a process."""

    def __init__(self, reader: RawRecordReader | None = None) -> None:
        self._reader = reader if reader is not None else RawRecordReader()

    def children(self, pid: int) -> list[int]:
        """Return the direct child pids of ``pid``."""
        text = self._reader.read_pid_file(pid, "task", str(pid), "children")
        try:
            return parse_children(text)
        except MalformedRecord as exc:
            path = self._reader.pid_path(pid, "task", str(pid), "children")
            raise MalformedRecord(exc.msg, path) from None


def child_pids(pid: int, reader: RawRecordReader | None = None) -> list[int]:
    """List the direct children of ``pid`` with a default reader."""
    return ChildPIDLister(reader).children(pid)
