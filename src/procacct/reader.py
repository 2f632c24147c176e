"""Raw access to /proc pseudo-files."""

from pathlib import Path

from procacct.config import ProcfsConfig
from procacct.errors import NotFound, PermissionDenied, ProcfsError, ReadError


class RawRecordReader:
    """
    Reads /proc pseudo-files as text.

    Every read opens the file, reads it fully and closes it before
    returning. No handles are kept between calls, so one reader can be
    shared freely between threads.
    """

    def __init__(self, config: ProcfsConfig | None = None) -> None:
        """
        Initialize the reader.

        Args:
            config: Filesystem settings. Defaults to ProcfsConfig().
        """
        self._config = config if config is not None else ProcfsConfig()

    @property
    def config(self) -> ProcfsConfig:
        """Get the reader configuration."""
        return self._config

    @property
    def root(self) -> Path:
        """Get the /proc mount point being read."""
        return self._config.root

    def pid_path(self, pid: int, *parts: str) -> Path:
        """Return the path of a per-process file, e.g. ``<root>/<pid>/stat``."""
        _check_pid(pid)
        return self._config.root.joinpath(str(pid), *parts)

    def read_pid_file(self, pid: int, *parts: str) -> str:
        """
        Read a per-process file.

        Args:
            pid: Process ID whose directory is read.
            parts: Path components below ``<root>/<pid>``.

        Returns:
            The full file content.

        Raises:
            NotFound: The process or file does not exist.
            PermissionDenied: The file is not readable by this process.
            ReadError: Any other I/O failure.
        """
        return self._read(self.pid_path(pid, *parts))

    def read_system_file(self, *parts: str) -> str:
        """Read a system-wide file such as ``<root>/uptime``."""
        return self._read(self._config.root.joinpath(*parts))

    def _read(self, path: Path) -> str:
        try:
            with open(path, encoding=self._config.encoding, errors=self._config.errors) as f:
                return f.read()
        except OSError as exc:
            raise _translate_os_error(exc, path) from exc


def _check_pid(pid: int) -> None:
    # bool is an int subclass but never a valid pid
    if isinstance(pid, bool) or not isinstance(pid, int):
        raise ValueError(f"pid must be an int, got {pid!r}")
    if pid < 0:
        raise ValueError(f"pid must be non-negative, got {pid}")


def _translate_os_error(exc: OSError, path: Path) -> ProcfsError:
    """Map an OSError raised while reading ``path`` to a procacct error."""
    reason = exc.strerror or str(exc)
    if isinstance(exc, (FileNotFoundError, ProcessLookupError, NotADirectoryError)):
        return NotFound(reason, path)
    if isinstance(exc, PermissionError):
        return PermissionDenied(reason, path)
    return ReadError(reason, path)
