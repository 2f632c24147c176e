"""Configuration for procacct readers."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

PROC_ROOT_ENV = "PROCACCT_PROC_ROOT"
DEFAULT_PROC_ROOT = Path("/proc")


@dataclass(slots=True, frozen=True)
class ProcfsConfig:
    """Where and how to read the /proc filesystem."""

    root: Path = field(default=DEFAULT_PROC_ROOT)
    encoding: str = "utf-8"
    # Process names are arbitrary bytes; never fail a read over them
    errors: str = "surrogateescape"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ProcfsConfig":
        """
        Build a config from environment variables.

        Args:
            environ: Mapping to read from. Defaults to os.environ.

        Returns:
            ProcfsConfig with ``root`` taken from PROCACCT_PROC_ROOT when set.
        """
        env = os.environ if environ is None else environ
        root = env.get(PROC_ROOT_ENV, "").strip()
        if not root:
            return cls()
        return cls(root=Path(root))
