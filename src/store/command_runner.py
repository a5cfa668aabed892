"""External process execution.

This module is the single seam through which kubectl, etcdctl, and the
object codec are invoked. It works on raw bytes so binary store values
pass through untouched.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Callable, Sequence

from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Completed external process output.

    Attributes:
        args: Executed argument vector.
        returncode: Process exit status.
        stdout: Raw standard output bytes.
        stderr: Raw standard error bytes.
    """

    args: tuple[str, ...]
    returncode: int
    stdout: bytes
    stderr: bytes

    @property
    def ok(self) -> bool:
        """Whether the process exited successfully."""
        return self.returncode == 0

    @property
    def error_text(self) -> str:
        """Standard error decoded for operator messages."""
        return self.stderr.decode("utf-8", errors="replace").strip()


CommandRunner = Callable[[Sequence[str], bytes | None], CommandResult]


class SubprocessRunner:
    """Run commands with ``subprocess.run`` and a fixed timeout."""

    def __init__(self, timeout_seconds: float | None) -> None:
        self._timeout_seconds = timeout_seconds

    def __call__(self, args: Sequence[str], stdin: bytes | None = None) -> CommandResult:
        """Run one command to completion.

        Args:
            args: Argument vector, executable first.
            stdin: Optional bytes fed to standard input.

        Returns:
            Completed command output. A missing executable or a timeout is
            reported as a failed result with the reason on stderr.
        """
        argv = tuple(args)
        _LOGGER.debug("command_started", command=argv[0], arg_count=len(argv))
        try:
            completed = subprocess.run(
                argv,
                input=stdin if stdin is not None else b"",
                capture_output=True,
                check=False,
                timeout=self._timeout_seconds,
            )
        except FileNotFoundError as error:
            return CommandResult(argv, 127, b"", f"{argv[0]}: {error.strerror}".encode())
        except subprocess.TimeoutExpired:
            return CommandResult(
                argv,
                124,
                b"",
                f"{argv[0]}: timed out after {self._timeout_seconds} seconds".encode(),
            )
        return CommandResult(argv, completed.returncode, completed.stdout, completed.stderr)
