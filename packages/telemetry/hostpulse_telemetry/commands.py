"""Bounded external command execution."""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import Sequence

logger = logging.getLogger("hostpulse.commands")

DEFAULT_TIMEOUT_S = 10.0


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


def which(name: str) -> str | None:
    return shutil.which(name)


def run_command(cmd: Sequence[str], timeout: float = DEFAULT_TIMEOUT_S) -> CommandResult:
    """Run ``cmd`` without a shell and return its captured output.

    A missing binary, a non-zero exit or an expired timeout never raise; they
    come back as a result whose ``ok`` is false. A hung tool costs at most
    ``timeout`` seconds.
    """
    try:
        proc = subprocess.run(
            list(cmd),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=timeout,
            text=True,
            check=False,
        )
    except subprocess.TimeoutExpired:
        logger.warning("command timed out after %ss: %s", timeout, cmd[0])
        return CommandResult(returncode=124, stdout="", stderr=f"timed out after {timeout}s", timed_out=True)
    except (FileNotFoundError, PermissionError) as exc:
        logger.debug("command not runnable: %s (%s)", cmd[0], exc)
        return CommandResult(returncode=127, stdout="", stderr=str(exc))
    except OSError as exc:
        logger.warning("command failed to start: %s (%s)", cmd[0], exc)
        return CommandResult(returncode=1, stdout="", stderr=str(exc))
    return CommandResult(returncode=proc.returncode, stdout=proc.stdout.strip(), stderr=proc.stderr.strip())
