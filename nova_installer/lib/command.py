from __future__ import annotations

import logging
import os
import shlex
import subprocess
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Mapping, Optional, Sequence

from ..errors import CommandError, CommandTimeout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def _fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
    input_text: str | None = None,
    timeout: float | None = None,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - Captures stdout/stderr so failures can be reported with diagnostics.
    - timeout raises CommandTimeout (regardless of check).
    - dry_run logs but does not execute.
    """

    argv_list = list(argv)
    logger.info("CMD %s", _fmt_argv(argv_list))

    if dry_run:
        return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

    try:
        p = subprocess.run(
            argv_list,
            input=input_text,
            text=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=cwd,
            env=dict(os.environ, **(env or {})),
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        partial = CmdResult(
            argv=argv_list,
            returncode=-1,
            stdout=_decode(e.stdout),
            stderr=_decode(e.stderr),
        )
        raise CommandTimeout(f"Command timed out after {timeout:.0f}s: {_fmt_argv(argv_list)}", partial) from e
    except FileNotFoundError as e:
        missing = CmdResult(argv=argv_list, returncode=127, stdout="", stderr=str(e))
        if check:
            raise CommandError(f"Command not found: {argv_list[0]}", missing) from e
        return missing

    if p.stdout:
        logger.debug("STDOUT %s", p.stdout.strip())
    if p.stderr:
        logger.debug("STDERR %s", p.stderr.strip())

    result = CmdResult(argv=argv_list, returncode=p.returncode, stdout=p.stdout, stderr=p.stderr)
    if check and p.returncode != 0:
        raise CommandError(f"Command failed ({p.returncode}): {_fmt_argv(argv_list)}", result)

    return result


def _decode(data: bytes | str | None) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


class CommandRunner:
    """run_cmd bound to run-wide settings and an optional per-step deadline."""

    def __init__(self, *, dry_run: bool = False) -> None:
        self.dry_run = dry_run
        self._deadline: Optional[float] = None

    @contextmanager
    def deadline(self, seconds: float | None) -> Iterator[None]:
        """Bound every command started inside the block by a shared budget."""

        previous = self._deadline
        self._deadline = None if seconds is None else time.monotonic() + seconds
        try:
            yield
        finally:
            self._deadline = previous

    def _remaining(self, argv: Sequence[str]) -> float | None:
        if self._deadline is None:
            return None
        remaining = self._deadline - time.monotonic()
        if remaining <= 0:
            raise CommandTimeout(
                f"Step time budget exhausted before: {_fmt_argv(argv)}",
                CmdResult(argv=list(argv), returncode=-1, stdout="", stderr=""),
            )
        return remaining

    def run(
        self,
        argv: Sequence[str],
        *,
        check: bool = True,
        env: Mapping[str, str] | None = None,
        input_text: str | None = None,
    ) -> CmdResult:
        return run_cmd(
            argv,
            check=check,
            env=env,
            input_text=input_text,
            timeout=self._remaining(argv),
            dry_run=self.dry_run,
        )

    def query(self, argv: Sequence[str], *, env: Mapping[str, str] | None = None) -> CmdResult:
        """Read-only probe: always executed, even in dry-run, never raises on exit status."""

        return run_cmd(argv, check=False, env=env, timeout=self._remaining(argv))
