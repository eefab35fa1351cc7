"""Optional interactive front ends.

A front end is only an input source for yes/no answers and an output sink
for progress events. The engine runs unchanged with UnattendedFrontend.
"""

from __future__ import annotations

import logging
import os
import shutil
import sys
from typing import Optional, TextIO

from .answers import Question
from .lib.command import run_cmd
from .pipeline import ProvisionResult, Status

logger = logging.getLogger(__name__)

TITLE = "Nova Installer"


class UnattendedFrontend:
    interactive = False

    def ask(self, question: Question) -> bool:
        return question.default

    def notify(self, message: str) -> None:
        logger.info("%s", message)

    def step_started(self, step_id: str) -> None:
        logger.info("==> %s", step_id)

    def step_finished(self, result: ProvisionResult) -> None:
        if result.status is Status.FAILED:
            logger.error("<== %s %s: %s", result.step_name, result.status.value, result.detail)
        else:
            logger.info("<== %s %s", result.step_name, result.status.value)


class TerminalFrontend(UnattendedFrontend):
    """y/N prompts on the controlling terminal."""

    interactive = True

    def __init__(self, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None) -> None:
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout

    def ask(self, question: Question) -> bool:
        hint = "Y/n" if question.default else "y/N"
        self.stdout.write(f"\n{question.text}\nContinue? ({hint}): ")
        self.stdout.flush()
        reply = self.stdin.readline().strip().lower()
        if not reply:
            return question.default
        return reply.startswith("y")


class ZenityFrontend(UnattendedFrontend):
    interactive = True

    def ask(self, question: Question) -> bool:
        r = run_cmd(
            ["zenity", "--question", f"--title={TITLE}", f"--text={question.text}", "--width=400"],
            check=False,
        )
        return r.returncode == 0

    def notify(self, message: str) -> None:
        super().notify(message)
        run_cmd(["zenity", "--notification", f"--text={TITLE}: {message}"], check=False)

    def step_finished(self, result: ProvisionResult) -> None:
        super().step_finished(result)
        if result.status is Status.FAILED:
            run_cmd(
                ["zenity", "--error", f"--title={TITLE}", f"--text={result.step_name}: {result.detail}", "--width=400"],
                check=False,
            )


def select_frontend(mode: str = "auto"):
    """Pick a front end: zenity when a display is usable, a TTY prompt, or none."""

    if mode == "none":
        return UnattendedFrontend()
    if mode == "zenity":
        return ZenityFrontend()
    if mode == "terminal":
        return TerminalFrontend()

    if shutil.which("zenity") and (os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY")):
        return ZenityFrontend()
    if sys.stdin.isatty():
        return TerminalFrontend()
    return UnattendedFrontend()
