from __future__ import annotations

import logging
from typing import List

from ..errors import ServiceManagerError
from .command import CommandRunner

logger = logging.getLogger(__name__)

# `systemctl is-enabled` answers for a unit file that does not exist.
NOT_FOUND = "not-found"

_UNREACHABLE_HINTS = (
    "failed to connect to bus",
    "system has not been booted with systemd",
)


def _scope_args(scope: str) -> List[str]:
    if scope == "system":
        return []
    if scope == "global":
        return ["--global"]
    raise ValueError(f"scope must be system|global, got {scope}")


class SystemdServiceManager:
    def __init__(self, commands: CommandRunner) -> None:
        self.commands = commands

    def state(self, unit: str, *, scope: str = "system") -> str:
        """Return the `systemctl is-enabled` state (enabled, disabled, static, not-found, ...)."""

        r = self.commands.query(["systemctl", *_scope_args(scope), "is-enabled", unit])
        out = r.stdout.strip().splitlines()
        if out:
            return out[-1].strip()

        err = r.stderr.strip()
        if r.returncode == 127 or any(h in err.lower() for h in _UNREACHABLE_HINTS):
            raise ServiceManagerError(f"systemctl unavailable: {err or 'exit ' + str(r.returncode)}")
        if any(h in err.lower() for h in ("not found", "does not exist", "no such file or directory")):
            return NOT_FOUND
        raise ServiceManagerError(f"systemctl is-enabled {unit} gave no state (exit {r.returncode}): {err}")

    def enable(self, unit: str, *, scope: str = "system") -> None:
        self.commands.run(["systemctl", *_scope_args(scope), "enable", unit])

    def disable(self, unit: str, *, scope: str = "system") -> None:
        self.commands.run(["systemctl", *_scope_args(scope), "disable", unit])
