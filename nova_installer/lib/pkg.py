from __future__ import annotations

import logging
from typing import List, Sequence

from .command import CommandRunner

logger = logging.getLogger(__name__)

APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


def _simulated(stdout: str, action: str) -> List[str]:
    """Package names from `apt-get -s` lines such as 'Inst foo [1.0] (1.1 ...)'."""

    out: List[str] = []
    for line in stdout.splitlines():
        parts = line.split()
        if len(parts) >= 2 and parts[0] == action:
            out.append(parts[1])
    return out


class AptPackageManager:
    """apt/dpkg operations for the running system."""

    def __init__(self, commands: CommandRunner) -> None:
        self.commands = commands

    def update(self) -> None:
        self.commands.run(["apt-get", "update"], env=APT_ENV)

    def is_known(self, package: str) -> bool:
        """Return True if apt knows about a package name.

        Package names drift between snapshots, so callers probe before installing.
        """
        r = self.commands.query(["apt-cache", "show", package])
        return r.returncode == 0 and bool(r.stdout.strip())

    def is_installed(self, package: str) -> bool:
        r = self.commands.query(["dpkg-query", "-W", "-f=${Status}", package])
        return r.returncode == 0 and r.stdout.strip().endswith(" installed")

    def missing(self, packages: Sequence[str]) -> List[str]:
        return [p for p in packages if not self.is_installed(p)]

    def install(self, packages: Sequence[str], *, with_recommends: bool = True) -> None:
        if not packages:
            return
        argv = ["apt-get", "install", "-y"]
        if not with_recommends:
            argv.append("--no-install-recommends")
        self.commands.run([*argv, *packages], env=APT_ENV)

    def pending_upgrades(self) -> List[str]:
        r = self.commands.query(["apt-get", "-s", "upgrade"], env=APT_ENV)
        return _simulated(r.stdout, "Inst")

    def upgrade(self) -> None:
        self.commands.run(["apt-get", "upgrade", "-y"], env=APT_ENV)

    def full_upgrade(self) -> None:
        self.commands.run(["apt-get", "full-upgrade", "-y"], env=APT_ENV)

    def pending_autoremove(self) -> List[str]:
        r = self.commands.query(["apt-get", "-s", "autoremove"], env=APT_ENV)
        return _simulated(r.stdout, "Remv")

    def autoremove(self) -> None:
        self.commands.run(["apt-get", "autoremove", "-y"], env=APT_ENV)

    def autoclean(self) -> None:
        self.commands.run(["apt-get", "autoclean"], env=APT_ENV)
