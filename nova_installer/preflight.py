"""Gating checks run before anything on the system is changed.

Order: privilege, release, network, free space. The first hard failure
stops the run. A confirmed upgrade to the target release is the only
mutation preflight may perform, and it only happens after every check
has passed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .answers import UPGRADE_TO_TESTING, Asker, decide
from .config import NovaConfig
from .errors import (
    ConnectivityError,
    InsufficientSpaceError,
    PrivilegeError,
    ReleaseMismatchError,
)
from .lib import apt_sources, net, sysinfo
from .lib.command import CommandRunner
from .lib.sysinfo import FilesystemKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SystemProfile:
    is_target_release: bool
    free_space_bytes: int
    has_network: bool
    filesystem_kind: FilesystemKind

    def as_dict(self) -> dict[str, Any]:
        return {
            "is_target_release": self.is_target_release,
            "free_space_bytes": self.free_space_bytes,
            "has_network": self.has_network,
            "filesystem_kind": self.filesystem_kind.value,
        }


def check_privilege(is_root: bool) -> None:
    if not is_root:
        raise PrivilegeError("This installer must be run as root (try: sudo nova-install)")


def check_free_space(available_kib: int, required_kib: int) -> None:
    if available_kib < required_kib:
        raise InsufficientSpaceError(available_kib, required_kib)


def check_release(
    cfg: NovaConfig,
    *,
    is_target: bool,
    answers: Mapping[str, Any],
    asker: Optional[Asker],
) -> bool:
    """Return True when an upgrade to the target release was confirmed."""

    if is_target:
        logger.info("System already tracks Debian %s", cfg.target_suite)
        return False

    logger.warning("System is not running Debian %s (markers: %s)", cfg.target_suite, ", ".join(cfg.suite_markers))
    if not cfg.require_target_release:
        return False

    if decide(UPGRADE_TO_TESTING, answers, asker):
        return True
    raise ReleaseMismatchError(f"Debian {cfg.target_suite} is required for Nova and the upgrade was declined")


def upgrade_release(cfg: NovaConfig, packages: Any) -> None:
    """Rewrite sources.list for the target suite (with backup) and full-upgrade."""

    apt_sources.write_sources(
        suite=cfg.target_suite,
        mirror=cfg.mirror_url,
        security_mirror=cfg.security_mirror_url,
        apt_dir=cfg.host_path("/etc/apt"),
        dry_run=cfg.dry_run,
    )
    logger.info("Upgrading to Debian %s...", cfg.target_suite)
    packages.update()
    packages.full_upgrade()
    logger.info("System upgraded to Debian %s", cfg.target_suite)


def run_preflight(
    cfg: NovaConfig,
    *,
    commands: CommandRunner,
    packages: Any,
    asker: Optional[Asker] = None,
    answers: Optional[Mapping[str, Any]] = None,
) -> SystemProfile:
    answers = cfg.answers if answers is None else answers

    check_privilege(sysinfo.is_root())

    release = sysinfo.read_os_release(str(cfg.host_path("/etc/os-release")))
    logger.info("Detected %s", release.get("PRETTY_NAME", "unknown OS"))
    is_target = apt_sources.tracks_suite(cfg.suite_markers, cfg.host_path("/etc/apt"))
    upgrade = check_release(cfg, is_target=is_target, answers=answers, asker=asker)

    online = net.mirror_reachable(commands, host=cfg.mirror_host, url=cfg.mirror_url)
    if not online:
        raise ConnectivityError(f"No connection to package mirror {cfg.mirror_url}")

    free_kib = sysinfo.free_space_kib(cfg.root)
    check_free_space(free_kib, cfg.min_free_kib)

    fs_kind = sysinfo.filesystem_kind(cfg.root)
    logger.info("System requirements check passed (free=%d KiB, fs=%s)", free_kib, fs_kind.value)

    if upgrade:
        upgrade_release(cfg, packages)
        is_target = True

    return SystemProfile(
        is_target_release=is_target,
        free_space_bytes=free_kib * 1024,
        has_network=online,
        filesystem_kind=fs_kind,
    )
