"""
Pytest configuration and shared fakes for nova_installer tests.

Nothing here needs root, apt or systemd: the package manager, service
manager and command runner are replaced by in-memory simulations.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple

import pytest

from nova_installer.answers import Decisions
from nova_installer.config import NovaConfig
from nova_installer.errors import CommandError
from nova_installer.lib.command import CmdResult
from nova_installer.lib.manifests import load_manifest
from nova_installer.lib.sysinfo import FilesystemKind
from nova_installer.pipeline import RunContext
from nova_installer.preflight import SystemProfile


def _ok(argv, stdout: str = "") -> CmdResult:
    return CmdResult(argv=list(argv), returncode=0, stdout=stdout, stderr="")


def _fail(argv, returncode: int = 1, stdout: str = "", stderr: str = "") -> CmdResult:
    return CmdResult(argv=list(argv), returncode=returncode, stdout=stdout, stderr=stderr)


class FakeCommands:
    """Stands in for CommandRunner, simulating the handful of tools steps call directly."""

    dry_run = False

    def __init__(self, root: Path, responses: Optional[Dict[Tuple[str, ...], CmdResult]] = None) -> None:
        self.root = root
        self.calls: List[List[str]] = []
        self.responses = dict(responses or {})
        self.lfs_configured = False
        self.flatpak_remotes: Set[str] = set()
        self.plymouth_theme = "bgrt"
        self.user_groups: Dict[str, List[str]] = {}
        self.deadlines: List[Optional[float]] = []

    @contextmanager
    def deadline(self, seconds):
        self.deadlines.append(seconds)
        yield

    def mutations(self) -> List[List[str]]:
        read_only = {("git", "config"), ("flatpak", "remotes"), ("id", "-nG")}
        out = []
        for argv in self.calls:
            if tuple(argv[:2]) in read_only or argv == ["plymouth-set-default-theme"]:
                continue
            out.append(argv)
        return out

    def _handle(self, argv: List[str]) -> CmdResult:
        for prefix in sorted(self.responses, key=len, reverse=True):
            if tuple(argv[: len(prefix)]) == prefix:
                return self.responses[prefix]

        if argv[:3] == ["git", "config", "--system"]:
            return _ok(argv, "git-lfs filter-process\n") if self.lfs_configured else _fail(argv)
        if argv[:4] == ["git", "lfs", "install", "--system"]:
            self.lfs_configured = True
            return _ok(argv)
        if argv[:2] == ["flatpak", "remotes"]:
            return _ok(argv, "".join(f"{r}\n" for r in sorted(self.flatpak_remotes)))
        if argv[:2] == ["flatpak", "remote-add"]:
            self.flatpak_remotes.add(argv[-2])
            return _ok(argv)
        if argv == ["plymouth-set-default-theme"]:
            return _ok(argv, self.plymouth_theme + "\n")
        if argv[:1] == ["plymouth-set-default-theme"]:
            self.plymouth_theme = argv[1]
            return _ok(argv)
        if argv[:1] == ["snapper"]:
            cfg = self.root / "etc/snapper/configs/root"
            cfg.parent.mkdir(parents=True, exist_ok=True)
            cfg.write_text("SUBVOLUME=/\n")
            return _ok(argv)
        if argv[:2] == ["id", "-nG"]:
            return _ok(argv, " ".join(self.user_groups.get(argv[2], [argv[2]])) + "\n")
        if argv[:1] == ["usermod"]:
            self.user_groups.setdefault(argv[-1], [argv[-1]]).append(argv[-2])
            return _ok(argv)
        return _ok(argv)

    def run(self, argv, *, check=True, env=None, input_text=None) -> CmdResult:
        argv = list(argv)
        self.calls.append(argv)
        r = self._handle(argv)
        if check and r.returncode != 0:
            raise CommandError(f"Command failed ({r.returncode}): {' '.join(argv)}", r)
        return r

    def query(self, argv, *, env=None) -> CmdResult:
        argv = list(argv)
        self.calls.append(argv)
        return self._handle(argv)


class FakePackages:
    """In-memory package index and dpkg database."""

    def __init__(
        self,
        known: Iterable[str] = (),
        installed: Iterable[str] = (),
        upgradable: Iterable[str] = (),
        autoremovable: Iterable[str] = (),
        broken: Iterable[str] = (),
    ) -> None:
        self.known = set(known)
        self.installed = set(installed)
        self.upgradable = list(upgradable)
        self.autoremovable = list(autoremovable)
        self.broken = set(broken)
        self.install_calls: List[List[str]] = []
        self.updates = 0
        self.full_upgrades = 0
        self.probed: List[str] = []

    def update(self) -> None:
        self.updates += 1

    def is_known(self, package: str) -> bool:
        self.probed.append(package)
        return package in self.known

    def is_installed(self, package: str) -> bool:
        return package in self.installed

    def missing(self, packages):
        return [p for p in packages if p not in self.installed]

    def install(self, packages, *, with_recommends: bool = True) -> None:
        packages = list(packages)
        self.install_calls.append(packages)
        bad = [p for p in packages if p in self.broken or p not in self.known]
        if bad:
            argv = ["apt-get", "install", "-y", *packages]
            raise CommandError(
                f"Command failed (100): {' '.join(argv)}",
                _fail(argv, 100, stderr=f"E: Unable to locate package {bad[0]}"),
            )
        self.installed.update(packages)

    def pending_upgrades(self):
        return list(self.upgradable)

    def upgrade(self) -> None:
        self.upgradable = []

    def full_upgrade(self) -> None:
        self.full_upgrades += 1

    def pending_autoremove(self):
        return list(self.autoremovable)

    def autoremove(self) -> None:
        self.autoremovable = []

    def autoclean(self) -> None:
        pass


class FakeServices:
    """systemd unit states keyed by (unit, scope)."""

    def __init__(self, states: Optional[Dict[Tuple[str, str], str]] = None, default: str = "disabled") -> None:
        self.states = dict(states or {})
        self.default = default
        self.calls: List[Tuple[str, str, str]] = []

    def state(self, unit: str, *, scope: str = "system") -> str:
        return self.states.get((unit, scope), self.default)

    def enable(self, unit: str, *, scope: str = "system") -> None:
        self.calls.append(("enable", unit, scope))
        self.states[(unit, scope)] = "enabled"

    def disable(self, unit: str, *, scope: str = "system") -> None:
        self.calls.append(("disable", unit, scope))
        self.states[(unit, scope)] = "disabled"


def all_manifest_packages(manifest) -> Set[str]:
    names: Set[str] = set()
    for pkgs in (manifest.get("packages") or {}).values():
        names.update(pkgs)
    for cap in (manifest.get("capabilities") or {}).values():
        names.update(cap["candidates"] if isinstance(cap, dict) else cap)
    return names


@pytest.fixture
def manifest():
    return load_manifest()


@pytest.fixture
def host_root(tmp_path: Path) -> Path:
    """A fake filesystem root with the files steps read and write."""
    root = tmp_path / "root"
    (root / "etc/default").mkdir(parents=True)
    (root / "etc/default/grub").write_text(
        'GRUB_DEFAULT=0\nGRUB_TIMEOUT=5\nGRUB_CMDLINE_LINUX_DEFAULT="quiet"\nGRUB_CMDLINE_LINUX=""\n'
    )
    (root / "etc/apt").mkdir(parents=True)
    (root / "etc/apt/sources.list").write_text("deb http://deb.debian.org/debian/ testing main\n")
    return root


@pytest.fixture
def cfg(host_root: Path) -> NovaConfig:
    return NovaConfig(raw={"root": str(host_root)})


@pytest.fixture
def commands(host_root: Path) -> FakeCommands:
    return FakeCommands(host_root)


@pytest.fixture
def profile() -> SystemProfile:
    return SystemProfile(
        is_target_release=True,
        free_space_bytes=50 * 1024**3,
        has_network=True,
        filesystem_kind=FilesystemKind.EXT4,
    )


@pytest.fixture
def make_ctx(cfg, profile, commands, manifest):
    def _make(packages=None, services=None, *, decisions=None, profile_override=None, cfg_override=None):
        return RunContext(
            cfg=cfg_override or cfg,
            profile=profile_override or profile,
            packages=packages if packages is not None else FakePackages(all_manifest_packages(manifest)),
            services=services if services is not None else FakeServices(),
            commands=commands,
            manifest=manifest,
            decisions=decisions or Decisions(),
        )

    return _make
