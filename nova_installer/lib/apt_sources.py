from __future__ import annotations

import logging
import re
import shutil
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from ..errors import ConfigRewriteError
from .files import atomic_write

logger = logging.getLogger(__name__)

COMPONENTS = "main contrib non-free non-free-firmware"


def _source_files(apt_dir: Path) -> List[Path]:
    files = []
    main = apt_dir / "sources.list"
    if main.exists():
        files.append(main)
    parts = apt_dir / "sources.list.d"
    if parts.is_dir():
        files += sorted(parts.glob("*.list"))
        files += sorted(parts.glob("*.sources"))
    return files


def _suites_in(path: Path) -> List[str]:
    """Suites named by active entries, for one-line (.list) and deb822 (.sources) files."""

    suites: List[str] = []
    for raw in path.read_text(encoding="utf-8", errors="ignore").splitlines():
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        if path.suffix == ".sources":
            if line.lower().startswith("suites:"):
                suites += line.split(":", 1)[1].split()
            continue
        if not line.startswith(("deb ", "deb-src ")):
            continue
        # Drop an options block such as [arch=amd64 signed-by=...].
        line = re.sub(r"\[[^\]]*\]", " ", line)
        fields = line.split()
        if len(fields) >= 3:
            suites.append(fields[2])
    return suites


def configured_suites(apt_dir: str | Path = "/etc/apt") -> List[str]:
    out: List[str] = []
    for f in _source_files(Path(apt_dir)):
        out += _suites_in(f)
    return out


def tracks_suite(markers: Iterable[str], apt_dir: str | Path = "/etc/apt") -> bool:
    """True if any configured suite matches a marker (testing-security counts as testing)."""

    wanted = [m.lower() for m in markers]
    for suite in configured_suites(apt_dir):
        base = suite.lower().split("-", 1)[0]
        if base in wanted:
            return True
    return False


def render_sources(suite: str, mirror: str, security_mirror: str) -> str:
    mirror = mirror.rstrip("/") + "/"
    lines = []
    for kind in ("deb", "deb-src"):
        lines.append(f"{kind} {mirror} {suite} {COMPONENTS}")
    lines.append("")
    for kind in ("deb", "deb-src"):
        lines.append(f"{kind} {security_mirror} {suite}-security {COMPONENTS}")
    lines.append("")
    for kind in ("deb", "deb-src"):
        lines.append(f"{kind} {mirror} {suite}-updates {COMPONENTS}")
    return "\n".join(lines) + "\n"


def write_sources(
    *,
    suite: str,
    mirror: str,
    security_mirror: str,
    apt_dir: str | Path = "/etc/apt",
    now: Optional[datetime] = None,
    dry_run: bool = False,
) -> Optional[Path]:
    """Point sources.list at `suite`, keeping a timestamped backup of the old file.

    Returns the backup path (None when there was nothing to back up).
    """

    target = Path(apt_dir) / "sources.list"
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    backup: Optional[Path] = None

    if dry_run:
        logger.info("Would back up and rewrite %s for suite %s", target, suite)
        return None

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        if target.exists():
            backup = target.with_name(f"sources.list.backup.{stamp}")
            shutil.copy2(target, backup)
            logger.info("Backed up %s to %s", target, backup)
        atomic_write(target, render_sources(suite, mirror, security_mirror))
    except OSError as e:
        raise ConfigRewriteError(f"Failed to rewrite {target}: {e}") from e

    logger.info("Configured APT sources for %s (%s)", suite, mirror)
    return backup
