from __future__ import annotations

import logging
import re
from pathlib import Path

from ..errors import ConfigRewriteError
from .command import CommandRunner
from .files import atomic_write

logger = logging.getLogger(__name__)

GRUB_DEFAULTS = "/etc/default/grub"
CMDLINE_KEY = "GRUB_CMDLINE_LINUX_DEFAULT"


def _key_re(key: str) -> "re.Pattern[str]":
    return re.compile(rf"^\s*{re.escape(key)}=")


def render_key(text: str, key: str, value: str) -> str:
    """Set KEY="value" in a shell-style defaults file.

    The first assignment is rewritten in place, later duplicates are dropped,
    and a missing key is appended as one new line.
    """

    line = f'{key}="{value}"'
    pattern = _key_re(key)
    out: list[str] = []
    seen = False
    for existing in text.splitlines():
        if pattern.match(existing):
            if not seen:
                out.append(line)
                seen = True
            continue
        out.append(existing)
    if not seen:
        out.append(line)
    return "\n".join(out) + "\n"


def set_kernel_cmdline(path: str | Path, value: str, *, key: str = CMDLINE_KEY, dry_run: bool = False) -> bool:
    """Rewrite the default kernel command line. Returns True if the file changed."""

    p = Path(path)
    try:
        current = p.read_text(encoding="utf-8") if p.exists() else ""
    except OSError as e:
        raise ConfigRewriteError(f"Cannot read {p}: {e}") from e

    wanted = render_key(current, key, value)
    if wanted == current:
        logger.info("%s already sets %s=%r", p, key, value)
        return False

    if dry_run:
        logger.info("Would rewrite %s in %s", key, p)
        return True

    try:
        atomic_write(p, wanted)
    except OSError as e:
        raise ConfigRewriteError(f"Failed to write {p}: {e}") from e

    # Verify what landed on disk.
    try:
        written = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigRewriteError(f"Cannot re-read {p} after rewrite: {e}") from e
    matches = [ln for ln in written.splitlines() if _key_re(key).match(ln)]
    if matches != [f'{key}="{value}"']:
        raise ConfigRewriteError(f"{p} is inconsistent after rewrite: {matches}")

    logger.info("Set %s=%r in %s", key, value, p)
    return True


def update_grub(commands: CommandRunner) -> None:
    commands.run(["update-grub"])
    logger.info("GRUB configuration regenerated")


def update_initramfs(commands: CommandRunner) -> None:
    commands.run(["update-initramfs", "-u"])
