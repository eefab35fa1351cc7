from __future__ import annotations

import enum
import logging
import os
import shutil
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class FilesystemKind(str, enum.Enum):
    BTRFS = "btrfs"
    EXT4 = "ext4"
    XFS = "xfs"
    OTHER = "other"


def is_root() -> bool:
    return os.geteuid() == 0


def read_os_release(path: str = "/etc/os-release") -> Dict[str, str]:
    """Parse os-release KEY=value pairs (quotes stripped)."""

    out: Dict[str, str] = {}
    p = Path(path)
    if not p.exists():
        return out
    for line in p.read_text(encoding="utf-8", errors="ignore").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        k, v = line.split("=", 1)
        out[k.strip()] = v.strip().strip('"').strip("'")
    return out


def free_space_kib(path: str = "/") -> int:
    """Available space for unprivileged users, in the 1K blocks df reports."""

    return shutil.disk_usage(path).free // 1024


def _mount_fstype(mountpoint: str, mounts: str) -> Optional[str]:
    fstype: Optional[str] = None
    p = Path(mounts)
    if not p.exists():
        return None
    for line in p.read_text(encoding="utf-8", errors="ignore").splitlines():
        fields = line.split()
        # The last matching entry wins (over-mounts).
        if len(fields) >= 3 and fields[1] == mountpoint:
            fstype = fields[2]
    return fstype


def filesystem_kind(mountpoint: str = "/", mounts: str = "/proc/self/mounts") -> FilesystemKind:
    fstype = _mount_fstype(mountpoint, mounts) or ""
    try:
        return FilesystemKind(fstype.lower())
    except ValueError:
        return FilesystemKind.OTHER
