from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from ..errors import ConfigRewriteError

logger = logging.getLogger(__name__)


def atomic_write(path: Path, contents: str, *, mode: int | None = None) -> None:
    """Replace a file via a temp file in the same directory and rename.

    The existing file mode is kept unless `mode` is given.
    """

    if mode is None:
        mode = path.stat().st_mode & 0o7777 if path.exists() else 0o644
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(contents)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp, mode)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


def write_if_absent(path: Path, contents: str, *, dry_run: bool = False) -> bool:
    """Create a file only when it does not exist yet. Returns True if written."""

    if path.exists():
        return False
    if dry_run:
        logger.info("Would write %s", str(path))
        return True
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        atomic_write(path, contents)
    except OSError as e:
        raise ConfigRewriteError(f"Failed to write {path}: {e}") from e
    logger.info("Wrote %s", str(path))
    return True
