from __future__ import annotations

import fcntl
import logging
import os
import shutil
import signal
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .errors import ConcurrentRunError

logger = logging.getLogger(__name__)


@contextmanager
def run_lock(path: str) -> Iterator[None]:
    """Hold an exclusive, non-blocking lock for the duration of a run."""

    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(str(p), os.O_RDWR | os.O_CREAT, 0o644)
    try:
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError as e:
            raise ConcurrentRunError(f"Another nova-install run holds {p}") from e
        os.ftruncate(fd, 0)
        os.write(fd, f"{os.getpid()}\n".encode())
        logger.info("Acquired run lock %s", p)
        try:
            yield
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
    finally:
        os.close(fd)


def _sigterm(signum, frame):  # pragma: no cover - exercised by real signals
    raise SystemExit(128 + signum)


@contextmanager
def temp_workdir(base: Optional[str] = None) -> Iterator[Path]:
    """Per-run scratch directory, removed on exit, error, Ctrl-C or SIGTERM."""

    workdir = Path(tempfile.mkdtemp(prefix=f"nova-install-{os.getpid()}-", dir=base))
    previous = signal.getsignal(signal.SIGTERM)
    installed = False
    try:
        signal.signal(signal.SIGTERM, _sigterm)
        installed = True
    except ValueError:
        # Not the main thread; rely on normal unwinding only.
        pass
    try:
        yield workdir
    finally:
        if installed:
            signal.signal(signal.SIGTERM, previous)
        shutil.rmtree(workdir, ignore_errors=True)
        logger.debug("Removed %s", workdir)
