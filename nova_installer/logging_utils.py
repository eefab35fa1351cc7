from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

DEFAULT_LOG_PATH = "/var/log/nova-install.log"

FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
CONSOLE_FORMAT = "%(levelname)s %(message)s"


class TranscriptHandler(logging.FileHandler):
    """Appends the run transcript; one per process."""


class ConsoleHandler(logging.StreamHandler):
    pass


def _fallback_path() -> Path:
    return Path.cwd() / "nova-install.log"


def _installed(root: logging.Logger) -> List[logging.Handler]:
    return [h for h in root.handlers if isinstance(h, (TranscriptHandler, ConsoleHandler))]


def _open_transcript(path: str) -> Optional[TranscriptHandler]:
    try:
        Path(os.path.dirname(path) or ".").mkdir(parents=True, exist_ok=True)
        return TranscriptHandler(path)
    except OSError:
        return None


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
) -> Optional[str]:
    """Configure logging for a run.

    Every run appends a timestamped transcript to /var/log/nova-install.log.
    Without write access there (dry runs as a normal user) the transcript
    goes to ./nova-install.log; if that fails too, only the console is used.
    The transcript is appended to and never rotated.

    Returns the transcript path actually in use, or None for console only.
    Calling it again keeps the handlers installed by the first call.
    """

    root = logging.getLogger()
    root.setLevel(level)

    existing = _installed(root)
    if existing:
        return next((h.baseFilename for h in existing if isinstance(h, TranscriptHandler)), None)

    log = logging.getLogger(__name__)
    if also_console:
        console = ConsoleHandler()
        console.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT))
        root.addHandler(console)

    transcript = _open_transcript(log_path)
    if transcript is None:
        fallback = str(_fallback_path())
        log.warning("Cannot write %s; falling back to %s", log_path, fallback)
        transcript = _open_transcript(fallback)

    if transcript is None:
        log.warning("No writable transcript location; logging to the console only")
        return None

    transcript.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z"))
    root.addHandler(transcript)
    log.info("Logging initialized (requested=%s, actual=%s)", log_path, transcript.baseFilename)
    return transcript.baseFilename
