from __future__ import annotations

import logging

from .command import CommandRunner

logger = logging.getLogger(__name__)


def mirror_reachable(commands: CommandRunner, *, host: str, url: str) -> bool:
    """Best-effort reachability check: ping the mirror host, then try an HTTP HEAD."""

    r = commands.query(["ping", "-c", "1", "-W", "2", host])
    if r.returncode == 0:
        return True
    logger.info("ping %s failed; trying HTTP", host)
    r = commands.query(["curl", "-s", "--head", "--max-time", "10", "-o", "/dev/null", url])
    return r.returncode == 0
