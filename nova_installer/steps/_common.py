from __future__ import annotations

import logging
from typing import Sequence

from ..pipeline import Changes, RunContext
from ..services import ensure_disabled, ensure_enabled

logger = logging.getLogger(__name__)


def ensure_packages(ctx: RunContext, packages: Sequence[str], changes: Changes) -> None:
    """Install only the packages that are not installed yet."""

    missing = ctx.packages.missing(list(packages))
    if not missing:
        logger.info("Already installed: %s", " ".join(packages))
        return
    ctx.packages.install(missing)
    changes.add(f"installed {' '.join(missing)}")


def ensure_units_enabled(ctx: RunContext, units: Sequence[str], changes: Changes, *, scope: str = "system") -> None:
    for unit in units:
        if ensure_enabled(ctx.services, unit, scope=scope):
            changes.add(f"enabled {unit}" + (f" ({scope})" if scope != "system" else ""))


def ensure_units_disabled(ctx: RunContext, units: Sequence[str], changes: Changes, *, scope: str = "system") -> None:
    for unit in units:
        if ensure_disabled(ctx.services, unit, scope=scope):
            changes.add(f"disabled {unit}" + (f" ({scope})" if scope != "system" else ""))
