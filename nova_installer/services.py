from __future__ import annotations

import logging
from typing import Protocol

from .errors import UnitNotFoundError
from .lib.systemd import NOT_FOUND

logger = logging.getLogger(__name__)

# States in which `systemctl enable` has nothing left to do.
ENABLED_STATES = frozenset(
    {"enabled", "enabled-runtime", "static", "indirect", "generated", "alias"}
)


class ServiceManager(Protocol):
    def state(self, unit: str, *, scope: str = "system") -> str:
        ...

    def enable(self, unit: str, *, scope: str = "system") -> None:
        ...

    def disable(self, unit: str, *, scope: str = "system") -> None:
        ...


def ensure_enabled(services: ServiceManager, unit: str, *, scope: str = "system") -> bool:
    """Enable a unit unless it already is. Returns True when something changed."""

    state = services.state(unit, scope=scope)
    if state in ENABLED_STATES:
        logger.info("Unit %s already %s (%s)", unit, state, scope)
        return False
    if state == NOT_FOUND:
        raise UnitNotFoundError(f"Unit {unit} not found ({scope})")
    if state == "masked":
        logger.warning("Unit %s is masked (%s); leaving it alone", unit, scope)
        return False

    services.enable(unit, scope=scope)
    logger.info("Enabled unit %s (%s)", unit, scope)
    return True


def ensure_disabled(services: ServiceManager, unit: str, *, scope: str = "system") -> bool:
    """Disable a unit if it is enabled. Absent and static units are left as they are."""

    state = services.state(unit, scope=scope)
    if state == NOT_FOUND:
        logger.info("Unit %s not present (%s); nothing to disable", unit, scope)
        return False
    if state not in {"enabled", "enabled-runtime", "linked", "linked-runtime", "alias"}:
        logger.info("Unit %s already %s (%s)", unit, state, scope)
        return False

    services.disable(unit, scope=scope)
    logger.info("Disabled unit %s (%s)", unit, scope)
    return True
