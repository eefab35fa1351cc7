from __future__ import annotations

import logging

from ..lib.manifests import package_group, units
from ..pipeline import Changes, RunContext
from ._common import ensure_packages, ensure_units_enabled

logger = logging.getLogger(__name__)


class GnomeDesktopStep:
    step_id = "30_gnome_desktop"
    optional = False

    def run(self, ctx: RunContext) -> Changes:
        changes = Changes()

        # Minimal GNOME plus a small set of GNOME Circle essentials.
        packages = package_group(ctx.manifest, "gnome_core") + package_group(ctx.manifest, "gnome_extras")
        ensure_packages(ctx, packages, changes)

        ensure_units_enabled(ctx, units(ctx.manifest, "display_manager"), changes)

        logger.info("GNOME desktop in place")
        return changes
