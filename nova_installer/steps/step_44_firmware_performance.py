from __future__ import annotations

import logging

from ..lib.files import write_if_absent
from ..lib.manifests import package_group, units
from ..pipeline import Changes, RunContext
from ._common import ensure_packages, ensure_units_enabled

logger = logging.getLogger(__name__)

ZRAMSWAP_DEFAULTS = "/etc/default/zramswap"


class FirmwarePerformanceStep:
    """fwupd, zram swap, power profiles and periodic TRIM."""

    step_id = "44_firmware_performance"
    optional = False

    def run(self, ctx: RunContext) -> Changes:
        changes = Changes()

        ensure_packages(ctx, package_group(ctx.manifest, "firmware_performance"), changes)

        zram = str(ctx.manifest.get("zramswap") or "")
        # An existing file (shipped by zram-tools or edited by the user) is kept.
        if zram and write_if_absent(ctx.host_path(ZRAMSWAP_DEFAULTS), zram, dry_run=ctx.cfg.dry_run):
            changes.add(f"wrote {ZRAMSWAP_DEFAULTS}")

        ensure_units_enabled(ctx, units(ctx.manifest, "firmware_performance"), changes)
        return changes
