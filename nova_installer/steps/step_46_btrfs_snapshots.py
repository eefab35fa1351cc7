from __future__ import annotations

import logging

from ..lib.manifests import package_group, units
from ..lib.sysinfo import FilesystemKind
from ..pipeline import Changes, RunContext
from ._common import ensure_packages, ensure_units_enabled

logger = logging.getLogger(__name__)

SNAPPER_ROOT_CONFIG = "/etc/snapper/configs/root"


class BtrfsSnapshotsStep:
    step_id = "46_btrfs_snapshots"
    optional = True

    def run(self, ctx: RunContext) -> Changes:
        changes = Changes()

        if ctx.profile.filesystem_kind is not FilesystemKind.BTRFS:
            return changes.skip(f"root filesystem is {ctx.profile.filesystem_kind.value}, not btrfs")

        logger.info("Detected Btrfs filesystem, installing snapshot tools")
        ensure_packages(ctx, package_group(ctx.manifest, "btrfs_snapshots"), changes)

        if not ctx.host_path(SNAPPER_ROOT_CONFIG).exists():
            ctx.commands.run(["snapper", "-c", "root", "create-config", "/"])
            changes.add("created snapper config for /")

        ensure_units_enabled(ctx, units(ctx.manifest, "snapper"), changes)
        return changes
