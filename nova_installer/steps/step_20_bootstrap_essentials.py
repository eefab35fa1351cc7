from __future__ import annotations

import logging

from ..lib.manifests import capability, package_group
from ..pipeline import Changes, RunContext
from ..prober import resolve_all
from ._common import ensure_packages

logger = logging.getLogger(__name__)


class BootstrapEssentialsStep:
    step_id = "20_bootstrap_essentials"
    optional = False

    def run(self, ctx: RunContext) -> Changes:
        changes = Changes()

        packages: list[str] = []
        for group in ("bootstrap_core", "bootstrap_monitoring", "bootstrap_archive"):
            packages += package_group(ctx.manifest, group)
        # fastfetch only exists in newer snapshots; neofetch is the older equivalent.
        packages += resolve_all([capability(ctx.manifest, "system_info")], ctx.packages)

        ensure_packages(ctx, packages, changes)

        # git-lfs ships the filter but does not register it system-wide.
        r = ctx.commands.query(["git", "config", "--system", "--get", "filter.lfs.process"])
        if r.returncode != 0 or not r.stdout.strip():
            ctx.commands.run(["git", "lfs", "install", "--system"])
            changes.add("configured git-lfs system-wide")

        return changes
