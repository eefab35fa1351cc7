from __future__ import annotations

import logging

from ..pipeline import Changes, RunContext

logger = logging.getLogger(__name__)


class CleanupStep:
    step_id = "90_cleanup"
    optional = False

    def run(self, ctx: RunContext) -> Changes:
        changes = Changes()

        removable = ctx.packages.pending_autoremove()
        if removable:
            ctx.packages.autoremove()
            changes.add(f"removed {len(removable)} unused packages")

        # Pruning the download cache is not counted as a change.
        ctx.packages.autoclean()
        return changes
