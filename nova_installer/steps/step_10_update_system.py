from __future__ import annotations

import logging

from ..pipeline import Changes, RunContext

logger = logging.getLogger(__name__)


class UpdateSystemStep:
    step_id = "10_update_system"
    optional = False

    def run(self, ctx: RunContext) -> Changes:
        changes = Changes()

        # Refreshing the index is not counted as a change to the system.
        ctx.packages.update()

        pending = ctx.packages.pending_upgrades()
        if not pending:
            return changes.skip("no pending upgrades")

        logger.info("Upgrading %d packages", len(pending))
        ctx.packages.upgrade()
        changes.add(f"upgraded {len(pending)} packages")
        return changes
