from __future__ import annotations

from ..lib.manifests import package_group
from ..pipeline import Changes, RunContext
from ._common import ensure_packages


class OnlineAccountsStep:
    step_id = "50_online_accounts"
    optional = False

    def run(self, ctx: RunContext) -> Changes:
        changes = Changes()
        ensure_packages(ctx, package_group(ctx.manifest, "online_accounts"), changes)
        return changes
