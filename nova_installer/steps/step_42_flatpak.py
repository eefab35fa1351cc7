from __future__ import annotations

import logging

from ..lib.manifests import package_group
from ..pipeline import Changes, RunContext
from ._common import ensure_packages

logger = logging.getLogger(__name__)


class FlatpakStep:
    step_id = "42_flatpak"
    optional = False

    def run(self, ctx: RunContext) -> Changes:
        changes = Changes()

        ensure_packages(ctx, package_group(ctx.manifest, "flatpak"), changes)

        remotes = ctx.manifest.get("flatpak_remotes") or {}
        r = ctx.commands.query(["flatpak", "remotes", "--system", "--columns=name"])
        configured = {line.strip() for line in r.stdout.splitlines() if line.strip()}
        for name, url in remotes.items():
            if name in configured:
                logger.info("Flatpak remote %s already configured", name)
                continue
            ctx.commands.run(["flatpak", "remote-add", "--system", "--if-not-exists", str(name), str(url)])
            changes.add(f"added flatpak remote {name}")

        return changes
