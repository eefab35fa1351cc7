from __future__ import annotations

import logging
import os

from ..lib.manifests import capability, package_group
from ..pipeline import Changes, RunContext
from ..prober import SKIP, resolve
from ._common import ensure_packages

logger = logging.getLogger(__name__)


class IosSupportStep:
    step_id = "54_ios_support"
    optional = True

    def run(self, ctx: RunContext) -> Changes:
        changes = Changes()

        lib = resolve(capability(ctx.manifest, "libimobiledevice"), ctx.packages)
        if lib is SKIP:
            return changes.skip("libimobiledevice not available; iOS support not installed")

        ensure_packages(ctx, [str(lib), *package_group(ctx.manifest, "ios")], changes)

        # Device access for the user who invoked sudo.
        user = os.environ.get("SUDO_USER", "").strip()
        if user and user != "root":
            r = ctx.commands.query(["id", "-nG", user])
            if r.returncode == 0 and "plugdev" not in r.stdout.split():
                ctx.commands.run(["usermod", "-a", "-G", "plugdev", user])
                changes.add(f"added {user} to plugdev")

        return changes
