from __future__ import annotations

import logging

from ..lib.manifests import capability, package_group
from ..pipeline import Changes, RunContext
from ..prober import resolve_all
from ._common import ensure_packages

logger = logging.getLogger(__name__)


class AndroidSupportStep:
    """GSConnect, MTP and the adb/fastboot tools (renamed across Debian snapshots)."""

    step_id = "52_android_support"
    optional = True

    def run(self, ctx: RunContext) -> Changes:
        changes = Changes()

        packages = package_group(ctx.manifest, "android")
        tools = [capability(ctx.manifest, "adb"), capability(ctx.manifest, "fastboot")]
        packages += resolve_all(tools, ctx.packages)

        ensure_packages(ctx, packages, changes)
        return changes
