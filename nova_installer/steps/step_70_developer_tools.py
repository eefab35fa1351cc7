from __future__ import annotations

import logging

from ..lib.manifests import package_group
from ..pipeline import Changes, RunContext
from ._common import ensure_packages

logger = logging.getLogger(__name__)

GROUPS = ("dev_build_tools", "dev_languages", "dev_containers")


class DeveloperToolsStep:
    step_id = "70_developer_tools"
    optional = True

    def run(self, ctx: RunContext) -> Changes:
        changes = Changes()

        if not ctx.decisions.install_developer_tools:
            return changes.skip("developer tools not requested")

        for group in GROUPS:
            logger.info("Installing %s", group)
            ensure_packages(ctx, package_group(ctx.manifest, group), changes)
        return changes
