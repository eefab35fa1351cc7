from __future__ import annotations

import logging

from ..lib.bootloader import GRUB_DEFAULTS, set_kernel_cmdline, update_grub, update_initramfs
from ..lib.manifests import package_group
from ..pipeline import Changes, RunContext
from ._common import ensure_packages

logger = logging.getLogger(__name__)


class BootSplashStep:
    """Plymouth splash and a quiet kernel command line."""

    step_id = "60_boot_splash"
    optional = False

    def run(self, ctx: RunContext) -> Changes:
        changes = Changes()

        ensure_packages(ctx, package_group(ctx.manifest, "boot_splash"), changes)

        theme = ctx.cfg.plymouth_theme
        # Without arguments the tool prints the current theme.
        current = ctx.commands.query(["plymouth-set-default-theme"]).stdout.strip()
        theme_changed = current != theme
        if theme_changed:
            ctx.commands.run(["plymouth-set-default-theme", theme])
            changes.add(f"plymouth theme {current or '(none)'} -> {theme}")

        grub_changed = set_kernel_cmdline(
            ctx.host_path(GRUB_DEFAULTS), ctx.cfg.grub_cmdline, dry_run=ctx.cfg.dry_run
        )
        if grub_changed:
            changes.add(f"kernel cmdline set to {ctx.cfg.grub_cmdline!r}")
            update_grub(ctx.commands)

        if theme_changed or grub_changed:
            update_initramfs(ctx.commands)

        return changes
