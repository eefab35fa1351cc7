from __future__ import annotations

import logging

from ..lib.manifests import package_group, units
from ..pipeline import Changes, RunContext
from ._common import ensure_packages, ensure_units_disabled, ensure_units_enabled

logger = logging.getLogger(__name__)


class AudioStackStep:
    """PipeWire as the session audio server for every user."""

    step_id = "40_audio_stack"
    optional = False

    def run(self, ctx: RunContext) -> Changes:
        changes = Changes()

        ensure_packages(ctx, package_group(ctx.manifest, "pipewire"), changes)

        # User units: --global sets the default for all users.
        ensure_units_disabled(ctx, units(ctx.manifest, "pulseaudio_global"), changes, scope="global")
        ensure_units_enabled(ctx, units(ctx.manifest, "pipewire_global"), changes, scope="global")

        return changes
