from __future__ import annotations

import logging
import platform

from ..lib.manifests import capability
from ..pipeline import Changes, RunContext
from ..prober import PackageRequest, resolve
from ._common import ensure_packages

logger = logging.getLogger(__name__)


class KernelHeadersStep:
    step_id = "62_kernel_headers"
    optional = False

    def __init__(self, kernel_release: str | None = None) -> None:
        self.kernel_release = kernel_release or platform.release()

    def run(self, ctx: RunContext) -> Changes:
        changes = Changes()

        generic = capability(ctx.manifest, "kernel_headers_generic")
        # Headers for the running kernel first, the metapackage otherwise.
        request = PackageRequest(
            "kernel headers",
            (f"linux-headers-{self.kernel_release}", *generic.candidates),
        )
        ensure_packages(ctx, [str(resolve(request, ctx.packages))], changes)
        return changes
