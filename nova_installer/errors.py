from __future__ import annotations

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .lib.command import CmdResult


class NovaError(Exception):
    """Base class for every error raised by the installer."""


class PreflightError(NovaError):
    """A gating check failed before any mutation was attempted."""


class PrivilegeError(PreflightError):
    pass


class ReleaseMismatchError(PreflightError):
    pass


class ConnectivityError(PreflightError):
    pass


class InsufficientSpaceError(PreflightError):
    def __init__(self, available_kib: int, required_kib: int) -> None:
        super().__init__(
            f"Insufficient disk space: {available_kib} KiB available, {required_kib} KiB required"
        )
        self.available_kib = available_kib
        self.required_kib = required_kib


class NoCandidateAvailableError(NovaError):
    def __init__(self, logical_name: str, candidates: tuple[str, ...]) -> None:
        super().__init__(f"No package available for {logical_name}. Tried: {', '.join(candidates)}")
        self.logical_name = logical_name
        self.candidates = candidates


class CommandError(NovaError):
    def __init__(self, message: str, result: "CmdResult") -> None:
        super().__init__(message)
        self.result = result

    @property
    def output(self) -> str:
        return "\n".join(s for s in (self.result.stdout.strip(), self.result.stderr.strip()) if s)


class CommandTimeout(CommandError):
    pass


class StepExecutionError(NovaError):
    def __init__(self, step_name: str, detail: str, output: str = "") -> None:
        msg = f"Step {step_name} failed: {detail}"
        if output:
            msg += f"\n{output}"
        super().__init__(msg)
        self.step_name = step_name
        self.detail = detail
        self.output = output


class ServiceManagerError(NovaError):
    pass


class UnitNotFoundError(ServiceManagerError):
    pass


class ConcurrentRunError(NovaError):
    pass


class ConfigRewriteError(NovaError):
    pass


class ManifestError(NovaError):
    pass


def describe(exc: BaseException, *, limit: Optional[int] = 2000) -> str:
    """One readable block for logs and reports."""

    text = str(exc) or exc.__class__.__name__
    if limit is not None and len(text) > limit:
        text = text[:limit] + "..."
    return text
