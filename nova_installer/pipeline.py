from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .answers import Decisions
from .config import NovaConfig
from .errors import CommandError, CommandTimeout, NovaError, StepExecutionError, describe
from .lib.command import CommandRunner
from .preflight import SystemProfile

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 2


class Status(str, enum.Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


class FailurePolicy(str, enum.Enum):
    FAIL_FAST = "fail_fast"
    CONTINUE_ON_ERROR = "continue_on_error"


@dataclass(frozen=True)
class ProvisionResult:
    step_name: str
    status: Status
    detail: str = ""
    attempts: int = 1

    def as_dict(self) -> Dict[str, Any]:
        return {
            "step": self.step_name,
            "status": self.status.value,
            "detail": self.detail,
            "attempts": self.attempts,
        }


class Changes(List[str]):
    """What a step actually changed. Empty means the state was already present."""

    note: str = ""

    def add(self, what: str) -> None:
        logger.info("Changed: %s", what)
        self.append(what)

    def skip(self, why: str) -> "Changes":
        """Mark the step as not applicable, with the reason reported."""
        logger.info("Nothing to do: %s", why)
        self.note = why
        return self


@dataclass(frozen=True)
class RunContext:
    """Everything a step may touch. Built once per run and never mutated."""

    cfg: NovaConfig
    profile: SystemProfile
    packages: Any
    services: Any
    commands: CommandRunner
    manifest: Dict[str, Any] = field(default_factory=dict)
    decisions: Decisions = field(default_factory=Decisions)
    workdir: Optional[Path] = None

    def host_path(self, path: str) -> Path:
        return self.cfg.host_path(path)


class Step(Protocol):
    """A single idempotent step."""

    step_id: str
    optional: bool

    def run(self, ctx: RunContext) -> Changes:
        ...


class Reporter(Protocol):
    def step_started(self, step_id: str) -> None:
        ...

    def step_finished(self, result: ProvisionResult) -> None:
        ...


@dataclass(frozen=True)
class PipelineResult:
    results: List[ProvisionResult]
    declared: int
    # A required step failed (optional failures are only warnings).
    fatal: bool = False

    @property
    def failed(self) -> List[ProvisionResult]:
        return [r for r in self.results if r.status is Status.FAILED]

    @property
    def halted(self) -> bool:
        return len(self.results) < self.declared

    @property
    def ok(self) -> bool:
        return not self.fatal


def _attempt(step: Step, ctx: RunContext, step_timeout: Optional[float]) -> ProvisionResult:
    attempts = 0
    while True:
        attempts += 1
        try:
            with ctx.commands.deadline(step_timeout):
                changes = step.run(ctx)
        except CommandTimeout as e:
            if attempts < MAX_ATTEMPTS:
                logger.warning("Step %s timed out; retrying once (%s)", step.step_id, describe(e))
                continue
            err = StepExecutionError(step.step_id, describe(e), e.output)
        except CommandError as e:
            err = StepExecutionError(step.step_id, describe(e), e.output)
        except StepExecutionError as e:
            err = e
        except NovaError as e:
            err = StepExecutionError(step.step_id, describe(e))
        except Exception as e:
            logger.exception("Step %s raised an unexpected error", step.step_id)
            err = StepExecutionError(step.step_id, f"{e.__class__.__name__}: {describe(e)}")
        else:
            if changes:
                return ProvisionResult(step.step_id, Status.SUCCESS, "; ".join(changes), attempts)
            return ProvisionResult(step.step_id, Status.SKIPPED, getattr(changes, "note", "") or "already in desired state", attempts)

        detail = err.detail if not err.output else f"{err.detail}\n{err.output}"
        return ProvisionResult(step.step_id, Status.FAILED, detail, attempts)


def run_pipeline(
    *,
    steps: Sequence[Step],
    ctx: RunContext,
    policy: FailurePolicy = FailurePolicy.FAIL_FAST,
    reporter: Optional[Reporter] = None,
    step_timeout: Optional[float] = None,
) -> PipelineResult:
    """Run steps strictly in order, one ProvisionResult per attempted step."""

    results: List[ProvisionResult] = []
    fatal = False

    for step in steps:
        if reporter is not None:
            reporter.step_started(step.step_id)
        logger.info("Running step %s", step.step_id)

        try:
            result = _attempt(step, ctx, step_timeout)
        except KeyboardInterrupt:
            logger.error("Interrupted during step %s", step.step_id)
            raise

        results.append(result)
        if reporter is not None:
            reporter.step_finished(result)

        if result.status is not Status.FAILED:
            logger.info("Step %s: %s", step.step_id, result.status.value)
            continue

        if getattr(step, "optional", False):
            logger.warning("Optional step %s failed; continuing: %s", step.step_id, result.detail)
            continue

        logger.error("Step %s failed: %s", step.step_id, result.detail)
        fatal = True
        if policy is FailurePolicy.FAIL_FAST:
            logger.error("Stopping after %s (fail-fast)", step.step_id)
            break

    return PipelineResult(results=results, declared=len(steps), fatal=fatal)
