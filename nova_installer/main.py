from __future__ import annotations

import argparse
import logging
from typing import Any, Dict, Optional

from . import __version__
from .answers import INSTALL_DEVELOPER_TOOLS, Decisions, decide
from .config import DEFAULT_CONFIG_PATH, FAILURE_POLICIES, FRONTENDS, NovaConfig, load_config
from .errors import ConcurrentRunError, NovaError, PreflightError, describe
from .frontend import select_frontend
from .lib import sysinfo
from .lib.command import CommandRunner
from .lib.manifests import load_manifest
from .lib.pkg import AptPackageManager
from .lib.systemd import SystemdServiceManager
from .logging_utils import configure_logging
from .pipeline import FailurePolicy, PipelineResult, RunContext, run_pipeline
from .preflight import check_privilege, run_preflight
from .report import build_report, log_summary, save_report
from .runlock import run_lock, temp_workdir
from .steps import (
    AndroidSupportStep,
    AudioStackStep,
    BootSplashStep,
    BootstrapEssentialsStep,
    BtrfsSnapshotsStep,
    CleanupStep,
    DeveloperToolsStep,
    FirmwarePerformanceStep,
    FlatpakStep,
    GnomeDesktopStep,
    IosSupportStep,
    KernelHeadersStep,
    OnlineAccountsStep,
    UpdateSystemStep,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PREFLIGHT = 1
EXIT_STEP_FAILED = 2
EXIT_CONCURRENT = 3
EXIT_INTERRUPTED = 130


def build_steps():
    return [
        UpdateSystemStep(),
        BootstrapEssentialsStep(),
        GnomeDesktopStep(),
        AudioStackStep(),
        FlatpakStep(),
        FirmwarePerformanceStep(),
        BtrfsSnapshotsStep(),
        OnlineAccountsStep(),
        AndroidSupportStep(),
        IosSupportStep(),
        BootSplashStep(),
        KernelHeadersStep(),
        DeveloperToolsStep(),
        CleanupStep(),
    ]


def run(
    cfg: NovaConfig,
    *,
    frontend: Any = None,
    commands: Optional[CommandRunner] = None,
    packages: Any = None,
    services: Any = None,
) -> PipelineResult:
    """Preflight, decide, then run the Nova steps under the run lock."""

    actual_log_path = configure_logging(log_path=cfg.log_path)
    logger.info("Nova Installer v%s (dry_run=%s)", __version__, cfg.dry_run)
    logger.info("Transcript: %s", actual_log_path or "console only")

    commands = commands or CommandRunner(dry_run=cfg.dry_run)
    packages = packages or AptPackageManager(commands)
    services = services or SystemdServiceManager(commands)
    frontend = frontend or select_frontend(cfg.frontend)
    manifest = load_manifest(cfg.manifest_path)

    # The lock file lives under /run; fail with a clear message before touching it.
    check_privilege(sysinfo.is_root())

    with run_lock(cfg.lock_path), temp_workdir() as workdir:
        profile = run_preflight(cfg, commands=commands, packages=packages, asker=frontend)
        decisions = Decisions(
            install_developer_tools=decide(INSTALL_DEVELOPER_TOOLS, cfg.answers, frontend),
        )
        ctx = RunContext(
            cfg=cfg,
            profile=profile,
            packages=packages,
            services=services,
            commands=commands,
            manifest=manifest,
            decisions=decisions,
            workdir=workdir,
        )
        result = run_pipeline(
            steps=build_steps(),
            ctx=ctx,
            policy=FailurePolicy(cfg.failure_policy),
            reporter=frontend,
            step_timeout=cfg.step_timeout,
        )

    log_summary(result.results)
    if cfg.report_path:
        save_report(
            cfg.report_path,
            build_report(
                result,
                version=__version__,
                profile=profile.as_dict(),
                decisions={"install_developer_tools": decisions.install_developer_tools},
                log_path=actual_log_path,
            ),
        )

    if result.ok:
        frontend.notify("Nova installation completed successfully! Please reboot your system.")
    else:
        failed = ", ".join(r.step_name for r in result.failed)
        where = actual_log_path or "the console output"
        frontend.notify(f"Nova installation failed at: {failed}. Logs saved to {where}")
    return result


def _overrides(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "log_path": args.log,
        "report_path": args.report,
        "manifest_path": args.manifest,
        "dry_run": True if args.dry_run else None,
        "frontend": args.frontend,
        "failure_policy": args.failure_policy,
        "step_timeout": args.step_timeout,
        "answers": {
            "install_developer_tools": args.dev_tools,
            "upgrade_to_testing": args.upgrade,
        },
        "release": {"strict": False if args.allow_other_release else None},
    }


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="nova-install", description="Turn Debian Testing into Nova.")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--config", default=None, help=f"YAML config (default: {DEFAULT_CONFIG_PATH} if present)")
    p.add_argument("--log", default=None, help="Path to the run transcript")
    p.add_argument("--report", default=None, help="Write a run report (json|yaml)")
    p.add_argument("--manifest", default=None, help="Package manifest to use instead of the bundled one")
    p.add_argument("--dry-run", action="store_true", help="Log commands without executing them")
    p.add_argument("--frontend", choices=sorted(FRONTENDS), default=None)
    p.add_argument("--failure-policy", choices=sorted(FAILURE_POLICIES), default=None)
    p.add_argument("--step-timeout", type=float, default=None, help="Seconds per step (0 disables)")
    p.add_argument("--dev-tools", dest="dev_tools", action="store_const", const=True, default=None)
    p.add_argument("--no-dev-tools", dest="dev_tools", action="store_const", const=False)
    p.add_argument("--upgrade", dest="upgrade", action="store_const", const=True, default=None,
                   help="Upgrade to Debian Testing without asking if needed")
    p.add_argument("--no-upgrade", dest="upgrade", action="store_const", const=False)
    p.add_argument("--allow-other-release", action="store_true",
                   help="Only warn when the system is not on Debian Testing")

    args = p.parse_args(argv)

    try:
        cfg = load_config(args.config, _overrides(args))
        cfg.validate()
    except (OSError, ValueError) as e:
        p.error(str(e))

    configure_logging(log_path=cfg.log_path)

    try:
        result = run(cfg)
    except PreflightError as e:
        logger.error("Preflight failed: %s", describe(e))
        return EXIT_PREFLIGHT
    except ConcurrentRunError as e:
        logger.error("%s", describe(e))
        return EXIT_CONCURRENT
    except KeyboardInterrupt:
        logger.error("Interrupted; partial changes are kept and the run can be resumed")
        return EXIT_INTERRUPTED
    except NovaError as e:
        logger.error("Installer failed: %s", describe(e))
        return EXIT_PREFLIGHT

    return EXIT_OK if result.ok else EXIT_STEP_FAILED


if __name__ == "__main__":
    raise SystemExit(main())
