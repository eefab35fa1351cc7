from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .answers import parse_answer
from .logging_utils import DEFAULT_LOG_PATH

DEFAULT_CONFIG_PATH = "/etc/nova-installer.yaml"
DEFAULT_LOCK_PATH = "/run/nova-install.lock"

# 5 GiB expressed in the 1K blocks reported by df.
MIN_FREE_KIB = 5 * 1024 * 1024

FAILURE_POLICIES = {"fail_fast", "continue_on_error"}
FRONTENDS = {"auto", "zenity", "terminal", "none"}


@dataclass(frozen=True)
class NovaConfig:
    raw: Dict[str, Any] = field(default_factory=dict)

    def _section(self, name: str) -> Dict[str, Any]:
        return dict(self.raw.get(name) or {})

    @property
    def root(self) -> str:
        return str(self.raw.get("root") or "/")

    def host_path(self, path: str) -> Path:
        """Resolve an absolute system path under the configured root."""
        return Path(self.root) / path.lstrip("/")

    @property
    def dry_run(self) -> bool:
        return bool(self.raw.get("dry_run", False))

    @property
    def log_path(self) -> str:
        return str(self.raw.get("log_path") or DEFAULT_LOG_PATH)

    @property
    def lock_path(self) -> str:
        return str(self.raw.get("lock_path") or DEFAULT_LOCK_PATH)

    @property
    def report_path(self) -> Optional[str]:
        p = self.raw.get("report_path")
        return str(p) if p else None

    @property
    def manifest_path(self) -> Optional[str]:
        p = self.raw.get("manifest_path")
        return str(p) if p else None

    @property
    def frontend(self) -> str:
        mode = str(self.raw.get("frontend") or "auto").lower()
        if mode not in FRONTENDS:
            raise ValueError(f"frontend must be one of {sorted(FRONTENDS)}, got {mode}")
        return mode

    @property
    def failure_policy(self) -> str:
        policy = str(self.raw.get("failure_policy") or "fail_fast").lower().replace("-", "_")
        if policy not in FAILURE_POLICIES:
            raise ValueError(f"failure_policy must be one of {sorted(FAILURE_POLICIES)}, got {policy}")
        return policy

    @property
    def step_timeout(self) -> Optional[float]:
        value = self.raw.get("step_timeout", 3600)
        if value in (None, 0, "0", "none"):
            return None
        return float(value)

    @property
    def mirror_url(self) -> str:
        return str(self._section("release").get("mirror") or "http://deb.debian.org/debian/")

    @property
    def security_mirror_url(self) -> str:
        return str(
            self._section("release").get("security_mirror") or "http://security.debian.org/debian-security"
        )

    @property
    def mirror_host(self) -> str:
        host = self._section("release").get("mirror_host")
        if host:
            return str(host)
        # http://deb.debian.org/debian/ -> deb.debian.org
        return self.mirror_url.split("://", 1)[-1].split("/", 1)[0]

    @property
    def target_suite(self) -> str:
        return str(self._section("release").get("suite") or "testing")

    @property
    def suite_markers(self) -> List[str]:
        markers = self._section("release").get("markers") or ["testing", "trixie", "sid"]
        return [str(m) for m in markers]

    @property
    def require_target_release(self) -> bool:
        return bool(self._section("release").get("strict", True))

    @property
    def min_free_kib(self) -> int:
        return int(self.raw.get("min_free_kib") or MIN_FREE_KIB)

    @property
    def grub_cmdline(self) -> str:
        return str(self._section("boot").get("cmdline") or "quiet splash")

    @property
    def plymouth_theme(self) -> str:
        return str(self._section("boot").get("plymouth_theme") or "spinner")

    @property
    def answers(self) -> Dict[str, Any]:
        return self._section("answers")

    def validate(self) -> None:
        """Raise ValueError early for settings that are only read later."""
        for prop in ("frontend", "failure_policy", "step_timeout", "min_free_kib"):
            getattr(self, prop)
        for key, value in self.answers.items():
            try:
                parse_answer(value)
            except ValueError as e:
                raise ValueError(f"answers.{key}: {e}") from e


def _merge(base: Dict[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, Mapping) and isinstance(out.get(key), Mapping):
            out[key] = _merge(dict(out[key]), value)
        elif isinstance(value, Mapping):
            out[key] = _merge({}, value)
        else:
            out[key] = value
    return out


def load_config(path: Optional[str] = None, overrides: Optional[Mapping[str, Any]] = None) -> NovaConfig:
    """Load YAML config, then apply CLI overrides (None values are ignored).

    An explicit path must exist; the default system path is optional.
    """

    raw: Dict[str, Any] = {}
    p = Path(path or DEFAULT_CONFIG_PATH)
    if p.exists():
        if p.suffix.lower() not in {".yaml", ".yml"}:
            raise ValueError("config must be YAML")
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"{p} must contain a mapping/object")
    elif path:
        raise FileNotFoundError(path)

    return NovaConfig(raw=_merge(raw, overrides or {}))
