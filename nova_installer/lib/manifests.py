from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..errors import ManifestError
from ..prober import PackageRequest, request_from_manifest

DEFAULT_MANIFEST = Path(__file__).resolve().parents[1] / "manifests" / "nova.yaml"


def load_manifest(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the package manifest (the bundled one unless a path is given)."""

    p = Path(path) if path else DEFAULT_MANIFEST
    if not p.exists():
        raise ManifestError(f"Manifest not found: {p}")
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ManifestError(f"Manifest must be a mapping/dict: {p}")
    return data


def package_group(manifest: Dict[str, Any], name: str) -> List[str]:
    groups = manifest.get("packages") or {}
    if not isinstance(groups, dict):
        raise ManifestError("packages must be a mapping")
    if name not in groups:
        raise ManifestError(f"Unknown package group: {name}")
    pkgs = groups.get(name) or []
    if not isinstance(pkgs, list):
        raise ManifestError(f"Package group {name} must be a list")
    return [str(p).strip() for p in pkgs if str(p).strip()]


def units(manifest: Dict[str, Any], name: str) -> List[str]:
    groups = manifest.get("units") or {}
    pkgs = groups.get(name) or []
    if not isinstance(pkgs, list):
        raise ManifestError(f"Unit group {name} must be a list")
    return [str(u) for u in pkgs]


def capability(manifest: Dict[str, Any], name: str) -> PackageRequest:
    caps = manifest.get("capabilities") or {}
    if name not in caps:
        raise ManifestError(f"Unknown capability: {name}")
    return request_from_manifest(name, caps[name])
