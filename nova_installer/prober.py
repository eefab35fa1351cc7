from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Protocol, Tuple, Union

from .errors import ManifestError, NoCandidateAvailableError

logger = logging.getLogger(__name__)


class _Skip:
    """Returned by resolve() for an optional request with no available candidate."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SKIP"

    def __bool__(self) -> bool:
        return False


SKIP = _Skip()


class PackageIndex(Protocol):
    def is_known(self, package: str) -> bool:
        ...


@dataclass(frozen=True)
class PackageRequest:
    logical_name: str
    candidates: Tuple[str, ...]
    optional: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.candidates, str):
            raise TypeError(f"PackageRequest {self.logical_name!r}: candidates must be a list of names, not a str")
        if not self.candidates:
            raise ValueError(f"PackageRequest {self.logical_name!r} needs at least one candidate")
        # Accept any iterable, store a tuple.
        object.__setattr__(self, "candidates", tuple(self.candidates))


def resolve(request: PackageRequest, packages: PackageIndex) -> Union[str, _Skip]:
    """Return the first candidate known to the package index, in listed order."""

    chosen = next((p for p in request.candidates if packages.is_known(p)), None)
    if chosen is not None:
        if chosen != request.candidates[0]:
            logger.info("%s: using %s (preferred %s unavailable)", request.logical_name, chosen, request.candidates[0])
        return chosen

    if request.optional:
        logger.warning(
            "%s: no candidate available (tried %s); continuing without it",
            request.logical_name,
            ", ".join(request.candidates),
        )
        return SKIP
    raise NoCandidateAvailableError(request.logical_name, request.candidates)


def resolve_all(requests: Iterable[PackageRequest], packages: PackageIndex) -> List[str]:
    """Resolve a batch; optional requests that resolve to SKIP are dropped."""

    out: List[str] = []
    for req in requests:
        name = resolve(req, packages)
        if name is not SKIP:
            out.append(str(name))
    return out


def request_from_manifest(name: str, raw: Any) -> PackageRequest:
    """Build a request from a manifest entry: a list, or {candidates, optional}."""

    if isinstance(raw, (list, tuple)):
        candidates, optional = list(raw), False
    elif isinstance(raw, Mapping):
        candidates, optional = raw.get("candidates") or [], bool(raw.get("optional", False))
        if not isinstance(candidates, list):
            raise ManifestError(f"capability {name}: candidates must be a list")
    else:
        raise ManifestError(f"capability {name}: expected a list or mapping, got {type(raw).__name__}")

    try:
        return PackageRequest(name, tuple(str(c) for c in candidates), optional)
    except ValueError as e:
        raise ManifestError(str(e)) from e
