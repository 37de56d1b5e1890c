"""Effective pod resource aggregation.

Init containers run one at a time before the main containers start, so a pod
never needs more than its largest init container at once. Main containers run
concurrently and their demands add up. The effective value per resource is
whichever of the two phases asks for more.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NamedTuple

from resagg.domain.quantity import Quantity, QuantityParseError, parse_quantity

logger = logging.getLogger(__name__)

ResourceList = dict[str, Quantity]


class StructuralError(ValueError):
    """Raised when a pod spec field has the wrong shape."""


class ResourceKind(str, Enum):
    """Resource section of a container."""

    REQUESTS = "requests"
    LIMITS = "limits"


class Phase(str, Enum):
    """Pod lifecycle phase, named after the pod spec field listing it."""

    INIT = "initContainers"
    MAIN = "containers"


class RejectedQuantity(NamedTuple):
    """Resource entry that could not be parsed."""

    resource: str
    raw_value: str
    reason: str


@dataclass(frozen=True)
class SkippedEntry:
    """Resource entry dropped from a container's contribution."""

    phase: Phase
    container: str
    kind: ResourceKind
    resource: str
    raw_value: str
    reason: str

    def describe(self) -> str:
        """Return one-line human readable description."""
        return (
            f"{self.phase.value}/{self.container}: {self.kind.value}."
            f"{self.resource}={self.raw_value!r} skipped ({self.reason})"
        )


@dataclass
class Summary:
    """Per-resource totals, init maxima and effective values of a pod."""

    total_requests: ResourceList = field(default_factory=dict)
    total_limits: ResourceList = field(default_factory=dict)
    init_max_requests: ResourceList = field(default_factory=dict)
    init_max_limits: ResourceList = field(default_factory=dict)
    effective_requests: ResourceList = field(default_factory=dict)
    effective_limits: ResourceList = field(default_factory=dict)
    skipped: list[SkippedEntry] = field(default_factory=list)

    def totals(self, kind: ResourceKind) -> ResourceList:
        """Return main-container sums for a resource kind."""
        if kind is ResourceKind.REQUESTS:
            return self.total_requests
        return self.total_limits

    def init_max(self, kind: ResourceKind) -> ResourceList:
        """Return init-container maxima for a resource kind."""
        if kind is ResourceKind.REQUESTS:
            return self.init_max_requests
        return self.init_max_limits

    def effective(self, kind: ResourceKind) -> ResourceList:
        """Return effective values for a resource kind."""
        if kind is ResourceKind.REQUESTS:
            return self.effective_requests
        return self.effective_limits

    def phase_target(self, phase: Phase, kind: ResourceKind) -> ResourceList:
        """Return the mapping a phase folds its containers into."""
        if phase is Phase.INIT:
            return self.init_max(kind)
        return self.totals(kind)

    def resource_names(self) -> list[str]:
        """Return every resource name present in any mapping, sorted."""
        names: set[str] = set()
        for kind in ResourceKind:
            names.update(self.totals(kind), self.init_max(kind), self.effective(kind))
        return sorted(names)


def _fold_max(dest: ResourceList, src: ResourceList) -> None:
    for name, qty in src.items():
        current = dest.get(name)
        if current is None or qty > current:
            dest[name] = qty


def _fold_sum(dest: ResourceList, src: ResourceList) -> None:
    for name, qty in src.items():
        current = dest.get(name)
        dest[name] = qty if current is None else current + qty


_PHASE_FOLDS: dict[Phase, Callable[[ResourceList, ResourceList], None]] = {
    Phase.INIT: _fold_max,
    Phase.MAIN: _fold_sum,
}


def build_quantity_map(raw: Any) -> tuple[ResourceList, list[RejectedQuantity]]:
    """Parse a resource-name -> quantity mapping, keeping what parses.

    Returns the parsed quantities and the entries that were rejected.
    Anything that is not a mapping is an empty contribution.
    """
    quantities: ResourceList = {}
    rejected: list[RejectedQuantity] = []
    if not isinstance(raw, Mapping):
        return quantities, rejected

    for name, value in raw.items():
        try:
            quantities[str(name)] = parse_quantity(value)
        except QuantityParseError as exc:
            rejected.append(RejectedQuantity(str(name), str(value), str(exc)))
    return quantities, rejected


def _container_list(pod_spec: Mapping[str, Any], phase: Phase) -> Sequence[Any]:
    containers = pod_spec.get(phase.value)
    if containers is None:
        return ()
    if isinstance(containers, (str, bytes)) or not isinstance(containers, Sequence):
        raise StructuralError(
            f"{phase.value} must be a list, got {type(containers).__name__}"
        )
    return containers


def _container_name(container: Mapping[str, Any], index: int) -> str:
    name = container.get("name")
    return str(name) if name else f"#{index}"


def _process_phase(pod_spec: Mapping[str, Any], phase: Phase, summary: Summary) -> None:
    fold = _PHASE_FOLDS[phase]
    for index, container in enumerate(_container_list(pod_spec, phase)):
        if not isinstance(container, Mapping):
            logger.debug("Ignoring non-mapping %s entry #%d", phase.value, index)
            continue
        name = _container_name(container, index)
        resources = container.get("resources")
        if not isinstance(resources, Mapping):
            resources = {}
        for kind in ResourceKind:
            quantities, rejected = build_quantity_map(resources.get(kind.value))
            fold(summary.phase_target(phase, kind), quantities)
            for entry in rejected:
                logger.debug(
                    "Skipping %s.%s=%r in %s/%s: %s",
                    kind.value,
                    entry.resource,
                    entry.raw_value,
                    phase.value,
                    name,
                    entry.reason,
                )
                summary.skipped.append(
                    SkippedEntry(
                        phase=phase,
                        container=name,
                        kind=kind,
                        resource=entry.resource,
                        raw_value=entry.raw_value,
                        reason=entry.reason,
                    )
                )


def _derive_effective(summary: Summary) -> None:
    for kind in ResourceKind:
        totals = summary.totals(kind)
        init_max = summary.init_max(kind)
        effective = summary.effective(kind)
        for name in set(totals) | set(init_max):
            total = totals.get(name)
            peak = init_max.get(name)
            if total is not None and (peak is None or total > peak):
                effective[name] = total
            elif peak is not None:
                effective[name] = peak


def aggregate(pod_spec: Mapping[str, Any]) -> Summary:
    """Compute totals, init maxima and effective values for a pod spec.

    Raises
    ------
    StructuralError
        If the pod spec is not a mapping or a container list is not a list.
    """
    if not isinstance(pod_spec, Mapping):
        raise StructuralError(
            f"pod spec must be a mapping, got {type(pod_spec).__name__}"
        )

    summary = Summary()
    for phase in (Phase.INIT, Phase.MAIN):
        _process_phase(pod_spec, phase, summary)
    _derive_effective(summary)

    logger.debug(
        "Aggregated %d resource names, %d entries skipped",
        len(summary.resource_names()),
        len(summary.skipped),
    )
    return summary
