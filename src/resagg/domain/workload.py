"""Locate the pod spec inside workload manifests."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from resagg.domain.aggregator import StructuralError

_TEMPLATE_PATH: tuple[str, ...] = ("spec", "template", "spec")

POD_SPEC_PATHS: dict[str, tuple[str, ...]] = {
    "Pod": ("spec",),
    "Deployment": _TEMPLATE_PATH,
    "StatefulSet": _TEMPLATE_PATH,
    "DaemonSet": _TEMPLATE_PATH,
    "ReplicaSet": _TEMPLATE_PATH,
    "ReplicationController": _TEMPLATE_PATH,
    "Job": _TEMPLATE_PATH,
    "CronJob": ("spec", "jobTemplate", "spec", "template", "spec"),
}


class UnsupportedKindError(ValueError):
    """Raised for manifests whose kind carries no pod spec we know of."""


@dataclass(frozen=True)
class WorkloadRef:
    """Identity of the workload a pod spec was taken from."""

    kind: str
    name: str
    namespace: str | None = None

    def label(self) -> str:
        """Return ``Kind/name`` or ``Kind/namespace/name``."""
        if self.namespace:
            return f"{self.kind}/{self.namespace}/{self.name}"
        return f"{self.kind}/{self.name}"


def describe_workload(manifest: Mapping[str, Any]) -> WorkloadRef:
    """Extract kind, name and namespace from manifest metadata."""
    metadata = manifest.get("metadata")
    if not isinstance(metadata, Mapping):
        metadata = {}
    namespace = metadata.get("namespace")
    return WorkloadRef(
        kind=str(manifest.get("kind") or "<unknown>"),
        name=str(metadata.get("name") or "<unnamed>"),
        namespace=str(namespace) if namespace else None,
    )


def extract_pod_spec(manifest: Mapping[str, Any]) -> dict[str, Any]:
    """Return the pod spec of a workload manifest.

    A missing pod spec yields an empty mapping.
    """
    kind = manifest.get("kind")
    path = POD_SPEC_PATHS.get(kind) if isinstance(kind, str) else None
    if path is None:
        raise UnsupportedKindError(f"unsupported resource kind: {kind!r}")

    node: Any = manifest
    for depth, key in enumerate(path):
        node = node.get(key)
        if node is None:
            return {}
        if not isinstance(node, Mapping):
            field_path = ".".join(path[: depth + 1])
            raise StructuralError(
                f"{kind}: {field_path} must be a mapping, got {type(node).__name__}"
            )
    return dict(node)
