"""Aggregate every workload found in a manifest stream."""

import logging
from dataclasses import dataclass, field

from resagg.domain.aggregator import StructuralError, Summary, aggregate
from resagg.domain.workload import (
    UnsupportedKindError,
    WorkloadRef,
    describe_workload,
    extract_pod_spec,
)
from resagg.infrastructure.manifest_reader import load_manifests

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkloadSummary:
    """Aggregation result for one workload manifest."""

    workload: WorkloadRef
    summary: Summary


@dataclass(frozen=True)
class SkippedManifest:
    """Document of a multi-document stream that was not aggregated."""

    workload: WorkloadRef
    reason: str

    def describe(self) -> str:
        """Return one-line human readable description."""
        return f"{self.workload.label()}: skipped ({self.reason})"


@dataclass
class StreamAggregation:
    """Results of a manifest stream plus the documents left out of it."""

    workloads: list[WorkloadSummary] = field(default_factory=list)
    skipped: list[SkippedManifest] = field(default_factory=list)


def aggregate_manifest_text(text: str) -> StreamAggregation:
    """Decode manifests and aggregate the pod spec of each one.

    A single document fails hard on an unsupported kind or a malformed pod
    spec. In a multi-document stream such documents are skipped and recorded.
    """
    manifests = load_manifests(text)
    stream = StreamAggregation()
    for manifest in manifests:
        workload = describe_workload(manifest)
        try:
            summary = aggregate(extract_pod_spec(manifest))
        except (UnsupportedKindError, StructuralError) as exc:
            if len(manifests) == 1:
                raise
            logger.debug("Skipping %s: %s", workload.label(), exc)
            stream.skipped.append(SkippedManifest(workload=workload, reason=str(exc)))
            continue
        stream.workloads.append(WorkloadSummary(workload=workload, summary=summary))
    return stream
