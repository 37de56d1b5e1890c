"""Application facade exports for stable use-case API."""

from resagg.application.aggregation_service import (
    SkippedManifest,
    StreamAggregation,
    WorkloadSummary,
    aggregate_manifest_text,
)
from resagg.application.aggregation_use_case import (
    OutputFormat,
    execute_resource_aggregation,
)
from resagg.application.run_writer import RunResult

__all__ = [
    "aggregate_manifest_text",
    "execute_resource_aggregation",
    "OutputFormat",
    "RunResult",
    "SkippedManifest",
    "StreamAggregation",
    "WorkloadSummary",
]
