"""Resource aggregation use-case."""

from __future__ import annotations

import json
from enum import Enum

from rich.console import Console
from rich.markup import escape

from resagg.application.aggregation_service import (
    StreamAggregation,
    aggregate_manifest_text,
)
from resagg.application.run_writer import (
    RunResult,
    SummaryContent,
    create_run,
    finalize_run,
    write_json_artifact,
    write_text_artifact,
)
from resagg.application.summary_report import (
    build_summary_table,
    format_summary_text,
    summary_to_dict,
)
from resagg.domain.workload import WorkloadRef
from resagg.infrastructure.manifest_reader import read_manifest_source

CAPABILITY = "resource-aggregation"


class OutputFormat(str, Enum):
    """Stdout rendering mode."""

    TABLE = "table"
    TEXT = "text"
    JSON = "json"

    @classmethod
    def parse(cls, value: str) -> OutputFormat:
        """Return the format named by ``value``."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(member.value for member in cls)
            raise ValueError(
                f"invalid output format {value!r}; expected one of {choices}"
            ) from None


def _workload_fields(workload: WorkloadRef) -> dict[str, object]:
    return {
        "kind": workload.kind,
        "name": workload.name,
        "namespace": workload.namespace,
    }


def results_to_payload(stream: StreamAggregation) -> list[dict[str, object]]:
    """Convert a stream's results to JSON-serializable records.

    Skipped documents are listed after the workloads with their reason.
    """
    records = [
        {
            **_workload_fields(result.workload),
            "summary": summary_to_dict(result.summary),
        }
        for result in stream.workloads
    ]
    records.extend(
        {**_workload_fields(entry.workload), "skipped": entry.reason}
        for entry in stream.skipped
    )
    return records


def _results_text(stream: StreamAggregation) -> str:
    blocks = [
        f"Result ({result.workload.label()}):\n{format_summary_text(result.summary)}"
        for result in stream.workloads
    ]
    blocks.extend(f"WARN: {entry.describe()}\n" for entry in stream.skipped)
    return "\n".join(blocks)


def _render_stdout(stream: StreamAggregation, output_format: OutputFormat) -> None:
    console = Console()
    if output_format is OutputFormat.JSON:
        console.print_json(json.dumps(results_to_payload(stream)))
        return
    if output_format is OutputFormat.TEXT:
        console.print(
            _results_text(stream), markup=False, highlight=False, soft_wrap=True
        )
        return

    for result in stream.workloads:
        console.print(build_summary_table(result.workload.label(), result.summary))
        for entry in result.summary.skipped:
            console.print(f"[yellow]WARN:[/yellow] {escape(entry.describe())}")
    for skipped in stream.skipped:
        console.print(f"[yellow]WARN:[/yellow] {escape(skipped.describe())}")


def _findings(stream: StreamAggregation) -> list[str]:
    findings: list[str] = []
    for result in stream.workloads:
        parts = []
        for label, values in (
            ("requests", result.summary.effective_requests),
            ("limits", result.summary.effective_limits),
        ):
            rendered = ", ".join(f"{name}={values[name]}" for name in sorted(values))
            parts.append(f"{label}: {rendered or 'none'}")
        findings.append(f"`{result.workload.label()}`: " + "; ".join(parts))
    return findings


def _warnings(stream: StreamAggregation) -> list[str]:
    warnings = [
        f"`{result.workload.label()}` {entry.describe()}"
        for result in stream.workloads
        for entry in result.summary.skipped
    ]
    warnings.extend(entry.describe() for entry in stream.skipped)
    return warnings


def execute_resource_aggregation(
    source: str,
    *,
    output_format: str = "table",
    reports_root: str | None = None,
) -> RunResult | None:
    """Aggregate effective resources of every workload in ``source``.

    Prints to stdout when ``reports_root`` is omitted and returns ``None``;
    otherwise writes a run directory and returns its result.
    """
    fmt = OutputFormat.parse(output_format)
    stream = aggregate_manifest_text(read_manifest_source(source))

    if reports_root is None:
        _render_stdout(stream, fmt)
        return None

    ctx = create_run(
        CAPABILITY,
        inputs={
            "source": source,
            "workloads": len(stream.workloads),
            "skipped_documents": len(stream.skipped),
        },
        reports_root=reports_root,
    )
    output_files = (
        write_json_artifact(ctx, "summary.json", results_to_payload(stream)),
        write_text_artifact(ctx, "report.txt", _results_text(stream)),
    )
    content = SummaryContent(
        title="Effective Pod Resources",
        key_findings=_findings(stream),
        warnings=_warnings(stream),
    )
    return finalize_run(ctx, content=content, output_files=output_files)
