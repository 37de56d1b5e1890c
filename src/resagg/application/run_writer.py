"""Persist aggregation runs as a report directory."""

import json
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class RunResult:
    """Files written by a persisted run."""

    run_id: str
    capability: str
    output_dir: Path
    manifest_path: Path
    summary_path: Path
    output_files: tuple[Path, ...]


@dataclass(frozen=True)
class RunContext:
    """In-progress run directory."""

    run_id: str
    capability: str
    output_dir: Path
    started_at: str
    inputs: dict[str, Any]


@dataclass(frozen=True)
class SummaryContent:
    """Content of the run's summary.md."""

    title: str
    key_findings: list[str] | None = None
    warnings: list[str] | None = None


def _utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


def create_run(
    capability: str,
    *,
    inputs: dict[str, Any],
    reports_root: str,
) -> RunContext:
    """Create ``<reports_root>/<capability>/<run_id>`` and its context."""
    run_id = datetime.now().strftime("%Y%m%d_%H%M%S")
    output_dir = Path(reports_root) / capability / run_id
    output_dir.mkdir(parents=True, exist_ok=True)
    return RunContext(
        run_id=run_id,
        capability=capability,
        output_dir=output_dir,
        started_at=_utc_now_iso(),
        inputs=inputs,
    )


def write_text_artifact(ctx: RunContext, name: str, text: str) -> Path:
    """Write a UTF-8 artifact into the run directory."""
    path = ctx.output_dir / name
    path.write_text(text if text.endswith("\n") else text + "\n", encoding="utf-8")
    return path


def write_json_artifact(ctx: RunContext, name: str, payload: Any) -> Path:
    """Write an indented JSON artifact into the run directory."""
    return write_text_artifact(
        ctx, name, json.dumps(payload, ensure_ascii=False, indent=2)
    )


def build_summary_lines(
    content: SummaryContent,
    *,
    inputs: dict[str, Any],
    output_files: tuple[Path, ...],
) -> list[str]:
    """Build summary markdown lines."""
    lines = [f"# {content.title}", "", "## Inputs"]
    if inputs:
        lines.extend(f"- `{key}`: `{inputs[key]}`" for key in sorted(inputs))
    else:
        lines.append("- (none)")

    lines.extend(["", "## Artifacts"])
    if output_files:
        lines.extend(f"- `{path.name}`" for path in output_files)
    else:
        lines.append("- (none)")

    lines.extend(["", "## Effective Resources"])
    if content.key_findings:
        lines.extend(f"- {item}" for item in content.key_findings)
    else:
        lines.append("- No workloads were aggregated.")

    lines.extend(["", "## Skipped Entries"])
    if content.warnings:
        lines.extend(f"- {item}" for item in content.warnings)
    else:
        lines.append("- None.")
    return lines


def finalize_run(
    ctx: RunContext,
    *,
    content: SummaryContent,
    output_files: tuple[Path, ...],
    status: str = "success",
) -> RunResult:
    """Write summary.md and manifest.json and return the run result."""
    summary_path = write_text_artifact(
        ctx,
        "summary.md",
        "\n".join(
            build_summary_lines(content, inputs=ctx.inputs, output_files=output_files)
        ),
    )
    all_outputs = tuple(output_files) + (summary_path,)

    manifest_path = write_json_artifact(
        ctx,
        "manifest.json",
        {
            "run_id": ctx.run_id,
            "capability": ctx.capability,
            "started_at": ctx.started_at,
            "finished_at": _utc_now_iso(),
            "status": status,
            "inputs": ctx.inputs,
            "outputs": [str(p.relative_to(ctx.output_dir)) for p in all_outputs]
            + ["manifest.json"],
            "warnings": len(content.warnings or []),
        },
    )

    return RunResult(
        run_id=ctx.run_id,
        capability=ctx.capability,
        output_dir=ctx.output_dir,
        manifest_path=manifest_path,
        summary_path=summary_path,
        output_files=all_outputs + (manifest_path,),
    )
