"""Tests for the run directory writer."""

import json
from pathlib import Path

from resagg.application.run_writer import (
    SummaryContent,
    build_summary_lines,
    create_run,
    finalize_run,
    write_json_artifact,
)


def test_run_writer_creates_manifest_and_summary(tmp_path: Path) -> None:
    ctx = create_run(
        "unit-test-capability",
        inputs={"source": "pod.yaml"},
        reports_root=str(tmp_path),
    )
    data_file = write_json_artifact(ctx, "summary.json", [{"kind": "Pod"}])

    result = finalize_run(
        ctx,
        content=SummaryContent(
            title="Unit",
            key_findings=["`Pod/web`: requests: cpu=1"],
            warnings=["bad entry"],
        ),
        output_files=(data_file,),
    )

    assert result.output_dir == tmp_path / "unit-test-capability" / ctx.run_id
    assert result.summary_path.exists()
    assert data_file in result.output_files
    manifest = json.loads(result.manifest_path.read_text(encoding="utf-8"))
    assert manifest["capability"] == "unit-test-capability"
    assert manifest["outputs"] == ["summary.json", "summary.md", "manifest.json"]
    assert manifest["warnings"] == 1
    summary_md = result.summary_path.read_text(encoding="utf-8")
    assert "- bad entry" in summary_md
    assert "`Pod/web`: requests: cpu=1" in summary_md


def test_summary_lines_without_content() -> None:
    lines = build_summary_lines(
        SummaryContent(title="Empty"), inputs={}, output_files=()
    )
    assert lines[0] == "# Empty"
    assert "- No workloads were aggregated." in lines
    assert lines[-1] == "- None."
