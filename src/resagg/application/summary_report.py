"""Render aggregation summaries as text, rich tables and JSON payloads."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from rich import box
from rich.table import Table

from resagg.domain.aggregator import ResourceKind, ResourceList, Summary

_MISSING = "-"


def _cell(values: ResourceList, name: str) -> str:
    qty = values.get(name)
    return _MISSING if qty is None else str(qty)


def _serialize(values: ResourceList) -> dict[str, str]:
    return {name: str(values[name]) for name in sorted(values)}


def format_summary_text(summary: Summary) -> str:
    """Return the plain-text per-resource report."""
    lines: list[str] = []
    for name in summary.resource_names():
        lines.append(f"{name}:")
        lines.append(f"  InitMax Requests:   {_cell(summary.init_max_requests, name)}")
        lines.append(f"  Total Requests:     {_cell(summary.total_requests, name)}")
        lines.append(
            f"  Effective Requests: {_cell(summary.effective_requests, name)}"
        )
        if name in summary.effective_limits:
            lines.append(
                f"  InitMax Limits:     {_cell(summary.init_max_limits, name)}"
            )
            lines.append(f"  Total Limits:       {_cell(summary.total_limits, name)}")
            lines.append(
                f"  Effective Limits:   {_cell(summary.effective_limits, name)}"
            )
        lines.append("")
    return "\n".join(lines)


def build_summary_table(title: str, summary: Summary) -> Table:
    """Build a rich table with one row per resource name."""
    table = Table(title=title, show_lines=False, expand=False, box=box.SIMPLE_HEAVY)
    table.add_column("resource", justify="left")
    for kind in ResourceKind:
        label = kind.value
        table.add_column(f"init max {label}", justify="right")
        table.add_column(f"total {label}", justify="right")
        table.add_column(f"effective {label}", justify="right", style="bold")

    for name in summary.resource_names():
        row = [name]
        for kind in ResourceKind:
            row.extend(
                (
                    _cell(summary.init_max(kind), name),
                    _cell(summary.totals(kind), name),
                    _cell(summary.effective(kind), name),
                )
            )
        table.add_row(*row)
    return table


def summary_to_dict(summary: Summary) -> dict[str, Any]:
    """Convert summary to a JSON-serializable dictionary."""
    return {
        "total_requests": _serialize(summary.total_requests),
        "total_limits": _serialize(summary.total_limits),
        "init_max_requests": _serialize(summary.init_max_requests),
        "init_max_limits": _serialize(summary.init_max_limits),
        "effective_requests": _serialize(summary.effective_requests),
        "effective_limits": _serialize(summary.effective_limits),
        "effective_milli": {
            kind.value: {
                name: summary.effective(kind)[name].milli_value()
                for name in sorted(summary.effective(kind))
            }
            for kind in ResourceKind
        },
        "skipped": [
            {**asdict(entry), "phase": entry.phase.value, "kind": entry.kind.value}
            for entry in summary.skipped
        ],
    }
