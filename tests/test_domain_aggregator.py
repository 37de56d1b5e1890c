"""Tests for effective pod resource aggregation."""

from __future__ import annotations

import copy
from typing import Any

import pytest

from resagg.domain.aggregator import (
    Phase,
    ResourceKind,
    StructuralError,
    aggregate,
    build_quantity_map,
)
from resagg.domain.quantity import parse_quantity


def _container(
    name: str,
    *,
    requests: dict[str, Any] | None = None,
    limits: dict[str, Any] | None = None,
) -> dict[str, Any]:
    resources: dict[str, Any] = {}
    if requests is not None:
        resources["requests"] = requests
    if limits is not None:
        resources["limits"] = limits
    return {"name": name, "image": "busybox", "resources": resources}


def _text(values: dict[str, Any]) -> dict[str, str]:
    return {name: str(qty) for name, qty in values.items()}


def test_empty_pod_spec() -> None:
    summary = aggregate({})
    assert summary.total_requests == {}
    assert summary.total_limits == {}
    assert summary.init_max_requests == {}
    assert summary.init_max_limits == {}
    assert summary.effective_requests == {}
    assert summary.effective_limits == {}
    assert summary.skipped == []


def test_main_containers_are_summed() -> None:
    summary = aggregate(
        {
            "containers": [
                _container("a", requests={"cpu": "100m"}),
                _container("b", requests={"cpu": "250m"}),
                _container("c", requests={"cpu": "150m"}),
            ]
        }
    )
    assert summary.total_requests["cpu"] == parse_quantity("500m")
    assert str(summary.total_requests["cpu"]) == "500m"


def test_init_containers_take_maximum() -> None:
    summary = aggregate(
        {
            "initContainers": [
                _container("migrate", requests={"cpu": "200m"}),
                _container("warmup", requests={"cpu": "900m"}),
            ]
        }
    )
    assert summary.init_max_requests["cpu"] == parse_quantity("900m")
    assert "cpu" not in summary.total_requests


def test_effective_prefers_larger_init_phase() -> None:
    summary = aggregate(
        {
            "initContainers": [_container("init", requests={"memory": "512Mi"})],
            "containers": [_container("app", requests={"memory": "300Mi"})],
        }
    )
    assert str(summary.effective_requests["memory"]) == "512Mi"


def test_effective_prefers_larger_main_phase() -> None:
    summary = aggregate(
        {
            "initContainers": [_container("init", requests={"memory": "300Mi"})],
            "containers": [
                _container("app", requests={"memory": "256Mi"}),
                _container("sidecar", requests={"memory": "256Mi"}),
            ],
        }
    )
    assert str(summary.effective_requests["memory"]) == "512Mi"


def test_equal_phases_use_init_value() -> None:
    summary = aggregate(
        {
            "initContainers": [_container("init", requests={"cpu": "1"})],
            "containers": [_container("app", requests={"cpu": "1000m"})],
        }
    )
    assert summary.effective_requests["cpu"] == parse_quantity("1")
    assert summary.effective_requests["cpu"] is summary.init_max_requests["cpu"]


def test_suffixes_mix_in_max_and_sum() -> None:
    summary = aggregate(
        {
            "initContainers": [
                _container("a", requests={"cpu": "1"}),
                _container("b", requests={"cpu": "1000m"}),
            ],
            "containers": [
                _container("c", requests={"cpu": "0.5"}),
                _container("d", requests={"cpu": "500m"}),
            ],
        }
    )
    assert summary.init_max_requests["cpu"] == parse_quantity("1")
    assert summary.total_requests["cpu"] == parse_quantity("1")


def test_resource_only_in_main_containers_is_effective() -> None:
    summary = aggregate(
        {
            "initContainers": [_container("init", requests={"cpu": "100m"})],
            "containers": [
                _container("app", requests={"cpu": "50m", "memory": "128Mi"})
            ],
        }
    )
    assert _text(summary.effective_requests) == {"cpu": "100m", "memory": "128Mi"}


def test_missing_limits_contribute_nothing() -> None:
    summary = aggregate(
        {
            "initContainers": [_container("init", requests={"cpu": "100m"})],
            "containers": [_container("app", requests={"cpu": "200m"})],
        }
    )
    assert summary.total_limits == {}
    assert summary.init_max_limits == {}
    assert summary.effective_limits == {}
    assert "cpu" in summary.effective_requests


def test_limits_are_aggregated_like_requests() -> None:
    summary = aggregate(
        {
            "initContainers": [_container("init", limits={"cpu": "2"})],
            "containers": [
                _container("app", limits={"cpu": "500m", "memory": "1Gi"}),
                _container("sidecar", limits={"cpu": "500m", "memory": "1Gi"}),
            ],
        }
    )
    assert _text(summary.total_limits) == {"cpu": "1", "memory": "2Gi"}
    assert _text(summary.effective_limits) == {"cpu": "2", "memory": "2Gi"}


def test_malformed_entry_is_isolated() -> None:
    summary = aggregate(
        {
            "containers": [
                _container("app", requests={"cpu": "lots", "memory": "64Mi"}),
            ]
        }
    )
    assert _text(summary.total_requests) == {"memory": "64Mi"}
    assert len(summary.skipped) == 1
    skipped = summary.skipped[0]
    assert skipped.phase is Phase.MAIN
    assert skipped.kind is ResourceKind.REQUESTS
    assert skipped.container == "app"
    assert skipped.resource == "cpu"
    assert skipped.raw_value == "lots"
    assert "app" in skipped.describe()


def test_yaml_numbers_are_accepted() -> None:
    summary = aggregate(
        {"containers": [_container("app", requests={"cpu": 2, "nvidia.com/gpu": 1})]}
    )
    assert _text(summary.total_requests) == {"cpu": "2", "nvidia.com/gpu": "1"}


def test_odd_shapes_are_tolerated() -> None:
    summary = aggregate(
        {
            "initContainers": None,
            "containers": [
                "not-a-container",
                {"name": "no-resources"},
                {"name": "bad-resources", "resources": "oops"},
                {"name": "bad-requests", "resources": {"requests": ["cpu"]}},
                {"resources": {"requests": {"cpu": "1"}}},
            ],
        }
    )
    assert _text(summary.total_requests) == {"cpu": "1"}
    assert summary.skipped == []


def test_unnamed_container_uses_index() -> None:
    summary = aggregate({"containers": [{"resources": {"limits": {"cpu": "x"}}}]})
    assert summary.skipped[0].container == "#0"
    assert summary.skipped[0].kind is ResourceKind.LIMITS


@pytest.mark.parametrize("field", ["containers", "initContainers"])
@pytest.mark.parametrize("value", [{"name": "app"}, "app", 3])
def test_container_list_with_wrong_shape_fails(field: str, value: object) -> None:
    with pytest.raises(StructuralError, match=field):
        aggregate({field: value})


def test_pod_spec_must_be_mapping() -> None:
    with pytest.raises(StructuralError):
        aggregate(["containers"])  # type: ignore[arg-type]


def test_aggregation_is_idempotent_and_pure() -> None:
    pod_spec = {
        "initContainers": [
            _container("init", requests={"cpu": "1"}, limits={"cpu": "2"})
        ],
        "containers": [
            _container("app", requests={"cpu": "250m", "memory": "1Gi"}),
            _container("log", requests={"cpu": "bad"}, limits={"memory": "128Mi"}),
        ],
    }
    original = copy.deepcopy(pod_spec)
    first = aggregate(pod_spec)
    second = aggregate(pod_spec)
    assert first == second
    assert first is not second
    assert pod_spec == original


def test_order_independence() -> None:
    containers = [
        _container("a", requests={"cpu": "100m"}),
        _container("b", requests={"cpu": "300m", "memory": "1Gi"}),
        _container("c", requests={"memory": "512Mi"}),
    ]
    forward = aggregate({"containers": containers, "initContainers": containers})
    backward = aggregate(
        {"containers": containers[::-1], "initContainers": containers[::-1]}
    )
    assert forward.total_requests == backward.total_requests
    assert forward.init_max_requests == backward.init_max_requests
    assert forward.effective_requests == backward.effective_requests


def test_build_quantity_map_returns_rejected_entries() -> None:
    quantities, rejected = build_quantity_map({"cpu": "1", "memory": "1Qi"})
    assert quantities == {"cpu": parse_quantity("1")}
    assert [entry.resource for entry in rejected] == ["memory"]
    assert rejected[0].raw_value == "1Qi"


def test_build_quantity_map_ignores_non_mappings() -> None:
    assert build_quantity_map(None) == ({}, [])
    assert build_quantity_map(["cpu"]) == ({}, [])


def test_resource_names_are_sorted_union() -> None:
    summary = aggregate(
        {
            "initContainers": [_container("init", limits={"memory": "1Gi"})],
            "containers": [_container("app", requests={"cpu": "1"})],
        }
    )
    assert summary.resource_names() == ["cpu", "memory"]
