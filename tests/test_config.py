"""Tests for application config."""

from __future__ import annotations

from pathlib import Path

import pytest

from resagg.config import AggregatorConfig, load_config


def test_defaults() -> None:
    cfg = AggregatorConfig()
    assert cfg.log_level == "WARNING"
    assert cfg.output_format == "table"
    assert not cfg.persists_reports


def test_load_config_from_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("RESAGG_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("RESAGG_OUTPUT", "json")
    monkeypatch.setenv("RESAGG_REPORTS_ROOT", str(tmp_path / "reports"))
    cfg = load_config(tmp_path / "missing.env")
    assert cfg.log_level == "DEBUG"
    assert cfg.output_format == "json"
    assert cfg.reports_root == tmp_path / "reports"
    assert cfg.persists_reports


def test_load_config_from_env_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    for name in ("RESAGG_LOG_LEVEL", "RESAGG_OUTPUT", "RESAGG_REPORTS_ROOT"):
        # setenv first so teardown also removes what load_dotenv writes
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    env_file = tmp_path / ".env"
    env_file.write_text("RESAGG_OUTPUT=text\n", encoding="utf-8")
    cfg = load_config(env_file)
    assert cfg.output_format == "text"
    assert cfg.reports_root is None
