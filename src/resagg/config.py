"""Application configuration and environment loading."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


@dataclass(frozen=True)
class AggregatorConfig:
    """Defaults for CLI runs, overridable by command-line options."""

    log_level: str = "WARNING"
    output_format: str = "table"
    reports_root: Path | None = None

    @property
    def persists_reports(self) -> bool:
        """Return whether runs are written to a reports directory by default."""
        return self.reports_root is not None


def load_config(env_path: Path = Path(".env")) -> AggregatorConfig:
    """Load config from environment and optional .env file."""
    load_dotenv(env_path, override=False)
    reports_root_raw = os.getenv("RESAGG_REPORTS_ROOT")
    return AggregatorConfig(
        log_level=os.getenv("RESAGG_LOG_LEVEL", "WARNING"),
        output_format=os.getenv("RESAGG_OUTPUT", "table"),
        reports_root=Path(reports_root_raw) if reports_root_raw else None,
    )
