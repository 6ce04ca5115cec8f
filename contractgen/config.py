"""Run settings: repo-relative defaults, overridable from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ROOT_DIR = Path(__file__).parent.parent
SPEC_PATH = ROOT_DIR / "spec" / "openapi.yaml"
OUTPUT_PATH = ROOT_DIR / "generated" / "contracts.json"


@dataclass(frozen=True)
class Settings:
    spec_path: Path = SPEC_PATH
    output_path: Path = OUTPUT_PATH
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Read ``CONTRACTGEN_SPEC``, ``CONTRACTGEN_OUTPUT`` and ``CONTRACTGEN_LOG_LEVEL``."""
    return Settings(
        spec_path=Path(os.environ.get("CONTRACTGEN_SPEC", SPEC_PATH)),
        output_path=Path(os.environ.get("CONTRACTGEN_OUTPUT", OUTPUT_PATH)),
        log_level=os.environ.get("CONTRACTGEN_LOG_LEVEL", "INFO").upper(),
    )
