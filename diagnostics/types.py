from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from config import AppConfig


@dataclass
class DiagnosticOptions:
    enable_on_failure: bool = False
    capture_screenshot: bool = True
    capture_html: bool = True
    output_dir: Path = Path("./logs/diagnostics")
    max_artifacts_per_run: int = 10
    secrets: List[str] = field(default_factory=list)

    @classmethod
    def from_config(cls, app_config: AppConfig) -> "DiagnosticOptions":
        diagnostics = app_config.diagnostics
        return cls(
            enable_on_failure=diagnostics.enable_on_failure,
            capture_screenshot=diagnostics.capture_screenshot,
            capture_html=diagnostics.capture_html,
            output_dir=diagnostics.output_dir,
            max_artifacts_per_run=diagnostics.max_artifacts_per_run,
            secrets=[s for s in (app_config.login.username, app_config.login.password) if s],
        )


@dataclass
class DiagnosticContext:
    record_index: Optional[int]
    record_name: str
    stage: str
    error: Optional[BaseException]
