"""
Run metrics for the materials entry bot.

Counts how every wait ended and how far every record got, so that a run
with many silent defaults or unclosed dialogs can be spotted afterwards.
"""

import json
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional

import structlog


class MetricsCollector:
    """Collects wait and record outcomes and exports them as JSON."""

    def __init__(self, max_duration_samples: int = 100):
        self.logger = structlog.get_logger(__name__)
        self.max_duration_samples = max_duration_samples
        self.wait_metrics: Dict[str, Dict[str, Any]] = {}
        self.record_metrics: Dict[str, int] = {
            "submitted": 0,
            "failed": 0,
            "modal_unclosed": 0,
            "field_warnings": 0,
        }
        self.failed_stages: Dict[str, int] = {}
        self.lock = threading.RLock()
        self.session_id = f"session_{int(time.time())}"
        self.start_time = time.time()

    def record_wait(self, label: str, status: str, duration_ms: float) -> None:
        """
        Record one finished wait.

        Args:
            label: Stable name of the condition (not the per-record description)
            status: "success", "timeout" or "error"
            duration_ms: Time spent polling
        """
        with self.lock:
            metrics = self.wait_metrics.setdefault(
                label,
                {"success": 0, "timeout": 0, "error": 0, "durations": []},
            )
            metrics[status] = metrics.get(status, 0) + 1
            metrics["durations"].append(duration_ms)
            if len(metrics["durations"]) > self.max_duration_samples:
                metrics["durations"] = metrics["durations"][-self.max_duration_samples:]

    def record_outcome(self, submitted: bool, failed_stage: Optional[str] = None, modal_closed: bool = True, field_warnings: int = 0) -> None:
        with self.lock:
            if submitted:
                self.record_metrics["submitted"] += 1
            else:
                self.record_metrics["failed"] += 1
                if failed_stage:
                    self.failed_stages[failed_stage] = self.failed_stages.get(failed_stage, 0) + 1
            if submitted and not modal_closed:
                self.record_metrics["modal_unclosed"] += 1
            self.record_metrics["field_warnings"] += field_warnings

    def get_summary(self) -> Dict[str, Any]:
        with self.lock:
            waits = {}
            for label, metrics in self.wait_metrics.items():
                durations = metrics["durations"]
                waits[label] = {
                    "success": metrics["success"],
                    "timeout": metrics["timeout"],
                    "error": metrics["error"],
                    "avg_duration_ms": round(sum(durations) / len(durations), 2) if durations else 0.0,
                    "max_duration_ms": round(max(durations), 2) if durations else 0.0,
                }
            return {
                "session_id": self.session_id,
                "uptime_seconds": round(time.time() - self.start_time, 2),
                "records": dict(self.record_metrics),
                "failed_stages": dict(self.failed_stages),
                "waits": waits,
            }

    def export_to_file(self, file_path: Path) -> None:
        """Write the summary to ``file_path``; export failures are logged, not raised."""
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, "w", encoding="utf-8") as f:
                json.dump(self.get_summary(), f, indent=2, ensure_ascii=False)
            self.logger.info("metrics_exported", file_path=str(file_path))
        except OSError as e:
            self.logger.error("metrics_export_failed", error=str(e), file_path=str(file_path))
