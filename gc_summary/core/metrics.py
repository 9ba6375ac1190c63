"""Metrics collected over a single digest run."""

import json
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Dict, Optional


@dataclass
class RunMetrics:
    """Counters and status for one coordinator pass."""

    run_id: str = field(default_factory=lambda: datetime.now().strftime("%Y%m%d_%H%M%S"))
    start_time: str = field(default_factory=lambda: datetime.now().isoformat())
    end_time: Optional[str] = None

    watermark_before: Optional[str] = None
    watermark_after: Optional[str] = None
    first_run: bool = False

    summaries_listed: int = 0
    records_new: int = 0
    records_reported: int = 0
    snapshots_written: int = 0
    baselines_created: int = 0

    success: bool = True
    error_message: Optional[str] = None

    def finalize(self, success: bool = True, error_message: Optional[str] = None) -> None:
        """Mark the run as complete and set final status."""
        self.end_time = datetime.now().isoformat()
        self.success = success
        self.error_message = error_message

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization."""
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def get_summary(self) -> str:
        """Generate a human-readable summary of the run."""
        lines = [
            f"Run Summary ({self.run_id})",
            "=" * 60,
            f"  Watermark: {self.watermark_before or 'none'} -> {self.watermark_after or 'unchanged'}",
        ]

        if self.first_run:
            lines.append("  First run: watermark initialized, nothing to report")

        lines.extend([
            f"  Records listed: {self.summaries_listed}",
            f"  New since watermark: {self.records_new}",
            f"  Records with changes: {self.records_reported}",
            f"  Snapshots written: {self.snapshots_written} ({self.baselines_created} new baselines)",
            "=" * 60,
        ])

        if not self.success and self.error_message:
            lines.extend(["", f"ERROR: {self.error_message}"])

        return "\n".join(lines)
