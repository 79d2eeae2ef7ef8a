"""
Step recorder.

Keeps the most recent StepReports of a run in memory so they can be
summarised or written out once the run ends.

    recorder = StepRecorder(max_records=100)
    simulator.register_post_hook(recorder.record)
    ...
    json.dump(recorder.to_dicts(), f)
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, Any, Deque, Dict, List, Optional

if TYPE_CHECKING:
    from ..simulation.simulator import StepReport


class StepRecorder:
    """Bounded history of StepReports.

    Attributes:
        max_records: Capacity; once full the earliest step is forgotten.
            None keeps every step.
    """

    def __init__(self, max_records: Optional[int] = None) -> None:
        if max_records is not None and max_records < 1:
            raise ValueError(f"StepRecorder capacity must be positive, got {max_records}")
        self.max_records = max_records
        self._reports: Deque["StepReport"] = deque(maxlen=max_records)

    def record(self, report: "StepReport") -> None:
        self._reports.append(report)

    def records(self) -> List["StepReport"]:
        return list(self._reports)

    def clear(self) -> None:
        self._reports.clear()

    def __len__(self) -> int:
        return len(self._reports)

    def to_dicts(self) -> List[Dict[str, Any]]:
        """JSON-ready view of every kept step."""
        return [report.to_dict() for report in self._reports]

    def brokenness_series(self, building_id: int) -> List[Optional[int]]:
        """Brokenness written to one building at each kept step (None where untouched)."""
        return [
            report.changes.changed_value(building_id, "brokenness")
            if report.changes.has_change(building_id, "brokenness")
            else None
            for report in self._reports
        ]
