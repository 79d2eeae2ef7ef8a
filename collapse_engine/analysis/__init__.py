"""Step recording and summary statistics."""
from .recorder import StepRecorder
from .metrics import degree_histogram, summary_statistics

__all__ = ["StepRecorder", "degree_histogram", "summary_statistics"]
