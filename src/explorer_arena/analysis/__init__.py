"""Post-run analysis."""

from .run_report import summarize_log

__all__ = ["summarize_log"]
