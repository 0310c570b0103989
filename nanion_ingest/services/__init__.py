from .scheduler import BatchScheduler, BatchSetupError, extract_one, run_batch, scan_input_paths
from .summary import render_summary_line, render_summary_report, write_summary_report

__all__ = [
    "BatchScheduler",
    "BatchSetupError",
    "extract_one",
    "run_batch",
    "scan_input_paths",
    "render_summary_line",
    "render_summary_report",
    "write_summary_report",
]
