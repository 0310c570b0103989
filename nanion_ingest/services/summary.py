from __future__ import annotations

from datetime import datetime
from pathlib import Path

from ..models.batch_result import BatchResult, FileOutcome

"""Summary rendering service.

Two renderings of the same BatchResult:
- analysis_summary.txt: header, one PASS/FAIL line per input file (input
  order), aggregate counts
- a single SUMMARY log line for the console
"""

SUMMARY_FILE_NAME = "analysis_summary.txt"
SUMMARY_HEADER = "=== NANION ANALYSIS SUMMARY ==="


def _format_seconds(value: float) -> str:
    """Render seconds without scientific notation or trailing zeros."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.2f}".rstrip("0").rstrip(".")


def render_file_line(outcome: FileOutcome) -> str:
    if outcome.succeeded:
        details = f"{outcome.protocol_type}, {outcome.iv_group_count} IV groups"
        if outcome.degraded:
            details += " (approximate)"
        details += f", {outcome.n_rows} rows x {outcome.n_columns} columns"
        if outcome.column_mismatch:
            details += ", columns truncated"
        return f"PASS {outcome.file_name} ({details})"
    return f"FAIL {outcome.file_name} [{outcome.phase}] {outcome.error_type}: {outcome.error}"


def render_summary_report(result: BatchResult, generated_at: datetime | None = None) -> str:
    """Render the full text of analysis_summary.txt."""
    generated_at = generated_at or result.end_time
    total = result.total_files
    rate = (100.0 * result.success_count / total) if total else 0.0
    lines = [
        SUMMARY_HEADER,
        f"Date: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}",
        f"Total files: {total}",
        f"Validated: {result.validated_count}",
        f"Success rate: {rate:.1f}%",
        "",
        "--- FILE DETAILS ---",
    ]
    lines.extend(render_file_line(o) for o in result.outcomes)
    lines.extend([
        "",
        "--- TOTALS ---",
        f"Extraction succeeded: {result.success_count}",
        f"Extraction failed: {result.failure_count}",
        f"Rejected at validation: {result.validation_failure_count}",
        f"Approximate IV counts: {result.degraded_count}",
        f"Elapsed seconds: {_format_seconds(result.elapsed_seconds)}",
    ])
    return "\n".join(lines) + "\n"


def write_summary_report(result: BatchResult, output_dir: Path) -> Path:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / SUMMARY_FILE_NAME
    path.write_text(render_summary_report(result), encoding="utf-8")
    return path


def render_summary_line(result: BatchResult) -> str:
    """Render the one-line console summary.

    Format:
    SUMMARY files={total} validated={validated} success={success} failed={failed}
    rejected={rejected} rows={rows} elapsed_sec={elapsed}
    """
    return (
        f"SUMMARY files={result.total_files} "
        f"validated={result.validated_count} "
        f"success={result.success_count} "
        f"failed={result.failure_count} "
        f"rejected={result.validation_failure_count} "
        f"rows={result.total_rows} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
