from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .parsed_table import ParsedTable

"""Per-file outcome and batch aggregation models.

BatchResult is assembled once by the aggregation phase and is not mutated
afterwards. Counts are split by phase: files rejected during validation are
reported in ``validation_failure_count`` and never appear in
``success_count``/``failure_count``, which only cover extraction attempts.
"""

PHASE_VALIDATION = "validation"
PHASE_EXTRACTION = "extraction"


@dataclass(frozen=True)
class FileOutcome:
    """Final status of one input file (one PASS/FAIL line in the summary)."""
    index: int  # input order
    file_name: str
    path: str
    phase: str  # validation / extraction: last phase attempted
    status: str  # succeeded / failed
    protocol_type: str | None = None
    iv_group_count: int | None = None
    degraded: bool = False
    n_rows: int = 0
    n_columns: int = 0
    column_mismatch: bool = False
    error_type: str | None = None
    error: str | None = None
    elapsed_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"


@dataclass(frozen=True)
class BatchResult:
    """Aggregated results for one batch run."""
    outcomes: tuple[FileOutcome, ...]  # input order
    success_count: int  # extraction succeeded
    failure_count: int  # extraction failed
    validation_failure_count: int  # rejected before extraction
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    summary_path: str | None = None
    error_log_path: str | None = None
    # ParsedTable per input index; only successful files have an entry
    tables: dict[int, ParsedTable] = field(default_factory=dict, compare=False, repr=False)

    @property
    def total_files(self) -> int:
        return len(self.outcomes)

    @property
    def validated_count(self) -> int:
        return self.success_count + self.failure_count

    @property
    def total_rows(self) -> int:
        return sum(o.n_rows for o in self.outcomes if o.succeeded)

    @property
    def degraded_count(self) -> int:
        return sum(1 for o in self.outcomes if o.degraded)

    def table_for(self, file_name: str) -> ParsedTable | None:
        for outcome in self.outcomes:
            if outcome.file_name == file_name:
                return self.tables.get(outcome.index)
        return None
