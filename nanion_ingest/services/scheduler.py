from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import Executor, Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from pathlib import Path

from ..excel.extractor import ExtractionError, TableExtractor
from ..excel.protocol import ProtocolDetectionError, ProtocolDetector
from ..excel.reader import FileReader, StructuralFileError
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..logging.init import task_logger
from ..models.batch_result import PHASE_EXTRACTION, PHASE_VALIDATION, BatchResult, FileOutcome
from ..models.config_models import IngestConfig
from ..models.file_task import FileTask
from ..models.grid import RawGrid
from ..models.parsed_table import ParsedTable
from .progress import ProgressTracker
from .summary import render_summary_line, write_summary_report

"""Batch scheduling: validate, extract, aggregate.

1. Validate: read + detect every path on the calling thread. A rejected file
   gets a FAILED outcome and is left out of extraction; this phase never
   aborts the batch.
2. Extract: parse every validated grid, sequentially or on a bounded worker
   pool (config.processing). Each task catches everything at its own
   boundary and returns a FAILED outcome instead of raising.
3. Aggregate: always runs. Builds the BatchResult, writes the summary report
   and flushes the error log. Only this phase writes to the output directory.

Outcomes are stored in a list pre-sized to the number of input paths and
addressed by input index, so report order never depends on completion order.
"""

logger = logging.getLogger(__name__)

ExecutorFactory = Callable[[int], Executor]


class BatchSetupError(Exception):
    """The worker pool requested for parallel extraction could not be created."""
    error_type = "BATCH_SETUP_ERROR"


def _default_executor_factory(max_workers: int) -> Executor:
    return ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="nanion-extract")


def scan_input_paths(inputs: Iterable[Path], extensions: Sequence[str]) -> list[Path]:
    """Expand directories (non-recursive) into their workbook files.

    Explicit file paths are kept as given, in order, even when their suffix
    is unsupported; the reader rejects those with a per-file error.
    Directory contents are sorted by name.
    """
    allowed = {e.lower() for e in extensions}
    paths: list[Path] = []
    for item in inputs:
        item = Path(item)
        if item.is_dir():
            found = sorted(
                p for p in item.iterdir()
                if p.is_file() and p.suffix.lower() in allowed and not p.name.startswith("~$")
            )
            paths.extend(found)
        else:
            paths.append(item)
    return paths


@dataclass(frozen=True, eq=False)
class _ExtractionJob:
    task: FileTask
    grid: RawGrid


class _BatchState:
    """Index-addressed result slots for one run; touched by the scheduler thread only."""

    def __init__(self, tasks: list[FileTask]) -> None:
        self.tasks = tasks
        self.outcomes: list[FileOutcome | None] = [None] * len(tasks)
        self.tables: dict[int, ParsedTable] = {}

    def record(self, task: FileTask, outcome: FileOutcome, table: ParsedTable | None) -> None:
        if outcome.succeeded:
            self.tasks[task.index] = task.succeeded()
        else:
            self.tasks[task.index] = task.failed(outcome.error_type or "UNEXPECTED_ERROR", outcome.error or "")
        self.outcomes[task.index] = outcome
        if table is not None:
            self.tables[task.index] = table


def _failure_outcome(task: FileTask, phase: str, error_type: str, error: str, elapsed: float) -> FileOutcome:
    protocol = task.protocol
    return FileOutcome(
        index=task.index,
        file_name=task.name,
        path=str(task.path),
        phase=phase,
        status="failed",
        protocol_type=protocol.protocol_type.value if protocol else None,
        iv_group_count=protocol.iv_group_count if protocol else None,
        degraded=protocol.degraded if protocol else False,
        error_type=error_type,
        error=error,
        elapsed_seconds=elapsed,
    )


def extract_one(
    task: FileTask,
    grid: RawGrid,
    extractor: TableExtractor,
) -> tuple[FileOutcome, ParsedTable | None]:
    """Run one extraction task to completion.

    Never raises: every exception is turned into a FAILED outcome here, at
    the task boundary. Safe to run on any worker thread; it only reads its
    arguments and logs through its own task logger.
    """
    log = task_logger(task.name)
    started = time.perf_counter()
    try:
        table = extractor.parse(grid, task.protocol, log)
    except ExtractionError as e:
        elapsed = time.perf_counter() - started
        log.error("extraction failed: %s", e)
        return _failure_outcome(task, PHASE_EXTRACTION, e.error_type, str(e), elapsed), None
    except Exception as e:
        elapsed = time.perf_counter() - started
        log.error("unexpected extraction error: %s", e, exc_info=True)
        return _failure_outcome(task, PHASE_EXTRACTION, "UNEXPECTED_ERROR", str(e), elapsed), None

    elapsed = time.perf_counter() - started
    protocol = task.protocol
    outcome = FileOutcome(
        index=task.index,
        file_name=task.name,
        path=str(task.path),
        phase=PHASE_EXTRACTION,
        status="succeeded",
        protocol_type=protocol.protocol_type.value,
        iv_group_count=protocol.iv_group_count,
        degraded=protocol.degraded,
        n_rows=table.n_rows,
        n_columns=table.n_columns,
        column_mismatch=table.column_mismatch,
        elapsed_seconds=elapsed,
    )
    return outcome, table


class BatchScheduler:
    """Drives many files through reader -> detector -> extractor."""

    def __init__(
        self,
        config: IngestConfig | None = None,
        *,
        executor_factory: ExecutorFactory | None = None,
    ) -> None:
        self.config = config or IngestConfig()
        self.reader = FileReader(self.config.io)
        self.detector = ProtocolDetector(self.config)
        self.extractor = TableExtractor(self.config)
        self.executor_factory = executor_factory or _default_executor_factory

    # -- phase 1 -----------------------------------------------------------
    def validate(self, task: FileTask) -> tuple[FileTask, RawGrid | None, float]:
        """Read and detect one file. Returns (task, grid or None, elapsed)."""
        log = task_logger(task.name)
        started = time.perf_counter()
        try:
            grid = self.reader.read(task.path, log)
            window = grid.head(self.config.detection.header_rows)
            protocol = self.detector.detect(window, total_columns=grid.n_columns, log=log)
        except (StructuralFileError, ProtocolDetectionError) as e:
            log.warning("rejected: %s", e)
            return task.failed(e.error_type, str(e)), None, time.perf_counter() - started
        except Exception as e:
            log.error("unexpected validation error: %s", e, exc_info=True)
            return task.failed("UNEXPECTED_ERROR", str(e)), None, time.perf_counter() - started
        return task.validated(protocol), grid, time.perf_counter() - started

    # -- phase 2 -----------------------------------------------------------
    def _extract_sequential(self, jobs: list[_ExtractionJob], state: _BatchState) -> None:
        with ProgressTracker(len(jobs), description="Extracting") as progress:
            for job in jobs:
                progress.start_file(job.task.name)
                outcome, table = extract_one(job.task, job.grid, self.extractor)
                state.record(job.task, outcome, table)
                progress.finish_file(success=outcome.succeeded)

    def _extract_parallel(self, jobs: list[_ExtractionJob], state: _BatchState) -> None:
        workers = max(1, min(self.config.processing.max_workers, len(jobs)))
        try:
            executor = self.executor_factory(workers)
        except Exception as e:
            raise BatchSetupError(f"parallel processing requested but worker pool creation failed: {e}") from e

        logger.info("starting parallel extraction with %d workers", workers)
        with executor, ProgressTracker(len(jobs), description="Extracting") as progress:
            futures: dict[Future, _ExtractionJob] = {
                executor.submit(extract_one, job.task, job.grid, self.extractor): job for job in jobs
            }
            for future in as_completed(futures):
                job = futures[future]
                try:
                    outcome, table = future.result()
                except Exception as e:
                    # extract_one does not raise; this covers executor-level failures
                    outcome = _failure_outcome(job.task, PHASE_EXTRACTION, "WORKER_ERROR", str(e), 0.0)
                    table = None
                state.record(job.task, outcome, table)
                progress.finish_file(success=outcome.succeeded)

    # -- entry point -------------------------------------------------------
    def run(self, paths: Sequence[Path], output_dir: Path) -> BatchResult:
        """Process ``paths`` and write the summary into ``output_dir``.

        Raises:
            BatchSetupError: parallel extraction was requested for more than
                one validated file and the worker pool could not be created.
                Raised before any extraction task starts.
        """
        start_time = datetime.now(UTC)
        started = time.perf_counter()
        output_dir = Path(output_dir)
        state = _BatchState([FileTask(index=i, path=Path(p)) for i, p in enumerate(paths)])

        logger.info("starting analysis of %d files", len(state.tasks))
        logger.info("output directory: %s", output_dir)

        jobs: list[_ExtractionJob] = []
        for task in list(state.tasks):
            checked, grid, elapsed = self.validate(task)
            state.tasks[task.index] = checked
            if grid is None:
                state.outcomes[task.index] = _failure_outcome(
                    checked, PHASE_VALIDATION, checked.error_type or "UNEXPECTED_ERROR", checked.error or "", elapsed
                )
            else:
                jobs.append(_ExtractionJob(task=checked, grid=grid))
        logger.info("file validation complete: %d/%d files valid", len(jobs), len(state.tasks))

        if not jobs:
            logger.error("no valid files found for extraction")
        elif self.config.processing.use_parallel and len(jobs) > 1:
            self._extract_parallel(jobs, state)
        else:
            self._extract_sequential(jobs, state)

        return self._aggregate(state, output_dir, start_time, started)

    # -- phase 3 -----------------------------------------------------------
    def _aggregate(self, state: _BatchState, output_dir: Path, start_time: datetime, started: float) -> BatchResult:
        missing = [i for i, o in enumerate(state.outcomes) if o is None]
        if missing:
            raise RuntimeError(f"no outcome recorded for input indices {missing}")
        outcomes = tuple(o for o in state.outcomes if o is not None)

        success = sum(1 for o in outcomes if o.phase == PHASE_EXTRACTION and o.succeeded)
        failed = sum(1 for o in outcomes if o.phase == PHASE_EXTRACTION and not o.succeeded)
        rejected = sum(1 for o in outcomes if o.phase == PHASE_VALIDATION)

        elapsed = time.perf_counter() - started
        timeout_seconds = self.config.processing.timeout_minutes * 60
        if elapsed > timeout_seconds:
            logger.warning(
                "batch took %.1f s, above the %.1f min monitoring threshold",
                elapsed, self.config.processing.timeout_minutes,
            )

        error_log = ErrorLogBuffer(output_dir)
        for o in outcomes:
            if not o.succeeded:
                error_log.append(ErrorRecord.create(o.file_name, o.phase, o.error_type or "", o.error or ""))

        result = BatchResult(
            outcomes=outcomes,
            success_count=success,
            failure_count=failed,
            validation_failure_count=rejected,
            start_time=start_time,
            end_time=datetime.now(UTC),
            elapsed_seconds=elapsed,
            tables=state.tables,
        )

        summary_path: Path | None = None
        error_log_path: Path | None = None
        try:
            summary_path = write_summary_report(result, output_dir)
            logger.info("summary report saved: %s", summary_path)
        except OSError as e:
            logger.error("could not write summary report to %s: %s", output_dir, e)
        try:
            error_log_path = error_log.flush()
        except OSError as e:
            logger.error("could not write error log to %s: %s", output_dir, e)

        result = replace(
            result,
            summary_path=str(summary_path) if summary_path else None,
            error_log_path=str(error_log_path) if error_log_path else None,
        )
        logger.debug(render_summary_line(result))
        return result


def run_batch(
    paths: Sequence[Path],
    output_dir: Path,
    config: IngestConfig | None = None,
    executor_factory: ExecutorFactory | None = None,
) -> BatchResult:
    """Convenience wrapper: BatchScheduler(config).run(paths, output_dir)."""
    return BatchScheduler(config, executor_factory=executor_factory).run(paths, output_dir)
