from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from nanion_ingest.config.loader import ConfigError, default_config, load_config
from nanion_ingest.excel.extractor import ExtractionError, TableExtractor
from nanion_ingest.excel.protocol import ProtocolDetectionError, ProtocolDetector
from nanion_ingest.excel.reader import FileReader, StructuralFileError
from nanion_ingest.logging.init import log_summary, set_debug, setup_logging, task_logger
from nanion_ingest.models.config_models import IngestConfig
from nanion_ingest.services.scheduler import BatchScheduler, BatchSetupError, scan_input_paths
from nanion_ingest.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load config (YAML file or built-in defaults), apply command line overrides
- Expand the input paths (directories are scanned non-recursively)
- Run the batch and print the SUMMARY line

Exit codes: 0 every file succeeded, 2 at least one file failed or was
rejected, 1 fatal (bad config, no inputs, worker pool unavailable).
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

INSPECT_ROWS = 3


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {text!r}") from None
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return value


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="nanion_ingest",
        description="Extract measurement tables from Nanion patch-clamp exports",
    )
    p.add_argument("paths", nargs="*", type=Path, help="Workbook files or directories")
    p.add_argument("--output-dir", type=Path, help="Directory for the summary report and error log")
    p.add_argument("--config", type=Path, help="YAML config file (defaults are used when omitted)")
    mode = p.add_mutually_exclusive_group()
    mode.add_argument("--sequential", dest="parallel", action="store_false", default=None,
                      help="Extract files one at a time")
    mode.add_argument("--parallel", dest="parallel", action="store_true",
                      help="Extract files on a worker pool")
    p.add_argument("--max-workers", type=_positive_int, help="Worker pool size for parallel extraction")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect", action="store_true",
                   help="Print detected protocol, header layout and first rows per file, then exit")
    return p.parse_args(argv)


def _apply_overrides(cfg: IngestConfig, args: argparse.Namespace) -> IngestConfig:
    processing = cfg.processing
    if args.parallel is not None:
        processing = replace(processing, use_parallel=args.parallel)
    if args.max_workers is not None:
        processing = replace(processing, max_workers=args.max_workers)
    return replace(cfg, processing=processing)


def _inspect(paths: list[Path], cfg: IngestConfig) -> int:
    reader = FileReader(cfg.io)
    detector = ProtocolDetector(cfg)
    extractor = TableExtractor(cfg)
    failures = 0
    for path in paths:
        print(f"FILE: {path.name}")
        log = task_logger(path.name)
        try:
            grid = reader.read(path, log)
            protocol = detector.detect(grid.head(cfg.detection.header_rows), total_columns=grid.n_columns, log=log)
            table = extractor.parse(grid, protocol, log)
        except (StructuralFileError, ProtocolDetectionError, ExtractionError) as e:
            print(f"  error: {e.error_type}: {e}")
            failures += 1
            continue
        approx = " (approximate)" if protocol.degraded else ""
        print(f"  grid: {grid.n_rows} rows x {grid.n_columns} columns")
        print(f"  protocol: {protocol.protocol_type.value}, {protocol.iv_group_count} IV groups{approx}")
        print(
            f"  header: results row {table.layout.results_row_index + 1}, "
            f"parameter row {table.layout.keyword_row_index + 1}, "
            f"data from row {table.layout.data_start_row_index + 1}"
        )
        print(f"  table: {table.n_rows} rows x {table.n_columns} columns")
        for row in table.rows[:INSPECT_ROWS]:
            print("    " + repr(list(row)))
    return EXIT_PARTIAL_FAILURE if failures else EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # only read sys.argv when no argument list was passed (tests call main([]))
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        set_debug(True)
        logger.debug("debug mode enabled")

    try:
        cfg = load_config(args.config) if args.config else default_config()
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL
    cfg = _apply_overrides(cfg, args)

    paths = scan_input_paths(args.paths, cfg.io.supported_extensions)
    if not paths:
        logger.error("no input files given")
        return EXIT_FATAL

    if args.inspect:
        return _inspect(paths, cfg)

    if args.output_dir is None:
        logger.error("--output-dir is required")
        return EXIT_FATAL

    try:
        result = BatchScheduler(cfg).run(paths, args.output_dir)
    except BatchSetupError as e:
        logger.error(f"batch setup: {e}")
        return EXIT_FATAL

    summary_line = render_summary_line(result)
    # log_summary adds the SUMMARY label itself
    log_summary(summary_line[len("SUMMARY "):])

    if result.failure_count or result.validation_failure_count:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
