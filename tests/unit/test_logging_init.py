from __future__ import annotations

import logging

from nanion_ingest.logging.init import (
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    log_summary,
    set_debug,
    setup_logging,
    task_logger,
)


def _record(level: int, msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("nanion_ingest", level, __file__, 1, msg, None, None)
    for k, v in extra.items():
        setattr(record, k, v)
    return record


def test_labeled_formatter_levels():
    fmt = LabeledFormatter()
    assert fmt.format(_record(logging.INFO, "hello")) == "INFO hello"
    assert fmt.format(_record(logging.WARNING, "careful")) == "WARN careful"
    assert fmt.format(_record(logging.ERROR, "boom")) == "ERROR boom"
    assert fmt.format(_record(SUMMARY_LEVEL, "files=1")) == "SUMMARY files=1"


def test_labeled_formatter_file_context():
    fmt = LabeledFormatter()
    assert fmt.format(_record(logging.INFO, "read", file_name="a.xlsx")) == "INFO [a.xlsx] read"


def test_setup_logging_is_idempotent():
    first = setup_logging()
    second = setup_logging()
    assert first is second
    assert len(first.handlers) == 1
    assert first.propagate is False


def test_task_logger_tags_messages(capsys):
    log = task_logger("cell_07.xlsx")
    log.info("found %s keywords", "activation")
    log.warning("low density")
    out = capsys.readouterr().out.splitlines()
    assert out == ["INFO [cell_07.xlsx] found activation keywords", "WARN [cell_07.xlsx] low density"]


def test_module_loggers_share_package_handler(capsys):
    setup_logging()
    logging.getLogger("nanion_ingest.services.scheduler").info("starting")
    assert capsys.readouterr().out == "INFO starting\n"


def test_log_summary(capsys):
    log_summary("files=2 success=2")
    assert capsys.readouterr().out == "SUMMARY files=2 success=2\n"


def test_debug_toggle(capsys):
    logger = get_logger()
    logger.debug("hidden")
    set_debug(True)
    logger.debug("shown")
    set_debug(False)
    logger.debug("hidden again")
    assert capsys.readouterr().out == "DEBUG shown\n"
