from __future__ import annotations

from pathlib import Path

import pytest

from nanion_ingest.models.file_task import FileTask, TaskStatus
from nanion_ingest.models.protocol import ProtocolInfo, ProtocolType

PROTOCOL = ProtocolInfo(protocol_type=ProtocolType.INACTIVATION, iv_group_count=3, column_stride=7)


def test_new_task_is_pending():
    task = FileTask(index=0, path=Path("/data/a.xlsx"))
    assert task.status is TaskStatus.PENDING
    assert task.name == "a.xlsx"
    assert task.protocol is None


def test_validated_then_succeeded():
    task = FileTask(index=1, path=Path("b.xlsx")).validated(PROTOCOL)
    assert task.status is TaskStatus.VALIDATED
    assert task.protocol is PROTOCOL
    done = task.succeeded()
    assert done.status is TaskStatus.SUCCEEDED
    assert done.protocol is PROTOCOL
    assert task.status is TaskStatus.VALIDATED  # original unchanged


def test_rejected_during_validation():
    task = FileTask(index=0, path=Path("c.xlsx")).failed("EMPTY_FILE", "file is empty")
    assert task.status is TaskStatus.FAILED
    assert task.error_type == "EMPTY_FILE"
    assert task.error == "file is empty"


def test_failed_after_validation_keeps_protocol():
    task = FileTask(index=0, path=Path("d.xlsx")).validated(PROTOCOL).failed("HEADER_NOT_FOUND", "x")
    assert task.status is TaskStatus.FAILED
    assert task.protocol is PROTOCOL


@pytest.mark.parametrize(
    "make",
    [
        lambda t: t.succeeded(),
        lambda t: t.validated(PROTOCOL).succeeded().failed("X", "y"),
        lambda t: t.failed("X", "y").validated(PROTOCOL),
        lambda t: t.validated(PROTOCOL).validated(PROTOCOL),
    ],
)
def test_invalid_transitions(make):
    with pytest.raises(ValueError):
        make(FileTask(index=0, path=Path("e.xlsx")))


def test_protocol_info_requires_positive_group_count():
    with pytest.raises(ValueError):
        ProtocolInfo(protocol_type=ProtocolType.ACTIVATION, iv_group_count=0, column_stride=6)


@pytest.mark.parametrize(
    "protocol_type,stride",
    [(ProtocolType.ACTIVATION, 7), (ProtocolType.INACTIVATION, 6), (ProtocolType.ACTIVATION, 12)],
)
def test_protocol_info_rejects_foreign_column_stride(protocol_type, stride):
    with pytest.raises(ValueError, match="column_stride"):
        ProtocolInfo(protocol_type=protocol_type, iv_group_count=2, column_stride=stride)
