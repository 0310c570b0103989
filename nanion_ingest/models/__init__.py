"""Domain models for the Nanion export ingestion pipeline.

Grid, protocol, table, task and batch-result models shared by the reader, the
detector, the extractor and the scheduler.
"""

from .batch_result import BatchResult, FileOutcome
from .config_models import IngestConfig, ProtocolColumnMap
from .file_task import FileTask, TaskStatus
from .grid import RawGrid
from .parsed_table import HeaderLayout, ParsedTable
from .protocol import ProtocolInfo, ProtocolType

__all__ = [
    # Configuration models
    "IngestConfig",
    "ProtocolColumnMap",
    # Ingestion models
    "RawGrid",
    "ProtocolType",
    "ProtocolInfo",
    "HeaderLayout",
    "ParsedTable",
    # Batch models
    "FileTask",
    "TaskStatus",
    "FileOutcome",
    "BatchResult",
]
