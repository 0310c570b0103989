from .extractor import EmptyDataBlockError, ExtractionError, HeaderNotFoundError, TableExtractor, locate_header
from .protocol import NoProtocolMarkersFoundError, ProtocolDetectionError, ProtocolDetector
from .reader import (
    EmptyFileError,
    FileReader,
    InsufficientShapeError,
    ReadFailedError,
    SourceFileNotFoundError,
    StructuralFileError,
    UnsupportedFormatError,
    read_grid,
)

__all__ = [
    "FileReader",
    "read_grid",
    "StructuralFileError",
    "SourceFileNotFoundError",
    "UnsupportedFormatError",
    "ReadFailedError",
    "EmptyFileError",
    "InsufficientShapeError",
    "ProtocolDetector",
    "ProtocolDetectionError",
    "NoProtocolMarkersFoundError",
    "TableExtractor",
    "locate_header",
    "ExtractionError",
    "HeaderNotFoundError",
    "EmptyDataBlockError",
]
