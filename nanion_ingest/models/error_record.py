from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the JSON Lines error log.

One record per rejected or failed file. The key set is fixed; to_json_line
serialises exactly the dataclass fields.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: workbook file name
        phase: batch phase that failed (validation / extraction)
        error_type: error classification in UPPER_SNAKE_CASE format
        message: human readable error message
    """
    timestamp: str  # ISO8601 UTC
    file: str
    phase: str
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(file: str, phase: str, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            phase=phase,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
