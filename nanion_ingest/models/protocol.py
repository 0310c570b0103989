from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

"""Protocol variant and per-file protocol description.

The two voltage-clamp protocol families are a closed set, so they are an enum
whose member selects a static column map (see config_models), not a class
hierarchy.
"""

__all__ = [
    "ProtocolType",
    "ProtocolInfo",
    "COLUMN_STRIDES",
]


class ProtocolType(Enum):
    """Voltage-clamp protocol family recorded in an export."""
    ACTIVATION = "activation"
    INACTIVATION = "inactivation"


# columns per IV block in a Nanion export
COLUMN_STRIDES = {
    ProtocolType.ACTIVATION: 6,
    ProtocolType.INACTIVATION: 7,
}


@dataclass(frozen=True)
class ProtocolInfo:
    """Result of protocol detection for one file.

    Attributes:
        protocol_type: detected protocol family
        iv_group_count: number of IV groups (>= 1)
        column_stride: columns per IV block (6 activation, 7 inactivation)
        field_column_offsets: field name -> zero-based column index per IV block
        total_sweeps: sweep count read from the header, None when unavailable
        degraded: True when the IV count comes from the column-count fallback
            rather than from the sweep count
    """
    protocol_type: ProtocolType
    iv_group_count: int
    column_stride: int
    field_column_offsets: dict[str, tuple[int, ...]] = field(default_factory=dict)
    total_sweeps: int | None = None
    degraded: bool = False

    def __post_init__(self) -> None:
        if self.iv_group_count < 1:
            raise ValueError(f"iv_group_count must be >= 1, got {self.iv_group_count}")
        expected = COLUMN_STRIDES[self.protocol_type]
        if self.column_stride != expected:
            raise ValueError(
                f"{self.protocol_type.value} column_stride must be {expected}, got {self.column_stride}"
            )

    @property
    def fields(self) -> list[str]:
        return list(self.field_column_offsets)
