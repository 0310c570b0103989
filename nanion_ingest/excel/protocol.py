from __future__ import annotations

import logging
import math
import numbers
from collections.abc import Iterable
from typing import Any

from ..models.config_models import IngestConfig, ProtocolColumnMap
from ..models.grid import RawGrid, is_missing
from ..models.protocol import ProtocolInfo, ProtocolType

"""Protocol detection from the header window of an export.

Row scan rules:
- only text cells contribute to a row's search string
- "peak" in a row means activation and is tested first
- otherwise "inact" and "act" together in a row mean inactivation
- the first row satisfying either test decides

A row can satisfy both tests ("Peak" next to "Inact"/"Act" labels); such a
row is activation.
"""

logger = logging.getLogger(__name__)

ACTIVATION_KEYWORD = "peak"
INACTIVATION_KEYWORDS = ("inact", "act")


class ProtocolDetectionError(Exception):
    error_type = "PROTOCOL_DETECTION_ERROR"


class NoProtocolMarkersFoundError(ProtocolDetectionError):
    error_type = "NO_PROTOCOL_MARKERS"


def row_search_text(cells: Iterable[Any]) -> str:
    """Concatenate the text cells of a row (numbers and blanks are skipped)."""
    return " ".join(c.strip() for c in cells if isinstance(c, str) and c.strip())


def classify_row(text: str) -> ProtocolType | None:
    lowered = text.lower()
    if ACTIVATION_KEYWORD in lowered:
        return ProtocolType.ACTIVATION
    if all(k in lowered for k in INACTIVATION_KEYWORDS):
        return ProtocolType.INACTIVATION
    return None


def parse_sweep_count(value: Any) -> int | None:
    """Interpret a header cell as a positive sweep count, None if it is not one."""
    if is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            number = float(value.strip().replace(",", ""))
        except ValueError:
            return None
    elif isinstance(value, numbers.Real):
        number = float(value)
    else:
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return math.ceil(number)


def iv_groups_from_sweeps(total_sweeps: int, data_points_per_group: int) -> int:
    return max(1, math.ceil(total_sweeps / data_points_per_group))


def iv_groups_from_columns(total_columns: int, column_stride: int) -> int:
    return max(1, total_columns // column_stride)


class ProtocolDetector:
    """Infers ProtocolInfo from a header window.

    Holds only the read-only config, so one instance can be shared by all
    workers.
    """

    def __init__(self, config: IngestConfig | None = None) -> None:
        self.config = config or IngestConfig()

    def column_map(self, protocol_type: ProtocolType) -> ProtocolColumnMap:
        if protocol_type is ProtocolType.ACTIVATION:
            return self.config.activation
        return self.config.inactivation

    def find_protocol_type(
        self, header_window: RawGrid, log: logging.Logger | logging.LoggerAdapter | None = None
    ) -> tuple[ProtocolType, int]:
        """Return (protocol type, zero-based row) of the first qualifying row."""
        log = log or logger
        for row_index in range(header_window.n_rows):
            text = row_search_text(header_window.row(row_index))
            if not text:
                continue
            found = classify_row(text)
            if found is not None:
                log.info("found %s keywords in row %d", found.value, row_index + 1)
                return found, row_index
        raise NoProtocolMarkersFoundError(
            f"no protocol keywords in the first {header_window.n_rows} rows"
        )

    def detect(
        self,
        header_window: RawGrid,
        total_columns: int | None = None,
        log: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> ProtocolInfo:
        """Detect protocol type, IV-group count and column offsets.

        Args:
            header_window: the first rows of the grid
            total_columns: grid width used by the column-count fallback and
                to check that the sweep-based IV blocks fit (defaults to the
                header window width)

        The result is ``degraded`` when the sweep count is unusable, when its
        IV blocks run past the last column, or when it implies more blocks
        than the grid can hold (the column estimate is used then).

        Raises:
            NoProtocolMarkersFoundError: no row of the window qualifies
        """
        log = log or logger
        protocol_type, _ = self.find_protocol_type(header_window, log)
        column_map = self.column_map(protocol_type)
        stride = column_map.column_stride
        per_group = self.config.analysis.data_points_per_group

        sweep_row, sweep_col = self.config.detection.sweep_count_cell
        raw_sweeps = header_window.cell(sweep_row, sweep_col)
        total_sweeps = parse_sweep_count(raw_sweeps)
        width = header_window.n_columns if total_columns is None else total_columns

        column_groups = iv_groups_from_columns(width, stride)
        if total_sweeps is not None:
            sweep_groups = iv_groups_from_sweeps(total_sweeps, per_group)
            if sweep_groups > width // stride + 1:
                # a corrupt count must not size the offset tables
                iv_group_count = column_groups
                degraded = True
                log.warning(
                    "%d total sweeps -> %d IV groups, more than %d columns can hold; "
                    "using column estimate %d IV groups (approximate)",
                    total_sweeps, sweep_groups, width, column_groups,
                )
            else:
                iv_group_count = sweep_groups
                last_column = column_map.last_column(sweep_groups)
                degraded = last_column >= width
                if degraded:
                    log.warning(
                        "%d total sweeps -> %d IV groups need column %d but the grid has %d columns "
                        "(column estimate %d IV groups); IV count is approximate",
                        total_sweeps, sweep_groups, last_column + 1, width, column_groups,
                    )
                else:
                    log.info(
                        "%d total sweeps -> %d IV groups (ceil(%d / %d))",
                        total_sweeps, iv_group_count, total_sweeps, per_group,
                    )
        else:
            iv_group_count = column_groups
            degraded = True
            log.warning(
                "sweep count cell (%d, %d) unusable (%r); IV groups estimated from %d columns / %d = %d (approximate)",
                sweep_row + 1, sweep_col + 1, raw_sweeps, width, stride, iv_group_count,
            )

        info = ProtocolInfo(
            protocol_type=protocol_type,
            iv_group_count=iv_group_count,
            column_stride=stride,
            field_column_offsets=column_map.offsets_for(iv_group_count),
            total_sweeps=total_sweeps,
            degraded=degraded,
        )
        log.info("detected %s protocol with %d IV groups", protocol_type.value, iv_group_count)
        return info
