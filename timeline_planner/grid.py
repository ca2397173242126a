"""Mapping between calendar days and horizontal pixels on the timeline grid."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date

from .dates import difference_in_days, format_date, inclusive_days

logger = logging.getLogger(__name__)

DAY_WIDTH_PX = 35
TASK_BAR_HEIGHT_PX = 28
TASK_ROW_GAP_PX = 8
HEADER_HEIGHT_PX = 60
RESIZE_HANDLE_WIDTH_PX = 8
BAR_AREA_PADDING_PX = 10


@dataclass(frozen=True)
class GridMetrics:
    """Pixel dimensions used to lay out the timeline."""

    day_width: int = DAY_WIDTH_PX
    bar_height: int = TASK_BAR_HEIGHT_PX
    row_gap: int = TASK_ROW_GAP_PX
    header_height: int = HEADER_HEIGHT_PX
    handle_width: int = RESIZE_HANDLE_WIDTH_PX
    bar_area_padding: int = BAR_AREA_PADDING_PX

    def __post_init__(self) -> None:
        for name in ("day_width", "bar_height", "header_height", "handle_width"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1")
        if self.row_gap < 0 or self.bar_area_padding < 0:
            raise ValueError("row_gap and bar_area_padding must be >= 0")

    @property
    def row_pitch(self) -> int:
        return self.bar_height + self.row_gap

    @property
    def bars_top(self) -> int:
        """Absolute y coordinate of the first task row."""
        return self.header_height + self.bar_area_padding

    def row_top(self, row_index: int) -> int:
        """Vertical offset of a row relative to the first task row."""
        return row_index * self.row_pitch


@dataclass(frozen=True)
class BarGeometry:
    left: int
    width: int

    @property
    def right(self) -> int:
        return self.left + self.width

    def is_renderable(self) -> bool:
        return self.width > 0


def date_to_offset(value: date, range_start: date, day_width: int = DAY_WIDTH_PX) -> int:
    """Pixel offset of `value` from the range start; earlier dates clamp to 0."""
    return max(0, difference_in_days(range_start, value)) * day_width


def position_of(start: date, end: date, range_start: date, day_width: int = DAY_WIDTH_PX) -> BarGeometry:
    """Bar placement for an inclusive `start..end` span.

    Inverted spans produce a zero-width geometry instead of raising so one
    malformed task cannot break the whole timeline.
    """
    if start > end:
        logger.debug(
            "Inverted span %s..%s has no geometry", format_date(start), format_date(end)
        )
        return BarGeometry(left=0, width=0)
    return BarGeometry(
        left=date_to_offset(start, range_start, day_width),
        width=inclusive_days(start, end) * day_width,
    )


def offset_to_day_delta(pixel_delta: float, day_width: int = DAY_WIDTH_PX) -> int:
    """Whole days represented by a horizontal drag distance.

    Halves round up, so a drag of exactly half a day in either direction
    resolves the same way a browser's `Math.round` would.
    """
    return math.floor(pixel_delta / day_width + 0.5)
