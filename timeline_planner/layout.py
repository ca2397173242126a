"""Toolkit-independent layout of the timeline surface.

`build_layout` turns tasks into absolute rectangles the widget paints and
hit-tests against. Keeping this free of Qt lets the geometry be tested without
a display.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence, Tuple

from .dates import difference_in_days, format_date, is_weekend, month_spans
from .drag import DragMode, GhostPreview
from .grid import GridMetrics, position_of
from .models import ProjectRange, Task

logger = logging.getLogger(__name__)

_FOOTER_HEIGHT_PX = 40
TODAY_LABEL = "Today"
GHOST_COLOR = "#bfdbfe"
GHOST_BORDER_COLOR = "#3b82f6"
TODAY_COLOR = "#ef4444"


@dataclass(frozen=True)
class BarLayout:
    task_id: str
    row_index: int
    left: int
    top: int
    width: int
    height: int
    color: str
    progress: float
    label: str
    tooltip: str
    dimmed: bool = False

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x < self.right and self.top <= y < self.bottom

    def hit_test(self, x: float, y: float, handle_width: int) -> Optional[DragMode]:
        """Which gesture a press at `(x, y)` starts; handles win over the body."""
        if not self.contains(x, y):
            return None
        if x < self.left + handle_width:
            return DragMode.RESIZE_START
        if x >= self.right - handle_width:
            return DragMode.RESIZE_END
        return DragMode.MOVE


@dataclass(frozen=True)
class MonthHeader:
    label: str
    left: int
    width: int


@dataclass(frozen=True)
class DayHeader:
    day: date
    left: int
    width: int
    weekend: bool

    @property
    def tooltip(self) -> str:
        return self.day.strftime("%A")


@dataclass(frozen=True)
class TodayMarker:
    x: float
    tooltip: str


@dataclass(frozen=True)
class GhostLayout:
    left: int
    top: int
    width: int
    height: int
    label: str


@dataclass(frozen=True)
class TimelineLayout:
    width: int
    height: int
    editable: bool
    metrics: GridMetrics
    month_headers: Tuple[MonthHeader, ...]
    day_headers: Tuple[DayHeader, ...]
    bars: Tuple[BarLayout, ...]
    today_marker: Optional[TodayMarker] = None
    ghost: Optional[GhostLayout] = None

    def bar_at(self, x: float, y: float) -> Optional[BarLayout]:
        for bar in self.bars:
            if bar.contains(x, y):
                return bar
        return None

    def tooltip_at(self, x: float, y: float) -> str:
        bar = self.bar_at(x, y)
        if bar is not None:
            return bar.tooltip
        half_header = self.metrics.header_height / 2
        if half_header <= y < self.metrics.header_height:
            for header in self.day_headers:
                if header.left <= x < header.left + header.width:
                    return header.tooltip
        return ""

    def hit_test(self, x: float, y: float) -> Optional[Tuple[BarLayout, DragMode]]:
        """Bar and drag mode under the pointer; always None when read-only."""
        if not self.editable:
            return None
        bar = self.bar_at(x, y)
        if bar is None:
            return None
        mode = bar.hit_test(x, y, self.metrics.handle_width)
        if mode is None:
            return None
        return bar, mode


def _tooltip(task: Task) -> str:
    return "\n".join(
        [
            task.label,
            f"Start: {format_date(task.start_date)}",
            f"Due: {format_date(task.due_date)}",
            f"Status: {task.status.value}",
        ]
    )


def today_marker(date_range: ProjectRange, today: date, metrics: GridMetrics) -> Optional[TodayMarker]:
    offset = difference_in_days(date_range.start, today)
    if not 0 <= offset < date_range.total_days:
        return None
    return TodayMarker(x=(offset + 0.5) * metrics.day_width, tooltip=f"{TODAY_LABEL}: {format_date(today)}")


def build_layout(
    tasks: Sequence[Task],
    date_range: ProjectRange,
    *,
    today: date,
    editable: bool,
    metrics: Optional[GridMetrics] = None,
    ghost: Optional[GhostPreview] = None,
    dragging_task_id: Optional[str] = None,
) -> TimelineLayout:
    """Lay out headers, one bar per task row, the today marker and the ghost."""
    metrics = metrics or GridMetrics()
    days = date_range.days()

    month_headers = tuple(
        MonthHeader(
            label=span.label,
            left=span.first_index * metrics.day_width,
            width=span.days * metrics.day_width,
        )
        for span in month_spans(days)
    )
    day_headers = tuple(
        DayHeader(day=day, left=index * metrics.day_width, width=metrics.day_width, weekend=is_weekend(day))
        for index, day in enumerate(days)
    )

    bars: List[BarLayout] = []
    for row_index, task in enumerate(tasks):
        if not task.has_valid_span():
            # Row stays reserved so the remaining bars keep their positions.
            logger.warning(
                "Task %s starts after its due date (start %s, due %s); skipping",
                task.task_id,
                format_date(task.start_date),
                format_date(task.due_date),
            )
            continue
        geometry = position_of(task.start_date, task.due_date, date_range.start, metrics.day_width)
        bars.append(
            BarLayout(
                task_id=task.task_id,
                row_index=row_index,
                left=geometry.left,
                top=metrics.bars_top + metrics.row_top(row_index),
                width=geometry.width,
                height=metrics.bar_height,
                color=task.status.bar_color,
                progress=task.status.progress,
                label=task.label,
                tooltip=_tooltip(task),
                dimmed=task.task_id == dragging_task_id,
            )
        )

    ghost_layout = None
    if ghost is not None:
        ghost_layout = GhostLayout(
            left=ghost.left,
            top=metrics.bars_top + ghost.top,
            width=ghost.width,
            height=metrics.bar_height,
            label=ghost.label,
        )

    height = metrics.bars_top + len(tasks) * metrics.row_pitch + metrics.row_gap + _FOOTER_HEIGHT_PX
    return TimelineLayout(
        width=date_range.total_days * metrics.day_width,
        height=height,
        editable=editable,
        metrics=metrics,
        month_headers=month_headers,
        day_headers=day_headers,
        bars=tuple(bars),
        today_marker=today_marker(date_range, today, metrics),
        ghost=ghost_layout,
    )
