from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Optional

from ..common.datetime_utils import day_label, hour_label, now_local, trailing_window
from ..common.validators import normalize_department, parse_int
from ..core.constants import (
    ALLOWED_ANALYTICS_RANGES,
    DEFAULT_ANALYTICS_RANGE,
    DEPARTMENT_OPTIONS,
    OTHER_DEPARTMENT_LABEL,
)
from ..core.enums import PassStatus
from ..passes.repository import PassRepository


@dataclass(frozen=True)
class Series:
    labels: list[str]
    counts: list[int]

    def to_dict(self) -> dict:
        return {"labels": list(self.labels), "counts": list(self.counts)}


@dataclass(frozen=True)
class PeakHour:
    hour: Optional[int]
    label: str
    count: int

    def to_dict(self) -> dict:
        return {"hour": self.hour, "label": self.label, "count": self.count}


NO_PEAK = PeakHour(hour=None, label="-", count=0)


@dataclass(frozen=True)
class AnalyticsReport:
    range_days: int
    total_visitors: int
    active_passes: int
    peak_hour: PeakHour
    trend: Series
    peak_hours: Series
    departments: Series

    def to_dict(self) -> dict:
        return {
            "rangeDays": self.range_days,
            "totalVisitors": self.total_visitors,
            "activePasses": self.active_passes,
            "peakHour": self.peak_hour.to_dict(),
            "trend": self.trend.to_dict(),
            "peakHours": self.peak_hours.to_dict(),
            "departments": self.departments.to_dict(),
        }


def resolve_range(raw: Any) -> int:
    """Restrict the window to the allow-list; anything else means the default."""
    value = parse_int(raw)
    return value if value in ALLOWED_ANALYTICS_RANGES else DEFAULT_ANALYTICS_RANGE


def find_peak(hour_counts: list[int]) -> PeakHour:
    peak_count = max(hour_counts) if hour_counts else 0
    if peak_count <= 0:
        return NO_PEAK
    # index() returns the first hour holding the maximum
    hour = hour_counts.index(peak_count)
    return PeakHour(hour=hour, label=hour_label(hour), count=peak_count)


class AnalyticsService:
    """Dashboard summaries over the passes issued in a trailing day window."""

    def __init__(self, passes: PassRepository):
        self._passes = passes

    def aggregate(self, range_days: Any = DEFAULT_ANALYTICS_RANGE, *, now: Optional[datetime] = None) -> AnalyticsReport:
        days = resolve_range(range_days)
        today = (now or now_local()).date()
        start, end = trailing_window(today, days)
        visitors = self._passes.list_by_date_between(start, end)

        trend: dict[date, int] = {start.date() + timedelta(days=i): 0 for i in range(days)}
        hour_counts = [0] * 24
        departments: dict[str, int] = {name: 0 for name in DEPARTMENT_OPTIONS}
        active = 0

        for v in visitors:
            if v.status == PassStatus.ACTIVE:
                active += 1

            when = v.date or v.time_in
            if when and when.date() in trend:
                trend[when.date()] += 1

            if v.time_in:
                hour_counts[v.time_in.hour] += 1

            department = normalize_department(v.department) or OTHER_DEPARTMENT_LABEL
            departments[department] = departments.get(department, 0) + 1

        return AnalyticsReport(
            range_days=days,
            total_visitors=len(visitors),
            active_passes=active,
            peak_hour=find_peak(hour_counts),
            trend=Series(labels=[day_label(d) for d in trend], counts=list(trend.values())),
            peak_hours=Series(labels=[hour_label(h) for h in range(24)], counts=hour_counts),
            departments=Series(labels=list(departments), counts=list(departments.values())),
        )
