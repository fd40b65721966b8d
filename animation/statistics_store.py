"""Per-activation statistics cache with time-indexed queries."""

from __future__ import annotations

import logging
from itertools import pairwise
from typing import Sequence

from animation.models import StatisticKey, StatisticsFile, StatisticsSummary, TimeSeriesPoint

LOGGER = logging.getLogger(__name__)


def interpolate_value(points: Sequence[TimeSeriesPoint], time: float) -> float | None:
    """Linearly interpolate a time-ordered series at ``time``.

    The first adjacent pair bracketing ``time`` is used. Returns ``None`` for
    fewer than two points or when no pair brackets ``time``; there is no
    extrapolation. A timestamp that hits a sample returns that sample's value
    unchanged.
    """
    for lower, upper in pairwise(points):
        if not lower.time <= time <= upper.time:
            continue
        if time == lower.time:
            return lower.value
        if time == upper.time:
            return upper.value
        ratio = (time - lower.time) / (upper.time - lower.time)
        return lower.value + ratio * (upper.value - lower.value)
    return None


def points_in_range(points: Sequence[TimeSeriesPoint], start: float, end: float) -> list[TimeSeriesPoint]:
    """Return the points with ``start <= time <= end`` in their original order."""
    return [point for point in points if start <= point.time <= end]


class StatisticsCache:
    """Statistics files keyed by ``(type, component_id, metric_name)``.

    The first file registered for a key is kept; later files declaring the
    same key are rejected with a warning.
    """

    def __init__(self) -> None:
        self._loaded_files: set[str] = set()
        self._files_by_key: dict[StatisticKey, StatisticsFile] = {}
        self._source_by_key: dict[StatisticKey, str] = {}

    def clear(self) -> None:
        self._loaded_files.clear()
        self._files_by_key.clear()
        self._source_by_key.clear()

    def is_loaded(self, file_path: str) -> bool:
        return file_path in self._loaded_files

    def add_file(self, file_path: str, stat_file: StatisticsFile) -> bool:
        """Register ``stat_file``; returns ``False`` if its key was already taken."""
        self._loaded_files.add(file_path)
        key = stat_file.metadata.key
        existing = self._source_by_key.get(key)
        if existing is not None:
            LOGGER.warning(
                "Statistic %s from %s ignored; already provided by %s",
                key,
                file_path,
                existing,
            )
            return False
        self._files_by_key[key] = stat_file
        self._source_by_key[key] = file_path
        return True

    def keys(self) -> list[StatisticKey]:
        return list(self._files_by_key)

    def get(self, stat_type: str, component_id: str | None, metric_name: str) -> StatisticsFile | None:
        return self._files_by_key.get((stat_type, component_id, metric_name))

    def summary(self, stat_type: str, component_id: str | None, metric_name: str) -> StatisticsSummary | None:
        stat_file = self.get(stat_type, component_id, metric_name)
        return stat_file.summary if stat_file is not None else None

    def value_at_time(
        self,
        stat_type: str,
        component_id: str | None,
        metric_name: str,
        time: float,
    ) -> float | None:
        stat_file = self.get(stat_type, component_id, metric_name)
        if stat_file is None:
            return None
        return interpolate_value(stat_file.time_series, time)

    def time_series_for_range(
        self,
        stat_type: str,
        component_id: str | None,
        metric_name: str,
        start: float,
        end: float,
    ) -> list[TimeSeriesPoint]:
        stat_file = self.get(stat_type, component_id, metric_name)
        if stat_file is None:
            return []
        return points_in_range(stat_file.time_series, start, end)

    def __len__(self) -> int:
        return len(self._files_by_key)
