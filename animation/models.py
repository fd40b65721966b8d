"""Immutable document contracts for replication animation data."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

StatisticKey = tuple[str, str | None, str]


@dataclass(frozen=True)
class ReplicationMetadata:
    """Descriptive header of one replication manifest."""

    format_version: str
    simulation_id: str
    replication: int
    duration: float
    time_unit: str
    model_layout_path: str | None = None
    shared_visual_config_path: str | None = None
    background_svg_path: str | None = None
    name: str | None = None


@dataclass(frozen=True)
class EntityPathFileRef:
    """Pointer to an entity path batch file listed in a manifest."""

    file_path: str
    entry_time_start: float | None = None
    entry_time_end: float | None = None
    entity_count: int | None = None


@dataclass(frozen=True)
class StatisticsFileRef:
    """Pointer to a statistics file listed in a manifest.

    Identity fields are hints only; the loaded file's own metadata is authoritative.
    """

    file_path: str
    type: str | None = None
    metric_name: str | None = None
    component_id: str | None = None
    time_start: float | None = None
    time_end: float | None = None


@dataclass(frozen=True)
class ReplicationManifest:
    """Index of the files belonging to one replication."""

    metadata: ReplicationMetadata
    entity_path_files: tuple[EntityPathFileRef, ...] = ()
    statistics_files: tuple[StatisticsFileRef, ...] = ()

    @property
    def replication(self) -> int:
        return self.metadata.replication


@dataclass(frozen=True)
class ModelLayout:
    """Shared model layout document.

    Only ``simulation_id`` is interpreted; everything else is kept verbatim in
    ``extras`` for clients that understand it.
    """

    simulation_id: str | None = None
    extras: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        if key == "simulationId":
            return self.simulation_id
        return self.extras.get(key, default)


@dataclass(frozen=True)
class SharedVisualConfig:
    """Shared visual configuration document.

    Known playback hints are typed fields; all other sections (for example
    ``visualization``) stay in ``extras``.
    """

    theme: str | None = None
    loop: bool | None = None
    speed_multiplier: float | None = None
    extras: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        declared = {"theme": self.theme, "loop": self.loop, "speedMultiplier": self.speed_multiplier}
        if key in declared and declared[key] is not None:
            return declared[key]
        return self.extras.get(key, default)


@dataclass(frozen=True)
class PathPoint:
    """Position and state of an entity at one simulation clock value."""

    clock: float
    x: float
    y: float
    state: str
    event: str | None = None
    component_id: str | None = None
    attributes: dict[str, str | float | int | bool] = field(default_factory=dict)


@dataclass(frozen=True)
class EntityPath:
    """Clock-ordered path of one simulated entity."""

    type: str
    path: tuple[PathPoint, ...] = ()


EntityPathBatch = dict[str, EntityPath]


@dataclass(frozen=True)
class StatisticsMetadata:
    """Identity and context of a statistics file."""

    type: str
    metric_name: str
    simulation_id: str
    replication: int
    time_start: float
    time_end: float
    time_unit: str
    component_id: str | None = None

    @property
    def key(self) -> StatisticKey:
        return (self.type, self.component_id, self.metric_name)


@dataclass(frozen=True)
class StatisticsSummary:
    """Precomputed aggregates of a metric's time series."""

    min: float
    max: float
    mean: float
    median: float
    std_dev: float
    count: int


@dataclass(frozen=True)
class TimeSeriesPoint:
    time: float
    value: float


@dataclass(frozen=True)
class StatisticsFile:
    """Complete contents of one statistics file."""

    metadata: StatisticsMetadata
    summary: StatisticsSummary
    time_series: tuple[TimeSeriesPoint, ...] = ()
