"""Best-effort conversion of decoded JSON payloads into animation documents."""

from __future__ import annotations

import math
from typing import Any, Callable, Mapping, TypeVar

from animation.models import (
    EntityPath,
    EntityPathBatch,
    EntityPathFileRef,
    ModelLayout,
    PathPoint,
    ReplicationManifest,
    ReplicationMetadata,
    SharedVisualConfig,
    StatisticsFile,
    StatisticsFileRef,
    StatisticsMetadata,
    StatisticsSummary,
    TimeSeriesPoint,
)


T = TypeVar("T")


class MalformedDocumentError(ValueError):
    """Raised when a decoded document does not have the expected structure."""


def _mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise MalformedDocumentError(f"{what} must be a mapping, got {type(value).__name__}.")
    return value


def _sequence(value: Any, what: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise MalformedDocumentError(f"{what} must be a list, got {type(value).__name__}.")
    return value


def _number(payload: Mapping[str, Any], key: str, what: str) -> float:
    if key not in payload:
        raise MalformedDocumentError(f"{what} missing required field '{key}'.")
    value = payload[key]
    if isinstance(value, bool):
        raise MalformedDocumentError(f"Field '{what}.{key}' must be numeric, got bool.")
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise MalformedDocumentError(f"Field '{what}.{key}' must be numeric, got {value!r}.") from exc
    if not math.isfinite(number):
        raise MalformedDocumentError(f"Field '{what}.{key}' must be finite, got {value!r}.")
    return number


def _optional_number(payload: Mapping[str, Any], key: str, what: str) -> float | None:
    if payload.get(key) is None:
        return None
    return _number(payload, key, what)


def _integer(payload: Mapping[str, Any], key: str, what: str) -> int:
    value = _number(payload, key, what)
    if not value.is_integer():
        raise MalformedDocumentError(f"Field '{what}.{key}' must be an integer, got {payload[key]!r}.")
    return int(value)


def _optional_integer(payload: Mapping[str, Any], key: str, what: str) -> int | None:
    if payload.get(key) is None:
        return None
    return _integer(payload, key, what)


def _hint(parse: Callable[[Mapping[str, Any], str, str], T], payload: Mapping[str, Any], key: str) -> T | None:
    """Read an optional manifest hint, treating an unusable value as absent."""
    try:
        return parse(payload, key, "file entry")
    except MalformedDocumentError:
        return None


def _string(payload: Mapping[str, Any], key: str, what: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise MalformedDocumentError(f"{what} missing required string field '{key}'.")
    return value


def _optional_string(payload: Mapping[str, Any], key: str) -> str | None:
    value = payload.get(key)
    if value is None or value == "":
        return None
    return str(value)


def parse_manifest(payload: Any) -> ReplicationManifest:
    """Build a ``ReplicationManifest`` from a decoded manifest document."""
    document = _mapping(payload, "Manifest")
    raw_metadata = _mapping(document.get("metadata"), "Manifest metadata")

    metadata = ReplicationMetadata(
        format_version=str(raw_metadata.get("formatVersion", "")),
        simulation_id=str(raw_metadata.get("simulationId", "")),
        replication=_integer(raw_metadata, "replication", "metadata"),
        duration=_optional_number(raw_metadata, "duration", "metadata") or 0.0,
        time_unit=str(raw_metadata.get("timeUnit", "")),
        model_layout_path=_optional_string(raw_metadata, "modelLayoutPath"),
        shared_visual_config_path=_optional_string(raw_metadata, "sharedVisualConfigPath"),
        background_svg_path=_optional_string(raw_metadata, "backgroundSvgPath"),
        name=_optional_string(raw_metadata, "name"),
    )

    entity_files = tuple(
        _parse_entity_path_ref(_mapping(item, "Entity path file entry"))
        for item in _sequence(document.get("entityPathDataFiles"), "entityPathDataFiles")
    )
    statistics_files = tuple(
        _parse_statistics_ref(_mapping(item, "Statistics file entry"))
        for item in _sequence(document.get("statisticsDataFiles"), "statisticsDataFiles")
    )
    return ReplicationManifest(
        metadata=metadata,
        entity_path_files=entity_files,
        statistics_files=statistics_files,
    )


def _parse_entity_path_ref(item: Mapping[str, Any]) -> EntityPathFileRef:
    return EntityPathFileRef(
        file_path=_string(item, "filePath", "Entity path file entry"),
        entry_time_start=_hint(_optional_number, item, "entryTimeStart"),
        entry_time_end=_hint(_optional_number, item, "entryTimeEnd"),
        entity_count=_hint(_optional_integer, item, "entityCount"),
    )


def _parse_statistics_ref(item: Mapping[str, Any]) -> StatisticsFileRef:
    return StatisticsFileRef(
        file_path=_string(item, "filePath", "Statistics file entry"),
        type=_optional_string(item, "type"),
        metric_name=_optional_string(item, "metricName"),
        component_id=_optional_string(item, "componentId"),
        time_start=_hint(_optional_number, item, "timeStart"),
        time_end=_hint(_optional_number, item, "timeEnd"),
    )


def parse_model_layout(payload: Any) -> ModelLayout:
    document = _mapping(payload, "Model layout")
    extras = {key: value for key, value in document.items() if key != "simulationId"}
    return ModelLayout(simulation_id=_optional_string(document, "simulationId"), extras=extras)


def parse_shared_visual_config(payload: Any) -> SharedVisualConfig:
    document = _mapping(payload, "Shared visual config")
    loop = document.get("loop")
    if loop is not None and not isinstance(loop, bool):
        raise MalformedDocumentError(f"Field 'loop' must be a boolean, got {loop!r}.")
    extras = {
        key: value
        for key, value in document.items()
        if key not in {"theme", "loop", "speedMultiplier"}
    }
    return SharedVisualConfig(
        theme=_optional_string(document, "theme"),
        loop=loop,
        speed_multiplier=_optional_number(document, "speedMultiplier", "sharedVisualConfig"),
        extras=extras,
    )


def _parse_path_point(item: Mapping[str, Any]) -> PathPoint:
    attributes = item.get("attributes") or {}
    return PathPoint(
        clock=_number(item, "clock", "Path point"),
        x=_number(item, "x", "Path point"),
        y=_number(item, "y", "Path point"),
        state=str(item.get("state", "")),
        event=_optional_string(item, "event"),
        component_id=_optional_string(item, "componentId"),
        attributes=dict(_mapping(attributes, "Path point attributes")),
    )


def parse_entity_path_batch(payload: Any) -> EntityPathBatch:
    """Build an entity-id -> ``EntityPath`` mapping from a batch document."""
    document = _mapping(payload, "Entity path batch")
    batch: EntityPathBatch = {}
    for entity_id, raw_entity in document.items():
        entity = _mapping(raw_entity, f"Entity '{entity_id}'")
        points = _sequence(entity.get("path"), f"Entity '{entity_id}' path")
        batch[str(entity_id)] = EntityPath(
            type=_string(entity, "type", f"Entity '{entity_id}'"),
            path=tuple(_parse_path_point(_mapping(point, "Path point")) for point in points),
        )
    return batch


def parse_statistics_file(payload: Any) -> StatisticsFile:
    """Build a ``StatisticsFile`` from a decoded statistics document."""
    document = _mapping(payload, "Statistics file")
    raw_metadata = _mapping(document.get("metadata"), "Statistics metadata")
    raw_summary = _mapping(document.get("summary"), "Statistics summary")

    metadata = StatisticsMetadata(
        type=_string(raw_metadata, "type", "Statistics metadata"),
        metric_name=_string(raw_metadata, "metricName", "Statistics metadata"),
        simulation_id=str(raw_metadata.get("simulationId", "")),
        replication=_optional_integer(raw_metadata, "replication", "metadata") or 0,
        time_start=_optional_number(raw_metadata, "timeStart", "metadata") or 0.0,
        time_end=_optional_number(raw_metadata, "timeEnd", "metadata") or 0.0,
        time_unit=str(raw_metadata.get("timeUnit", "")),
        component_id=_optional_string(raw_metadata, "componentId"),
    )
    summary = StatisticsSummary(
        min=_number(raw_summary, "min", "summary"),
        max=_number(raw_summary, "max", "summary"),
        mean=_number(raw_summary, "mean", "summary"),
        median=_number(raw_summary, "median", "summary"),
        std_dev=_number(raw_summary, "stdDev", "summary"),
        count=_integer(raw_summary, "count", "summary"),
    )
    time_series = tuple(
        TimeSeriesPoint(
            time=_number(point, "time", "timeSeries"),
            value=_number(point, "value", "timeSeries"),
        )
        for point in (
            _mapping(item, "Time series point")
            for item in _sequence(document.get("timeSeries"), "timeSeries")
        )
    )
    return StatisticsFile(metadata=metadata, summary=summary, time_series=time_series)
