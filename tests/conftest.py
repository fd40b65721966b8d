"""Pytest fixtures for building animation studies in memory or on disk."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Mapping

import pytest

from readers.memory import InMemoryContentAccessor


class StudyBuilder:
    """Accumulates study documents as relative path -> JSON text."""

    def __init__(self) -> None:
        self.files: dict[str, str] = {}

    def put(self, path: str, payload: Any) -> StudyBuilder:
        self.files[path] = payload if isinstance(payload, str) else json.dumps(payload)
        return self

    def add_shared(
        self,
        layout_path: str = "model_layout.json",
        simulation_id: str = "sim-1",
        visual_path: str = "shared_visual_config.json",
        theme: str = "dark",
    ) -> StudyBuilder:
        self.put(layout_path, {"simulationId": simulation_id, "components": [{"id": "act1"}]})
        self.put(
            visual_path,
            {"theme": theme, "loop": True, "speedMultiplier": 2, "visualization": {"backgroundMode": "svg"}},
        )
        return self

    def add_replication(
        self,
        directory: str,
        replication: int,
        entity_files: Iterable[str] = (),
        statistics: Iterable[tuple[str, str | None, str, str]] = (),
        name: str | None = None,
        model_layout_path: str | None = "model_layout.json",
        shared_visual_config_path: str | None = "shared_visual_config.json",
    ) -> StudyBuilder:
        metadata: dict[str, Any] = {
            "formatVersion": "1.0",
            "simulationId": "sim-1",
            "replication": replication,
            "duration": 100,
            "timeUnit": "minutes",
            "modelLayoutPath": model_layout_path,
            "sharedVisualConfigPath": shared_visual_config_path,
            "backgroundSvgPath": "background.svg",
        }
        if name is not None:
            metadata["name"] = name
        stats_refs = []
        for stat_type, component_id, metric_name, file_path in statistics:
            ref = {"type": stat_type, "metricName": metric_name, "filePath": file_path}
            if component_id is not None:
                ref["componentId"] = component_id
            stats_refs.append(ref)
        manifest = {
            "metadata": metadata,
            "entityPathDataFiles": [
                {"filePath": path, "entryTimeStart": 0, "entryTimeEnd": 100} for path in entity_files
            ],
            "statisticsDataFiles": stats_refs,
        }
        return self.put(f"replications/{directory}/animation_manifest_{directory}.json", manifest)

    def add_batch(self, file_path: str, entities: Mapping[str, str]) -> StudyBuilder:
        """Add a batch where ``entities`` maps entity id -> entity type."""
        batch = {
            entity_id: {
                "type": entity_type,
                "path": [
                    {"clock": 0, "x": 0, "y": 0, "state": "created"},
                    {"clock": 10, "x": 5, "y": 5, "state": "moving", "event": "arrive"},
                ],
            }
            for entity_id, entity_type in entities.items()
        }
        return self.put(file_path, batch)

    def add_statistic(
        self,
        file_path: str,
        stat_type: str,
        component_id: str | None,
        metric_name: str,
        series: Iterable[tuple[float, float]],
        replication: int = 1,
    ) -> StudyBuilder:
        points = [{"time": t, "value": v} for t, v in series]
        values = [p["value"] for p in points] or [0.0]
        metadata: dict[str, Any] = {
            "type": stat_type,
            "metricName": metric_name,
            "simulationId": "sim-1",
            "replication": replication,
            "timeStart": points[0]["time"] if points else 0,
            "timeEnd": points[-1]["time"] if points else 0,
            "timeUnit": "minutes",
        }
        if component_id is not None:
            metadata["componentId"] = component_id
        summary = {
            "min": min(values),
            "max": max(values),
            "mean": sum(values) / len(values),
            "median": sorted(values)[len(values) // 2],
            "stdDev": 0.0,
            "count": len(points),
        }
        return self.put(file_path, {"metadata": metadata, "summary": summary, "timeSeries": points})

    def reader(self) -> InMemoryContentAccessor:
        return InMemoryContentAccessor(self.files)

    def write(self, root: Path) -> Path:
        for relative_path, text in self.files.items():
            target = root / relative_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
        return root


@pytest.fixture
def study() -> StudyBuilder:
    return StudyBuilder()


@pytest.fixture
def two_replication_study(study: StudyBuilder) -> StudyBuilder:
    """Replications 1 and 2 with disjoint entities and one queue statistic each."""
    study.add_shared()
    study.add_replication(
        "rep_001",
        1,
        entity_files=["rep1/batch_a.json", "rep1/batch_b.json"],
        statistics=[("activity_metric", "act1", "queueLength", "rep1/stats_queue.json")],
        name="Baseline",
    )
    study.add_batch("rep1/batch_a.json", {"c1": "Customer", "c2": "Customer"})
    study.add_batch("rep1/batch_b.json", {"n1": "Nurse"})
    study.add_statistic("rep1/stats_queue.json", "activity_metric", "act1", "queueLength", [(0, 10), (10, 20)])

    study.add_replication(
        "rep_002",
        2,
        entity_files=["rep2/batch_a.json"],
        statistics=[("activity_metric", "act1", "queueLength", "rep2/stats_queue.json")],
        name="Extra nurse",
    )
    study.add_batch("rep2/batch_a.json", {"c9": "Customer", "n9": "Nurse"})
    study.add_statistic(
        "rep2/stats_queue.json", "activity_metric", "act1", "queueLength", [(0, 1), (5, 3), (10, 2)], replication=2
    )
    return study
