"""Replication discovery, activation, and query facade over animation data."""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Callable, Iterable, TypeVar

from animation.content_accessor import ContentAccessor
from animation.documents import (
    MalformedDocumentError,
    parse_entity_path_batch,
    parse_manifest,
    parse_model_layout,
    parse_shared_visual_config,
    parse_statistics_file,
)
from animation.entity_paths import EntityPathCache
from animation.models import (
    EntityPath,
    EntityPathFileRef,
    ModelLayout,
    ReplicationManifest,
    ReplicationMetadata,
    SharedVisualConfig,
    StatisticKey,
    StatisticsFile,
    StatisticsFileRef,
    StatisticsSummary,
    TimeSeriesPoint,
)
from animation.statistics_store import StatisticsCache

LOGGER = logging.getLogger(__name__)

DEFAULT_REPLICATIONS_DIR = "replications"
_REPLICATION_DIR_PATTERN = re.compile(r"^rep_[\w-]+$")

T = TypeVar("T")
_Ref = TypeVar("_Ref", EntityPathFileRef, StatisticsFileRef)


def manifest_path_for(replications_dir: str, directory_name: str) -> str:
    """Return the manifest location for a ``rep_<id>`` directory."""
    return f"{replications_dir}/{directory_name}/animation_manifest_{directory_name}.json"


class AnimationData:
    """Loads manifests and serves the active replication's paths and statistics.

    All reads go through the injected ``ContentAccessor``. Missing or malformed
    documents are logged and treated as absent; no query raises for them.
    """

    def __init__(
        self,
        reader: ContentAccessor,
        replications_dir: str = DEFAULT_REPLICATIONS_DIR,
        concurrent_loads: bool = True,
    ) -> None:
        self.reader = reader
        self.replications_dir = replications_dir
        self.concurrent_loads = concurrent_loads

        self.available_replications: dict[int, ReplicationManifest] = {}
        self.model_layout: ModelLayout | None = None
        self.shared_visual_config: SharedVisualConfig | None = None
        self._active_replication_id: int | None = None

        self._entity_paths = EntityPathCache()
        self._statistics = StatisticsCache()

    async def _fetch_document(self, relative_path: str, parser: Callable[[Any], T]) -> T | None:
        content = await self.reader.read_file_as_text(relative_path)
        if content is None:
            LOGGER.warning("Could not read %s", relative_path)
            return None
        try:
            payload = json.loads(content)
        except json.JSONDecodeError as exc:
            LOGGER.error("Error parsing JSON from %s: %s", relative_path, exc)
            return None
        try:
            return parser(payload)
        except MalformedDocumentError as exc:
            LOGGER.warning("Malformed document %s: %s", relative_path, exc)
            return None

    async def discover_replications(self) -> None:
        """Register every readable ``rep_<id>`` manifest under the replications directory."""
        items = await self.reader.list_directory_contents(self.replications_dir)
        if items is None:
            LOGGER.warning("Replications directory %r could not be listed", self.replications_dir)
            return

        for item in sorted(items, key=lambda entry: entry.name):
            if not item.is_directory or not _REPLICATION_DIR_PATTERN.match(item.name):
                LOGGER.debug("Skipping %s: not a replication directory", item.path)
                continue

            manifest_path = manifest_path_for(self.replications_dir, item.name)
            manifest = await self._fetch_document(manifest_path, parse_manifest)
            if manifest is None:
                LOGGER.warning("Skipping replication directory %s", item.name)
                continue

            self.available_replications[manifest.replication] = manifest
            await self._load_shared_documents(manifest.metadata)

        LOGGER.info(
            "Discovered %d replication(s): %s",
            len(self.available_replications),
            sorted(self.available_replications),
        )

    async def _load_shared_documents(self, metadata: ReplicationMetadata) -> None:
        if self.model_layout is None and metadata.model_layout_path:
            self.model_layout = await self._fetch_document(metadata.model_layout_path, parse_model_layout)
        if self.shared_visual_config is None and metadata.shared_visual_config_path:
            self.shared_visual_config = await self._fetch_document(
                metadata.shared_visual_config_path, parse_shared_visual_config
            )

    async def set_active_replication(self, replication_id: int) -> bool:
        """Make ``replication_id`` active and reload its caches from scratch.

        Returns ``False`` without touching any state if the id is unknown.
        """
        manifest = self.available_replications.get(replication_id)
        if manifest is None:
            LOGGER.warning("Unknown replication %s", replication_id)
            return False

        self._active_replication_id = replication_id
        self._entity_paths.clear()
        self._statistics.clear()

        await self._load_entity_path_batches(manifest.entity_path_files)
        await self._load_statistics_files(manifest.statistics_files)

        LOGGER.info(
            "Activated replication %s: %d entities, %d statistics",
            replication_id,
            len(self._entity_paths),
            len(self._statistics),
        )
        return True

    async def _load_entity_path_batches(self, refs: Iterable[EntityPathFileRef]) -> None:
        pending = _unique_by_path(ref for ref in refs if not self._entity_paths.is_loaded(ref.file_path))
        if not self.concurrent_loads:
            for ref in pending:
                await self.load_entity_path_batch(ref)
            return

        batches = await asyncio.gather(
            *(self._fetch_document(ref.file_path, parse_entity_path_batch) for ref in pending)
        )
        # merge in manifest order so duplicate ids resolve the same way as sequential loading
        for ref, batch in zip(pending, batches):
            if batch is not None:
                self._entity_paths.add_batch(ref.file_path, batch)

    async def _load_statistics_files(self, refs: Iterable[StatisticsFileRef]) -> None:
        pending = _unique_by_path(ref for ref in refs if not self._statistics.is_loaded(ref.file_path))
        if not self.concurrent_loads:
            for ref in pending:
                await self.load_statistics_file(ref)
            return

        stat_files = await asyncio.gather(
            *(self._fetch_document(ref.file_path, parse_statistics_file) for ref in pending)
        )
        for ref, stat_file in zip(pending, stat_files):
            if stat_file is not None:
                self._statistics.add_file(ref.file_path, stat_file)

    async def load_entity_path_batch(self, ref: EntityPathFileRef) -> None:
        if self._entity_paths.is_loaded(ref.file_path):
            LOGGER.debug("Entity path batch %s already loaded", ref.file_path)
            return
        batch = await self._fetch_document(ref.file_path, parse_entity_path_batch)
        if batch is not None:
            self._entity_paths.add_batch(ref.file_path, batch)

    async def load_statistics_file(self, ref: StatisticsFileRef) -> None:
        if self._statistics.is_loaded(ref.file_path):
            LOGGER.debug("Statistics file %s already loaded", ref.file_path)
            return
        stat_file = await self._fetch_document(ref.file_path, parse_statistics_file)
        if stat_file is not None:
            self._statistics.add_file(ref.file_path, stat_file)

    def get_active_replication_id(self) -> int | None:
        return self._active_replication_id

    def get_active_manifest(self) -> ReplicationManifest | None:
        if self._active_replication_id is None:
            return None
        return self.available_replications.get(self._active_replication_id)

    def get_active_replication_metadata(self) -> ReplicationMetadata | None:
        manifest = self.get_active_manifest()
        return manifest.metadata if manifest is not None else None

    def get_entity_path(self, entity_id: str) -> EntityPath | None:
        return self._entity_paths.get(entity_id)

    def get_loaded_entity_ids(self) -> list[str]:
        return self._entity_paths.entity_ids()

    def get_entities_by_type(self, entity_type: str) -> dict[str, EntityPath]:
        return self._entity_paths.by_type(entity_type)

    def get_loaded_statistic_keys(self) -> list[StatisticKey]:
        return self._statistics.keys()

    def get_statistic(
        self, stat_type: str, component_id: str | None, metric_name: str
    ) -> StatisticsFile | None:
        return self._statistics.get(stat_type, component_id, metric_name)

    def get_statistic_summary(
        self, stat_type: str, component_id: str | None, metric_name: str
    ) -> StatisticsSummary | None:
        return self._statistics.summary(stat_type, component_id, metric_name)

    def get_statistic_value_at_time(
        self, stat_type: str, component_id: str | None, metric_name: str, time: float
    ) -> float | None:
        return self._statistics.value_at_time(stat_type, component_id, metric_name, time)

    def get_statistic_time_series_for_range(
        self,
        stat_type: str,
        component_id: str | None,
        metric_name: str,
        start: float,
        end: float,
    ) -> list[TimeSeriesPoint]:
        return self._statistics.time_series_for_range(stat_type, component_id, metric_name, start, end)


def _unique_by_path(refs: Iterable[_Ref]) -> list[_Ref]:
    seen: set[str] = set()
    unique: list[_Ref] = []
    for ref in refs:
        file_path = ref.file_path
        if file_path in seen:
            continue
        seen.add(file_path)
        unique.append(ref)
    return unique
