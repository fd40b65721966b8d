"""Per-activation cache of entity path batches and the flat entity index."""

from __future__ import annotations

import logging

from animation.models import EntityPath, EntityPathBatch

LOGGER = logging.getLogger(__name__)


class EntityPathCache:
    """Paths of loaded batch files plus an entity-id index merged across them."""

    def __init__(self) -> None:
        self._loaded_files: set[str] = set()
        self._paths_by_id: dict[str, EntityPath] = {}

    def clear(self) -> None:
        self._loaded_files.clear()
        self._paths_by_id.clear()

    def is_loaded(self, file_path: str) -> bool:
        return file_path in self._loaded_files

    def add_batch(self, file_path: str, batch: EntityPathBatch) -> None:
        """Record ``batch`` as loaded and merge its entities into the index.

        An entity id already present is replaced by the newer path.
        """
        self._loaded_files.add(file_path)
        replaced = 0
        for entity_id, path in batch.items():
            if entity_id in self._paths_by_id:
                replaced += 1
            self._paths_by_id[entity_id] = path
        if replaced:
            LOGGER.debug("Batch %s replaced %d previously indexed entities", file_path, replaced)

    def get(self, entity_id: str) -> EntityPath | None:
        return self._paths_by_id.get(entity_id)

    def entity_ids(self) -> list[str]:
        return list(self._paths_by_id)

    def by_type(self, entity_type: str) -> dict[str, EntityPath]:
        return {
            entity_id: path
            for entity_id, path in self._paths_by_id.items()
            if path.type == entity_type
        }

    def __len__(self) -> int:
        return len(self._paths_by_id)
