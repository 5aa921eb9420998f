"""Archive toggling shared by every archivable kind (fixed and variable costs).

Archiving never deletes: it flips the entity's `archived` flag.
"""

from __future__ import annotations

from typing import Optional

from tireworks.bindings import DataSourceBinding
from tireworks.errors import NotFoundError
from tireworks.models.schemas import EntitySchema

from finance_dashboard.utils.logging import logger


async def toggle_archive(binding: DataSourceBinding, entity_id: str) -> Optional[EntitySchema]:
    """Flip `archived` on the entity with `entity_id`.

    A missing entity (not in the snapshot, or removed before the update
    landed) is a no-op and returns None.
    """
    current = binding.find(entity_id)
    if current is None:
        logger.info("archive: %s %s not in snapshot, skipping", binding.kind.value, entity_id)
        return None
    try:
        return await binding.update(entity_id, {"archived": not current.archived})
    except NotFoundError:
        logger.info("archive: %s %s vanished before update", binding.kind.value, entity_id)
        return None
