"""View counters kept in a Cassandra counter table."""

from typing import TYPE_CHECKING
from uuid import UUID


if TYPE_CHECKING:
    from cassandra.cluster import Session


class ViewCounter:
    """Increment-only view counts per ``(entity_type, entity_id)``."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self._increment = session.prepare(f"""
            UPDATE {keyspace}.view_counts SET views = views + 1
            WHERE entity_type = ? AND entity_id = ?
        """)
        self._get = session.prepare(f"""
            SELECT views FROM {keyspace}.view_counts
            WHERE entity_type = ? AND entity_id = ?
        """)
        self._delete = session.prepare(f"""
            DELETE FROM {keyspace}.view_counts
            WHERE entity_type = ? AND entity_id = ?
        """)

    async def increment(self, entity_type: str, entity_id: UUID) -> None:
        await self.session.aexecute(self._increment, [entity_type, entity_id])

    async def get(self, entity_type: str, entity_id: UUID) -> int:
        result = await self.session.aexecute(self._get, [entity_type, entity_id])
        row = result.one()
        return row.views if row and row.views else 0

    async def get_many(self, entity_type: str, entity_ids: list[UUID]) -> dict[UUID, int]:
        return {
            entity_id: await self.get(entity_type, entity_id) for entity_id in entity_ids
        }

    async def reset(self, entity_type: str, entity_id: UUID) -> None:
        await self.session.aexecute(self._delete, [entity_type, entity_id])
