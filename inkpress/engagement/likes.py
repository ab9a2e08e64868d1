"""Like ledger: a ``likes map<uuid, timestamp>`` column keyed by user id.

Toggles write a single map element (``likes[user] = ts`` or
``DELETE likes[user]``), so toggles from different users never overwrite
each other. Two concurrent toggles by the same user both read the same
snapshot and the last write wins.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

import structlog

from inkpress.engagement.models import LikeToggle


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = structlog.get_logger(__name__)


def apply_like_toggle(
    likes: dict[UUID, datetime],
    user_id: UUID,
    now: datetime | None = None,
) -> LikeToggle:
    """Add or remove ``user_id`` from ``likes`` in place."""
    if user_id in likes:
        del likes[user_id]
        return LikeToggle(liked=False, like_count=len(likes))
    likes[user_id] = now or datetime.now(UTC)
    return LikeToggle(liked=True, like_count=len(likes))


def has_liked(likes: dict[UUID, Any] | None, user_id: UUID | None) -> bool:
    return bool(likes) and user_id is not None and user_id in likes


class LikeLedger:
    """Per-row like map stored on an entity table."""

    def __init__(self, session: "Session", keyspace: str, table: str, key_column: str):
        self.session = session
        self.table = table
        self._select_likes = session.prepare(
            f"SELECT likes FROM {keyspace}.{table} WHERE {key_column} = ?"
        )
        # IF EXISTS keeps a like that lands after a delete from recreating the row
        self._add_like = session.prepare(
            f"UPDATE {keyspace}.{table} SET likes[?] = ? WHERE {key_column} = ? "
            "IF EXISTS"
        )
        self._remove_like = session.prepare(
            f"DELETE likes[?] FROM {keyspace}.{table} WHERE {key_column} = ?"
        )

    async def toggle(self, entity_id: UUID, user_id: UUID) -> LikeToggle | None:
        """Toggle ``user_id``'s like on the row. Returns None if the row is gone."""
        result = await self.session.aexecute(self._select_likes, [entity_id])
        row = result.one()
        if row is None:
            return None

        likes = dict(row.likes or {})
        now = datetime.now(UTC)
        toggle = apply_like_toggle(likes, user_id, now)

        if toggle.liked:
            added = await self.session.aexecute(
                self._add_like, [user_id, now, entity_id]
            )
            if not added.one().applied:
                return None
        else:
            await self.session.aexecute(self._remove_like, [user_id, entity_id])

        logger.debug(
            "like_toggled",
            table=self.table,
            entity_id=str(entity_id),
            liked=toggle.liked,
            like_count=toggle.like_count,
        )
        return toggle
