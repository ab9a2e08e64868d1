"""Commentable targets.

Posts and user content both accept comments. The comment engine only sees
them through ``CommentTarget``: whether commenting is open and whether new
comments wait for approval.
"""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from .models import CommentStatus, CommentTargetType


@dataclass(frozen=True)
class CommentTarget:
    type: CommentTargetType
    id: UUID
    comments_enabled: bool
    requires_approval: bool

    @property
    def initial_status(self) -> CommentStatus:
        return CommentStatus.PENDING if self.requires_approval else CommentStatus.APPROVED


class Commentable(Protocol):
    def as_comment_target(self) -> CommentTarget: ...


class CommentableRepository(Protocol):
    async def get(self, entity_id: UUID) -> Commentable | None: ...


class CommentTargetResolver:
    """Resolve a target id into a ``CommentTarget`` via the owning repository."""

    def __init__(self, repository: CommentableRepository):
        self.repository = repository

    async def resolve(self, target_id: UUID) -> CommentTarget | None:
        entity = await self.repository.get(target_id)
        return entity.as_comment_target() if entity else None
