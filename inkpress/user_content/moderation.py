"""Moderation state machine for user content.

    create               -> pending
    pending  --approve-->   approved
    pending  --reject-->    rejected
    rejected --author edit-> pending
    approved --publish-->   published

Admin edits never change the status. Transitions mutate the entity in
memory; persisting them (with a compare-and-set on ``status``) is the
repository's job.
"""

from datetime import UTC, datetime
from uuid import UUID

from inkpress.auth.permissions import Actor
from inkpress.core.exceptions import InvalidStateError, ValidationError

from .models import ContentStatus, UserContent


LOCKED_FOR_AUTHORS = frozenset({ContentStatus.APPROVED, ContentStatus.PUBLISHED})


def approve(
    content: UserContent,
    moderator_id: UUID,
    notes: str = "",
    now: datetime | None = None,
) -> None:
    """Approve pending content.

    ``published_at`` is stamped only the first time; moderation fields are
    always overwritten.

    Raises:
        InvalidStateError: content is not pending
    """
    if content.status != ContentStatus.PENDING:
        raise InvalidStateError("Only pending content can be approved")

    now = now or datetime.now(UTC)
    content.status = ContentStatus.APPROVED
    if content.published_at is None:
        content.published_at = now
    _stamp(content, moderator_id, notes, now)


def reject(
    content: UserContent,
    moderator_id: UUID,
    notes: str,
    now: datetime | None = None,
) -> None:
    """Reject pending content with a mandatory reason.

    Raises:
        ValidationError: notes are empty
        InvalidStateError: content is not pending
    """
    if not notes or not notes.strip():
        raise ValidationError("Rejection reason is required")
    if content.status != ContentStatus.PENDING:
        raise InvalidStateError("Only pending content can be rejected")

    now = now or datetime.now(UTC)
    content.status = ContentStatus.REJECTED
    _stamp(content, moderator_id, notes.strip(), now)


def publish(
    content: UserContent,
    moderator_id: UUID,
    now: datetime | None = None,
) -> None:
    """Promote approved content to published.

    Raises:
        InvalidStateError: content is not approved
    """
    if content.status != ContentStatus.APPROVED:
        raise InvalidStateError("Only approved content can be published")

    now = now or datetime.now(UTC)
    content.status = ContentStatus.PUBLISHED
    if content.published_at is None:
        content.published_at = now
    content.moderated_by = moderator_id
    content.moderated_at = now
    content.updated_at = now


def check_editable(content: UserContent, actor: Actor) -> None:
    """Raise if ``actor`` may not change ``content`` in its current state.

    Ownership is checked separately (``can_manage``).

    Raises:
        InvalidStateError: a non-admin tries to edit approved/published content
    """
    if not actor.is_admin and content.status in LOCKED_FOR_AUTHORS:
        raise InvalidStateError("Cannot edit approved or published content")


def resubmit_on_edit(content: UserContent, actor: Actor) -> bool:
    """Send rejected content back to the queue after its author edits it.

    Returns:
        True if the status changed
    """
    if actor.is_admin or content.status != ContentStatus.REJECTED:
        return False
    content.status = ContentStatus.PENDING
    content.moderation_notes = ""
    return True


def _stamp(content: UserContent, moderator_id: UUID, notes: str, now: datetime) -> None:
    content.moderated_by = moderator_id
    content.moderated_at = now
    content.moderation_notes = notes
    content.updated_at = now
