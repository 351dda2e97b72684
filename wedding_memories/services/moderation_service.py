"""
Moderation gate: the single place where item/comment status is decided.
- decide_initial_status: submission + event policy -> pending | approved.
- apply_moderation_action: approve/reject transition + became_visible (broadcast trigger).
- decide_comment_approval: same rule for comments/replies, independent of the parent item.
Pure logic over already-loaded state; no I/O, never raises for no-op transitions.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Tuple
from uuid import UUID


class ItemStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SubmitterRole(str, Enum):
    GUEST = "guest"
    HOST = "host"
    PHOTOGRAPHER = "photographer"
    ADMIN = "admin"


class ModerationAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


# Authenticated submitters bypass moderation.
TRUSTED_ROLES = frozenset({SubmitterRole.HOST, SubmitterRole.PHOTOGRAPHER, SubmitterRole.ADMIN})

_ACTION_TARGET = {
    ModerationAction.APPROVE: ItemStatus.APPROVED,
    ModerationAction.REJECT: ItemStatus.REJECTED,
}


@dataclass(frozen=True)
class EventPolicy:
    """Subset of the event row that drives moderation and interaction gating."""

    moderate_uploads: bool = False
    enable_guestbook: bool = True
    enable_audio_messages: bool = True
    allow_comments: bool = True
    allow_likes: bool = True
    allow_downloads: bool = True

    @classmethod
    def from_event(cls, event: Any) -> "EventPolicy":
        return cls(
            moderate_uploads=bool(event.moderate_uploads),
            enable_guestbook=bool(event.enable_guestbook),
            enable_audio_messages=bool(event.enable_audio_messages),
            allow_comments=bool(event.allow_comments),
            allow_likes=bool(event.allow_likes),
            allow_downloads=bool(event.allow_downloads),
        )


@dataclass(frozen=True)
class ModerationOutcome:
    previous: ItemStatus
    status: ItemStatus
    became_visible: bool

    @property
    def changed(self) -> bool:
        return self.previous != self.status


def _needs_review(policy: EventPolicy, submitter_role: SubmitterRole) -> bool:
    if SubmitterRole(submitter_role) in TRUSTED_ROLES:
        return False
    return policy.moderate_uploads


def decide_initial_status(policy: EventPolicy, submitter_role: SubmitterRole) -> ItemStatus:
    """
    Trạng thái ban đầu của item mới.
    host / photographer / admin: luôn approved.
    guest: pending khi policy.moderate_uploads, ngược lại approved.
    """
    if _needs_review(policy, submitter_role):
        return ItemStatus.PENDING
    return ItemStatus.APPROVED


def decide_comment_approval(policy: EventPolicy, submitter_role: SubmitterRole) -> bool:
    """is_approved for a new comment/reply; does not touch the parent item's status."""
    return not _needs_review(policy, submitter_role)


def apply_moderation_action(current: ItemStatus | str, action: ModerationAction | str) -> ModerationOutcome:
    """
    approve: pending|rejected -> approved. reject: pending|approved -> rejected.
    Already in the target state is a no-op. became_visible is True exactly when the
    item enters approved from another status.
    """
    previous = ItemStatus(current)
    target = _ACTION_TARGET[ModerationAction(action)]
    became_visible = previous != ItemStatus.APPROVED and target == ItemStatus.APPROVED
    return ModerationOutcome(previous=previous, status=target, became_visible=became_visible)


def is_guest_visible(status: ItemStatus | str, is_hidden: bool) -> bool:
    """Guests only ever see approved, non-hidden items."""
    return ItemStatus(status) == ItemStatus.APPROVED and not is_hidden


def partition_for_event(items: Iterable[Any], event_id: UUID) -> Tuple[List[Any], List[Any]]:
    """Split items into (belonging to event_id, foreign). Bulk actions only touch the first list."""
    own: List[Any] = []
    foreign: List[Any] = []
    for item in items:
        (own if item.event_id == event_id else foreign).append(item)
    return own, foreign
