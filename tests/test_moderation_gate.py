"""
Moderation gate: initial status, approve/reject transitions, comment approval, guest visibility.
Pure functions; no database.
"""
import uuid
from types import SimpleNamespace

import pytest

from wedding_memories.services.moderation_service import (
    EventPolicy,
    ItemStatus,
    ModerationAction,
    SubmitterRole,
    apply_moderation_action,
    decide_comment_approval,
    decide_initial_status,
    is_guest_visible,
    partition_for_event,
)

MODERATED = EventPolicy(moderate_uploads=True)
OPEN = EventPolicy(moderate_uploads=False)


def test_guest_upload_pending_when_event_moderates() -> None:
    assert decide_initial_status(MODERATED, SubmitterRole.GUEST) == ItemStatus.PENDING


def test_guest_upload_approved_when_event_does_not_moderate() -> None:
    assert decide_initial_status(OPEN, SubmitterRole.GUEST) == ItemStatus.APPROVED


@pytest.mark.parametrize("role", [SubmitterRole.HOST, SubmitterRole.PHOTOGRAPHER, SubmitterRole.ADMIN])
def test_trusted_roles_always_approved(role: SubmitterRole) -> None:
    assert decide_initial_status(MODERATED, role) == ItemStatus.APPROVED
    assert decide_comment_approval(MODERATED, role) is True


def test_role_given_as_string() -> None:
    assert decide_initial_status(MODERATED, "guest") == ItemStatus.PENDING
    assert decide_initial_status(MODERATED, "host") == ItemStatus.APPROVED


def test_guest_comment_needs_approval_only_when_moderated() -> None:
    assert decide_comment_approval(MODERATED, SubmitterRole.GUEST) is False
    assert decide_comment_approval(OPEN, SubmitterRole.GUEST) is True


def test_approve_pending_becomes_visible() -> None:
    outcome = apply_moderation_action(ItemStatus.PENDING, ModerationAction.APPROVE)
    assert outcome.status == ItemStatus.APPROVED
    assert outcome.changed is True
    assert outcome.became_visible is True


def test_approve_rejected_becomes_visible() -> None:
    outcome = apply_moderation_action("rejected", "approve")
    assert outcome.previous == ItemStatus.REJECTED
    assert outcome.became_visible is True


def test_approve_already_approved_is_noop() -> None:
    outcome = apply_moderation_action(ItemStatus.APPROVED, ModerationAction.APPROVE)
    assert outcome.changed is False
    assert outcome.became_visible is False


def test_reject_approved_hides_without_visibility_signal() -> None:
    outcome = apply_moderation_action(ItemStatus.APPROVED, ModerationAction.REJECT)
    assert outcome.status == ItemStatus.REJECTED
    assert outcome.changed is True
    assert outcome.became_visible is False


def test_unknown_action_rejected() -> None:
    with pytest.raises(ValueError):
        apply_moderation_action(ItemStatus.PENDING, "feature")


def test_guest_visibility() -> None:
    assert is_guest_visible(ItemStatus.APPROVED, False) is True
    assert is_guest_visible(ItemStatus.APPROVED, True) is False
    assert is_guest_visible(ItemStatus.PENDING, False) is False
    assert is_guest_visible("rejected", False) is False


def test_policy_from_event_row() -> None:
    row = SimpleNamespace(
        moderate_uploads=True,
        enable_guestbook=False,
        enable_audio_messages=True,
        allow_comments=False,
        allow_likes=True,
        allow_downloads=False,
    )
    policy = EventPolicy.from_event(row)
    assert policy.moderate_uploads is True
    assert policy.enable_guestbook is False
    assert policy.allow_downloads is False


def test_partition_keeps_foreign_items_apart() -> None:
    a, b = uuid.uuid4(), uuid.uuid4()
    items = [SimpleNamespace(event_id=a), SimpleNamespace(event_id=b), SimpleNamespace(event_id=a)]
    own, foreign = partition_for_event(items, a)
    assert len(own) == 2
    assert foreign == [items[1]]
