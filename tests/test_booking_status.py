import pytest
from fastapi import HTTPException

from barberbook.services.booking_status import DELETED, can_transition, resolve_action


def test_pending_can_be_confirmed_or_cancelled_but_not_completed():
    assert can_transition("pending", "confirmed")
    assert can_transition("pending", "cancelled")
    assert not can_transition("pending", "completed")


def test_confirmed_cannot_be_cancelled():
    assert can_transition("confirmed", "completed")
    assert not can_transition("confirmed", "cancelled")


def test_only_terminal_states_can_be_deleted():
    assert can_transition("completed", DELETED)
    assert can_transition("cancelled", DELETED)
    assert not can_transition("pending", DELETED)
    assert not can_transition("confirmed", DELETED)


def test_nothing_leaves_completed_or_deleted():
    for target in ("pending", "confirmed", "cancelled"):
        assert not can_transition("completed", target)
        assert not can_transition(DELETED, target)


@pytest.mark.parametrize(
    "action, role, current, confirm, expected",
    [
        ("accept", "barber", "pending", False, "confirmed"),
        ("reject", "barber", "pending", True, "cancelled"),
        ("complete", "barber", "confirmed", False, "completed"),
        ("cancel", "customer", "pending", True, "cancelled"),
        ("delete", "customer", "completed", True, DELETED),
        ("delete", "barber", "cancelled", True, DELETED),
    ],
)
def test_allowed_actions(action, role, current, confirm, expected):
    assert resolve_action(action, role, current, confirm) == expected


def test_complete_on_pending_is_a_conflict():
    with pytest.raises(HTTPException) as exc:
        resolve_action("complete", "barber", "pending", False)
    assert exc.value.status_code == 409


def test_customer_cannot_accept():
    with pytest.raises(HTTPException) as exc:
        resolve_action("accept", "customer", "pending", False)
    assert exc.value.status_code == 403


@pytest.mark.parametrize("action, role, current", [
    ("reject", "barber", "pending"),
    ("cancel", "customer", "pending"),
    ("delete", "customer", "cancelled"),
])
def test_destructive_actions_need_confirmation(action, role, current):
    with pytest.raises(HTTPException) as exc:
        resolve_action(action, role, current, False)
    assert exc.value.status_code == 400


def test_unknown_action_is_rejected():
    with pytest.raises(HTTPException) as exc:
        resolve_action("reschedule", "barber", "pending", True)
    assert exc.value.status_code == 400
