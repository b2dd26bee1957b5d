from dataclasses import dataclass
from typing import Dict, FrozenSet, Set

from fastapi import HTTPException, status

DELETED = "deleted"

ALLOWED_TRANSITIONS: Dict[str, Set[str]] = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"completed"},
    "completed": {DELETED},
    "cancelled": {DELETED},
}


@dataclass(frozen=True)
class ActionRule:
    roles: FrozenSet[str]
    target: str
    needs_confirmation: bool = False


ACTION_RULES: Dict[str, ActionRule] = {
    "accept": ActionRule(frozenset({"barber"}), "confirmed"),
    "reject": ActionRule(frozenset({"barber"}), "cancelled", needs_confirmation=True),
    "complete": ActionRule(frozenset({"barber"}), "completed"),
    "cancel": ActionRule(frozenset({"customer"}), "cancelled", needs_confirmation=True),
    "delete": ActionRule(frozenset({"barber", "customer"}), DELETED, needs_confirmation=True),
}


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, set())


def resolve_action(action: str, role: str, current: str, confirmed: bool) -> str:
    """Return the status an action moves a booking to, or raise the matching HTTP error"""
    rule = ACTION_RULES.get(action)
    if rule is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown booking action: {action}"
        )
    if role not in rule.roles:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"A {role} cannot {action} a booking"
        )
    if not can_transition(current, rule.target):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Invalid status transition: {current} -> {rule.target}"
        )
    if rule.needs_confirmation and not confirmed:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Please confirm that you want to {action} this booking"
        )
    return rule.target
