"""
Repair Order State Machine

SINGLE SOURCE OF TRUTH for repair order status transitions:
    scheduled -> completed
    scheduled -> cancelled
completed and cancelled are terminal.
"""

from typing import Dict, List

from warranty_engine.core.enum_utils import get_enum_value
from warranty_engine.core.exceptions import InvalidStateError
from warranty_engine.models.repair_order import RepairOrderStatus


REPAIR_ORDER_TRANSITIONS: Dict[str, List[str]] = {
    RepairOrderStatus.SCHEDULED.value: [
        RepairOrderStatus.COMPLETED.value,
        RepairOrderStatus.CANCELLED.value,
    ],
    RepairOrderStatus.COMPLETED.value: [],  # Terminal state
    RepairOrderStatus.CANCELLED.value: [],  # Terminal state
}


def can_transition(current_status, new_status) -> bool:
    allowed = REPAIR_ORDER_TRANSITIONS.get(get_enum_value(current_status), [])
    return get_enum_value(new_status) in allowed


def get_allowed_transitions(current_status) -> List[str]:
    return REPAIR_ORDER_TRANSITIONS.get(get_enum_value(current_status), [])


def validate_transition(current_status, new_status) -> None:
    """Raises InvalidStateError if the transition is not allowed."""
    current, new = get_enum_value(current_status), get_enum_value(new_status)
    if can_transition(current, new):
        return

    details = {"current_status": current, "requested_status": new}
    if current == new:
        raise InvalidStateError(f"Repair order is already {current}", details)
    raise InvalidStateError(
        f"Repair order in '{current}' status cannot be moved to '{new}'. "
        f"This is a terminal state.",
        details,
    )
