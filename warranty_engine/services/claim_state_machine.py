"""
Claim State Machine

This module is the SINGLE SOURCE OF TRUTH for all claim status transitions.
All claim status changes must go through validate_transition().

Lifecycle:
    pending_approval -> approved -> in_repair -> completed -> closed
    Any non-terminal state -> denied
    pending_approval -> in_repair (repair dispatched before approval)
"""

from typing import Dict, List

from warranty_engine.core.enum_utils import get_enum_value
from warranty_engine.core.exceptions import InvalidStateError
from warranty_engine.models.claim import ClaimStatus


# =============================================================================
# TRANSITION RULES
# =============================================================================

# Format: current_status -> [list of allowed next statuses]
CLAIM_TRANSITIONS: Dict[str, List[str]] = {
    ClaimStatus.PENDING_APPROVAL.value: [
        ClaimStatus.APPROVED.value,     # Approve
        ClaimStatus.IN_REPAIR.value,    # Repair order created
        ClaimStatus.DENIED.value,       # Deny
    ],
    ClaimStatus.APPROVED.value: [
        ClaimStatus.IN_REPAIR.value,    # Repair order created
        ClaimStatus.DENIED.value,       # Deny
    ],
    ClaimStatus.IN_REPAIR.value: [
        ClaimStatus.COMPLETED.value,    # Repair order completed
        ClaimStatus.DENIED.value,       # Deny
    ],
    ClaimStatus.COMPLETED.value: [
        ClaimStatus.CLOSED.value,       # Close
        ClaimStatus.DENIED.value,       # Deny
    ],
    ClaimStatus.DENIED.value: [],       # Terminal state
    ClaimStatus.CLOSED.value: [],       # Terminal state
}


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def can_transition(current_status, new_status) -> bool:
    """Check if a transition is allowed."""
    allowed = CLAIM_TRANSITIONS.get(get_enum_value(current_status), [])
    return get_enum_value(new_status) in allowed


def get_allowed_transitions(current_status) -> List[str]:
    """Get list of statuses that can be transitioned to from current status."""
    return CLAIM_TRANSITIONS.get(get_enum_value(current_status), [])


def validate_transition(current_status, new_status) -> None:
    """
    Validate a claim status transition. Raises InvalidStateError if invalid.

    Unlike a no-op update, moving a claim to the status it already holds is
    rejected: approving an approved claim is an error.
    """
    current, new = get_enum_value(current_status), get_enum_value(new_status)

    if not can_transition(current, new):
        allowed = get_allowed_transitions(current)
        details = {"current_status": current, "requested_status": new, "allowed": allowed}
        if not allowed:
            raise InvalidStateError(
                f"Claim in '{current}' status cannot be modified. This is a terminal state.",
                details,
            )
        raise InvalidStateError(
            f"Cannot change claim from '{current}' to '{new}'. "
            f"Allowed transitions: {', '.join(allowed)}",
            details,
        )


# =============================================================================
# STATUS CHECK HELPERS
# =============================================================================

def can_approve(status) -> bool:
    return get_enum_value(status) == ClaimStatus.PENDING_APPROVAL.value


def can_dispatch_repair(status) -> bool:
    """Can a repair order be created for this claim?"""
    return get_enum_value(status) in (ClaimStatus.PENDING_APPROVAL.value, ClaimStatus.APPROVED.value)
