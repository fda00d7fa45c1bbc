"""
Unit Tests for Claim and Repair Order State Machines
"""

import pytest

from warranty_engine.core.exceptions import InvalidStateError
from warranty_engine.models import ClaimStatus, RepairOrderStatus
from warranty_engine.services import claim_state_machine, repair_order_state_machine


class TestClaimStateMachine:

    @pytest.mark.parametrize("current,new", [
        ("pending_approval", "approved"),
        ("pending_approval", "in_repair"),
        ("pending_approval", "denied"),
        ("approved", "in_repair"),
        ("approved", "denied"),
        ("in_repair", "completed"),
        ("in_repair", "denied"),
        ("completed", "closed"),
        ("completed", "denied"),
    ])
    def test_allowed_transitions(self, current, new):
        assert claim_state_machine.can_transition(current, new)
        claim_state_machine.validate_transition(current, new)

    @pytest.mark.parametrize("current,new", [
        ("pending_approval", "completed"),
        ("pending_approval", "closed"),
        ("approved", "approved"),
        ("approved", "completed"),
        ("in_repair", "approved"),
        ("completed", "in_repair"),
        ("closed", "denied"),
    ])
    def test_rejected_transitions(self, current, new):
        assert not claim_state_machine.can_transition(current, new)
        with pytest.raises(InvalidStateError) as exc_info:
            claim_state_machine.validate_transition(current, new)
        assert exc_info.value.details["current_status"] == current
        assert exc_info.value.details["requested_status"] == new

    @pytest.mark.parametrize("status", [ClaimStatus.DENIED, ClaimStatus.CLOSED])
    def test_terminal_states(self, status):
        assert claim_state_machine.get_allowed_transitions(status) == []
        with pytest.raises(InvalidStateError, match="terminal state"):
            claim_state_machine.validate_transition(status, ClaimStatus.APPROVED)

    def test_accepts_enum_members(self):
        assert claim_state_machine.can_transition(ClaimStatus.APPROVED, ClaimStatus.IN_REPAIR)

    def test_status_helpers(self):
        assert claim_state_machine.can_approve("pending_approval")
        assert not claim_state_machine.can_approve("approved")
        assert claim_state_machine.can_dispatch_repair("approved")
        assert not claim_state_machine.can_dispatch_repair("in_repair")


class TestRepairOrderStateMachine:

    def test_scheduled_transitions(self):
        assert repair_order_state_machine.get_allowed_transitions(RepairOrderStatus.SCHEDULED) == [
            "completed", "cancelled",
        ]

    @pytest.mark.parametrize("status", ["completed", "cancelled"])
    def test_terminal_states(self, status):
        assert repair_order_state_machine.get_allowed_transitions(status) == []
        for new in ("scheduled", "completed", "cancelled"):
            with pytest.raises(InvalidStateError):
                repair_order_state_machine.validate_transition(status, new)

    def test_already_in_state_message(self):
        with pytest.raises(InvalidStateError, match="already cancelled"):
            repair_order_state_machine.validate_transition("cancelled", "cancelled")
