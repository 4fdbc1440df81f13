from __future__ import annotations

from datetime import date, datetime

import pytest

from src.leave_system.leave_system.core.enums import (
    ApprovalStage,
    DecisionOutcome,
    EmployeeType,
    LeaveDuration,
    LeaveStatus,
    LeaveType,
    LeaveVariant,
)
from src.leave_system.leave_system.core.exceptions import AlreadyDecidedError, InvalidTransitionError
from src.leave_system.leave_system.leaves.model import Decision, LeaveRequest
from src.leave_system.leave_system.leaves.transitions import awaits_stage, check_transition, is_terminal, next_status


def _leave(status, *, requires_hod_stage=True, hod_decision=None, principal_decision=None):
    return LeaveRequest(
        leave_id=7,
        employee_id="F-PHY-01",
        first_name="Ravi",
        department="Physics",
        variant=LeaveVariant.REGULAR,
        leave_type=LeaveType.CASUAL,
        employee_type=EmployeeType.FACULTY,
        start_date=date(2024, 6, 10),
        end_date=date(2024, 6, 10),
        leave_duration=LeaveDuration.FULL_DAY,
        reason="x",
        leave_days=1,
        status=status,
        requires_hod_stage=requires_hod_stage,
        created_at=datetime(2024, 6, 1, 9, 0),
        hod_decision=hod_decision,
        principal_decision=principal_decision,
    )


def _decision(outcome=DecisionOutcome.APPROVED):
    return Decision(employee_id="H-PHY", outcome=outcome, decided_at=datetime(2024, 6, 2, 10, 0))


def test_next_status_table():
    assert next_status(ApprovalStage.HOD, DecisionOutcome.APPROVED) == LeaveStatus.HOD_APPROVED
    assert next_status(ApprovalStage.HOD, DecisionOutcome.REJECTED) == LeaveStatus.HOD_REJECTED
    assert next_status(ApprovalStage.PRINCIPAL, DecisionOutcome.APPROVED) == LeaveStatus.PRINCIPAL_APPROVED
    assert next_status(ApprovalStage.PRINCIPAL, DecisionOutcome.REJECTED) == LeaveStatus.PRINCIPAL_REJECTED


def test_terminal_statuses():
    assert not is_terminal(LeaveStatus.PENDING)
    assert not is_terminal(LeaveStatus.HOD_APPROVED)
    assert is_terminal(LeaveStatus.HOD_REJECTED)
    assert is_terminal(LeaveStatus.PRINCIPAL_APPROVED)
    assert is_terminal(LeaveStatus.PRINCIPAL_REJECTED)


def test_awaits_stage_follows_routing_flag():
    assert awaits_stage(_leave(LeaveStatus.PENDING), ApprovalStage.HOD)
    assert not awaits_stage(_leave(LeaveStatus.PENDING), ApprovalStage.PRINCIPAL)
    assert awaits_stage(_leave(LeaveStatus.HOD_APPROVED, hod_decision=_decision()), ApprovalStage.PRINCIPAL)
    assert awaits_stage(_leave(LeaveStatus.HOD_APPROVED, requires_hod_stage=False), ApprovalStage.PRINCIPAL)


def test_principal_before_hod_is_invalid_transition():
    with pytest.raises(InvalidTransitionError) as exc:
        check_transition(_leave(LeaveStatus.PENDING), ApprovalStage.PRINCIPAL)
    assert exc.value.current_status == LeaveStatus.PENDING
    assert "requires HOD approval" in str(exc.value)


def test_hod_on_bypassed_request_is_invalid_transition():
    with pytest.raises(InvalidTransitionError):
        check_transition(_leave(LeaveStatus.HOD_APPROVED, requires_hod_stage=False), ApprovalStage.HOD)


def test_hod_slot_filled_is_already_decided():
    leave = _leave(LeaveStatus.HOD_REJECTED, hod_decision=_decision(DecisionOutcome.REJECTED))
    with pytest.raises(AlreadyDecidedError):
        check_transition(leave, ApprovalStage.HOD)


@pytest.mark.parametrize("status", [LeaveStatus.HOD_REJECTED, LeaveStatus.PRINCIPAL_REJECTED])
def test_nothing_leaves_a_rejected_status(status):
    with pytest.raises(InvalidTransitionError):
        check_transition(_leave(status), ApprovalStage.PRINCIPAL)


def test_legal_transition_returns_expected_prior_status():
    leave = _leave(LeaveStatus.HOD_APPROVED, hod_decision=_decision())
    assert check_transition(leave, ApprovalStage.PRINCIPAL) == LeaveStatus.HOD_APPROVED
