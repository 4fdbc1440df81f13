from __future__ import annotations

from ..core.enums import ApprovalStage, DecisionOutcome, LeaveStatus
from ..core.exceptions import AlreadyDecidedError, InvalidTransitionError
from .model import LeaveRequest

TERMINAL_STATUSES = frozenset(
    {
        LeaveStatus.HOD_REJECTED,
        LeaveStatus.PRINCIPAL_APPROVED,
        LeaveStatus.PRINCIPAL_REJECTED,
    }
)

_NEXT_STATUS = {
    (ApprovalStage.HOD, DecisionOutcome.APPROVED): LeaveStatus.HOD_APPROVED,
    (ApprovalStage.HOD, DecisionOutcome.REJECTED): LeaveStatus.HOD_REJECTED,
    (ApprovalStage.PRINCIPAL, DecisionOutcome.APPROVED): LeaveStatus.PRINCIPAL_APPROVED,
    (ApprovalStage.PRINCIPAL, DecisionOutcome.REJECTED): LeaveStatus.PRINCIPAL_REJECTED,
}


def is_terminal(status: LeaveStatus) -> bool:
    return status in TERMINAL_STATUSES


def next_status(stage: ApprovalStage, outcome: DecisionOutcome) -> LeaveStatus:
    return _NEXT_STATUS[(stage, outcome)]


def awaits_stage(leave: LeaveRequest, stage: ApprovalStage) -> bool:
    """True when `stage` may decide `leave` right now (ignoring who the actor is)."""
    if stage == ApprovalStage.HOD:
        return leave.status == LeaveStatus.PENDING and leave.requires_hod_stage
    if leave.status == LeaveStatus.HOD_APPROVED:
        return True
    return leave.status == LeaveStatus.PENDING and not leave.requires_hod_stage


def check_transition(leave: LeaveRequest, stage: ApprovalStage) -> LeaveStatus:
    """Validate that `stage` may decide `leave`; return the status the update must start from."""
    if leave.decision_for(stage) is not None:
        raise AlreadyDecidedError(f"Leave request {leave.leave_id} already has a {stage.value} decision")

    if not awaits_stage(leave, stage):
        if stage == ApprovalStage.HOD and leave.status == LeaveStatus.PENDING:
            message = "This leave does not require HOD approval"
        elif stage == ApprovalStage.PRINCIPAL and leave.status == LeaveStatus.PENDING:
            message = "This leave requires HOD approval before Principal can review it"
        elif is_terminal(leave.status):
            message = f"Leave request is already final (status: {leave.status.value})"
        else:
            message = f"Leave is not pending {stage.value} approval (status: {leave.status.value})"
        raise InvalidTransitionError(message, current_status=leave.status)

    return leave.status
