from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import (
    ApprovalStage,
    DecisionOutcome,
    EmployeeType,
    LeaveDuration,
    LeaveStatus,
    LeaveType,
    LeaveVariant,
)


@dataclass(frozen=True)
class Decision:
    """One stage's verdict. Never overwritten once stored."""

    employee_id: str
    outcome: DecisionOutcome
    decided_at: datetime
    comment: Optional[str] = None


@dataclass(frozen=True)
class OnDutyDetails:
    event_name: str
    location: str
    approval_letter: Optional[str] = None


@dataclass(frozen=True)
class NewLeaveRequest:
    """A validated submission, before the store assigns an id."""

    employee_id: str
    first_name: str
    department: str
    variant: LeaveVariant
    leave_type: LeaveType
    employee_type: EmployeeType
    start_date: date
    end_date: date
    leave_duration: LeaveDuration
    reason: str
    leave_days: int
    status: LeaveStatus
    requires_hod_stage: bool
    created_at: datetime
    contact: Optional[str] = None
    attachment: Optional[str] = None
    od_details: Optional[OnDutyDetails] = None


@dataclass(frozen=True)
class LeaveRequest:
    leave_id: int
    employee_id: str
    first_name: str
    department: str
    variant: LeaveVariant
    leave_type: LeaveType
    employee_type: EmployeeType
    start_date: date
    end_date: date
    leave_duration: LeaveDuration
    reason: str
    leave_days: int
    status: LeaveStatus
    requires_hod_stage: bool
    created_at: datetime
    contact: Optional[str] = None
    attachment: Optional[str] = None
    od_details: Optional[OnDutyDetails] = None
    hod_decision: Optional[Decision] = None
    principal_decision: Optional[Decision] = None

    @property
    def is_regular(self) -> bool:
        return self.variant == LeaveVariant.REGULAR

    def decision_for(self, stage: ApprovalStage) -> Optional[Decision]:
        if stage == ApprovalStage.HOD:
            return self.hod_decision
        return self.principal_decision
