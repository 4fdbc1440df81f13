from __future__ import annotations

from typing import Collection, Mapping, Optional, Protocol, Sequence, Tuple

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import ApprovalStage, EmployeeType, LeaveStatus, LeaveVariant
from .model import Decision, LeaveRequest, NewLeaveRequest


class LeaveRepository(Protocol):
    def create(self, leave: NewLeaveRequest) -> int:
        """Persist a new request and return its generated leave_id."""

        raise NotImplementedError

    def get(self, *, leave_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        employee_id: Optional[str] = None,
        variant: Optional[LeaveVariant] = None,
        statuses: Optional[Sequence[LeaveStatus]] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[LeaveRequest]:
        """Newest first."""

        raise NotImplementedError

    def list_for_department(
        self,
        *,
        department: str,
        exclude_employee_types: Collection[EmployeeType] = (),
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[LeaveRequest]:
        """Requests whose frozen department matches case-insensitively, newest first.

        Rows filed under `exclude_employee_types` are dropped before the limit applies.
        """

        raise NotImplementedError

    def list_awaiting_principal(self, *, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[LeaveRequest]:
        """`HOD Approved`, or `Pending` without an HOD stage; newest first."""

        raise NotImplementedError

    def list_principal_history(self, *, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[LeaveRequest]:
        """Every request that reached, or waits at, the principal stage; newest first."""

        raise NotImplementedError

    def count_by_status(self) -> Mapping[Tuple[str, LeaveVariant, LeaveStatus], int]:
        """Uncapped counts keyed by (employee_id, variant, status)."""

        raise NotImplementedError

    def apply_decision(
        self,
        *,
        leave_id: int,
        stage: ApprovalStage,
        decision: Decision,
        expected_status: LeaveStatus,
        new_status: LeaveStatus,
    ) -> bool:
        """Compare-and-swap: write the stage decision and new status only if the
        request is still in `expected_status` with an empty slot for `stage`.

        Returns False when another writer got there first.
        """

        raise NotImplementedError
