from __future__ import annotations

from typing import Collection, Dict, Optional, Sequence, Tuple

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import (
    ApprovalStage,
    DecisionOutcome,
    EmployeeType,
    LeaveDuration,
    LeaveStatus,
    LeaveType,
    LeaveVariant,
)
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Decision, LeaveRequest, NewLeaveRequest, OnDutyDetails
from .repository import LeaveRepository

_COLUMNS = """
    leave_id, employee_id, first_name, department, variant, leave_type, employee_type,
    start_date, end_date, leave_duration, reason, contact, attachment,
    event_name, location, approval_letter, leave_days, requires_hod_stage, status,
    hod_decided_by, hod_outcome, hod_comment, hod_decided_at,
    principal_decided_by, principal_outcome, principal_comment, principal_decided_at,
    created_at
"""

# Column prefix per stage; never built from user input.
_SLOT_PREFIX = {
    ApprovalStage.HOD: "hod",
    ApprovalStage.PRINCIPAL: "principal",
}


def _decision_from_row(r: dict, prefix: str) -> Optional[Decision]:
    if not r.get(f"{prefix}_decided_at"):
        return None
    return Decision(
        employee_id=str(r[f"{prefix}_decided_by"]),
        outcome=DecisionOutcome(r[f"{prefix}_outcome"]),
        comment=r.get(f"{prefix}_comment"),
        decided_at=r[f"{prefix}_decided_at"],
    )


def _row_to_leave(r: dict) -> LeaveRequest:
    variant = LeaveVariant(r["variant"])
    od_details = None
    if variant == LeaveVariant.ON_DUTY:
        od_details = OnDutyDetails(
            event_name=r.get("event_name") or "",
            location=r.get("location") or "",
            approval_letter=r.get("approval_letter"),
        )
    return LeaveRequest(
        leave_id=int(r["leave_id"]),
        employee_id=str(r["employee_id"]),
        first_name=r["first_name"],
        department=r["department"],
        variant=variant,
        leave_type=LeaveType(r["leave_type"]),
        employee_type=EmployeeType(r["employee_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        leave_duration=LeaveDuration(r["leave_duration"]),
        reason=r["reason"],
        leave_days=int(r["leave_days"]),
        status=LeaveStatus(r["status"]),
        requires_hod_stage=bool(r["requires_hod_stage"]),
        created_at=r["created_at"],
        contact=r.get("contact"),
        attachment=r.get("attachment"),
        od_details=od_details,
        hod_decision=_decision_from_row(r, "hod"),
        principal_decision=_decision_from_row(r, "principal"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, leave: NewLeaveRequest) -> int:
        od = leave.od_details
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    employee_id, first_name, department, variant, leave_type, employee_type,
                    start_date, end_date, leave_duration, reason, contact, attachment,
                    event_name, location, approval_letter,
                    leave_days, requires_hod_stage, status, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    leave.employee_id,
                    leave.first_name,
                    leave.department,
                    leave.variant.value,
                    leave.leave_type.value,
                    leave.employee_type.value,
                    leave.start_date,
                    leave.end_date,
                    leave.leave_duration.value,
                    leave.reason,
                    leave.contact,
                    leave.attachment,
                    od.event_name if od else None,
                    od.location if od else None,
                    od.approval_letter if od else None,
                    int(leave.leave_days),
                    1 if leave.requires_hod_stage else 0,
                    leave.status.value,
                    leave.created_at,
                ),
            )
            return int(cur.lastrowid)

    def get(self, *, leave_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE leave_id=%s", (int(leave_id),))
            r = fetchone(cur)
            return _row_to_leave(r) if r else None

    def _select(self, where: str, params: Sequence[object], limit: int) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE {where}
                ORDER BY created_at DESC, leave_id DESC
                LIMIT %s
                """,
                tuple(params) + (int(limit),),
            )
            return [_row_to_leave(r) for r in fetchall(cur)]

    def list_requests(
        self,
        *,
        employee_id: Optional[str] = None,
        variant: Optional[LeaveVariant] = None,
        statuses: Optional[Sequence[LeaveStatus]] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[LeaveRequest]:
        clauses = ["1=1"]
        params: list[object] = []

        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(str(employee_id))
        if variant is not None:
            clauses.append("variant=%s")
            params.append(variant.value)
        if statuses:
            clauses.append(f"status IN ({in_clause(statuses)})")
            params.extend(s.value for s in statuses)

        return self._select(" AND ".join(clauses), params, limit)

    def list_for_department(
        self,
        *,
        department: str,
        exclude_employee_types: Collection[EmployeeType] = (),
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[LeaveRequest]:
        where = "LOWER(TRIM(department)) = LOWER(TRIM(%s))"
        params: list[object] = [department]
        if exclude_employee_types:
            excluded = sorted(t.value for t in exclude_employee_types)
            where += f" AND employee_type NOT IN ({in_clause(excluded)})"
            params.extend(excluded)
        return self._select(where, params, limit)

    def list_awaiting_principal(self, *, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[LeaveRequest]:
        return self._select(
            "status=%s OR (status=%s AND requires_hod_stage=0)",
            (LeaveStatus.HOD_APPROVED.value, LeaveStatus.PENDING.value),
            limit,
        )

    def list_principal_history(self, *, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[LeaveRequest]:
        return self._select(
            "status IN (%s,%s,%s) OR (status=%s AND requires_hod_stage=0)",
            (
                LeaveStatus.HOD_APPROVED.value,
                LeaveStatus.PRINCIPAL_APPROVED.value,
                LeaveStatus.PRINCIPAL_REJECTED.value,
                LeaveStatus.PENDING.value,
            ),
            limit,
        )

    def count_by_status(self) -> Dict[Tuple[str, LeaveVariant, LeaveStatus], int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, variant, status, COUNT(*) AS n
                FROM leave_requests
                GROUP BY employee_id, variant, status
                """
            )
            return {
                (str(r["employee_id"]), LeaveVariant(r["variant"]), LeaveStatus(r["status"])): int(r["n"])
                for r in fetchall(cur)
            }

    def apply_decision(
        self,
        *,
        leave_id: int,
        stage: ApprovalStage,
        decision: Decision,
        expected_status: LeaveStatus,
        new_status: LeaveStatus,
    ) -> bool:
        p = _SLOT_PREFIX[stage]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE leave_requests
                SET status=%s,
                    {p}_decided_by=%s, {p}_outcome=%s, {p}_comment=%s, {p}_decided_at=%s
                WHERE leave_id=%s AND status=%s AND {p}_decided_at IS NULL
                """,
                (
                    new_status.value,
                    decision.employee_id,
                    decision.outcome.value,
                    decision.comment,
                    decision.decided_at,
                    int(leave_id),
                    expected_status.value,
                ),
            )
            return cur.rowcount > 0
