from __future__ import annotations

import logging
from collections import Counter
from dataclasses import fields, replace
from datetime import date, datetime
from typing import Callable, Optional, Sequence, Tuple, Union

from ..common.datetime_utils import now_local
from ..common.validators import optional_text, parse_choice, require_non_empty, same_department
from ..core.constants import HOD_QUEUE_EXCLUDED_TYPES
from ..core.enums import ApprovalStage, DecisionOutcome, LeaveStatus, LeaveVariant
from ..core.exceptions import ForbiddenError, InvalidTransitionError, NotFoundError
from ..employees.model import Employee
from ..employees.repository import EmployeeDirectory
from ..ledger.service import LeaveLedgerService
from .model import Decision, LeaveRequest, NewLeaveRequest
from .repository import LeaveRepository
from .routing import route
from .transitions import check_transition, next_status
from .validator import validate_submission

logger = logging.getLogger(__name__)

DateLike = Union[date, str, None]


class LeaveWorkflowService:
    """Use case: submit leave, route it, and record department-head / principal decisions.

    Every call is one synchronous operation; failures are raised as DomainError
    subclasses and leave the stored request untouched.
    """

    def __init__(
        self,
        leaves: LeaveRepository,
        employees: EmployeeDirectory,
        ledger: LeaveLedgerService,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._leaves = leaves
        self._employees = employees
        self._ledger = ledger
        self._clock = clock or now_local

    # -------- Submission --------
    def submit_regular(
        self,
        *,
        employee_id: Optional[str] = None,
        first_name: Optional[str] = None,
        leave_type: Optional[str] = None,
        employee_type: Optional[str] = "Faculty",
        start_date: DateLike = None,
        end_date: DateLike = None,
        leave_duration: Optional[str] = "Full Day",
        reason: Optional[str] = None,
        contact: Optional[str] = None,
        attachment: Optional[str] = None,
    ) -> LeaveRequest:
        return self._submit(
            LeaveVariant.REGULAR,
            {
                "employee_id": employee_id,
                "first_name": first_name,
                "leave_type": leave_type,
                "employee_type": employee_type,
                "start_date": start_date,
                "end_date": end_date,
                "leave_duration": leave_duration,
                "reason": reason,
                "contact": contact,
                "attachment": attachment,
            },
        )

    def submit_on_duty(
        self,
        *,
        employee_id: Optional[str] = None,
        first_name: Optional[str] = None,
        leave_type: Optional[str] = None,
        employee_type: Optional[str] = "Faculty",
        start_date: DateLike = None,
        end_date: DateLike = None,
        leave_duration: Optional[str] = "Full Day",
        reason: Optional[str] = None,
        event_name: Optional[str] = None,
        location: Optional[str] = None,
        contact: Optional[str] = None,
        attachment: Optional[str] = None,
        approval_letter: Optional[str] = None,
    ) -> LeaveRequest:
        return self._submit(
            LeaveVariant.ON_DUTY,
            {
                "employee_id": employee_id,
                "first_name": first_name,
                "leave_type": leave_type,
                "employee_type": employee_type,
                "start_date": start_date,
                "end_date": end_date,
                "leave_duration": leave_duration,
                "reason": reason,
                "event_name": event_name,
                "location": location,
                "contact": contact,
                "attachment": attachment,
                "approval_letter": approval_letter,
            },
        )

    def _submit(self, variant: LeaveVariant, data: dict) -> LeaveRequest:
        submission = validate_submission(variant, data)

        employee = self._employees.get_by_id(submission.employee_id)
        if not employee:
            raise NotFoundError(f"Employee {submission.employee_id} not found")

        # Department and staff type are frozen here; later directory edits do not reroute.
        initial = route(submission.employee_type, variant, employee.staff_type)

        new_leave = NewLeaveRequest(
            employee_id=submission.employee_id,
            first_name=submission.first_name,
            department=employee.department,
            variant=variant,
            leave_type=submission.leave_type,
            employee_type=submission.employee_type,
            start_date=submission.start_date,
            end_date=submission.end_date,
            leave_duration=submission.leave_duration,
            reason=submission.reason,
            leave_days=submission.leave_days,
            status=initial.status,
            requires_hod_stage=initial.requires_hod_stage,
            created_at=self._clock(),
            contact=submission.contact,
            attachment=submission.attachment,
            od_details=submission.od_details,
        )
        leave_id = self._leaves.create(new_leave)

        logger.info(
            "%s leave %s submitted by %s (%s, %s): %d day(s), status=%s",
            variant.value,
            leave_id,
            new_leave.employee_id,
            new_leave.employee_type.value,
            new_leave.department,
            new_leave.leave_days,
            new_leave.status.value,
        )
        return LeaveRequest(leave_id=leave_id, **{f.name: getattr(new_leave, f.name) for f in fields(new_leave)})

    # -------- Decisions --------
    def decide(
        self,
        *,
        leave_id: int,
        stage: Union[ApprovalStage, str],
        actor_employee_id: Optional[str],
        outcome: Union[DecisionOutcome, str, None],
        comment: Optional[str] = None,
    ) -> LeaveRequest:
        """Record one stage's decision.

        Checks, in order: the request exists (NotFoundError); the actor may act
        for this stage and department (ForbiddenError); the stage has not
        decided yet (AlreadyDecidedError); the current status admits this stage
        (InvalidTransitionError). The write is conditional on the status read
        here, so a concurrent decision makes this call fail instead of
        overwriting it.
        """
        stage = parse_choice(ApprovalStage, stage, "approval stage")
        outcome = parse_choice(DecisionOutcome, outcome, "decision")
        actor_id = require_non_empty(actor_employee_id, f"{stage.value}EmployeeId")

        leave = self._leaves.get(leave_id=int(leave_id))
        if not leave:
            raise NotFoundError("Leave request not found")

        self._authorize(leave, stage, actor_id)
        expected_status = check_transition(leave, stage)
        new_status = next_status(stage, outcome)

        decision = Decision(
            employee_id=actor_id,
            outcome=outcome,
            comment=optional_text(comment),
            decided_at=self._clock(),
        )
        applied = self._leaves.apply_decision(
            leave_id=leave.leave_id,
            stage=stage,
            decision=decision,
            expected_status=expected_status,
            new_status=new_status,
        )
        if not applied:
            self._raise_lost_race(leave.leave_id, stage)

        if stage == ApprovalStage.HOD:
            updated = replace(leave, status=new_status, hod_decision=decision)
        else:
            updated = replace(leave, status=new_status, principal_decision=decision)

        logger.info(
            "Leave %s: %s %s by %s (%s -> %s)",
            leave.leave_id,
            stage.value,
            outcome.value,
            actor_id,
            expected_status.value,
            new_status.value,
        )

        if new_status == LeaveStatus.PRINCIPAL_APPROVED and updated.is_regular:
            self._record_in_ledger(updated)

        return updated

    def record_hod_decision(
        self, *, leave_id: int, hod_employee_id: Optional[str], decision, comment: Optional[str] = None
    ) -> LeaveRequest:
        return self.decide(
            leave_id=leave_id,
            stage=ApprovalStage.HOD,
            actor_employee_id=hod_employee_id,
            outcome=decision,
            comment=comment,
        )

    def record_principal_decision(
        self, *, leave_id: int, principal_employee_id: Optional[str], decision, comment: Optional[str] = None
    ) -> LeaveRequest:
        return self.decide(
            leave_id=leave_id,
            stage=ApprovalStage.PRINCIPAL,
            actor_employee_id=principal_employee_id,
            outcome=decision,
            comment=comment,
        )

    def _authorize(self, leave: LeaveRequest, stage: ApprovalStage, actor_id: str) -> None:
        actor = self._employees.get_by_id(actor_id)

        if stage == ApprovalStage.HOD:
            if not actor or not actor.is_hod:
                raise ForbiddenError("HOD not found or not authorized")
            if not same_department(actor.department, leave.department):
                raise ForbiddenError("You can only approve leaves from your own department")
            if actor.employee_id == leave.employee_id:
                raise ForbiddenError("An HOD cannot decide their own leave")
            return

        if not actor or not actor.is_principal:
            raise ForbiddenError("Not authorized as Principal")

    def _raise_lost_race(self, leave_id: int, stage: ApprovalStage) -> None:
        current = self._leaves.get(leave_id=leave_id)
        if not current:
            raise NotFoundError("Leave request not found")
        logger.warning("Leave %s: concurrent %s decision detected (status=%s)", leave_id, stage.value, current.status.value)
        check_transition(current, stage)
        raise InvalidTransitionError("Leave request changed while the decision was being recorded", current_status=current.status)

    def _record_in_ledger(self, leave: LeaveRequest) -> None:
        # The decision is already stored; the summary is a derived view and may lag.
        try:
            self._ledger.record_approval(
                employee_id=leave.employee_id,
                start_date=leave.start_date,
                leave_days=leave.leave_days,
            )
        except Exception:
            logger.exception("Ledger update failed for leave %s (employee %s)", leave.leave_id, leave.employee_id)

    # -------- Read projections --------
    def get(self, *, leave_id: int) -> LeaveRequest:
        leave = self._leaves.get(leave_id=int(leave_id))
        if not leave:
            raise NotFoundError("Leave request not found")
        return leave

    def list_all(self, *, variant: Optional[LeaveVariant] = None) -> Sequence[LeaveRequest]:
        return self._leaves.list_requests(variant=variant)

    def list_for_employee(self, *, employee_id: str, variant: Optional[LeaveVariant] = None) -> Sequence[LeaveRequest]:
        employee_id = require_non_empty(employee_id, "employeeId")
        return self._leaves.list_requests(employee_id=employee_id, variant=variant)

    def list_hod_queue(self, *, department: str) -> Sequence[LeaveRequest]:
        """Every request of the department (all statuses), minus those filed by HODs or Staff."""
        department = require_non_empty(department, "department")
        return self._leaves.list_for_department(department=department, exclude_employee_types=HOD_QUEUE_EXCLUDED_TYPES)

    def list_pending_for_principal(self) -> Sequence[LeaveRequest]:
        return self._leaves.list_awaiting_principal()

    def list_principal_history(self) -> Sequence[LeaveRequest]:
        """Everything that reached, or is waiting at, the principal stage."""
        return self._leaves.list_principal_history()

    def list_for_management(
        self, *, variant: Optional[LeaveVariant] = None
    ) -> Sequence[Tuple[LeaveRequest, Optional[Employee]]]:
        """All requests paired with the requester's current directory entry (None when gone)."""
        leaves = self._leaves.list_requests(variant=variant)
        directory = self._employees.get_many({leave.employee_id for leave in leaves})
        return [(leave, directory.get(leave.employee_id)) for leave in leaves]

    def statistics(self) -> dict:
        counts = self._leaves.count_by_status()

        by_variant: dict[str, Counter] = {v.value: Counter() for v in LeaveVariant}
        per_employee: dict[str, Counter] = {}
        for (employee_id, variant, status), n in counts.items():
            by_variant[variant.value][status.value] += n
            tally = per_employee.setdefault(employee_id, Counter())
            tally["total"] += n
            if variant == LeaveVariant.ON_DUTY:
                tally["od"] += n
            if status == LeaveStatus.PRINCIPAL_APPROVED:
                tally["approved"] += n
            elif status in (LeaveStatus.HOD_REJECTED, LeaveStatus.PRINCIPAL_REJECTED):
                tally["rejected"] += n
            else:
                tally["pending"] += n

        directory = self._employees.get_many(per_employee.keys())
        employee_stats = []
        for employee_id, tally in per_employee.items():
            employee = directory.get(employee_id)
            employee_stats.append(
                {
                    "employee_id": employee_id,
                    "employee_name": employee.full_name if employee else "Unknown",
                    "department": employee.department if employee else "Unknown",
                    "total": tally["total"],
                    "approved": tally["approved"],
                    "pending": tally["pending"],
                    "rejected": tally["rejected"],
                    "od": tally["od"],
                }
            )
        employee_stats.sort(key=lambda s: (-s["total"], s["employee_id"]))

        return {
            "summary": {
                variant: {
                    "total": sum(counter.values()),
                    **{status.value: counter[status.value] for status in LeaveStatus},
                }
                for variant, counter in by_variant.items()
            },
            "employees": employee_stats,
        }
