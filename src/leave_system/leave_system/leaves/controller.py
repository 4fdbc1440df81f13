from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, request

from ..common.validators import parse_choice
from ..container import Container
from ..core.enums import ApprovalStage, LeaveVariant
from ..core.exceptions import ValidationError
from ..employees.model import Employee
from .model import Decision, LeaveRequest


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def decision_to_json(decision: Optional[Decision]) -> Optional[dict]:
    if decision is None:
        return None
    return {
        "employeeId": decision.employee_id,
        "decision": decision.outcome.value,
        "comment": decision.comment,
        "decidedAt": _iso(decision.decided_at),
    }


def leave_to_json(leave: LeaveRequest) -> dict:
    data = {
        "id": leave.leave_id,
        "employeeId": leave.employee_id,
        "firstName": leave.first_name,
        "department": leave.department,
        "leaveCategory": leave.variant.value,
        "leaveType": leave.leave_type.value,
        "type": leave.employee_type.value,
        "startDate": _iso(leave.start_date),
        "endDate": _iso(leave.end_date),
        "leaveDuration": leave.leave_duration.value,
        "reason": leave.reason,
        "contact": leave.contact,
        "attachment": leave.attachment,
        "leaveDays": leave.leave_days,
        "status": leave.status.value,
        "requiresHodApproval": leave.requires_hod_stage,
        "hodDecision": decision_to_json(leave.hod_decision),
        "principalDecision": decision_to_json(leave.principal_decision),
        "createdAt": _iso(leave.created_at),
    }
    if leave.od_details is not None:
        data["eventName"] = leave.od_details.event_name
        data["location"] = leave.od_details.location
        data["approvalLetter"] = leave.od_details.approval_letter
    return data


_STAGE_ROLES = {ApprovalStage.HOD: "HOD", ApprovalStage.PRINCIPAL: "Principal"}


def management_leave_to_json(leave: LeaveRequest, employee: Optional[Employee]) -> dict:
    data = leave_to_json(leave)
    data["employeeName"] = employee.full_name if employee else leave.first_name
    approvals = []
    for stage, role in _STAGE_ROLES.items():
        decision = leave.decision_for(stage)
        if decision is None:
            continue
        approvals.append(
            {
                "role": role,
                "approverId": decision.employee_id,
                "decision": decision.outcome.value,
                "comment": decision.comment,
                "decidedAt": _iso(decision.decided_at),
            }
        )
    data["approvals"] = approvals
    return data


def register(app: Flask, container: Container) -> None:
    service = container.leave_service

    def _payload() -> dict:
        body = request.get_json(silent=True)
        if body is None:
            return request.form.to_dict()
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")
        return body

    def _variant_arg() -> Optional[LeaveVariant]:
        raw = request.args.get("variant")
        return parse_choice(LeaveVariant, raw, "leave category") if raw else None

    def _submission_fields(p: dict) -> dict:
        return {
            "employee_id": p.get("employeeId"),
            "first_name": p.get("firstName"),
            "leave_type": p.get("leaveType"),
            "employee_type": p.get("type", "Faculty"),
            "start_date": p.get("startDate"),
            "end_date": p.get("endDate"),
            "leave_duration": p.get("leaveDuration", "Full Day"),
            "reason": p.get("reason"),
            "contact": p.get("contact"),
            "attachment": p.get("attachment"),
        }

    @app.route("/api/leaves/apply", methods=["POST"], endpoint="apply_leave")
    def apply_leave():
        leave = service.submit_regular(**_submission_fields(_payload()))
        return (
            jsonify({"message": "Leave request submitted", "leaveId": leave.leave_id, "leave": leave_to_json(leave)}),
            201,
        )

    @app.route("/api/leaves/odleave/apply", methods=["POST"], endpoint="apply_od_leave")
    def apply_od_leave():
        p = _payload()
        leave = service.submit_on_duty(
            **_submission_fields(p),
            event_name=p.get("eventName"),
            location=p.get("location"),
            approval_letter=p.get("approvalLetter"),
        )
        return (
            jsonify({"message": "OD leave request submitted", "leaveId": leave.leave_id, "leave": leave_to_json(leave)}),
            201,
        )

    @app.route("/api/leaves/all", methods=["GET"], endpoint="all_leaves")
    def all_leaves():
        return jsonify([leave_to_json(l) for l in service.list_all(variant=_variant_arg())])

    @app.route("/api/leaves/<int:leave_id>", methods=["GET"], endpoint="get_leave")
    def get_leave(leave_id: int):
        return jsonify(leave_to_json(service.get(leave_id=leave_id)))

    @app.route("/api/leaves/my-leaves/<employee_id>", methods=["GET"], endpoint="my_leaves")
    def my_leaves(employee_id: str):
        leaves = service.list_for_employee(employee_id=employee_id, variant=_variant_arg())
        return jsonify({"leaves": [leave_to_json(l) for l in leaves]})

    @app.route("/api/leaves/hod/<department>", methods=["GET"], endpoint="hod_queue")
    def hod_queue(department: str):
        return jsonify([leave_to_json(l) for l in service.list_hod_queue(department=department)])

    @app.route("/api/leaves/hod/<int:leave_id>", methods=["PUT"], endpoint="hod_decision")
    def hod_decision(leave_id: int):
        p = _payload()
        leave = service.record_hod_decision(
            leave_id=leave_id,
            hod_employee_id=p.get("hodEmployeeId"),
            decision=p.get("decision"),
            comment=p.get("comment"),
        )
        return jsonify(
            {
                "message": f"Leave request {leave.hod_decision.outcome.value.lower()} by HOD",
                "leave": leave_to_json(leave),
            }
        )

    @app.route("/api/leaves/principal", methods=["GET"], endpoint="principal_queue")
    def principal_queue():
        return jsonify([leave_to_json(l) for l in service.list_pending_for_principal()])

    @app.route("/api/leaves/principal/all", methods=["GET"], endpoint="principal_history")
    def principal_history():
        return jsonify([leave_to_json(l) for l in service.list_principal_history()])

    @app.route("/api/leaves/principal/<int:leave_id>", methods=["PUT"], endpoint="principal_decision")
    def principal_decision(leave_id: int):
        p = _payload()
        leave = service.record_principal_decision(
            leave_id=leave_id,
            principal_employee_id=p.get("principalEmployeeId"),
            decision=p.get("decision"),
            comment=p.get("comment"),
        )
        return jsonify(
            {
                "message": f"Leave request {leave.principal_decision.outcome.value.lower()} by Principal",
                "leave": leave_to_json(leave),
            }
        )

    @app.route("/api/leaves/management/all-leaves", methods=["GET"], endpoint="management_all_leaves")
    def management_all_leaves():
        rows = service.list_for_management(variant=_variant_arg())
        return jsonify({"success": True, "leaves": [management_leave_to_json(l, e) for l, e in rows]})

    @app.route("/api/leaves/management/statistics", methods=["GET"], endpoint="leave_statistics")
    def leave_statistics():
        return jsonify({"success": True, **service.statistics()})
