from __future__ import annotations

from flask import Flask, jsonify

from ..container import Container
from .model import LeaveSummary


def summary_to_json(summary: LeaveSummary) -> dict:
    return {
        "employeeId": summary.employee_id,
        "monthlyLeaves": [{"year": m.year, "month": m.month, "days": m.days} for m in summary.monthly_leaves],
        "yearlyLeaves": [{"year": y.year, "days": y.days} for y in summary.yearly_leaves],
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/leaves/summary/<employee_id>", methods=["GET"], endpoint="leave_summary")
    def leave_summary(employee_id: str):
        summary = container.ledger_service.get_summary(employee_id=employee_id)
        return jsonify(summary_to_json(summary))
