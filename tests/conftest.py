from __future__ import annotations

from collections import Counter
from dataclasses import fields, replace
from datetime import datetime

import pytest

from src.leave_system.leave_system.container import wire_services
from src.leave_system.leave_system.core.enums import ApprovalStage, LeaveStatus, Role, StaffType
from src.leave_system.leave_system.employees.model import Employee
from src.leave_system.leave_system.ledger.model import LeaveSummary, MonthlyLeave, YearlyLeave
from src.leave_system.leave_system.leaves.model import LeaveRequest


class FakeEmployeeDirectory:
    def __init__(self, employees=()):
        self._by_id = {e.employee_id: e for e in employees}

    def add(self, employee: Employee) -> None:
        self._by_id[employee.employee_id] = employee

    def remove(self, employee_id: str) -> None:
        self._by_id.pop(employee_id, None)

    def get_by_id(self, employee_id):
        return self._by_id.get(employee_id)

    def get_many(self, employee_ids):
        return {i: self._by_id[i] for i in employee_ids if i in self._by_id}


class FakeLeaveRepo:
    def __init__(self):
        self._next_id = 1
        self._rows: dict[int, LeaveRequest] = {}
        # Simulates another writer deciding between the service's read and its write.
        self.interleave = None

    def create(self, leave):
        leave_id = self._next_id
        self._next_id += 1
        self._rows[leave_id] = LeaveRequest(leave_id=leave_id, **{f.name: getattr(leave, f.name) for f in fields(leave)})
        return leave_id

    def get(self, *, leave_id):
        return self._rows.get(int(leave_id))

    def list_requests(self, *, employee_id=None, variant=None, statuses=None, limit=500):
        rows = [
            r
            for r in self._rows.values()
            if (employee_id is None or r.employee_id == employee_id)
            and (variant is None or r.variant == variant)
            and (statuses is None or r.status in statuses)
        ]
        return self._newest(rows, limit)

    def _newest(self, rows, limit):
        return sorted(rows, key=lambda r: r.leave_id, reverse=True)[:limit]

    def list_for_department(self, *, department, exclude_employee_types=(), limit=500):
        key = department.strip().casefold()
        rows = [
            r
            for r in self._rows.values()
            if r.department.strip().casefold() == key and r.employee_type not in exclude_employee_types
        ]
        return self._newest(rows, limit)

    def list_awaiting_principal(self, *, limit=500):
        rows = [
            r
            for r in self._rows.values()
            if r.status == LeaveStatus.HOD_APPROVED or (r.status == LeaveStatus.PENDING and not r.requires_hod_stage)
        ]
        return self._newest(rows, limit)

    def list_principal_history(self, *, limit=500):
        rows = [r for r in self._rows.values() if r.status != LeaveStatus.HOD_REJECTED]
        rows = [r for r in rows if r.status != LeaveStatus.PENDING or not r.requires_hod_stage]
        return self._newest(rows, limit)

    def count_by_status(self):
        return dict(Counter((r.employee_id, r.variant, r.status) for r in self._rows.values()))

    def apply_decision(self, *, leave_id, stage, decision, expected_status, new_status):
        if self.interleave is not None:
            hook, self.interleave = self.interleave, None
            hook(self)

        row = self._rows.get(int(leave_id))
        if not row or row.status != expected_status or row.decision_for(stage) is not None:
            return False
        if stage == ApprovalStage.HOD:
            self._rows[row.leave_id] = replace(row, status=new_status, hod_decision=decision)
        else:
            self._rows[row.leave_id] = replace(row, status=new_status, principal_decision=decision)
        return True


class FakeSummaryRepo:
    def __init__(self):
        self.monthly: dict[tuple, int] = {}
        self.yearly: dict[tuple, int] = {}
        self.fail = False

    def increment(self, *, employee_id, year, month, days):
        if self.fail:
            raise RuntimeError("ledger store unavailable")
        self.monthly[(employee_id, year, month)] = self.monthly.get((employee_id, year, month), 0) + days
        self.yearly[(employee_id, year)] = self.yearly.get((employee_id, year), 0) + days

    def get(self, *, employee_id):
        if not any(k[0] == employee_id for k in self.yearly):
            return None
        return LeaveSummary(
            employee_id=employee_id,
            monthly_leaves=tuple(
                MonthlyLeave(year=y, month=m, days=d) for (e, y, m), d in sorted(self.monthly.items()) if e == employee_id
            ),
            yearly_leaves=tuple(YearlyLeave(year=y, days=d) for (e, y), d in sorted(self.yearly.items()) if e == employee_id),
        )


DIRECTORY = (
    Employee("P001", "Asha", "Rao", "Administration", StaffType.PRINCIPAL, Role.PRINCIPAL),
    Employee("H-PHY", "Vikram", "Iyer", "Physics", StaffType.HOD, Role.HOD),
    Employee("H-CHE", "Meera", "Nair", "Chemistry", StaffType.HOD, Role.HOD),
    Employee("F-PHY-01", "Ravi", "Kumar", "Physics", StaffType.TEACHING),
    Employee("F-PHY-02", "Nisha", "Menon", "Physics", StaffType.CC, Role.CC),
    Employee("F-CHE-01", "Arjun", "Das", "Chemistry", StaffType.TEACHING),
    Employee("S-ADM-01", "Kiran", "Shah", "Administration", StaffType.NON_TEACHING),
)


@pytest.fixture
def fixed_now():
    return datetime(2024, 6, 1, 9, 30, 0)


@pytest.fixture
def employees():
    return FakeEmployeeDirectory(DIRECTORY)


@pytest.fixture
def leaves_repo():
    return FakeLeaveRepo()


@pytest.fixture
def summaries_repo():
    return FakeSummaryRepo()


@pytest.fixture
def container(employees, leaves_repo, summaries_repo, fixed_now):
    return wire_services(
        employees_repo=employees,
        leaves_repo=leaves_repo,
        summaries_repo=summaries_repo,
        clock=lambda: fixed_now,
    )


@pytest.fixture
def service(container):
    return container.leave_service


@pytest.fixture
def submit(service):
    """Submit a leave with sensible defaults; keyword overrides win."""

    def _submit(employee_id="F-PHY-01", *, on_duty=False, **overrides):
        data = dict(
            employee_id=employee_id,
            first_name="Test",
            employee_type="Faculty",
            start_date="2024-06-10",
            end_date="2024-06-12",
            leave_duration="Full Day",
            reason="Personal",
        )
        if on_duty:
            data.update(leave_type="Conference", event_name="ICP 2024", location="Pune")
            data.update(overrides)
            return service.submit_on_duty(**data)
        data.update(leave_type="Casual Leave")
        data.update(overrides)
        return service.submit_regular(**data)

    return _submit
