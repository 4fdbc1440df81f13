from __future__ import annotations

from enum import Enum


class _LooseEnum(str, Enum):
    """String enum that accepts values case-insensitively and ignoring surrounding spaces."""

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if member.value.lower() == key or member.name.lower() == key:
                    return member
        return None


class EmployeeType(_LooseEnum):
    """Category the requester files the leave under."""

    FACULTY = "Faculty"
    HOD = "HOD"
    PRINCIPAL = "Principal"
    STAFF = "Staff"


class StaffType(_LooseEnum):
    """Capacity recorded on the employee directory entry."""

    TEACHING = "teaching"
    NON_TEACHING = "non-teaching"
    HOD = "HOD"
    PRINCIPAL = "principal"
    CC = "cc"


class Role(_LooseEnum):
    """Administrative role held by an employee."""

    HOD = "hod"
    PRINCIPAL = "principal"
    CC = "cc"


class LeaveVariant(_LooseEnum):
    REGULAR = "Regular"
    ON_DUTY = "OD"


class LeaveType(_LooseEnum):
    SICK = "Sick Leave"
    CASUAL = "Casual Leave"
    EARNED = "Earned Leave"
    SABBATICAL = "Sabbatical"
    COMP_OFF = "CompOff Leave"
    CONFERENCE = "Conference"
    WORKSHOP = "Workshop"
    OFFICIAL_DUTY = "Official Duty"


class LeaveDuration(_LooseEnum):
    FULL_DAY = "Full Day"
    HALF_DAY = "Half Day"


class LeaveStatus(_LooseEnum):
    """Approval flow state: department head first, then principal."""

    PENDING = "Pending"
    HOD_APPROVED = "HOD Approved"
    HOD_REJECTED = "HOD Rejected"
    PRINCIPAL_APPROVED = "Principal Approved"
    PRINCIPAL_REJECTED = "Principal Rejected"


class DecisionOutcome(_LooseEnum):
    APPROVED = "Approved"
    REJECTED = "Rejected"


class ApprovalStage(_LooseEnum):
    HOD = "hod"
    PRINCIPAL = "principal"
