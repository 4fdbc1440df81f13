from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import HOD_REVIEWED_STAFF_TYPES, OD_BYPASS_EMPLOYEE_TYPES
from ..core.enums import EmployeeType, LeaveStatus, LeaveVariant, StaffType


@dataclass(frozen=True)
class Route:
    status: LeaveStatus
    requires_hod_stage: bool


PENDING_HOD = Route(status=LeaveStatus.PENDING, requires_hod_stage=True)
DIRECT_TO_PRINCIPAL = Route(status=LeaveStatus.HOD_APPROVED, requires_hod_stage=False)


def route(employee_type: EmployeeType, variant: LeaveVariant, staff_type: StaffType) -> Route:
    """Initial status of a new request.

    A department head never approves their own leave, so the first stage is
    skipped depending on who is asking:

    - Regular: only Faculty in a teaching or class-coordinator capacity go
      through the department head.
    - OD: HOD and Staff requesters go straight to the principal.

    A skipped stage leaves its decision slot empty ("not applicable").
    """
    if variant == LeaveVariant.REGULAR:
        if employee_type == EmployeeType.FACULTY and staff_type in HOD_REVIEWED_STAFF_TYPES:
            return PENDING_HOD
        return DIRECT_TO_PRINCIPAL

    if employee_type in OD_BYPASS_EMPLOYEE_TYPES:
        return DIRECT_TO_PRINCIPAL
    return PENDING_HOD
