"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from .enums import EmployeeType, LeaveType, LeaveVariant, StaffType

REGULAR_LEAVE_TYPES = frozenset(
    {
        LeaveType.SICK,
        LeaveType.CASUAL,
        LeaveType.EARNED,
        LeaveType.SABBATICAL,
        LeaveType.COMP_OFF,
    }
)

ON_DUTY_LEAVE_TYPES = frozenset(
    {
        LeaveType.CONFERENCE,
        LeaveType.WORKSHOP,
        LeaveType.OFFICIAL_DUTY,
    }
)

LEAVE_TYPES_BY_VARIANT = {
    LeaveVariant.REGULAR: REGULAR_LEAVE_TYPES,
    LeaveVariant.ON_DUTY: ON_DUTY_LEAVE_TYPES,
}

# Directory capacities whose Regular leave goes through the department head.
HOD_REVIEWED_STAFF_TYPES = frozenset({StaffType.TEACHING, StaffType.CC})

# Requesters whose OD leave skips the department head.
OD_BYPASS_EMPLOYEE_TYPES = frozenset({EmployeeType.HOD, EmployeeType.STAFF})

# Requests filed under these types never appear in a department head's queue.
HOD_QUEUE_EXCLUDED_TYPES = frozenset({EmployeeType.HOD, EmployeeType.STAFF})

DEFAULT_LIST_LIMIT = 500
