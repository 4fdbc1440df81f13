from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Mapping, Optional

from ..common.datetime_utils import coerce_date, inclusive_days
from ..common.validators import optional_text, parse_choice, require_fields
from ..core.constants import LEAVE_TYPES_BY_VARIANT
from ..core.enums import EmployeeType, LeaveDuration, LeaveType, LeaveVariant
from ..core.exceptions import ValidationError
from .model import OnDutyDetails

REQUIRED_FIELDS = (
    "employee_id",
    "first_name",
    "leave_type",
    "start_date",
    "end_date",
    "leave_duration",
    "reason",
)
ON_DUTY_REQUIRED_FIELDS = ("event_name", "location")


@dataclass(frozen=True)
class LeaveSubmission:
    """Submission fields after validation; department and routing are added by the service."""

    employee_id: str
    first_name: str
    variant: LeaveVariant
    leave_type: LeaveType
    employee_type: EmployeeType
    start_date: date
    end_date: date
    leave_duration: LeaveDuration
    reason: str
    contact: Optional[str] = None
    attachment: Optional[str] = None
    od_details: Optional[OnDutyDetails] = None

    @property
    def leave_days(self) -> int:
        return inclusive_days(self.start_date, self.end_date)


def validate_submission(variant: LeaveVariant, data: Mapping[str, object]) -> LeaveSubmission:
    """Check a raw submission and return it normalised.

    Raises ValidationError for missing fields, a leave type outside the
    variant's set, unknown employee type or duration, unparseable dates, or an
    end date before the start date.
    """
    required = REQUIRED_FIELDS
    if variant == LeaveVariant.ON_DUTY:
        required = REQUIRED_FIELDS + ON_DUTY_REQUIRED_FIELDS
    require_fields(data, required)

    label = "OD leave type" if variant == LeaveVariant.ON_DUTY else "leave type"
    try:
        leave_type = LeaveType(data["leave_type"])
    except ValueError:
        leave_type = None
    if leave_type not in LEAVE_TYPES_BY_VARIANT[variant]:
        raise ValidationError(f"Invalid {label}: {data['leave_type']!r}")

    employee_type = parse_choice(EmployeeType, data.get("employee_type"), "employee type")
    leave_duration = parse_choice(LeaveDuration, data["leave_duration"], "leave duration")

    start_date = coerce_date(data["start_date"], "Start date")
    end_date = coerce_date(data["end_date"], "End date")
    if end_date < start_date:
        raise ValidationError("End date must be on or after start date")

    od_details = None
    if variant == LeaveVariant.ON_DUTY:
        od_details = OnDutyDetails(
            event_name=str(data["event_name"]).strip(),
            location=str(data["location"]).strip(),
            approval_letter=optional_text(data.get("approval_letter")),
        )

    return LeaveSubmission(
        employee_id=str(data["employee_id"]).strip(),
        first_name=str(data["first_name"]).strip(),
        variant=variant,
        leave_type=leave_type,
        employee_type=employee_type,
        start_date=start_date,
        end_date=end_date,
        leave_duration=leave_duration,
        reason=str(data["reason"]).strip(),
        contact=optional_text(data.get("contact")),
        attachment=optional_text(data.get("attachment")),
        od_details=od_details,
    )
