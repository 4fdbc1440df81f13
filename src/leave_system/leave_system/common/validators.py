from __future__ import annotations

from enum import Enum
from typing import Iterable, Mapping, Optional, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def require_fields(data: Mapping[str, object], fields: Iterable[str]) -> None:
    """Raise one ValidationError naming every missing field."""

    missing = [f for f in fields if data.get(f) is None or not str(data.get(f)).strip()]
    if missing:
        raise ValidationError("Missing required fields: " + ", ".join(missing))


def parse_choice(enum_cls: Type[E], value: object, field_name: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {field_name}: {value!r} (expected one of: {allowed})")


def same_department(a: Optional[str], b: Optional[str]) -> bool:
    if a is None or b is None:
        return False
    return a.strip().casefold() == b.strip().casefold()
