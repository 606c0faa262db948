"""Enumerations shared by the ORM tables and the API models.

Values are stored as plain strings; the tables carry CHECK constraints built
from these enums.
"""

import enum
from typing import Optional


class InspectionCategory(str, enum.Enum):
    FACILITY = "Facility"
    MACHINE_SAFETY = "MachineSafety"

    @classmethod
    def parse(cls, value) -> Optional["InspectionCategory"]:
        """Accept the canonical value or the older spelling with a space."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        compact = value.replace(" ", "").strip()
        for member in cls:
            if member.value.lower() == compact.lower():
                return member
        return None


class ValueType(str, enum.Enum):
    """Stored value type of a subcheck."""
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"


class SubcheckStatus(str, enum.Enum):
    PASS = "pass"
    FAIL = "fail"
    NOT_APPLICABLE = "notApplicable"


class OverallResult(str, enum.Enum):
    PASS = "pass"
    FAIL = "fail"


class UserRole(str, enum.Enum):
    ENGINEER = "engineer"
    MANAGER = "manager"
    ADMIN = "admin"


def check_in(column: str, enum_cls) -> str:
    """SQL text for a CHECK constraint limiting `column` to the enum values."""
    values = ", ".join(f"'{member.value}'" for member in enum_cls)
    return f"{column} IN ({values})"
