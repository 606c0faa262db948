"""
Validation rules for inspection submissions.

Pure functions, no database access:
- subcheck shape checks
- overall pass/fail aggregation against the mandatory flags of the templates
- the comment-on-failure rule
- the wire <-> stored value type mapping
- the stored form of inspection dates
"""

from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, Mapping, Optional

from maintenance_service.errors import ValidationError
from maintenance_service.models.enums import InspectionCategory, OverallResult, SubcheckStatus, ValueType

COMMENT_REQUIRED_MESSAGE = "Comment is required when the overall result is 'fail'."

# Wire token -> stored value type. "text" is accepted as an alias of "string".
_WIRE_TO_STORED: Dict[str, ValueType] = {
    "string": ValueType.TEXT,
    "text": ValueType.TEXT,
    "number": ValueType.NUMBER,
    "boolean": ValueType.BOOLEAN,
}

_STORED_TO_WIRE: Dict[ValueType, str] = {
    ValueType.TEXT: "string",
    ValueType.NUMBER: "number",
    ValueType.BOOLEAN: "boolean",
}

_STATUSES = {status.value for status in SubcheckStatus}


def to_db_value_type(value: str) -> ValueType:
    """Map a submitted value type ("string", "number", "boolean") to its stored form."""
    try:
        return _WIRE_TO_STORED[value]
    except (KeyError, TypeError):
        raise ValidationError(f"Value type must be 'string' | 'number' | 'boolean', got {value!r}.")


def from_db_value_type(value) -> str:
    """Map a stored value type back to the token clients use."""
    try:
        return _STORED_TO_WIRE[ValueType(value)]
    except ValueError:
        raise ValidationError(f"Unknown stored value type {value!r}.")


def subcheck_shape_errors(subcheck) -> List[str]:
    """
    List what is wrong with one subcheck.

    Args:
        subcheck: any object with subcheck_name, subcheck_description,
            value_type and status attributes (usually a SubcheckDraft)

    Returns:
        Error messages, empty when the subcheck is well formed
    """
    errors = []
    name = (getattr(subcheck, "subcheck_name", None) or "").strip()
    label = name or "<unnamed>"
    if not name:
        errors.append("Subcheck name is required.")
    if not (getattr(subcheck, "subcheck_description", None) or "").strip():
        errors.append(f"Subcheck '{label}': description is required.")
    if getattr(subcheck, "value_type", None) not in _WIRE_TO_STORED:
        errors.append(f"Subcheck '{label}': value type must be 'string' | 'number' | 'boolean'.")
    if getattr(subcheck, "status", None) not in _STATUSES:
        errors.append(f"Subcheck '{label}': status must be 'pass' | 'fail' | 'notApplicable'.")
    return errors


def validate_subcheck_shape(subcheck) -> bool:
    return not subcheck_shape_errors(subcheck)


def is_satisfied(status: str, mandatory: bool) -> bool:
    """A mandatory subcheck needs a pass; an optional one may also be not applicable."""
    if mandatory:
        return status == SubcheckStatus.PASS.value
    return status in (SubcheckStatus.PASS.value, SubcheckStatus.NOT_APPLICABLE.value)


def aggregate_overall(subchecks: Iterable, mandatory_by_label: Optional[Mapping[str, bool]] = None) -> OverallResult:
    """
    Derive the overall result of an inspection.

    Labels missing from `mandatory_by_label` count as mandatory.

    Args:
        subchecks: submitted subchecks (subcheck_name and status attributes)
        mandatory_by_label: template label -> mandatory flag

    Returns:
        OverallResult.PASS when every subcheck is satisfied, else OverallResult.FAIL
    """
    mandatory_by_label = mandatory_by_label or {}
    statuses = [
        is_satisfied(_status_value(sc.status), bool(mandatory_by_label.get(sc.subcheck_name, True)))
        for sc in subchecks
    ]
    return OverallResult.PASS if all(statuses) else OverallResult.FAIL


def require_comment_on_failure(overall, comment: Optional[str]) -> List[str]:
    errors = []
    if _status_value(overall) == OverallResult.FAIL.value and not (comment or "").strip():
        errors.append(COMMENT_REQUIRED_MESSAGE)
    return errors


def draft_errors(draft) -> List[str]:
    """Basic checks on an InspectionDraft before any database work."""
    errors = []
    date_text = (draft.inspection_date or "").strip()
    if not date_text:
        errors.append("Inspection date is required (ISO string).")
    elif parse_inspection_date(date_text) is None:
        errors.append(f"Inspection date {date_text!r} is not a valid ISO date.")
    if not draft.inspection_category:
        errors.append("Inspection category is required.")
    elif InspectionCategory.parse(draft.inspection_category) is None:
        errors.append("Inspection category must be 'Facility' | 'MachineSafety'.")
    if not isinstance(draft.item_id, int):
        errors.append("Item ID must be an integer.")
    if not draft.subchecks:
        errors.append("At least one subcheck is required.")
    return errors


def parse_inspection_date(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def normalize_inspection_date(value: str) -> str:
    """
    Canonical text form of a submitted ISO 8601 date, so stored dates sort by time.

    A plain date becomes YYYY-MM-DD. A date-time becomes YYYY-MM-DDTHH:MM:SS[.ffffff];
    one with an offset is converted to UTC and keeps the "+00:00" suffix.

    Raises:
        ValidationError: the text is not an ISO date
    """
    text = (value or "").strip()
    try:
        return date.fromisoformat(text).isoformat()
    except ValueError:
        pass
    parsed = parse_inspection_date(text)
    if parsed is None:
        raise ValidationError(f"Inspection date {text!r} is not a valid ISO date.")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.isoformat()


def _status_value(status) -> str:
    return status.value if hasattr(status, "value") else status
