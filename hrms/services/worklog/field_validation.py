"""Validation of work-log field_data against the role's field definitions."""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable

from hrms.core.exceptions import ValidationError
from hrms.models.shared.enums import FieldType


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _number(field, value):
    if isinstance(value, bool):
        raise ValidationError(f"{field.field_label} must be a number")
    if isinstance(value, (int, float)):
        return value
    try:
        parsed = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"{field.field_label} must be a number")
    if not parsed.is_finite():
        raise ValidationError(f"{field.field_label} must be a number")
    return int(parsed) if parsed == parsed.to_integral_value() else float(parsed)


def _text(field, value):
    if not isinstance(value, str):
        raise ValidationError(f"{field.field_label} must be text")
    return value


def _select(field, value):
    options = field.field_options or []
    if value not in options:
        raise ValidationError(f"{field.field_label} must be one of: {', '.join(map(str, options))}")
    return value


def _date(field, value):
    try:
        return date.fromisoformat(str(value).strip()).isoformat()
    except ValueError:
        raise ValidationError(f"{field.field_label} must be a date (YYYY-MM-DD)")


FIELD_CONVERTERS = {
    FieldType.TEXT: _text,
    FieldType.NUMBER: _number,
    FieldType.SELECT: _select,
    FieldType.DATE: _date,
}


def validate_field_data(fields: Iterable, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check data against field definitions and return the cleaned values.

    Unknown keys, missing required values and values of the wrong type are
    rejected; blank optional values are dropped.
    """
    by_key = {field.field_key: field for field in fields}

    unknown = sorted(set(data) - set(by_key))
    if unknown:
        raise ValidationError(f"Unknown work log field(s): {', '.join(unknown)}")

    cleaned = {}
    for key, field in by_key.items():
        value = data.get(key)
        if _is_blank(value):
            if field.is_required:
                raise ValidationError(f"{field.field_label} is required")
            continue
        cleaned[key] = FIELD_CONVERTERS[FieldType(field.field_type)](field, value)
    return cleaned
