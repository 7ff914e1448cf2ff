"""
Maps raw form answers onto the typed value slots of checklist and repeatable-group rows.
Only one slot is populated per answer; the item_type decides which.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any

from models.checklist import VALUE_COLUMNS
from models.enums import ChecklistStatus, ItemType
from services.errors import InvalidAnswerError


def _parse_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and value.strip():
        try:
            number = float(value)
        except ValueError:
            return None
        # float() accepts "nan"; an answer of NaN is not a number
        return None if number != number else number
    return None


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError as e:
            raise InvalidAnswerError(f"Invalid date format: {value}") from e
    raise InvalidAnswerError(f"Invalid date format: {value!r}")


def is_blank(value: Any) -> bool:
    """None, an empty string or an empty selection clears an answer."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def typed_columns(value: Any, item_type: str) -> dict[str, Any]:
    """
    Column values for an answer; every slot is present and at most one is non-null.
    A blank answer clears every slot.
    """
    columns: dict[str, Any] = dict.fromkeys(VALUE_COLUMNS)

    if is_blank(value):
        return columns
    if item_type == ItemType.NUMBER.value:
        number = _parse_number(value)
        if number is None:
            raise InvalidAnswerError(f"Invalid number format: {value!r}")
        columns["numeric_value"] = number
    elif item_type == ItemType.DATE.value:
        columns["date_value"] = _parse_date(value)
    elif item_type == ItemType.SINGLE_CHOICE_DROPDOWN.value:
        number = _parse_number(value)
        if value in ("TRUE", "FALSE"):
            columns["boolean_value"] = value == "TRUE"
        elif number is not None:
            columns["numeric_value"] = number
        else:
            columns["text_value"] = str(value)
    elif item_type == ItemType.MULTIPLE_CHOICE_CHECKBOX.value:
        columns["json_value"] = list(value) if isinstance(value, (list, tuple)) else [value]
    else:
        columns["text_value"] = str(value)
    return columns


def typed_value(row: Any) -> Any:
    """The populated slot of a row, or None when unanswered."""
    for column in VALUE_COLUMNS:
        value = getattr(row, column)
        if value is not None:
            return value
    return None


def has_answer(row: Any) -> bool:
    return any(getattr(row, column) is not None for column in VALUE_COLUMNS)


def answer_status(columns: dict[str, Any], current: str | None = None) -> str:
    """Status after writing `columns`: cleared answers go back to pending, approved ones stay approved."""
    if all(columns[column] is None for column in VALUE_COLUMNS):
        return ChecklistStatus.PENDING.value
    if current == ChecklistStatus.APPROVED.value:
        return current
    return ChecklistStatus.SUBMITTED.value
