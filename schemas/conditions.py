"""
Typed validation rules for conditional questions.

A catalog item's `validation_rules` maps a subcategory name to a list of conditions;
every condition must hold for the subcategory to unlock. Conditions are evaluated
against the answer of the item carrying the rules, or of `item_id` when given.
"""
from __future__ import annotations

import json
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


def _to_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return None
        return None if number != number else number
    return None


def loose_equals(left: Any, right: Any) -> bool:
    """Type-coercing equality: '3' == 3, True == 1, None only equals None."""
    if left is None or right is None:
        return left is None and right is None
    if isinstance(left, (list, tuple)) or isinstance(right, (list, tuple)):
        if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
            return list(left) == list(right)
        seq, other = (left, right) if isinstance(left, (list, tuple)) else (right, left)
        return loose_equals(",".join("" if v is None else str(v) for v in seq), other)
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    if isinstance(left, (bool, int, float)) or isinstance(right, (bool, int, float)):
        a, b = _to_number(left), _to_number(right)
        return a is not None and b is not None and a == b
    return str(left) == str(right)


class _ConditionBase(BaseModel):
    item_id: Optional[str] = Field(None, alias="itemId")

    model_config = {"populate_by_name": True}

    def holds(self, answer: Any) -> bool:
        raise NotImplementedError


class Equals(_ConditionBase):
    type: Literal["equals"]
    value: Any = None

    def holds(self, answer: Any) -> bool:
        return loose_equals(answer, self.value)


class NotEquals(_ConditionBase):
    type: Literal["notEquals"]
    value: Any = None

    def holds(self, answer: Any) -> bool:
        return not loose_equals(answer, self.value)


class GreaterThan(_ConditionBase):
    type: Literal["greaterThan"]
    value: Any = None

    def holds(self, answer: Any) -> bool:
        a, b = _to_number(answer), _to_number(self.value)
        return a is not None and b is not None and a > b


class LessThan(_ConditionBase):
    type: Literal["lessThan"]
    value: Any = None

    def holds(self, answer: Any) -> bool:
        a, b = _to_number(answer), _to_number(self.value)
        return a is not None and b is not None and a < b


def _contains(answer: Any, value: Any) -> bool | None:
    """Membership for lists, substring for strings, None when not applicable."""
    if isinstance(answer, (list, tuple)):
        return any(loose_equals(v, value) for v in answer)
    if isinstance(answer, str):
        return str(value) in answer
    return None


class Contains(_ConditionBase):
    type: Literal["contains"]
    value: Any = None

    def holds(self, answer: Any) -> bool:
        return _contains(answer, self.value) is True


class NotContains(_ConditionBase):
    type: Literal["notContains"]
    value: Any = None

    def holds(self, answer: Any) -> bool:
        return _contains(answer, self.value) is False


Condition = Annotated[
    Union[Equals, NotEquals, GreaterThan, LessThan, Contains, NotContains],
    Field(discriminator="type"),
]

ValidationRules = dict[str, list[Condition]]

_rules_adapter = TypeAdapter(ValidationRules)


def parse_validation_rules(raw: Any) -> ValidationRules:
    """Parse stored rules (dict or JSON string). Raises ValueError when malformed."""
    if raw is None:
        return {}
    if isinstance(raw, str):
        raw = json.loads(raw)
    return _rules_adapter.validate_python(raw)
