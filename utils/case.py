"""
camelCase serialization for API responses.
Keys listed as opaque keep their payload untouched (user data such as form field ids
or subcategory names must not be rewritten).
"""
from typing import Any, Iterable

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

OPAQUE_KEYS = frozenset({"preserved_answers", "validation_rules", "answers", "json_value", "value"})


def dict_keys_to_camel(obj: Any, opaque: Iterable[str] = OPAQUE_KEYS) -> Any:
    """Recursively convert dict keys from snake_case to camelCase."""
    opaque = frozenset(opaque)
    if isinstance(obj, dict):
        return {
            to_camel(k): (v if k in opaque else dict_keys_to_camel(v, opaque))
            for k, v in obj.items()
        }
    if isinstance(obj, list):
        return [dict_keys_to_camel(x, opaque) for x in obj]
    return obj


def model_to_camel(model: BaseModel) -> dict[str, Any]:
    return dict_keys_to_camel(model.model_dump())
