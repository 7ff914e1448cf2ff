"""Shared utilities for the backend."""
from utils.case import OPAQUE_KEYS, dict_keys_to_camel, model_to_camel

__all__ = [
    "OPAQUE_KEYS",
    "dict_keys_to_camel",
    "model_to_camel",
]
