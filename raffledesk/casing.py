"""Key transcoding between the store's underscored names and camel-cased records.

Rows read from the store are serialized with underscored keys
(``organizer_code``); the application works with camel-cased records
(``organizerCode``). Both directions rewrite mapping keys recursively and leave
leaf values and sequence order untouched.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

# Form fields holding raw credential material keep their exact name on the way
# to the store; the mutation layer maps ``password`` onto ``password_hash``.
CREDENTIAL_KEYS = frozenset({"password", "confirmPassword"})

_SNAKE_SEGMENT = re.compile(r"[-_]([a-z])")
_UPPER = re.compile(r"[A-Z]")


def snake_to_camel(name: str) -> str:
    """``banner_url`` -> ``bannerUrl``."""
    return _SNAKE_SEGMENT.sub(lambda m: m.group(1).upper(), name)


def camel_to_snake(name: str) -> str:
    """``bannerUrl`` -> ``banner_url``."""
    return _UPPER.sub(lambda m: "_" + m.group(0).lower(), name)


def to_camel(value: Any) -> Any:
    """Return ``value`` with every mapping key rewritten to camel case."""
    if isinstance(value, Mapping):
        return {snake_to_camel(str(k)): to_camel(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_camel(v) for v in value]
    if isinstance(value, tuple):
        return tuple(to_camel(v) for v in value)
    return value


def to_snake(value: Any) -> Any:
    """Return ``value`` with every mapping key rewritten to underscore case.

    Keys listed in :data:`CREDENTIAL_KEYS` are copied unchanged.
    """
    if isinstance(value, Mapping):
        result: dict[str, Any] = {}
        for key, item in value.items():
            if key in CREDENTIAL_KEYS:
                result[key] = item
                continue
            result[camel_to_snake(str(key))] = to_snake(item)
        return result
    if isinstance(value, list):
        return [to_snake(v) for v in value]
    if isinstance(value, tuple):
        return tuple(to_snake(v) for v in value)
    return value


__all__ = [
    "CREDENTIAL_KEYS",
    "camel_to_snake",
    "snake_to_camel",
    "to_camel",
    "to_snake",
]
