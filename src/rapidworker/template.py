"""Placeholder substitution over job definition trees."""
from __future__ import annotations

import json
import re
from typing import Any

from .context import UNSET, Context

PLACEHOLDER = re.compile(r"\{\{\s*([\w.\-]+)\s*\}\}")


class UnresolvedPlaceholderError(KeyError):
    """Raised in strict mode when a placeholder names a key missing from the Context."""

    def __init__(self, key: str):
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Unresolved placeholder '{{{{{self.key}}}}}'"


def to_text(value: Any) -> str:
    """Text form used when a value is spliced into a larger string."""
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str, ensure_ascii=False)


def substitute(data: Any, context: Context, *, strict: bool = False) -> Any:
    """
    Return a copy of ``data`` with ``{{key}}`` placeholders resolved.

    - "{{key}}" as the whole string yields the context value, type preserved.
    - "a {{key}} b" yields a string with the value's text form spliced in.
    - Dict keys are left alone; dicts and lists are rebuilt recursively.
    - Unknown keys are left as literal text unless ``strict`` is set.
    """
    if isinstance(data, dict):
        return {k: substitute(v, context, strict=strict) for k, v in data.items()}
    if isinstance(data, list):
        return [substitute(item, context, strict=strict) for item in data]
    if isinstance(data, str):
        return _substitute_string(data, context, strict)
    return data


def _substitute_string(data: str, context: Context, strict: bool) -> Any:
    whole = PLACEHOLDER.fullmatch(data)
    if whole:
        value = context.get(whole.group(1))
        if value is not UNSET:
            return value
        if strict:
            raise UnresolvedPlaceholderError(whole.group(1))
        return data

    def replace(m: re.Match) -> str:
        value = context.get(m.group(1))
        if value is UNSET:
            if strict:
                raise UnresolvedPlaceholderError(m.group(1))
            return m.group(0)
        return to_text(value)

    return PLACEHOLDER.sub(replace, data)
