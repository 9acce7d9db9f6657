"""
Response shaping: snake_case storage keys to camelCase API keys.
Uses Pydantic's alias_generators so request aliases and response keys agree.
"""
from datetime import date, datetime
from typing import Any

from pydantic.alias_generators import to_camel


def to_camel_key(s: str) -> str:
    """Convert a single snake_case key to camelCase (first letter lower)."""
    return to_camel(s)


def dict_keys_to_camel(obj: Any) -> Any:
    """Recursively convert dict keys from snake_case to camelCase for API responses."""
    if isinstance(obj, dict):
        return {to_camel_key(k): dict_keys_to_camel(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [dict_keys_to_camel(x) for x in obj]
    return obj


def iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value else None


def columns_to_camel(obj: Any, fields: list[str]) -> dict[str, Any]:
    """Pick ORM attributes by name into a camelCase dict; dates become ISO strings."""
    out: dict[str, Any] = {}
    for name in fields:
        value = getattr(obj, name)
        if isinstance(value, (date, datetime)):
            value = value.isoformat()
        out[to_camel_key(name)] = value
    return out
