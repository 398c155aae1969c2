"""
Helpers shared by the GraphQL resolvers.

Collaborators may hand back dataclasses, plain objects or mappings (a
comment that crossed the Redis bus arrives as a dict), so field access
goes through :func:`get_field`.
"""

from collections.abc import Mapping
from datetime import date, datetime, time, timezone
from typing import Any

from graphql import GraphQLError

from githunt_api.core.errors import GitHuntError


def get_field(obj: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from a mapping or an object attribute."""
    if obj is None:
        return default
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def to_timestamp(value: Any) -> float | None:
    """
    Convert a stored creation time to epoch milliseconds.

    Accepts datetimes and dates (naive values are taken as UTC), ISO-8601
    strings and numbers, which are assumed to already be milliseconds.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise TypeError("Boolean is not a timestamp")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if isinstance(value, date) and not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.timestamp() * 1000
    raise TypeError(f"Cannot convert {type(value).__name__} to a timestamp")


def format_graphql_error(error: GraphQLError) -> dict[str, Any]:
    """
    Format an execution error for the response ``errors`` list.

    Adds ``extensions.code`` when the underlying error is one of ours.
    """
    formatted = dict(error.formatted)
    original = error.original_error
    if isinstance(original, GitHuntError):
        extensions = dict(formatted.get("extensions") or {})
        extensions["code"] = original.code
        formatted["extensions"] = extensions
    return formatted


__all__ = ["format_graphql_error", "get_field", "to_timestamp"]
