"""
Bracket-notation query string decoding

Storefront clients send nested and list parameters the way most JS query
string libraries encode them:

    created_at[gt]=2023-01-01       -> {"created_at": {"gt": "2023-01-01"}}
    status[]=pending&status[]=completed -> {"status": ["pending", "completed"]}
    status=pending&status=completed  -> {"status": ["pending", "completed"]}
    status[0]=pending                -> {"status": ["pending"]}

Indexed list entries are kept in the order they appear in the query string.
"""
import re
from typing import Any, Dict, Iterable, List, Tuple

from .errors import QueryValidationError

_KEY_PATTERN = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_SEGMENT_PATTERN = re.compile(r"\[([^\[\]]*)\]")


def split_key(key: str) -> List[str]:
    """Split `a[b][c]` into ["a", "b", "c"]; malformed keys stay whole"""
    match = _KEY_PATTERN.match(key)
    if not match:
        return [key]
    return [match.group(1)] + _SEGMENT_PATTERN.findall(match.group(2))


def _conflict(key: str) -> QueryValidationError:
    return QueryValidationError(
        "Invalid request parameters",
        [{"field": key, "message": "Conflicting scalar, list and object forms for the same parameter"}],
    )


def _assign(container: Dict[str, Any], path: List[str], value: str, key: str) -> None:
    head, rest = path[0], path[1:]

    if not rest:
        existing = container.get(head)
        if existing is None:
            container[head] = value
        elif isinstance(existing, list):
            existing.append(value)
        elif isinstance(existing, str):
            container[head] = [existing, value]
        else:
            raise _conflict(key)
        return

    segment = rest[0]

    # List entry: `a[]` or `a[0]`
    if segment == "" or segment.isdigit():
        if len(rest) > 1:
            raise _conflict(key)
        existing = container.get(head)
        if existing is None:
            container[head] = [value]
        elif isinstance(existing, list):
            existing.append(value)
        elif isinstance(existing, str):
            container[head] = [existing, value]
        else:
            raise _conflict(key)
        return

    # Nested object: `a[b]...`
    existing = container.setdefault(head, {})
    if not isinstance(existing, dict):
        raise _conflict(key)
    _assign(existing, rest, value, key)


def parse_query_items(items: Iterable[Tuple[str, str]]) -> Dict[str, Any]:
    """
    Decode (key, value) query pairs into a nested dict

    Args:
        items: Query pairs in request order, e.g. request.query_params.multi_items()

    Returns:
        Dict of str, list of str, or nested dicts

    Raises:
        QueryValidationError: when one parameter is sent in incompatible forms
    """
    result: Dict[str, Any] = {}
    for key, value in items:
        _assign(result, split_key(key), value, key)
    return result
