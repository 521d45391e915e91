"""
Redaction and truncation of header and parameter values before they are logged.
"""

from typing import Any, Dict, Iterable, Mapping, Tuple

FILTERED = "[FILTERED]"

# Longest value kept in a record (characters 0..100 inclusive)
MAX_VALUE_LENGTH = 101

# Only the first entries of a header or parameter list are logged
MAX_FIELDS = 20


def sanitize(key: str, value: Any, filtered_keys: Iterable[str] = ()) -> Tuple[str, Any]:
    """
    Redact a denylisted key or truncate an oversized text value.

    Args:
        key: Field name, compared case-sensitively against the denylist.
        value: Raw value. Only strings are truncated; other values pass through.
        filtered_keys: Keys whose values are always replaced by the filter marker.

    Returns:
        The (key, value) pair to log.
    """
    if key in filtered_keys:
        return key, FILTERED
    if isinstance(value, str):
        return key, value[:MAX_VALUE_LENGTH]
    return key, value


def collect(
    pairs: Iterable[Tuple[str, Any]] | Mapping[str, Any],
    filtered_keys: Iterable[str] = (),
) -> Dict[str, Any]:
    """
    Sanitize the first MAX_FIELDS pairs and merge them into a mapping.

    Pairs past the limit are dropped. When a key repeats among the kept pairs
    the later value wins.
    """
    if isinstance(pairs, Mapping):
        pairs = pairs.items()

    filtered_keys = frozenset(filtered_keys)
    collected: Dict[str, Any] = {}
    for index, (key, value) in enumerate(pairs):
        if index >= MAX_FIELDS:
            break
        key, value = sanitize(key, value, filtered_keys)
        collected[key] = value
    return collected
