"""
Attribute value conversion for span-context log records.

OpenTelemetry attribute values are limited to a closed set of primitives
(bool, int, float, str) and homogeneous sequences of them. This module maps
them onto JSON-safe values for the structured log output.
"""

import math
from typing import Any, Dict, Mapping, Iterable


def to_json_value(value: Any) -> Any:
    """
    Convert one attribute value into a JSON-safe value.

    Sequences are not deep-converted: they always become an empty string.
    Non-finite floats have no JSON representation and become None.

    Args:
        value: An OpenTelemetry attribute value

    Returns:
        bool, int, float, str or None
    """
    # bool first, it is a subclass of int
    if isinstance(value, bool):
        return value
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, (int, float, str)):
        return value
    if isinstance(value, (list, tuple)):
        return ""
    return str(value)


def convert_attributes(attributes: Mapping[str, Any], ignore: Iterable[str] = ()) -> Dict[str, Any]:
    """
    Convert an attribute mapping, dropping the ignored keys.

    Args:
        attributes: Attribute mapping (span, event or record extras)
        ignore: Keys to leave out

    Returns:
        dict: New mapping with converted values, in the original order
    """
    ignored = set(ignore)
    return {
        str(key): to_json_value(value)
        for key, value in attributes.items()
        if key not in ignored
    }
