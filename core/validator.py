"""
Place Validator
===============
Schema check for an inbound place before it reaches the topology store.

Checks run in a fixed order and the first failure wins, so the same bad
payload always produces the same reason:

    1. object            5. properties.nameEN null or string
    2. type == "Point"   6. properties.state non-empty
    3. two coordinates   7. id non-empty
    4. properties.name non-empty

Pure: no I/O, nothing is mutated.
"""

import math
from numbers import Real
from typing import Any, Mapping, Optional, Sequence

from core.errors import PlaceValidationError

_MISSING = object()


def _is_number(value: Any) -> bool:
    # bool is an int subclass but JSON true/false is not a coordinate
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    # NaN and Infinity have no JSON encoding
    return isinstance(value, int) or math.isfinite(value)


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or value.strip() == ""


def validate_place(candidate: Any) -> Optional[str]:
    """Return None if candidate is a well-formed place, else the first reason it is not."""
    if not isinstance(candidate, Mapping):
        return "PlaceGeometry must be an object"

    if candidate.get("type") != "Point":
        return "Property 'type' must be 'Point'"

    coordinates = candidate.get("coordinates")
    if (
        not isinstance(coordinates, Sequence)
        or isinstance(coordinates, (str, bytes))
        or len(coordinates) != 2
        or not all(_is_number(c) for c in coordinates)
    ):
        return "Property 'coordinates' must be an array of two numbers [lon, lat]"

    properties = candidate.get("properties")
    if not isinstance(properties, Mapping):
        properties = {}

    if _is_blank(properties.get("name")):
        return "Property 'properties.name' must be a non-empty string."

    # key must be present; an absent nameEN is not the same as null
    name_en = properties.get("nameEN", _MISSING)
    if name_en is not None and not isinstance(name_en, str):
        return "Property 'properties.nameEN' must be a string or null."

    if _is_blank(properties.get("state")):
        return "Property 'properties.state' must be a non-empty string."

    if _is_blank(candidate.get("id")):
        return "Property 'id' must be a non-empty string."

    return None


def ensure_valid_place(candidate: Any) -> None:
    """Raise PlaceValidationError carrying the first failing reason."""
    reason = validate_place(candidate)
    if reason is not None:
        raise PlaceValidationError(reason)
