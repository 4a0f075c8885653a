"""Location names, edge weights, and the Route query result.

Names are used directly as graph node keys; two distinct names can never
map to the same node.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from numbers import Real

from pydantic import BaseModel

from routemap.domain.errors import InvalidInputError


class Route(BaseModel):
    """One minimal-weight path returned by a shortest-route query."""

    model_config = {"frozen": True}

    route: list[str]
    weight: float


def validate_name(name: object) -> str:
    """Return *name* if it is a usable location name."""
    if not isinstance(name, str) or not name:
        raise InvalidInputError(f"Location name must be a non-empty string, got {name!r}")
    return name


def validate_weight(weight: object) -> float:
    """Coerce *weight* to a float, rejecting NaN, infinities and negatives.

    Negative weights would break the Dijkstra-based route search.
    """
    if isinstance(weight, bool) or not isinstance(weight, Real):
        raise InvalidInputError(f"Route weight must be a real number, got {weight!r}")
    value = float(weight)
    if math.isnan(value) or math.isinf(value):
        raise InvalidInputError(f"Route weight must be finite, got {value!r}")
    if value < 0:
        raise InvalidInputError(f"Route weight must be non-negative, got {value!r}")
    return value


def normalize_routes(source: str, routes_to: Mapping[str, object] | None) -> dict[str, float]:
    """Validate a destination -> weight mapping, dropping self-routes."""
    if routes_to is None:
        return {}
    if not isinstance(routes_to, Mapping):
        raise InvalidInputError("Routes must be a mapping of destination to weight")
    normalized: dict[str, float] = {}
    for to, weight in routes_to.items():
        validate_name(to)
        value = validate_weight(weight)
        if to != source:
            normalized[to] = value
    return normalized


def normalize_targets(source: str, to_list: Iterable[str]) -> list[str]:
    """Validate a list of destinations, dropping self-references and duplicates."""
    if isinstance(to_list, (str, bytes)) or not isinstance(to_list, Iterable):
        raise InvalidInputError("Destinations must be a list of location names")
    targets: list[str] = []
    for to in to_list:
        validate_name(to)
        if to != source and to not in targets:
            targets.append(to)
    return targets


def encode_weight(weight: float) -> str:
    """Encode a weight as the decimal string stored in the backend."""
    return repr(float(weight))


def decode_weight(raw: str) -> float:
    """Parse a stored weight string back into a validated float."""
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Stored weight {raw!r} is not a number") from exc
    return validate_weight(value)
