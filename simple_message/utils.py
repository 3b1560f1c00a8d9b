"""Helpers for comparing joint values held as sequences or name-keyed maps."""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping, Sequence


def is_within_range(lhs: Sequence[float], rhs: Sequence[float], full_range: float) -> bool:
    """True if both sequences have equal length and differ element-wise by less than |full_range/2|."""
    if len(lhs) != len(rhs):
        return False
    limit = abs(full_range / 2.0)
    return all(abs(a - b) < limit for a, b in zip(lhs, rhs))


def map_insert(key: str, value: float, mappings: MutableMapping[str, float]) -> bool:
    """Insert ``value`` under ``key`` unless the key already exists."""
    mappings.setdefault(key, value)
    return True


def to_map(keys: Sequence[str], values: Sequence[float]) -> dict[str, float]:
    """Combine parallel key and value sequences into a dict; the first of duplicate keys wins."""
    if len(keys) != len(values):
        raise ValueError(
            f"key and value counts differ: {len(keys)} keys, {len(values)} values"
        )
    mappings: dict[str, float] = {}
    for key, value in zip(keys, values):
        map_insert(key, value, mappings)
    return mappings


def is_within_range_map(
    keys: Sequence[str],
    lhs: Mapping[str, float],
    rhs: Mapping[str, float],
    full_range: float,
) -> bool:
    """Map version of :func:`is_within_range`, compared over ``keys``."""
    try:
        lhs_values = [lhs[key] for key in keys]
        rhs_values = [rhs[key] for key in keys]
    except KeyError:
        return False
    return is_within_range(lhs_values, rhs_values, full_range)


def is_within_range_kv(
    lhs_keys: Sequence[str],
    lhs_values: Sequence[float],
    rhs_keys: Sequence[str],
    rhs_values: Sequence[float],
    full_range: float,
) -> bool:
    """Key/value sequence version of :func:`is_within_range`."""
    if len(lhs_keys) != len(rhs_keys):
        return False
    try:
        lhs_map = to_map(lhs_keys, lhs_values)
        rhs_map = to_map(rhs_keys, rhs_values)
    except ValueError:
        return False
    return is_within_range_map(lhs_keys, lhs_map, rhs_map, full_range)