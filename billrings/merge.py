"""Composition of partial chart descriptors."""

from __future__ import annotations

from typing import Any

Descriptor = dict[str, Any]


def merge_descriptors(left: Descriptor | None, right: Descriptor | None) -> Descriptor:
    """Merge two descriptor fragments key by key.

    A key held by one side only passes through. Two lists concatenate with
    ``left`` first; a scalar next to a list is boxed into it on its own side;
    two scalars become a two element list. Neither input is modified.
    """

    left = left or {}
    right = right or {}

    merged: Descriptor = {}
    for key in [*left, *(k for k in right if k not in left)]:
        if key not in right:
            merged[key] = left[key]
        elif key not in left:
            merged[key] = right[key]
        else:
            merged[key] = _as_list(left[key]) + _as_list(right[key])
    return merged


def merge_all(*fragments: Descriptor | None) -> Descriptor:
    merged: Descriptor = {}
    for fragment in fragments:
        merged = merge_descriptors(merged, fragment)
    return merged


def _as_list(value: Any) -> list[Any]:
    return list(value) if isinstance(value, list) else [value]
