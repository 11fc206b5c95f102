"""Descriptor fragment composition."""

from __future__ import annotations

import copy

from billrings import merge


def test_lists_concatenate_left_first() -> None:
    left = {"series": [1, 2], "polar": ["a"]}
    right = {"series": [3]}

    assert merge.merge_descriptors(left, right) == {"series": [1, 2, 3], "polar": ["a"]}


def test_one_sided_keys_pass_through_and_scalars_are_boxed() -> None:
    merged = merge.merge_descriptors({"title": "x", "legend": [1]}, {"title": "y", "legend": 2, "extra": True})

    assert merged == {"title": ["x", "y"], "legend": [1, 2], "extra": True}


def test_empty_and_none_fragments_are_identities() -> None:
    fragment = {"series": [1]}

    assert merge.merge_descriptors(fragment, {}) == fragment
    assert merge.merge_descriptors(None, fragment) == fragment
    assert merge.merge_all() == {}


def test_merge_is_associative_for_list_fragments() -> None:
    a = {"series": [1], "polar": ["p1"]}
    b = {"series": [2]}
    c = {"series": [3], "polar": ["p3"]}

    left = merge.merge_descriptors(merge.merge_descriptors(a, b), c)
    right = merge.merge_descriptors(a, merge.merge_descriptors(b, c))

    assert left == right == merge.merge_all(a, b, c)


def test_inputs_are_not_modified() -> None:
    left = {"series": [1]}
    right = {"series": [2]}
    before = (copy.deepcopy(left), copy.deepcopy(right))

    merge.merge_descriptors(left, right)

    assert (left, right) == before
