"""End-to-end assembly of the chart descriptor for one period."""

from __future__ import annotations

import json
from typing import Any

from . import inner, scaling, scatter, trend
from .aggregate import BillPayload, PeriodDeltas
from .logging_setup import get_logger
from .merge import Descriptor, merge_all
from .records import Direction

logger = get_logger(__name__)

AXIS_KEYS = ("angleAxis", "radiusAxis", "series")


def _period_deltas(payload: BillPayload, period: str) -> PeriodDeltas:
    for entry in payload["category_deltas"]:
        if entry["period"] == period:
            return entry
    raise KeyError(period)


def resolve_polar_indices(descriptor: Descriptor) -> Descriptor:
    """Point every axis and series at the position of its polar region.

    Builders stamp fixed slot numbers; once a ring half is omitted the merged
    ``polar`` list is shorter and the slots have to follow the regions.
    """

    polars = descriptor.get("polar", [])
    slots: dict[int, int] = {}
    for position, region in enumerate(polars):
        slot = _slot_of(region["id"])
        if slot is not None:
            slots[slot] = position

    resolved = dict(descriptor)
    for key in AXIS_KEYS:
        if key not in descriptor:
            continue
        resolved[key] = [
            {**item, "polarIndex": slots[item["polarIndex"]]}
            if item.get("polarIndex") in slots
            else item
            for item in descriptor[key]
        ]
    return resolved


def _slot_of(region_id: str) -> int | None:
    ring, _, key = region_id.partition("-")
    indices = {"inner": inner.POLAR_INDEX, "trend": trend.POLAR_INDEX, "scatter": scatter.POLAR_INDEX}.get(ring)
    if indices is None:
        return None
    for direction, slot in indices.items():
        if direction.key == key:
            return slot
    return None


def build_chart_descriptor(
    payload: BillPayload,
    period: str,
    *,
    top_n: int = inner.TOP_N,
    split_number: int = scaling.DEFAULT_SPLIT_NUMBER,
) -> Descriptor:
    """Compose inner, trend and scatter rings of ``period`` into one descriptor.

    Raises :class:`KeyError` when ``period`` is not part of the payload.
    """

    if period not in payload["periods"]:
        raise KeyError(period)

    records = payload["periods"][period]
    rank = payload["category_rank"]
    color_map = payload["color_map"]

    fragments: list[Descriptor] = [
        inner.build_inner_ring(
            _period_deltas(payload, period),
            color_map=color_map,
            extent=inner.inner_extent(payload["category_min_max"], split_number),
            top_n=top_n,
        )
    ]
    for direction in Direction:
        fragments.append(
            trend.build_trend_ring(
                records,
                direction=direction,
                rank=rank[direction.key],
                color_map=color_map,
                value_range=payload["category_min_max"][direction.key],
                split_number=split_number,
            )
        )
    for direction in Direction:
        fragments.append(
            scatter.build_scatter_ring(
                records,
                direction=direction,
                rank=rank[direction.key],
                color_map=color_map,
                min_max=payload["trade_min_max"][direction.key],
                split_number=split_number,
            )
        )

    descriptor = resolve_polar_indices(merge_all(*fragments))
    logger.debug(
        "Built descriptor for %s with %d polar regions and %d series",
        period,
        len(descriptor.get("polar", [])),
        len(descriptor.get("series", [])),
    )
    return descriptor


def build_chart_descriptors(payload: BillPayload, **kwargs: Any) -> dict[str, Descriptor]:
    return {period: build_chart_descriptor(payload, period, **kwargs) for period in payload["periods"]}


def descriptor_to_json(descriptor: Descriptor, *, indent: int | None = 2) -> str:
    return json.dumps(descriptor, ensure_ascii=False, indent=indent)
