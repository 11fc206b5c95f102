"""Outer ring: every transaction of a month as a scatter point.

Amount maps to the radius, trade time to the angle. Points only carry the
record id; tooltip details are resolved through :func:`record_index`.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

import numpy as np

from . import scaling, utils
from .aggregate import MinMax, color_for
from .logging_setup import get_logger
from .merge import Descriptor
from .records import Direction, TransactionRecord
from .scaffold import ScaffoldCache

logger = get_logger(__name__)

POLAR_INDEX = {Direction.INCOME: 4, Direction.EXPENSE: 5}
RADIUS = {Direction.INCOME: ["60%", "75%"], Direction.EXPENSE: ["75%", "90%"]}
SYMBOL_SIZE = (10.0, 48.0)
LEGEND_TOP = {Direction.INCOME: "0px", Direction.EXPENSE: "20px"}


def create_scatter_scaffold(direction: Direction) -> Descriptor:
    polar_index = POLAR_INDEX[direction]
    return {
        "polar": [
            {"id": f"scatter-{direction.key}", "center": ["50%", "50%"], "radius": list(RADIUS[direction])}
        ],
        "angleAxis": [
            {
                "polarIndex": polar_index,
                "show": False,
                "type": "time",
                "axisTick": {"show": False},
                "splitLine": {"show": True, "lineStyle": {"color": "#ddd"}},
            }
        ],
        "radiusAxis": [
            {
                "polarIndex": polar_index,
                "show": False,
                "type": "value",
                "inverse": direction is Direction.INCOME,
            }
        ],
        "legend": [],
        "tooltip": [{"trigger": "item"}],
        "series": [],
    }


_SCAFFOLDS = ScaffoldCache("scatter", create_scatter_scaffold)


def marker_size(amount: float, min_max: MinMax, sizes: tuple[float, float] = SYMBOL_SIZE) -> float:
    """Interpolate a marker size from where ``amount`` sits in ``min_max``.

    A zero-width range yields the smallest size.
    """

    low, high = min_max["min"], min_max["max"]
    if high <= low:
        return sizes[0]
    return utils.round2(float(np.interp(amount, [low, high], list(sizes))))


def record_index(records: Sequence[TransactionRecord]) -> dict[str, TransactionRecord]:
    return {record.id: record for record in records}


def tooltip_text(record: TransactionRecord, currency: str = "¥") -> str:
    """Plain text detail for one point: date, amount, category, counterparty, description."""

    lines = [
        f"{utils.format_datetime(record.trade_time)}  {utils.format_currency(record.amount, currency)}",
        f"{record.category}  {record.counterparty or '-'}",
        record.description or "-",
    ]
    return "\n".join(lines)


def resolve_tooltip(
    index: Mapping[str, TransactionRecord],
    point_id: str,
    currency: str = "¥",
) -> str | None:
    record = index.get(point_id)
    return tooltip_text(record, currency) if record is not None else None


def _group_by_category(records: Sequence[TransactionRecord], rank: Sequence[str]) -> dict[str, list[TransactionRecord]]:
    groups: dict[str, list[TransactionRecord]] = {category: [] for category in rank}
    for record in records:
        groups.setdefault(record.category, []).append(record)
    return {category: items for category, items in groups.items() if items}


def build_scatter_ring(
    records: Sequence[TransactionRecord],
    *,
    direction: Direction,
    rank: Sequence[str],
    color_map: Mapping[str, str],
    min_max: MinMax,
    split_number: int = scaling.DEFAULT_SPLIT_NUMBER,
    cache: ScaffoldCache | None = None,
) -> Descriptor:
    """Build one direction's scatter series for the month of ``records``."""

    selected = [record for record in records if record.direction is direction]
    if not selected:
        logger.debug("Scatter ring has no %s records; omitting", direction.key)
        return {}

    start, end = utils.month_range(min(record.trade_time for record in selected))
    lo, hi = scaling.nice_bounds(min_max["min"], min_max["max"], split_number)

    fragment = (cache or _SCAFFOLDS).fresh(direction)
    polar_index = POLAR_INDEX[direction]
    fragment["angleAxis"][0] = {
        **fragment["angleAxis"][0],
        "min": start.isoformat(sep=" ", timespec="milliseconds"),
        "max": end.isoformat(sep=" ", timespec="milliseconds"),
    }
    fragment["radiusAxis"][0] = {**fragment["radiusAxis"][0], "min": lo, "max": hi}

    series: list[dict[str, Any]] = []
    for category, items in _group_by_category(selected, rank).items():
        series.append(
            {
                "id": f"{direction.value}-{category}",
                "name": category,
                "type": "scatter",
                "coordinateSystem": "polar",
                "polarIndex": polar_index,
                "data": [
                    {
                        "id": record.id,
                        "value": [record.amount, utils.format_datetime(record.trade_time)],
                        "symbolSize": marker_size(record.amount, min_max),
                    }
                    for record in items
                ],
                "itemStyle": {"color": color_for(color_map, category)},
                "tooltip": {"show": True},
            }
        )

    fragment["series"] = series
    fragment["legend"] = [{"data": [item["name"] for item in series], "top": LEGEND_TOP[direction]}]
    return fragment
