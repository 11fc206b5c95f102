"""Middle ring: stacked daily totals per category over one month."""

from __future__ import annotations

import copy
from datetime import date
from typing import Any, Mapping, Sequence

import pandas as pd

from . import scaling, utils
from .aggregate import MinMax, color_for, rounded_sum
from .logging_setup import get_logger
from .merge import Descriptor
from .records import Direction, TransactionRecord, records_to_frame
from .scaffold import ScaffoldCache

logger = get_logger(__name__)

POLAR_INDEX = {Direction.INCOME: 2, Direction.EXPENSE: 3}
RADIUS = {Direction.INCOME: ["30%", "45%"], Direction.EXPENSE: ["45%", "60%"]}
SMOOTHNESS = 0.4


def create_trend_scaffold(direction: Direction) -> Descriptor:
    polar_index = POLAR_INDEX[direction]
    is_income = direction is Direction.INCOME
    grey_line = {"lineStyle": {"color": "#ddd"}}
    label_style = {"color": "#999", "fontSize": 14, "fontWeight": "bold"}

    return {
        "polar": [
            {"id": f"trend-{direction.key}", "center": ["50%", "50%"], "radius": list(RADIUS[direction])}
        ],
        "angleAxis": [
            {
                "polarIndex": polar_index,
                "type": "category",
                "boundaryGap": False,
                "axisLine": {"show": is_income, "lineStyle": {"color": "#ddd", "width": 3}},
                "axisLabel": {"show": is_income, **label_style},
                "axisTick": {"show": False},
                "splitLine": {"show": True, **grey_line},
            }
        ],
        "radiusAxis": [
            {
                "polarIndex": polar_index,
                "type": "value",
                "inverse": is_income,
                "axisLine": {"show": True, "lineStyle": {"color": "#999", "width": 2}},
                "axisLabel": {"show": True, **label_style},
                "axisTick": {"show": False},
                "splitLine": grey_line,
            }
        ],
        "series": [],
    }


_SCAFFOLDS = ScaffoldCache("trend", create_trend_scaffold)


def daily_category_totals(
    records: Sequence[TransactionRecord],
    days: Sequence[date],
    rank: Sequence[str],
) -> pd.DataFrame:
    """Return a category x day frame of rounded totals, zero where nothing happened.

    Rows follow ``rank``; categories missing from it are appended in order of
    first appearance. Days outside ``days`` are ignored.
    """

    frame = records_to_frame(records)
    known = set(rank)
    extra = [c for c in dict.fromkeys(frame["category"]) if c not in known]
    categories = [*rank, *extra]
    if frame.empty:
        return pd.DataFrame(0.0, index=categories, columns=list(days))

    frame["day"] = frame["trade_time"].dt.date
    totals = (
        frame.groupby(["category", "day"])["amount"]
        .agg(rounded_sum)
        .unstack(fill_value=0.0)
    )
    return totals.reindex(index=categories, columns=list(days), fill_value=0.0).astype(float)


def closed_loop(points: list[Any]) -> list[Any]:
    """Repeat the first point at the end so a polar curve closes on itself."""

    return [*points, copy.copy(points[0])] if points else []


def build_trend_ring(
    records: Sequence[TransactionRecord],
    *,
    direction: Direction,
    rank: Sequence[str],
    color_map: Mapping[str, str],
    value_range: MinMax,
    split_number: int = scaling.DEFAULT_SPLIT_NUMBER,
    cache: ScaffoldCache | None = None,
) -> Descriptor:
    """Build one direction's stacked trend for the month of ``records``.

    ``records`` may hold both directions; only ``direction`` is drawn. The
    month is taken from the earliest matching record.
    """

    selected = [record for record in records if record.direction is direction]
    if not selected:
        logger.debug("Trend ring has no %s records; omitting", direction.key)
        return {}

    days = utils.month_days(min(record.trade_time for record in selected))
    labels = [utils.format_date(day) for day in days]
    totals = daily_category_totals(selected, days, rank)
    totals = totals.loc[totals.sum(axis=1) > 0]
    if totals.empty:
        return {}

    peak = float(totals.sum(axis=0).max())
    lo, hi = scaling.nice_bounds(0.0, max(value_range["max"], peak), split_number)

    fragment = (cache or _SCAFFOLDS).fresh(direction)
    polar_index = POLAR_INDEX[direction]
    fragment["angleAxis"][0] = {**fragment["angleAxis"][0], "data": labels}
    fragment["radiusAxis"][0] = {**fragment["radiusAxis"][0], "min": lo, "max": hi}

    series = []
    for category, row in totals.iterrows():
        color = color_for(color_map, str(category))
        points = [[utils.round2(amount), label] for amount, label in zip(row.tolist(), labels)]
        series.append(
            {
                "name": f"{direction.key}-{category}",
                "type": "line",
                "coordinateSystem": "polar",
                "polarIndex": polar_index,
                "stack": f"trend-{direction.key}",
                "data": closed_loop(points),
                "showSymbol": False,
                "smooth": SMOOTHNESS,
                "silent": True,
                "itemStyle": {"color": color},
                "lineStyle": {"color": color},
                "areaStyle": {"color": color},
            }
        )
    fragment["series"] = series
    return fragment
