"""Aggregation of parsed records into ring-ready statistics."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from typing import Any, TypedDict

import pandas as pd

from . import records as records_mod
from . import utils
from .logging_setup import get_logger
from .records import Direction, TransactionRecord

logger = get_logger(__name__)

PALETTE = (
    "#72adff",
    "#bf98ff",
    "#ff80c8",
    "#ff8b69",
    "#629f00",
    "#94b81f",
    "#00c292",
    "#00bcd7",
)
DEFAULT_COLOR = "#cccccc"

NOISE_ABSOLUTE = 10.0
NOISE_RATIO = 0.05

DIRECTION_KEYS = tuple(direction.key for direction in Direction)


class CategoryDelta(TypedDict):
    increase: float
    decrease: float
    value: float


class MinMax(TypedDict):
    min: float
    max: float


class TradeMinMax(TypedDict):
    income: MinMax
    expense: MinMax


class CategoryRank(TypedDict):
    income: list[str]
    expense: list[str]


class PeriodTotals(TypedDict):
    period: str
    income: dict[str, float]
    expense: dict[str, float]


class PeriodDeltas(TypedDict):
    period: str
    income: dict[str, CategoryDelta]
    expense: dict[str, CategoryDelta]


class BillPayload(TypedDict):
    records: list[TransactionRecord]
    periods: dict[str, list[TransactionRecord]]
    category_rank: CategoryRank
    color_map: dict[str, str]
    period_totals: list[PeriodTotals]
    category_deltas: list[PeriodDeltas]
    trade_min_max: TradeMinMax
    category_min_max: TradeMinMax


def rounded_sum(values: Iterable[float]) -> float:
    """Sum amounts, rounding to two decimals after every addition."""

    total = 0.0
    for value in values:
        total = utils.round2(total + float(value))
    return total


def color_for(color_map: Mapping[str, str], category: str) -> str:
    return color_map.get(category, DEFAULT_COLOR)


def category_rank(records: Sequence[TransactionRecord]) -> CategoryRank:
    """Return category names per direction ordered by descending total.

    Equal totals keep the order in which the categories were first seen.
    """

    frame = records_mod.records_to_frame(records)
    rank: dict[str, list[str]] = {}
    for key in DIRECTION_KEYS:
        subset = frame.loc[frame["direction_key"] == key]
        if subset.empty:
            rank[key] = []
            continue
        totals = subset.groupby("category", sort=False)["amount"].agg(rounded_sum)
        rank[key] = [str(name) for name in totals.sort_values(ascending=False, kind="stable").index]
    return {"income": rank["income"], "expense": rank["expense"]}


def category_color_map(rank: CategoryRank, palette: Sequence[str] = PALETTE) -> dict[str, str]:
    """Assign palette colours by rank position, per direction.

    Income and expense are coloured independently, so two categories may
    share a colour. A name present in both lists keeps its expense colour.
    """

    if not palette:
        raise ValueError("palette must not be empty")

    colors: dict[str, str] = {}
    for key in DIRECTION_KEYS:
        for index, category in enumerate(rank[key]):
            colors[category] = palette[index % len(palette)]
    return colors


def period_key(moment: datetime | pd.Timestamp) -> str:
    return f"{moment.year:04d}-{moment.month:02d}"


def group_by_period(
    records: Iterable[TransactionRecord],
    allowed: Iterable[str] | None = None,
) -> dict[str, list[TransactionRecord]]:
    """Bucket records by calendar month in chronological order.

    With ``allowed`` only the listed period keys are returned (every listed
    key is present, possibly with no records) and all other records are
    discarded.
    """

    buckets: dict[str, list[TransactionRecord]] = {}
    allow_list = sorted(set(allowed)) if allowed is not None else None
    if allow_list is not None:
        buckets = {key: [] for key in allow_list}

    for record in records:
        key = period_key(record.trade_time)
        if allow_list is not None and key not in buckets:
            continue
        buckets.setdefault(key, []).append(record)

    return {key: buckets[key] for key in sorted(buckets)}


def _direction_totals(
    period_records: Sequence[TransactionRecord],
    direction: Direction,
    categories: Sequence[str],
) -> dict[str, float]:
    totals = {category: 0.0 for category in categories}
    for record in period_records:
        if record.direction is direction and record.category in totals:
            totals[record.category] = utils.round2(totals[record.category] + record.amount)
    return totals


def category_period_totals(
    periods: dict[str, list[TransactionRecord]],
    rank: CategoryRank,
) -> list[PeriodTotals]:
    """Sum each ranked category per period and direction."""

    return [
        {
            "period": key,
            "income": _direction_totals(bucket, Direction.INCOME, rank["income"]),
            "expense": _direction_totals(bucket, Direction.EXPENSE, rank["expense"]),
        }
        for key, bucket in periods.items()
    ]


def category_delta(current: float, previous: float) -> CategoryDelta:
    """Decompose the swing from ``previous`` to ``current``.

    A zero baseline reports no swing. Swings under ten currency units, or
    under five percent of the current total, are treated as noise.
    """

    diff = 0.0 if previous == 0 else utils.round2(current - previous)
    if diff != 0 and (
        abs(diff) < NOISE_ABSOLUTE or (current != 0 and abs(diff) / current < NOISE_RATIO)
    ):
        diff = 0.0

    return {
        "increase": diff if diff > 0 else 0.0,
        "decrease": -diff if diff < 0 else 0.0,
        "value": utils.round2(current - diff) if diff > 0 else current,
    }


def compute_deltas(series: Sequence[dict[str, float]]) -> list[dict[str, CategoryDelta]]:
    """Compute deltas for consecutive period totals of one direction."""

    deltas: list[dict[str, CategoryDelta]] = []
    for index, current in enumerate(series):
        previous = series[index - 1] if index > 0 else {}
        deltas.append(
            {
                category: category_delta(total, previous.get(category, 0.0))
                for category, total in current.items()
            }
        )
    return deltas


def category_deltas(totals: Sequence[PeriodTotals]) -> list[PeriodDeltas]:
    income = compute_deltas([entry["income"] for entry in totals])
    expense = compute_deltas([entry["expense"] for entry in totals])
    return [
        {"period": entry["period"], "income": income[index], "expense": expense[index]}
        for index, entry in enumerate(totals)
    ]


def _min_max(values: Iterable[float]) -> MinMax:
    series = pd.Series(list(values), dtype=float)
    if series.empty:
        return {"min": 0.0, "max": 0.0}
    return {"min": float(series.min()), "max": float(series.max())}


def trade_min_max(records: Sequence[TransactionRecord]) -> TradeMinMax:
    """Smallest and largest single transaction per direction.

    A direction without records reports ``0.0`` for both bounds.
    """

    return {
        "income": _min_max(r.amount for r in records if r.direction is Direction.INCOME),
        "expense": _min_max(r.amount for r in records if r.direction is Direction.EXPENSE),
    }


def category_period_min_max(totals: Sequence[PeriodTotals]) -> TradeMinMax:
    """Smallest and largest non-zero category total in any period, per direction."""

    return {
        "income": _min_max(
            value for entry in totals for value in entry["income"].values() if value != 0
        ),
        "expense": _min_max(
            value for entry in totals for value in entry["expense"].values() if value != 0
        ),
    }


def process_records(
    records: Sequence[TransactionRecord],
    *,
    allowed_periods: Iterable[str] | None = None,
) -> BillPayload:
    """Run every aggregation step over already parsed records."""

    rank = category_rank(records)
    periods = group_by_period(records, allowed_periods)
    totals = category_period_totals(periods, rank)

    payload: BillPayload = {
        "records": list(records),
        "periods": periods,
        "category_rank": rank,
        "color_map": category_color_map(rank),
        "period_totals": totals,
        "category_deltas": category_deltas(totals),
        "trade_min_max": trade_min_max(records),
        "category_min_max": category_period_min_max(totals),
    }
    logger.info(
        "Aggregated %d records into %d periods (%d income, %d expense categories)",
        len(records),
        len(periods),
        len(rank["income"]),
        len(rank["expense"]),
    )
    return payload


def process_bill_grid(
    grid: Iterable[Sequence[Any]],
    *,
    allowed_periods: Iterable[str] | None = None,
    strict_header: bool = True,
) -> BillPayload:
    """Parse an export grid and aggregate it in one step."""

    parsed = records_mod.parse_bill_grid(grid, strict_header=strict_header)
    return process_records(parsed, allowed_periods=allowed_periods)
