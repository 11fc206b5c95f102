"""Ring builders: inner bars, trend lines and scatter points."""

from __future__ import annotations

import threading

import pytest
from billrings import inner, scatter, trend
from billrings.records import Direction
from billrings.scaffold import ScaffoldCache
from billrings.utils import month_days

EXPENSE = Direction.EXPENSE
INCOME = Direction.INCOME


def _delta(value, increase=0.0, decrease=0.0):
    return {"increase": increase, "decrease": decrease, "value": value}


# -- inner ring ---------------------------------------------------------------


def test_select_top_categories_orders_and_pads() -> None:
    deltas = {"small": _delta(50), "zero": _delta(0), "big": _delta(200, increase=50)}

    data = inner.select_top_categories(deltas, 4)

    assert data["category"] == ["", "", "small", "big"]
    assert data["value"] == [0.0, 0.0, 50, 200]
    assert data["raw_value"] == [0.0, 0.0, 50.0, 250.0]


def test_select_top_categories_truncates_and_handles_empty() -> None:
    deltas = {f"c{i}": _delta(float(i + 1)) for i in range(8)}

    data = inner.select_top_categories(deltas, 3)
    assert data["category"] == ["c5", "c6", "c7"]

    empty = inner.select_top_categories({}, 5)
    assert empty["category"] == []
    assert empty["value"] == []


def test_stack_ends() -> None:
    data = inner.select_top_categories(
        {"a": _delta(100), "b": _delta(200, increase=30), "c": _delta(300, decrease=40)}, 3
    )

    assert inner.stack_ends(data) == [inner.STACK_VALUE, inner.STACK_INCREASE, inner.STACK_DECREASE]


def test_build_inner_ring_omits_empty_half_and_labels_bar_ends() -> None:
    deltas = {"income": {}, "expense": {"a": _delta(100), "b": _delta(200, increase=50)}}

    descriptor = inner.build_inner_ring(
        deltas, color_map={"a": "#111111", "b": "#222222"}, extent=(0.0, 300.0), top_n=5
    )

    assert [region["id"] for region in descriptor["polar"]] == ["inner-expense"]
    assert descriptor["radiusAxis"][0]["data"] == ["", "", "", "a", "b"]
    assert descriptor["angleAxis"][0]["max"] == 300.0

    value, increase, decrease = descriptor["series"]
    assert [s["name"] for s in descriptor["series"]] == ["expense-value", "expense-increase", "expense-decrease"]
    assert {s["stack"] for s in descriptor["series"]} == {"expense"}
    assert value["data"][4]["itemStyle"]["color"] == "#222222"
    assert value["data"][4]["label"]["show"] is False
    assert increase["data"][4]["label"]["formatter"] == "{category|b}\n{value|250.0}"
    assert value["data"][3]["label"]["formatter"] == "{category|a}\n{value|100.0}"
    assert value["data"][0]["label"]["show"] is False
    assert decrease["data"][4]["value"] == 0.0


def test_inner_ring_fragment_empty_data() -> None:
    data = inner.select_top_categories({}, 5)

    assert inner.inner_ring_fragment(data, INCOME, (0.0, 1.0), {}) == {}


def test_inner_extent_uses_largest_direction() -> None:
    extent = inner.inner_extent({"income": {"min": 10, "max": 100}, "expense": {"min": 1, "max": 40}})

    assert extent == pytest.approx((0.0, 120.0))


# -- scaffold cache -----------------------------------------------------------


def test_scaffold_cache_builds_once_and_hands_out_copies() -> None:
    calls = []

    def factory(direction):
        calls.append(direction)
        return {"polar": [{"id": direction.key}], "series": []}

    cache = ScaffoldCache("test", factory)
    threads = [threading.Thread(target=cache.get, args=(EXPENSE,)) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert cache.builds == 1
    copy_ = cache.fresh(EXPENSE)
    copy_["series"].append("mutated")
    copy_["polar"] = []
    assert cache.get(EXPENSE) == {"polar": [{"id": "expense"}], "series": []}

    cache.warm()
    assert cache.builds == 2
    assert calls.count(EXPENSE) == 1


def test_ring_builders_leave_cached_scaffold_untouched(make_record) -> None:
    cache = ScaffoldCache("scatter", scatter.create_scatter_scaffold, eager=True)
    before = cache.get(EXPENSE)
    snapshot = repr(before)
    records = [make_record("2024-03-05 08:00:00", "food", 10)]

    scatter.build_scatter_ring(
        records, direction=EXPENSE, rank=["food"], color_map={}, min_max={"min": 10, "max": 10}, cache=cache
    )

    assert repr(cache.get(EXPENSE)) == snapshot
    assert cache.builds == 2


# -- trend ring ---------------------------------------------------------------


@pytest.fixture
def march_records(make_record):
    return [
        make_record("2024-03-02 09:00:00", "food", 30),
        make_record("2024-03-02 19:00:00", "food", 20),
        make_record("2024-03-10 12:00:00", "travel", 15),
        make_record("2024-03-15 12:00:00", "salary", 900, INCOME),
    ]


def test_daily_category_totals(march_records) -> None:
    days = month_days(march_records[0].trade_time)
    expense = [r for r in march_records if r.direction is EXPENSE]

    totals = trend.daily_category_totals(expense, days, ["travel", "rent"])

    assert list(totals.index) == ["travel", "rent", "food"]
    assert totals.shape == (3, 31)
    assert totals.loc["food", days[1]] == 50.0
    assert totals.loc["rent"].sum() == 0


def test_build_trend_ring(march_records) -> None:
    descriptor = trend.build_trend_ring(
        march_records,
        direction=EXPENSE,
        rank=["food", "travel", "rent"],
        color_map={"food": "#123456"},
        value_range={"min": 15, "max": 50},
    )

    assert descriptor["polar"][0]["id"] == "trend-expense"
    labels = descriptor["angleAxis"][0]["data"]
    assert len(labels) == 31
    assert labels[0] == "2024-03-01"
    assert descriptor["radiusAxis"][0]["min"] == 0
    assert descriptor["radiusAxis"][0]["max"] == pytest.approx(60.0)

    names = [s["name"] for s in descriptor["series"]]
    assert names == ["expense-food", "expense-travel"]
    food = descriptor["series"][0]
    assert food["stack"] == "trend-expense"
    assert len(food["data"]) == 32
    assert food["data"][0] == food["data"][-1] == [0.0, "2024-03-01"]
    assert food["data"][1] == [50.0, "2024-03-02"]
    assert food["areaStyle"]["color"] == "#123456"
    assert descriptor["series"][1]["itemStyle"]["color"] == "#cccccc"


def test_build_trend_ring_without_records(march_records) -> None:
    only_expense = [r for r in march_records if r.direction is EXPENSE]

    assert trend.build_trend_ring(
        only_expense, direction=INCOME, rank=["salary"], color_map={}, value_range={"min": 0, "max": 0}
    ) == {}


def test_closed_loop() -> None:
    assert trend.closed_loop([]) == []
    points = [[1, "a"], [2, "b"]]
    looped = trend.closed_loop(points)
    assert looped == [[1, "a"], [2, "b"], [1, "a"]]


# -- scatter ring -------------------------------------------------------------


def test_marker_size() -> None:
    assert scatter.marker_size(10, {"min": 10, "max": 100}) == 10.0
    assert scatter.marker_size(100, {"min": 10, "max": 100}) == 48.0
    assert scatter.marker_size(55, {"min": 10, "max": 100}) == pytest.approx(29.0)
    assert scatter.marker_size(42, {"min": 42, "max": 42}) == scatter.SYMBOL_SIZE[0]


def test_build_scatter_ring(march_records, make_record) -> None:
    records = [*march_records, make_record("2024-03-20 21:30:00", "food", 100)]

    descriptor = scatter.build_scatter_ring(
        records,
        direction=EXPENSE,
        rank=["food", "travel"],
        color_map={"food": "#123456", "travel": "#654321"},
        min_max={"min": 15, "max": 100},
    )

    angle = descriptor["angleAxis"][0]
    assert angle["min"] == "2024-03-01 00:00:00.000"
    assert angle["max"] == "2024-03-31 23:59:59.999"
    assert descriptor["radiusAxis"][0]["min"] == pytest.approx(0.0)
    assert descriptor["radiusAxis"][0]["max"] == pytest.approx(120.0)

    food, travel = descriptor["series"]
    assert food["id"] == "支出-food"
    assert food["name"] == "food"
    assert len(food["data"]) == 3
    assert food["data"][0]["value"] == [30, "2024-03-02 09:00:00"]
    assert food["data"][2]["symbolSize"] == 48.0
    assert travel["data"][0]["symbolSize"] == 10.0
    assert descriptor["legend"] == [{"data": ["food", "travel"], "top": scatter.LEGEND_TOP[EXPENSE]}]


def test_build_scatter_ring_without_records() -> None:
    assert scatter.build_scatter_ring(
        [], direction=INCOME, rank=[], color_map={}, min_max={"min": 0, "max": 0}
    ) == {}


def test_tooltip_resolution(march_records) -> None:
    index = scatter.record_index(march_records)
    salary = march_records[-1]

    text = scatter.resolve_tooltip(index, salary.id)

    assert text is not None
    assert "2024-03-15 12:00:00" in text
    assert "¥900.00" in text
    assert "salary" in text
    assert scatter.resolve_tooltip(index, "missing") is None
