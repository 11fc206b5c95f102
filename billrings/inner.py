"""Inner ring: top categories of a period with their month-over-month swing.

Each direction owns one half of the inner polar region. Income runs
clockwise over the right half, expense over the left half. Every category
is one stacked bar: the baseline ``value`` segment first, then the
``increase`` and ``decrease`` segments, at most one of which is non-zero.
"""

from __future__ import annotations

from typing import Any, Mapping, TypedDict

from . import scaling, utils
from .aggregate import CategoryDelta, TradeMinMax, color_for
from .logging_setup import get_logger
from .merge import Descriptor, merge_all
from .records import Direction
from .scaffold import ScaffoldCache

logger = get_logger(__name__)

TOP_N = 5
POLAR_INDEX = {Direction.INCOME: 0, Direction.EXPENSE: 1}
BORDER_RADIUS = 5
INCREASE_COLOR = "#f5222d"
DECREASE_COLOR = "#52c41a"
LABEL_VALUE_COLOR = "#888"

STACK_VALUE, STACK_INCREASE, STACK_DECREASE = 0, 1, 2


class InnerData(TypedDict):
    category: list[str]
    increase: list[float]
    decrease: list[float]
    value: list[float]
    raw_value: list[float]


def select_top_categories(deltas: Mapping[str, CategoryDelta], n: int = TOP_N) -> InnerData:
    """Pick the ``n`` largest non-zero categories, ordered for the ring.

    The list is reversed so the largest category sits on the outside, and is
    padded with blank categories at the front when fewer than ``n`` qualify.
    With no qualifying category every list is empty.
    """

    ranked = sorted(
        (item for item in deltas.items() if item[1]["value"] != 0),
        key=lambda item: item[1]["value"],
        reverse=True,
    )[:n]
    ranked.reverse()

    category = [name for name, _ in ranked]
    increase = [delta["increase"] for _, delta in ranked]
    decrease = [delta["decrease"] for _, delta in ranked]
    value = [delta["value"] for _, delta in ranked]
    raw_value = [utils.round2(v + inc) for v, inc in zip(value, increase)]

    if category and len(category) < n:
        pad = n - len(category)
        category = [""] * pad + category
        increase = [0.0] * pad + increase
        decrease = [0.0] * pad + decrease
        value = [0.0] * pad + value
        raw_value = [0.0] * pad + raw_value

    return {
        "category": category,
        "increase": increase,
        "decrease": decrease,
        "value": value,
        "raw_value": raw_value,
    }


def stack_ends(data: InnerData) -> list[int]:
    """Index of the last non-zero segment of every bar."""

    ends = []
    for inc, dec in zip(data["increase"], data["decrease"]):
        if inc > 0:
            ends.append(STACK_INCREASE)
        elif dec > 0:
            ends.append(STACK_DECREASE)
        else:
            ends.append(STACK_VALUE)
    return ends


def create_inner_scaffold(direction: Direction) -> Descriptor:
    polar_index = POLAR_INDEX[direction]
    key = direction.key
    start_angle, end_angle = (90, -90) if direction is Direction.INCOME else (-90, -270)

    def bar(segment: str, **extra: Any) -> dict[str, Any]:
        return {
            "name": f"{key}-{segment}",
            "type": "bar",
            "coordinateSystem": "polar",
            "polarIndex": polar_index,
            "stack": key,
            **extra,
        }

    return {
        "polar": [{"id": f"inner-{key}", "center": ["50%", "50%"], "radius": ["0%", "30%"]}],
        "angleAxis": [
            {
                "polarIndex": polar_index,
                "startAngle": start_angle,
                "endAngle": end_angle,
                "axisTick": {"show": False},
                "axisLine": {"lineStyle": {"color": "#ddd", "width": 4}},
                "splitLine": {"show": False},
                "axisLabel": {"show": False},
            }
        ],
        "radiusAxis": [
            {
                "polarIndex": polar_index,
                "type": "category",
                "inverse": True,
                "axisTick": {"show": False},
                "axisLine": {"lineStyle": {"color": "#ddd", "width": 3, "type": "dashed"}},
                "axisLabel": {"show": False},
            }
        ],
        "series": [
            bar("value"),
            bar("increase", itemStyle={"color": INCREASE_COLOR}),
            bar(
                "decrease",
                itemStyle={
                    "color": DECREASE_COLOR,
                    "opacity": 0.5,
                    "borderWidth": 2,
                    "borderColor": "#000",
                    "borderType": "dashed",
                },
            ),
        ],
    }


_SCAFFOLDS = ScaffoldCache("inner", create_inner_scaffold)


def _segment_points(
    data: InnerData,
    amounts: list[float],
    stack_index: int,
    ends: list[int],
    color_map: Mapping[str, str],
) -> list[dict[str, Any]]:
    points = []
    for i, amount in enumerate(amounts):
        category = data["category"][i]
        is_end = ends[i] == stack_index
        innermost = stack_index == STACK_VALUE
        color = color_for(color_map, category)

        corner = BORDER_RADIUS if innermost else 0
        end_corner = BORDER_RADIUS if is_end else 0
        item_style: dict[str, Any] = {"borderRadius": [corner, end_corner, corner, end_corner]}
        if innermost:
            item_style["color"] = color

        label: dict[str, Any] = {"show": False}
        if is_end and category:
            label = {
                "show": True,
                "position": "end",
                "formatter": f"{{category|{category}}}\n{{value|{data['raw_value'][i]}}}",
                "rich": {
                    "category": {"fontSize": 14, "color": color, "fontWeight": "bold"},
                    "value": {"fontSize": 14, "color": LABEL_VALUE_COLOR, "fontWeight": "bold"},
                },
            }

        points.append({"value": amount, "itemStyle": item_style, "label": label})
    return points


def inner_ring_fragment(
    data: InnerData,
    direction: Direction,
    extent: tuple[float, float],
    color_map: Mapping[str, str],
    *,
    cache: ScaffoldCache | None = None,
) -> Descriptor:
    """Fill one direction's scaffold with bar data; ``{}`` when there is none."""

    if not data["category"]:
        return {}

    fragment = (cache or _SCAFFOLDS).fresh(direction)
    ends = stack_ends(data)

    fragment["radiusAxis"][0] = {**fragment["radiusAxis"][0], "data": list(data["category"])}
    fragment["angleAxis"][0] = {**fragment["angleAxis"][0], "min": extent[0], "max": extent[1]}
    fragment["series"] = [
        {**series, "data": _segment_points(data, amounts, index, ends, color_map)}
        for index, (series, amounts) in enumerate(
            zip(fragment["series"], (data["value"], data["increase"], data["decrease"]))
        )
    ]
    return fragment


def inner_extent(
    category_min_max: TradeMinMax,
    split_number: int = scaling.DEFAULT_SPLIT_NUMBER,
) -> tuple[float, float]:
    """Shared angle bounds for both halves, from zero to the largest category total."""

    peak = max(category_min_max["income"]["max"], category_min_max["expense"]["max"])
    return scaling.nice_bounds(0.0, peak, split_number)


def build_inner_ring(
    period_deltas: Mapping[str, Mapping[str, CategoryDelta]],
    *,
    color_map: Mapping[str, str],
    extent: tuple[float, float],
    top_n: int = TOP_N,
    cache: ScaffoldCache | None = None,
) -> Descriptor:
    """Build the inner ring for both directions of one period."""

    fragments = []
    for direction in Direction:
        data = select_top_categories(period_deltas.get(direction.key, {}), top_n)
        if not data["category"]:
            logger.debug("Inner ring has no %s categories; omitting half", direction.key)
        fragments.append(inner_ring_fragment(data, direction, extent, color_map, cache=cache))
    return merge_all(*fragments)
