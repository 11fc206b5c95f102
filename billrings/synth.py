"""Synthetic bill export grids for demos and tests.

The generator produces deterministic exports in the same shape as a real
download: a few preamble rows, the header row, then transaction rows in the
fixed column layout. Some rows are deliberately invalid (failed or pending
status, tiny amounts, neutral direction) the way real exports are.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from .records import COLUMNS, EXCEL_EPOCH, SECONDS_PER_DAY, SUCCESS_STATUS, Direction

DEFAULT_ROWS = 500
DEFAULT_MONTHS = 6
DEFAULT_SEED = 7

PREAMBLE = (
    ("------------------------------------------------------------------------------------",),
    ("导出信息：",),
    ("起始时间：[{start}]    终止时间：[{end}]",),
)

PAYMENT_METHODS = ("余额", "余额宝", "花呗", "银行卡", "信用卡")
INVALID_STATUSES = ("交易关闭", "处理中", "退款成功")
REMARKS = ("", "", "", "优惠", "分期", "活动")
NEUTRAL_DIRECTION = "不计收支"


@dataclass(frozen=True)
class CategoryProfile:
    """Static metadata for one category of the generated ledger."""

    name: str
    direction: Direction
    counterparties: tuple[str, ...]
    descriptions: tuple[str, ...]
    amount_range: tuple[float, float]
    weight: float


CATALOGUE = (
    CategoryProfile("餐饮美食", Direction.EXPENSE, ("美团", "饿了么", "肯德基"), ("午餐", "晚餐", "奶茶"), (8.0, 120.0), 0.30),
    CategoryProfile("日用百货", Direction.EXPENSE, ("淘宝", "京东", "盒马"), ("纸巾", "洗衣液", "收纳盒"), (5.0, 260.0), 0.16),
    CategoryProfile("交通出行", Direction.EXPENSE, ("滴滴出行", "地铁", "高德打车"), ("打车", "地铁票", "加油"), (2.0, 90.0), 0.14),
    CategoryProfile("休闲娱乐", Direction.EXPENSE, ("猫眼", "腾讯视频", "网易云音乐"), ("电影票", "会员", "演出票"), (15.0, 400.0), 0.08),
    CategoryProfile("医疗健康", Direction.EXPENSE, ("医院", "药房"), ("挂号", "药品"), (20.0, 600.0), 0.04),
    CategoryProfile("教育培训", Direction.EXPENSE, ("学校", "得到"), ("课程", "书籍"), (30.0, 1500.0), 0.03),
    CategoryProfile("住房物业", Direction.EXPENSE, ("物业公司", "房东"), ("物业费", "房租"), (300.0, 3500.0), 0.03),
    CategoryProfile("工资薪水", Direction.INCOME, ("某某科技有限公司",), ("工资",), (6000.0, 12000.0), 0.04),
    CategoryProfile("投资理财", Direction.INCOME, ("余额宝", "基金"), ("收益", "分红"), (0.5, 300.0), 0.08),
    CategoryProfile("转账红包", Direction.INCOME, ("张三", "李四", "王五"), ("红包", "转账"), (5.0, 800.0), 0.06),
    CategoryProfile("退款", Direction.INCOME, ("淘宝", "京东"), ("退货退款",), (10.0, 300.0), 0.04),
)


def _weights() -> np.ndarray:
    weights = np.array([profile.weight for profile in CATALOGUE], dtype=float)
    return weights / weights.sum()


def datetime_to_excel_serial(moment: datetime) -> float:
    """Inverse of :func:`billrings.records.excel_serial_to_datetime` at second precision."""

    delta = moment - EXCEL_EPOCH
    return delta.days + delta.seconds / SECONDS_PER_DAY


def _order_no(rng: np.random.Generator) -> str:
    return "".join(str(digit) for digit in rng.integers(0, 10, size=18))


def _random_moment(start: datetime, end: datetime, rng: np.random.Generator) -> datetime:
    span = int((end - start).total_seconds())
    return start + timedelta(seconds=int(rng.integers(0, max(span, 1))))


def _build_row(
    profile: CategoryProfile,
    moment: datetime,
    rng: np.random.Generator,
    *,
    excel_dates: bool,
    invalid_rate: float,
) -> list[Any]:
    low, high = profile.amount_range
    amount = round(float(rng.uniform(low, high)), 2)
    direction = profile.direction.value
    status = SUCCESS_STATUS

    if rng.random() < invalid_rate:
        flaw = int(rng.integers(0, 3))
        if flaw == 0:
            status = str(rng.choice(INVALID_STATUSES))
        elif flaw == 1:
            amount = round(float(rng.uniform(0.01, 0.09)), 2)
        else:
            direction = NEUTRAL_DIRECTION

    counterparty = str(rng.choice(profile.counterparties))
    timestamp: Any = (
        round(datetime_to_excel_serial(moment), 8)
        if excel_dates
        else moment.strftime("%Y-%m-%d %H:%M:%S")
    )

    return [
        timestamp,
        profile.name,
        counterparty,
        f"{counterparty}***\t" if rng.random() < 0.3 else "",
        str(rng.choice(profile.descriptions)),
        direction,
        amount,
        str(rng.choice(PAYMENT_METHODS)),
        status,
        f"{_order_no(rng)}\t",
        f"{_order_no(rng)}\t" if rng.random() < 0.6 else "",
        str(rng.choice(REMARKS)),
    ]


def generate_bill_grid(
    rows: int = DEFAULT_ROWS,
    *,
    months: int = DEFAULT_MONTHS,
    end: date | None = None,
    seed: int | None = DEFAULT_SEED,
    excel_dates: bool = False,
    invalid_rate: float = 0.05,
    shuffle: bool = True,
    preamble: bool = True,
) -> list[list[Any]]:
    """Generate an export grid spanning the ``months`` full months before ``end``.

    ``end`` defaults to the first day of 2025-07 so output is stable across
    runs; with ``shuffle`` the transaction rows are not in time order.
    """

    if rows <= 0:
        raise ValueError("rows must be positive")
    if months <= 0:
        raise ValueError("months must be positive")

    rng = np.random.default_rng(seed)
    end_month = pd.Timestamp(end or date(2025, 7, 1)).to_period("M")
    start = (end_month - months).to_timestamp().to_pydatetime()
    stop = end_month.to_timestamp().to_pydatetime() - timedelta(seconds=1)

    picks = rng.choice(len(CATALOGUE), size=rows, p=_weights())
    moments = sorted(_random_moment(start, stop, rng) for _ in range(rows))
    body = [
        _build_row(CATALOGUE[int(pick)], moment, rng, excel_dates=excel_dates, invalid_rate=invalid_rate)
        for pick, moment in zip(picks, moments)
    ]
    if shuffle:
        order = rng.permutation(len(body))
        body = [body[int(i)] for i in order]

    grid: list[list[Any]] = []
    if preamble:
        for (line,) in PREAMBLE:
            grid.append([line.format(start=start.strftime("%Y-%m-%d %H:%M:%S"), end=stop.strftime("%Y-%m-%d %H:%M:%S"))])
    grid.append(list(COLUMNS))
    grid.extend(body)
    return grid


def write_bill_csv(
    path: str | Path,
    grid: list[list[Any]] | None = None,
    **kwargs: Any,
) -> Path:
    """Persist a grid as CSV, generating one with ``kwargs`` when none is given."""

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    frame = pd.DataFrame(grid if grid is not None else generate_bill_grid(**kwargs))
    frame.to_csv(target, index=False, header=False)
    return target


def main() -> None:  # pragma: no cover - convenience CLI
    path = write_bill_csv(Path("data") / "bill_sample.csv")
    print(f"Wrote {path}")


if __name__ == "__main__":  # pragma: no cover - module CLI
    main()
