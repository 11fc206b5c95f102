"""Shared utilities for the bill rings engine."""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Iterable, Mapping

import pandas as pd


def ensure_dataframe(rows: Iterable[Mapping] | pd.DataFrame) -> pd.DataFrame:
    """Ensure the input payload is normalised to a :class:`pandas.DataFrame`."""

    if isinstance(rows, pd.DataFrame):
        return rows.copy()

    return pd.DataFrame(list(rows))


def round2(value: float) -> float:
    """Round an amount to two decimal places, returning a plain float."""

    return round(float(value), 2)


def format_currency(value: float, currency: str = "¥") -> str:
    """Return a human-readable currency string."""

    return f"{currency}{value:,.2f}"


def format_date(moment: date | datetime) -> str:
    return moment.strftime("%Y-%m-%d")


def format_datetime(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d %H:%M:%S")


def month_range(moment: date | datetime) -> tuple[datetime, datetime]:
    """Return the first and last instant of the month containing ``moment``.

    The end is one millisecond before the next month starts, so a time axis
    bounded by it never spills into the following month.
    """

    start = datetime(moment.year, moment.month, 1)
    _, days = calendar.monthrange(moment.year, moment.month)
    end = start + timedelta(days=days) - timedelta(milliseconds=1)
    return start, end


def month_days(moment: date | datetime) -> list[date]:
    """Return every calendar day of the month containing ``moment``."""

    _, days = calendar.monthrange(moment.year, moment.month)
    return [date(moment.year, moment.month, day) for day in range(1, days + 1)]
