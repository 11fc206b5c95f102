"""Parsing of raw bill export grids into typed transaction records.

An export is a 2-D grid of string or number cells. A few preamble rows
precede a header row whose first column is ``交易时间``; every row below it
is a transaction in the fixed twelve column layout listed in
:data:`COLUMNS`.
"""

from __future__ import annotations

import math
import numbers
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import IO, Any, Iterable, NamedTuple, Sequence, Union

import pandas as pd

from . import utils
from .logging_setup import get_logger

logger = get_logger(__name__)

HEADER_MARKER = "交易时间"
SUCCESS_STATUS = "交易成功"
MIN_AMOUNT = 0.1
ORDER_ID_SENTINEL = -1

COLUMNS = (
    "交易时间",
    "交易分类",
    "交易对方",
    "对方账号",
    "商品说明",
    "收/支",
    "金额",
    "收/付款方式",
    "交易状态",
    "交易订单号",
    "商家订单号",
    "备注",
)

# Spreadsheet serial 25569 is 1970-01-01.
EXCEL_EPOCH = datetime(1899, 12, 30)
SECONDS_PER_DAY = 86_400
MAX_GRID_WIDTH = 32


class HeaderNotFoundError(ValueError):
    """Raised when a grid has no row carrying the header marker."""


class Direction(Enum):
    INCOME = "收入"
    EXPENSE = "支出"

    @property
    def key(self) -> str:
        return "income" if self is Direction.INCOME else "expense"

    @classmethod
    def from_label(cls, label: str) -> "Direction | None":
        for member in cls:
            if member.value == label:
                return member
        return None


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Number:
    value: float


Cell = Union[Text, Number]
OrderId = Union[str, int]


class RawRow(NamedTuple):
    """One export row, positionally matched to :data:`COLUMNS`."""

    trade_time: Cell
    category: Cell
    counterparty: Cell
    counterparty_account: Cell
    description: Cell
    direction: Cell
    amount: Cell
    payment_method: Cell
    status: Cell
    trade_order_id: Cell
    merchant_order_id: Cell
    remark: Cell


@dataclass(frozen=True)
class TransactionRecord:
    """A validated transaction. Created once by the parser, never mutated."""

    id: str
    trade_time: datetime
    category: str
    counterparty: str
    counterparty_account: str
    description: str
    direction: Direction
    amount: float
    payment_method: str
    status: str
    trade_order_id: OrderId
    merchant_order_id: OrderId
    remark: str

    @property
    def is_income(self) -> bool:
        return self.direction is Direction.INCOME


def decode_cell(cell: Any) -> Cell:
    """Decode a raw grid cell into ``Text`` or ``Number``.

    Tab characters are stripped from text. Any real number (``int``,
    ``float``, ``Decimal``, numpy scalars) becomes ``Number``. Empty
    spreadsheet cells (``None`` or NaN) become empty text; date objects
    produced by spreadsheet readers are carried as ISO text.
    """

    if cell is None or isinstance(cell, bool):
        return Text("" if cell is None else str(cell))
    if isinstance(cell, Decimal):
        return Text("") if cell.is_nan() else Number(float(cell))
    if isinstance(cell, numbers.Real):
        value = float(cell)
        return Text("") if math.isnan(value) else Number(value)
    if isinstance(cell, (datetime, date)):
        return Text(cell.isoformat(sep=" ") if isinstance(cell, datetime) else cell.isoformat())
    return Text(str(cell).replace("\t", ""))


def _text(cell: Cell) -> str:
    if isinstance(cell, Number):
        value = cell.value
        return str(int(value)) if value.is_integer() else str(value)
    return cell.value.strip()


def _amount(cell: Cell) -> float | None:
    if isinstance(cell, Number):
        return cell.value
    raw = cell.value.strip().replace(",", "").lstrip("¥￥")
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return None if math.isnan(value) else value


def _order_id(cell: Cell) -> OrderId:
    text = _text(cell)
    return text if text else ORDER_ID_SENTINEL


def excel_serial_to_datetime(serial: float) -> datetime:
    """Convert a spreadsheet day serial to a naive :class:`datetime`.

    The fractional part encodes the time of day and is truncated to whole
    seconds. A tiny nudge keeps values such as ``.5`` from flooring to the
    previous second through binary rounding.
    """

    days = math.floor(serial)
    fractional = serial - days + 1e-7
    seconds = math.floor(SECONDS_PER_DAY * fractional)
    return EXCEL_EPOCH + timedelta(days=days, seconds=seconds)


def parse_trade_time(cell: Cell) -> datetime:
    """Decode the timestamp column, which may be text or a day serial."""

    if isinstance(cell, Number):
        return excel_serial_to_datetime(cell.value)
    parsed = pd.to_datetime(cell.value.strip())
    if pd.isna(parsed):
        raise ValueError(f"Unparseable trade time: {cell.value!r}")
    if parsed.tzinfo is not None:
        parsed = parsed.tz_localize(None)
    return parsed.to_pydatetime()


def find_header_row(grid: Sequence[Sequence[Any]], marker: str = HEADER_MARKER) -> int:
    """Return the index of the first row containing the ``marker`` cell."""

    for index, row in enumerate(grid):
        for cell in row:
            decoded = decode_cell(cell)
            if isinstance(decoded, Text) and decoded.value.strip() == marker:
                return index
    raise HeaderNotFoundError(f"No header row containing {marker!r} found")


def _to_raw_row(row: Sequence[Any]) -> RawRow | None:
    if len(row) < len(COLUMNS):
        return None
    return RawRow._make(decode_cell(cell) for cell in row[: len(COLUMNS)])


def _parse_row(row: Sequence[Any]) -> TransactionRecord | None:
    raw = _to_raw_row(row)
    if raw is None:
        return None

    amount = _amount(raw.amount)
    direction = Direction.from_label(_text(raw.direction))
    status = _text(raw.status)
    if amount is None or amount < MIN_AMOUNT or direction is None or status != SUCCESS_STATUS:
        return None

    try:
        trade_time = parse_trade_time(raw.trade_time)
    except (ValueError, TypeError, OverflowError):
        return None

    return TransactionRecord(
        id=uuid.uuid4().hex,
        trade_time=trade_time,
        category=_text(raw.category),
        counterparty=_text(raw.counterparty),
        counterparty_account=_text(raw.counterparty_account),
        description=_text(raw.description),
        direction=direction,
        amount=utils.round2(amount),
        payment_method=_text(raw.payment_method),
        status=status,
        trade_order_id=_order_id(raw.trade_order_id),
        merchant_order_id=_order_id(raw.merchant_order_id),
        remark=_text(raw.remark),
    )


def parse_bill_grid(
    grid: Iterable[Sequence[Any]],
    *,
    strict_header: bool = True,
    marker: str = HEADER_MARKER,
) -> list[TransactionRecord]:
    """Parse an export grid into records sorted by trade time.

    Rows that fail validation (amount below :data:`MIN_AMOUNT`, a direction
    other than income or expense, a status other than
    :data:`SUCCESS_STATUS`, too few cells or an unreadable timestamp) are
    skipped. With ``strict_header`` a grid without the header marker raises
    :class:`HeaderNotFoundError`; otherwise parsing starts at the first row.
    """

    rows = [list(row) for row in grid]
    try:
        start = find_header_row(rows, marker) + 1
    except HeaderNotFoundError:
        if strict_header:
            raise
        logger.warning("Header marker %r missing; parsing from the first row", marker)
        start = 0

    records: list[TransactionRecord] = []
    dropped = 0
    for row in rows[start:]:
        record = _parse_row(row)
        if record is None:
            dropped += 1
            continue
        records.append(record)

    records.sort(key=lambda record: record.trade_time)
    logger.debug("Parsed %d records, skipped %d rows", len(records), dropped)
    return records


def records_to_frame(records: Iterable[TransactionRecord]) -> pd.DataFrame:
    """Return a tabular view of the records, one column per field."""

    rows = [
        {
            "id": record.id,
            "trade_time": record.trade_time,
            "category": record.category,
            "counterparty": record.counterparty,
            "counterparty_account": record.counterparty_account,
            "description": record.description,
            "direction": record.direction.value,
            "direction_key": record.direction.key,
            "amount": record.amount,
            "payment_method": record.payment_method,
            "status": record.status,
            "trade_order_id": record.trade_order_id,
            "merchant_order_id": record.merchant_order_id,
            "remark": record.remark,
        }
        for record in records
    ]
    frame = utils.ensure_dataframe(rows)
    if frame.empty:
        return pd.DataFrame(
            columns=[
                "id",
                "trade_time",
                "category",
                "counterparty",
                "counterparty_account",
                "description",
                "direction",
                "direction_key",
                "amount",
                "payment_method",
                "status",
                "trade_order_id",
                "merchant_order_id",
                "remark",
            ]
        )
    frame["trade_time"] = pd.to_datetime(frame["trade_time"])
    return frame


def load_grid(
    source: str | Path | IO[Any],
    *,
    encoding: str = "utf-8",
    suffix: str | None = None,
) -> list[list[Any]]:
    """Read a ``.csv`` or ``.xlsx`` export into a raw cell grid.

    ``source`` is a path or an open binary buffer; for buffers the format is
    taken from ``suffix`` (or the buffer's ``name``). Legacy ``.xls``
    workbooks raise :class:`ValueError`. Exports carry ragged
    preamble rows, so CSV rows are read into a wide frame and trailing empty
    cells past the twelve fixed columns are dropped again per row.
    """

    if suffix is None:
        suffix = Path(str(getattr(source, "name", source))).suffix
    if suffix.lower() == ".xls":
        raise ValueError("Legacy .xls workbooks are not supported; save the export as .xlsx or .csv")
    if suffix.lower() == ".xlsx":
        frame = pd.read_excel(source, header=None, dtype=object)
    else:
        frame = pd.read_csv(
            source,
            header=None,
            names=range(MAX_GRID_WIDTH),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=False,
            encoding=encoding,
            engine="python",
        )

    grid: list[list[Any]] = []
    for row in frame.astype(object).where(frame.notna(), None).values.tolist():
        while len(row) > len(COLUMNS) and (row[-1] is None or row[-1] == ""):
            row.pop()
        grid.append(row)
    return grid
