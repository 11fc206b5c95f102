"""Regression tests for the synthetic export generator."""

from __future__ import annotations

from datetime import date, datetime

import pytest
from billrings import records, synth


def test_generate_bill_grid_is_deterministic() -> None:
    first = synth.generate_bill_grid(rows=250, seed=123)
    second = synth.generate_bill_grid(rows=250, seed=123)

    assert first == second
    assert first != synth.generate_bill_grid(rows=250, seed=124)


def test_grid_layout() -> None:
    grid = synth.generate_bill_grid(rows=100, seed=1)

    header = records.find_header_row(grid)
    assert header == len(synth.PREAMBLE)
    assert tuple(grid[header]) == records.COLUMNS
    assert len(grid) == header + 1 + 100
    assert all(len(row) == len(records.COLUMNS) for row in grid[header + 1 :])


def test_grid_without_preamble() -> None:
    grid = synth.generate_bill_grid(rows=10, preamble=False)

    assert tuple(grid[0]) == records.COLUMNS


def test_invalid_rows_are_filtered_by_parser() -> None:
    grid = synth.generate_bill_grid(rows=500, seed=9, invalid_rate=0.2)

    parsed = records.parse_bill_grid(grid)

    assert 300 < len(parsed) < 500
    assert all(r.status == records.SUCCESS_STATUS for r in parsed)
    assert all(r.amount >= records.MIN_AMOUNT for r in parsed)


def test_clean_grid_parses_every_row() -> None:
    grid = synth.generate_bill_grid(rows=200, seed=4, invalid_rate=0.0)

    assert len(records.parse_bill_grid(grid)) == 200


def test_rows_cover_requested_months() -> None:
    grid = synth.generate_bill_grid(rows=400, months=3, end=date(2024, 4, 1), seed=2, invalid_rate=0.0)

    months = {(r.trade_time.year, r.trade_time.month) for r in records.parse_bill_grid(grid)}

    assert months == {(2024, 1), (2024, 2), (2024, 3)}


def test_excel_dates_round_trip() -> None:
    moment = datetime(2024, 2, 29, 13, 45, 7)

    assert records.excel_serial_to_datetime(synth.datetime_to_excel_serial(moment)) == moment

    grid = synth.generate_bill_grid(rows=20, seed=8, excel_dates=True, preamble=False)
    assert all(isinstance(row[0], float) for row in grid[1:])


def test_write_bill_csv(tmp_path) -> None:
    path = synth.write_bill_csv(tmp_path / "nested" / "bill.csv", rows=30, seed=3)

    assert path.exists()
    grid = records.load_grid(path)
    assert records.find_header_row(grid) == len(synth.PREAMBLE)


@pytest.mark.parametrize("kwargs", [{"rows": 0}, {"rows": 10, "months": 0}])
def test_invalid_arguments(kwargs) -> None:
    with pytest.raises(ValueError):
        synth.generate_bill_grid(**kwargs)
