"""Command-line helpers under scripts/."""

from __future__ import annotations

import json
import runpy
from pathlib import Path

import pytest
from billrings import synth

SCRIPTS = Path(__file__).resolve().parents[1] / "scripts"


def _dump_main():
    return runpy.run_path(str(SCRIPTS / "dump_descriptor.py"))["main"]


def test_dump_descriptor_prints_latest_month(tmp_path, capsys) -> None:
    path = synth.write_bill_csv(tmp_path / "bill.csv", rows=300, seed=4)

    _dump_main()([str(path), "--compact"])

    descriptor = json.loads(capsys.readouterr().out)
    assert descriptor["series"]
    assert "scatter-expense" in [region["id"] for region in descriptor["polar"]]


def test_dump_descriptor_rejects_export_without_header(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("BILLRINGS_STRICT_HEADER", raising=False)
    body = synth.generate_bill_grid(rows=20, seed=4, preamble=False)[1:]
    path = synth.write_bill_csv(tmp_path / "headless.csv", body)

    with pytest.raises(SystemExit) as exc:
        _dump_main()([str(path)])

    assert exc.value.code == 1


def test_dump_descriptor_unknown_period(tmp_path) -> None:
    path = synth.write_bill_csv(tmp_path / "bill.csv", rows=50, seed=4)

    with pytest.raises(SystemExit) as exc:
        _dump_main()([str(path), "--period", "1999-01"])

    assert exc.value.code == 1
