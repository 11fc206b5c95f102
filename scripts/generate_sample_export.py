"""Write a deterministic sample bill export for demos and manual testing.

The export mirrors a real download: preamble lines, the header row and one
transaction per row, with a small share of failed, pending or neutral rows
that the parser is expected to skip.

Output: data/bill_sample.csv (or .xlsx with --xlsx)
"""

from __future__ import annotations

import argparse
from datetime import date
from pathlib import Path

import pandas as pd

from billrings import logging_setup, synth

logger = logging_setup.get_logger("billrings.scripts.generate_sample_export")


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate a synthetic bill export")
    parser.add_argument("--rows", type=int, default=synth.DEFAULT_ROWS)
    parser.add_argument("--months", type=int, default=synth.DEFAULT_MONTHS)
    parser.add_argument("--end", type=date.fromisoformat, default=None, help="First day after the last month (YYYY-MM-DD)")
    parser.add_argument("--seed", type=int, default=synth.DEFAULT_SEED)
    parser.add_argument("--invalid-rate", type=float, default=0.05)
    parser.add_argument("--excel-dates", action="store_true", help="Write timestamps as spreadsheet day serials")
    parser.add_argument("--xlsx", action="store_true", help="Write an .xlsx workbook instead of CSV")
    parser.add_argument("--output", type=Path, default=None)
    args = parser.parse_args()

    logging_setup.configure_logging()

    grid = synth.generate_bill_grid(
        rows=args.rows,
        months=args.months,
        end=args.end,
        seed=args.seed,
        excel_dates=args.excel_dates,
        invalid_rate=args.invalid_rate,
    )

    output = args.output or Path("data") / ("bill_sample.xlsx" if args.xlsx else "bill_sample.csv")
    if args.xlsx:
        output.parent.mkdir(parents=True, exist_ok=True)
        pd.DataFrame(grid).to_excel(output, index=False, header=False)
    else:
        synth.write_bill_csv(output, grid)

    logger.info("Wrote %s with %d transaction rows", output, args.rows)
    print(f"Wrote {output} with {args.rows} rows")


if __name__ == "__main__":
    main()
