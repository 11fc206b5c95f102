"""Print the chart descriptor of one month as JSON.

Reads a bill export (or generates the sample export when no path is given)
and prints the descriptor for the requested month, the latest by default.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from billrings import aggregate, chart, config, logging_setup, records, synth

logger = logging_setup.get_logger("billrings.scripts.dump_descriptor")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Dump the chart descriptor for one month")
    parser.add_argument("export", type=Path, nargs="?", default=None, help="CSV or XLSX bill export")
    parser.add_argument("--period", default=None, help="Month key (YYYY-MM); defaults to the latest")
    parser.add_argument("--compact", action="store_true", help="Print JSON without indentation")
    args = parser.parse_args(argv)

    settings = config.load_settings()
    logging_setup.configure_logging(settings.log_level)

    grid = records.load_grid(args.export) if args.export else synth.generate_bill_grid()
    try:
        payload = aggregate.process_bill_grid(grid, strict_header=settings.strict_header)
    except records.HeaderNotFoundError as exc:
        logger.error("Rejected %s: %s", args.export, exc)
        sys.exit(1)
    if not payload["periods"]:
        logger.error("No valid transactions in %s", args.export or "the sample export")
        sys.exit(1)

    period = args.period or list(payload["periods"])[-1]
    try:
        descriptor = chart.build_chart_descriptor(
            payload, period, top_n=settings.top_n, split_number=settings.split_number
        )
    except KeyError:
        logger.error("Unknown period %s; available: %s", period, ", ".join(payload["periods"]))
        sys.exit(1)

    print(chart.descriptor_to_json(descriptor, indent=None if args.compact else 2))


if __name__ == "__main__":
    main()
