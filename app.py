"""Streamlit entry point for the bill rings explorer."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any

import pandas as pd
import streamlit as st
from billrings import aggregate, chart, config, logging_setup, records, scatter, synth, utils, viz

logger = logging_setup.get_logger("billrings.app")


@st.cache_data(show_spinner=False)
def _load_sample_grid(rows: int, seed: int) -> list[list[Any]]:
    return synth.generate_bill_grid(rows=rows, seed=seed)


@st.cache_data(show_spinner=False)
def _load_uploaded_grid(payload: bytes, name: str) -> list[list[Any]]:
    return records.load_grid(io.BytesIO(payload), suffix=Path(name).suffix or ".csv")


@st.cache_data(show_spinner=False)
def _build_payload(grid: list[list[Any]], strict_header: bool) -> aggregate.BillPayload:
    return aggregate.process_bill_grid(grid, strict_header=strict_header)


def _totals_frame(totals: dict[str, float], currency: str) -> pd.DataFrame:
    frame = pd.DataFrame(
        [{"category": name, "total": value} for name, value in totals.items() if value]
    )
    if frame.empty:
        return frame
    frame = frame.sort_values("total", ascending=False, kind="stable")
    frame["total"] = frame["total"].map(lambda value: utils.format_currency(value, currency))
    return frame


def main() -> None:
    """Render the bill rings Streamlit application."""

    settings = config.load_settings()
    logging_setup.configure_logging(settings.log_level)

    st.set_page_config(page_title="Bill Rings", page_icon="💴", layout="wide")

    sidebar = st.sidebar
    sidebar.header("Data source")
    uploaded = sidebar.file_uploader("Bill export", type=["csv", "xlsx"])
    seed = int(
        sidebar.number_input(
            "Random seed", value=synth.DEFAULT_SEED, min_value=0, step=1, help="Seed for the sample export"
        )
    )
    rows = int(
        sidebar.slider(
            "Sample rows",
            min_value=50,
            max_value=2000,
            value=synth.DEFAULT_ROWS,
            step=50,
            help="Rows in the generated sample when no export is uploaded",
        )
    )

    if uploaded is not None:
        grid = _load_uploaded_grid(uploaded.getvalue(), uploaded.name)
        source_label = uploaded.name
    else:
        grid = _load_sample_grid(rows, seed)
        source_label = f"Sample export ({rows:,} rows, seed {seed})"

    try:
        payload = _build_payload(grid, settings.strict_header)
    except records.HeaderNotFoundError as exc:
        logger.warning("Rejected export %s: %s", source_label, exc)
        st.error(f"Could not find the header row in {source_label}: {exc}")
        return

    st.title("Where the money went, month by month.")
    st.caption(f"{source_label} · {len(payload['records']):,} valid transactions")

    periods = list(payload["periods"])
    if not periods:
        st.info("No valid transactions in this export.")
        return

    period = sidebar.selectbox("Month", options=periods, index=len(periods) - 1)
    top_n = int(sidebar.slider("Top categories", min_value=1, max_value=10, value=settings.top_n))

    descriptor = chart.build_chart_descriptor(
        payload, period, top_n=top_n, split_number=settings.split_number
    )

    chart_col, detail_col = st.columns([1.4, 1], gap="large")
    with chart_col:
        st.plotly_chart(viz.plot_descriptor_preview(descriptor), use_container_width=True)
    with detail_col:
        totals = next(entry for entry in payload["period_totals"] if entry["period"] == period)
        income_tab, expense_tab = st.tabs(["Income", "Expense"])
        with income_tab:
            st.dataframe(_totals_frame(totals["income"], settings.currency), hide_index=True, use_container_width=True)
        with expense_tab:
            st.dataframe(_totals_frame(totals["expense"], settings.currency), hide_index=True, use_container_width=True)

        month_records = payload["periods"][period]
        index = scatter.record_index(month_records)
        if index:
            point_id = st.selectbox(
                "Transaction detail",
                options=list(index),
                format_func=lambda key: f"{utils.format_datetime(index[key].trade_time)} · {index[key].category}",
            )
            st.text(scatter.resolve_tooltip(index, point_id, settings.currency) or "")

    with st.expander("Chart descriptor"):
        st.code(chart.descriptor_to_json(descriptor), language="json")

    st.subheader("Transactions")
    frame = records.records_to_frame(payload["periods"][period])
    st.caption(f"Showing up to 200 rows ({len(frame):,} total)")
    st.dataframe(frame.drop(columns=["id", "direction_key"]).head(200), use_container_width=True)

    sidebar.subheader("Exports")
    sidebar.download_button(
        "Download descriptor JSON",
        data=chart.descriptor_to_json(descriptor),
        file_name=f"bill_rings_{period}.json",
        mime="application/json",
    )


if __name__ == "__main__":
    main()
