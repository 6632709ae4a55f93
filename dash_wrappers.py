import logging

import pandas as pd
import plotly.graph_objects as go
import requests

from config import ACTION_COLORS, EQUITY_API_INVESTORS, GLOBAL_PALETTE
from data_loader import fetch_equity_data, list_datasets, load_dataset
from financial_math import filter_timeframe
from portfolio_engine import run_engine
from report_formatting import (
    fmt_dollar_clean,
    fmt_pct_clean,
    historical_stats,
    latest_quarter_stats,
    welcome_lines,
)

logger = logging.getLogger(__name__)

API_PREFIX = "api:"

# ============================================================
# GLOBAL DATA CACHE (Server-Side, keyed by dataset source)
# ============================================================
_DATA_CACHE = {}


def dataset_options(data_dir=None):
    """Dropdown options: bundled JSON datasets first, then live API investors."""
    options = [{"label": name.replace("_", " ").title(), "value": name} for name in list_datasets(data_dir)]
    options += [
        {"label": f"Live API ({investor})", "value": f"{API_PREFIX}{investor}"}
        for investor in EQUITY_API_INVESTORS
    ]
    return options


def default_source(data_dir=None):
    options = dataset_options(data_dir)
    return options[0]["value"] if options else None


def load_raw_transactions(source, data_dir=None):
    if source.startswith(API_PREFIX):
        return fetch_equity_data(source[len(API_PREFIX):])
    return load_dataset(source, data_dir=data_dir)


def get_data(source, data_dir=None):
    """Retrieve cached results for a dataset, computing them if necessary."""
    if not source:
        return None
    if source in _DATA_CACHE:
        return _DATA_CACHE[source]

    result = run_analytics_engine(source, data_dir=data_dir)
    # Failed loads are retried on the next request
    if not result["load_failed"]:
        _DATA_CACHE[source] = result
    return result


def refresh_data(source=None, data_dir=None):
    """Drop cached results (one dataset, or all of them) and recompute."""
    if source is None:
        _DATA_CACHE.clear()
        return None
    _DATA_CACHE.pop(source, None)
    return get_data(source, data_dir=data_dir)


# ============================================================
# CORE: Run Engine Wrapper
# ============================================================
def run_analytics_engine(source, data_dir=None):
    """
    Load one dataset and run the quarterly engine over it.

    A dataset that cannot be loaded produces an empty result with the
    failure recorded in "errors" so pages can show the warning.
    """
    load_errors = []
    try:
        raw = load_raw_transactions(source, data_dir=data_dir)
    except (requests.RequestException, OSError, ValueError) as e:
        logger.error("Could not load dataset %s: %s", source, e)
        raw = []
        load_errors.append(f"Could not load dataset {source}: {e}")

    result = run_engine(raw)
    result["errors"] = load_errors + result["errors"]
    result["source"] = source
    result["source_type"] = "API" if source.startswith(API_PREFIX) else "File"
    result["record_count"] = len(raw)
    result["load_failed"] = bool(load_errors)

    if result["errors"]:
        logger.debug("%s: %d data quality issues", source, len(result["errors"]))
    return result


# ============================================================
# CARDS & TABLES
# ============================================================

def get_welcome(data):
    return welcome_lines(data["investor_name"], data["summary"])


def get_stat_cards(data):
    """(latest quarter cards, historical cards), each [{label, value}]."""
    summary = data["summary"]
    return latest_quarter_stats(summary), historical_stats(summary)


def get_source_summary(data):
    """Input for components.data_source_badge."""
    return {
        "source_type": data["source_type"],
        "source": data["source"],
        "record_count": data["record_count"],
        "used_count": len(data["transactions"]),
        "errors": data["errors"],
    }


def get_quarterly_table_data(data):
    """Display-formatted quarterly ledger, newest quarter first."""
    rows = data["rows"]
    if rows.empty:
        return pd.DataFrame()

    table = pd.DataFrame({
        "Quarter": rows["label"],
        "Begin GAAP": rows["beginning_gaap"].apply(fmt_dollar_clean),
        "Contributions": rows["contribution_dollar"].apply(fmt_dollar_clean),
        "Redemptions (GAAP)": rows["redemption_gaap_dollar"].apply(fmt_dollar_clean),
        "Redemptions (NAV)": rows["redemption_nav_dollar"].apply(fmt_dollar_clean),
        "Income Paid": rows["income_paid_dollar"].apply(fmt_dollar_clean),
        "Income Reinvested": rows["income_reinvested_dollar"].apply(fmt_dollar_clean),
        "Unrealized": rows["unrealized_dollar"].apply(fmt_dollar_clean),
        "Tax": rows["tax_dollar"].apply(fmt_dollar_clean),
        "Other": rows["other_dollar"].apply(fmt_dollar_clean),
        "End GAAP": rows["gaap_end"].apply(fmt_dollar_clean),
        "End NAV": rows["nav_end"].apply(fmt_dollar_clean),
        "Realized (Ann)": rows["realized_rate_annualized"].apply(fmt_pct_clean),
        "Total (Ann)": rows["total_return_rate_annualized"].apply(fmt_pct_clean),
        "Action": rows["action"],
        "Net Flow": rows["net_flow"].apply(fmt_dollar_clean),
    })
    return table.iloc[::-1].reset_index(drop=True)


# ============================================================
# CHART GENERATORS (PLOTLY)
# ============================================================

def _hex_to_rgba(hex_code, alpha=0.2):
    """Helper to convert hex to rgba string."""
    hex_code = hex_code.lstrip('#')
    return f"rgba({int(hex_code[0:2], 16)}, {int(hex_code[2:4], 16)}, {int(hex_code[4:6], 16)}, {alpha})"


def get_balance_flow_chart(data, timeframe="all", theme="light"):
    """Ending GAAP/NAV balance per quarter with net-flow bars."""
    rows = filter_timeframe(data["rows"], timeframe)
    if rows.empty: return go.Figure()

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=rows["label"],
        y=rows["gaap_end"],
        mode='lines',
        fill='tozeroy',
        name='GAAP Balance',
        line=dict(color=GLOBAL_PALETTE[0], width=2),
        fillcolor=_hex_to_rgba(GLOBAL_PALETTE[0], 0.2),
        customdata=rows[["beginning_gaap"]],
        hovertemplate="<b>End</b>: %{y:$,.2f}<br><b>Begin</b>: %{customdata[0]:$,.2f}<extra></extra>"
    ))
    fig.add_trace(go.Scatter(
        x=rows["label"],
        y=rows["nav_end"],
        mode='lines',
        name='NAV Balance',
        line=dict(color=GLOBAL_PALETTE[8], width=2, dash='dot'),
        hovertemplate="<b>NAV</b>: %{y:$,.2f}<extra></extra>"
    ))
    fig.add_trace(go.Bar(
        x=rows["label"],
        y=rows["net_flow"],
        name='Net Flow',
        marker_color=[GLOBAL_PALETTE[4] if v >= 0 else GLOBAL_PALETTE[2] for v in rows["net_flow"]],
        hovertemplate="<b>Net Flow</b>: %{y:$,.2f}<extra></extra>"
    ))

    fig.update_layout(
        yaxis_title="Balance ($)",
        template="plotly_white" if theme == "light" else "plotly_dark",
        margin=dict(l=40, r=20, t=40, b=40),
        hovermode="x unified",
        legend=dict(orientation="h", y=1.1)
    )
    return fig


def get_return_combo_chart(data, timeframe="all", view_mode="dollar", theme="light"):
    """
    Realized return bars coloured by action (Reinvested / Distributed) with a
    total-return line. view_mode "percent" plots annualized rates (x4).
    """
    if view_mode not in ("dollar", "percent"):
        raise ValueError(f"Unsupported view mode: {view_mode}")

    rows = filter_timeframe(data["rows"], timeframe)
    if rows.empty: return go.Figure()

    if view_mode == "dollar":
        realized = rows["income_realized_dollar"]
        total = rows["total_return_dollar"]
        y_title = "Return ($)"
        fmt = "%{y:$,.2f}"
    else:
        realized = rows["realized_rate_annualized"] * 100.0
        total = rows["total_return_rate_annualized"] * 100.0
        y_title = "Annualized Return (%)"
        fmt = "%{y:.2f}%"

    fig = go.Figure()
    for action, color in ACTION_COLORS.items():
        mask = rows["action"] == action
        if not mask.any():
            continue
        fig.add_trace(go.Bar(
            x=rows.loc[mask, "label"],
            y=realized[mask],
            name=f"Realized ({action})",
            marker_color=color,
            hovertemplate=f"<b>Realized</b>: {fmt}<extra>{action}</extra>"
        ))
    fig.add_trace(go.Scatter(
        x=rows["label"],
        y=total,
        mode='lines+markers',
        name='Total Return',
        line=dict(color=GLOBAL_PALETTE[6], width=2),
        hovertemplate=f"<b>Total</b>: {fmt}<extra></extra>"
    ))

    fig.update_layout(
        yaxis_title=y_title,
        template="plotly_white" if theme == "light" else "plotly_dark",
        margin=dict(l=40, r=20, t=40, b=40),
        hovermode="x unified",
        legend=dict(orientation="h", y=1.1),
        xaxis=dict(categoryorder="array", categoryarray=list(rows["label"]))
    )
    return fig
