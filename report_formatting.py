import math

# ============================================================
# NUMBER FORMATTING (presentation only, engine emits raw numbers)
# ============================================================

def _is_missing(x) -> bool:
    if x is None:
        return True
    try:
        return math.isnan(float(x))
    except (TypeError, ValueError):
        return True


def fmt_dollar_clean(x) -> str:
    """1234.5 -> "$1,234.50", -4.71 -> "-$4.71"."""
    if _is_missing(x):
        return "N/A"
    x = float(x)
    sign = "-" if x < 0 else ""
    return f"{sign}${abs(x):,.2f}"


def fmt_pct_clean(x) -> str:
    """Decimal rate to percent: 0.24 -> "24.00%"."""
    if _is_missing(x):
        return "N/A"
    return f"{float(x) * 100:.2f}%"


# ============================================================
# STAT CARDS
# ============================================================

def latest_quarter_stats(summary: dict) -> list:
    """[{label, value}] cards for the most recent quarter."""
    return [
        {"label": "Realized Return (Ann %)", "value": fmt_pct_clean(summary["latest_realized_rate_annualized"])},
        {"label": "Realized Return ($)", "value": fmt_dollar_clean(summary["latest_realized_dollar"])},
        {"label": "Total Return (Ann %)", "value": fmt_pct_clean(summary["latest_total_return_rate_annualized"])},
        {"label": "Total Return ($)", "value": fmt_dollar_clean(summary["latest_total_return_dollar"])},
        {"label": "GAAP Balance", "value": fmt_dollar_clean(summary["latest_gaap_balance"])},
        {"label": "NAV Balance", "value": fmt_dollar_clean(summary["latest_nav_balance"])},
    ]


def historical_stats(summary: dict) -> list:
    """[{label, value}] cards for the life of the investment."""
    return [
        {"label": "Beginning Balance", "value": fmt_dollar_clean(summary["beginning_balance"])},
        {"label": "Realized Return", "value": fmt_dollar_clean(summary["lifetime_realized_dollar"])},
        {"label": "Total Return", "value": fmt_dollar_clean(summary["lifetime_total_return_dollar"])},
        {"label": "Ending GAAP Balance", "value": fmt_dollar_clean(summary["ending_gaap_balance"])},
        {"label": "Ending NAV Balance", "value": fmt_dollar_clean(summary["ending_nav_balance"])},
    ]


def welcome_lines(investor_name: str, summary: dict) -> tuple:
    line1 = f"Welcome {investor_name},"
    if summary.get("latest_label"):
        line2 = f"Here are your {summary['latest_label']} numbers."
    else:
        line2 = "No quarterly activity yet."
    return line1, line2
