import pandas as pd

from config import (
    ANNUALIZATION_FACTOR,
    EARNINGS_TYPE_PREFIXES,
    QUARTER_CUTOFF_DAY,
    TIMEFRAMES,
    UNCLASSIFIED_POLICIES,
    UNCLASSIFIED_POLICY,
)


# ============================================================
# CONFIG / CONSTANTS
# ============================================================

# Prefix -> category. First match wins, so "Redemption - NAV" must come
# before the generic "Redemption".
CATEGORY_RULES = (
    ("Contribution", "contribution"),
    ("Transfer In", "contribution"),
    ("Equity Conversion - from", "contribution"),
    ("Transfer Out", "redemption_gaap"),
    ("Redemption - NAV", "redemption_nav"),
    ("Redemption", "redemption_gaap"),
    ("Income Paid", "income_paid"),
    ("Income Reinvestment", "income_reinvested"),
    ("Unrealized Gains/Losses", "unrealized"),
    ("Tax Increase/Decrease", "tax"),
)

CATEGORIES = (
    "contribution",
    "redemption_gaap",
    "redemption_nav",
    "income_paid",
    "income_reinvested",
    "unrealized",
    "tax",
    "other",
)

REINVESTED = "Reinvested"
DISTRIBUTED = "Distributed"

# ------------------------------------------------------------
# Classification
# ------------------------------------------------------------

def match_category(transaction_type: str):
    """Category from CATEGORY_RULES, or None when no rule matches."""
    label = (transaction_type or "").strip()
    for prefix, category in CATEGORY_RULES:
        if label.startswith(prefix):
            return category
    return None


def classify_transaction(transaction_type: str, unclassified_policy: str = UNCLASSIFIED_POLICY) -> str:
    """
    Map a ledger label to exactly one category.

    Unknown labels go to "other" (kept out of balances and returns) or, under
    the "realized" policy, are counted as paid income.
    """
    if unclassified_policy not in UNCLASSIFIED_POLICIES:
        raise ValueError(
            f"Unsupported unclassified policy {unclassified_policy!r}; "
            f"expected one of {UNCLASSIFIED_POLICIES}"
        )
    category = match_category(transaction_type)
    if category is not None:
        return category
    return "income_paid" if unclassified_policy == "realized" else "other"


def unclassified_types(tx: pd.DataFrame) -> list:
    """Distinct transaction types that no rule recognises, sorted."""
    if tx.empty:
        return []
    types = tx["transaction_type"].drop_duplicates()
    return sorted(t for t in types if match_category(t) is None)


def is_earnings_type(transaction_type: str, earnings_prefixes=EARNINGS_TYPE_PREFIXES) -> bool:
    label = (transaction_type or "").strip()
    return any(label.startswith(p) for p in earnings_prefixes)


# ------------------------------------------------------------
# Quarter math
# ------------------------------------------------------------

def calendar_quarter(date) -> tuple:
    """(year, quarter) of a date, quarter in 1..4."""
    return date.year, (date.month - 1) // 3 + 1


def previous_quarter(year: int, quarter: int) -> tuple:
    if quarter == 1:
        return year - 1, 4
    return year, quarter - 1


def quarter_label(year: int, quarter: int) -> str:
    return f"{year} Q{quarter}"


def effective_quarter(
    date,
    transaction_type: str,
    cutoff_day: int = QUARTER_CUTOFF_DAY,
    earnings_prefixes=EARNINGS_TYPE_PREFIXES,
) -> tuple:
    """
    Calendar quarter of `date`, moved back one quarter for earnings postings
    dated on or before `cutoff_day` of the month. Capital movements never move.
    """
    year, quarter = calendar_quarter(date)
    if date.day <= cutoff_day and is_earnings_type(transaction_type, earnings_prefixes):
        return previous_quarter(year, quarter)
    return year, quarter


def bucket_transactions(
    tx: pd.DataFrame,
    cutoff_day: int = QUARTER_CUTOFF_DAY,
    earnings_prefixes=EARNINGS_TYPE_PREFIXES,
):
    """
    Group normalized transactions by effective quarter.

    Returns (buckets, keys): buckets maps (year, quarter) -> DataFrame of that
    quarter's transactions, keys lists the populated quarters ascending.
    """
    if tx.empty:
        return {}, []

    quarters = [
        effective_quarter(d, t, cutoff_day, earnings_prefixes)
        for d, t in zip(pd.to_datetime(tx["date"]), tx["transaction_type"])
    ]
    keyed = tx.assign(
        year=[y for y, _ in quarters],
        quarter=[q for _, q in quarters],
    )

    buckets = {
        (int(y), int(q)): group.drop(columns=["year", "quarter"]).reset_index(drop=True)
        for (y, q), group in keyed.groupby(["year", "quarter"], sort=True)
    }
    keys = sorted(buckets)
    return buckets, keys


# ------------------------------------------------------------
# Rates
# ------------------------------------------------------------

def annualize(rate: float, factor: int = ANNUALIZATION_FACTOR) -> float:
    """Simple annualization of a quarterly rate: rate * 4. Never compounded."""
    return rate * factor


def quarterly_rate(dollars: float, denominator: float) -> float:
    """dollars / denominator, defined as 0 when the denominator is not positive."""
    if denominator <= 0:
        return 0.0
    return dollars / denominator


# ------------------------------------------------------------
# Quarterly aggregation (single forward scan)
# ------------------------------------------------------------

def aggregate_quarters(buckets: dict, keys, unclassified_policy: str = UNCLASSIFIED_POLICY) -> list:
    """
    Reduce each quarter's transactions to one row, carrying the GAAP balance
    and the cumulative unrealized gain from one quarter to the next.

      gaap_end   = gaap_begin + contributions + reinvested income - GAAP redemptions
      cum_unreal += unrealized - NAV redemptions
      nav_end    = gaap_end + cum_unreal

    Rates use the quarter's opening GAAP balance as denominator.
    """
    rows = []
    gaap_balance = 0.0
    cumulative_unrealized = 0.0

    for period, key in enumerate(keys, start=1):
        year, quarter = key
        group = buckets[key]

        categories = group["transaction_type"].map(
            lambda t: classify_transaction(t, unclassified_policy)
        )
        sums = group["amount"].groupby(categories).sum().reindex(CATEGORIES, fill_value=0.0)

        def total(category):
            return float(sums[category])

        contribution = total("contribution")
        redemption_gaap = total("redemption_gaap")
        redemption_nav = total("redemption_nav")
        income_paid = total("income_paid")
        income_reinvested = total("income_reinvested")
        unrealized = total("unrealized")

        beginning_gaap = gaap_balance
        beginning_nav = gaap_balance + cumulative_unrealized

        realized = income_paid + income_reinvested
        total_return = realized + unrealized

        gaap_end = beginning_gaap + contribution + income_reinvested - redemption_gaap
        cumulative_unrealized += unrealized - redemption_nav
        nav_end = gaap_end + cumulative_unrealized

        denominator = beginning_gaap if beginning_gaap > 0 else 0.0
        realized_rate = quarterly_rate(realized, denominator)
        total_return_rate = quarterly_rate(total_return, denominator)

        capital_flow = contribution - redemption_gaap - redemption_nav

        rows.append({
            "period": period,
            "label": quarter_label(year, quarter),
            "year": year,
            "quarter": quarter,
            "beginning_gaap": beginning_gaap,
            "beginning_nav": beginning_nav,
            "contribution_dollar": contribution,
            "redemption_gaap_dollar": redemption_gaap,
            "redemption_nav_dollar": redemption_nav,
            "income_paid_dollar": income_paid,
            "income_reinvested_dollar": income_reinvested,
            "income_realized_dollar": realized,
            "unrealized_dollar": unrealized,
            "tax_dollar": total("tax"),
            "other_dollar": total("other"),
            "total_return_dollar": total_return,
            "gaap_end": gaap_end,
            "nav_end": nav_end,
            "denominator": denominator,
            "realized_rate": realized_rate,
            "total_return_rate": total_return_rate,
            "realized_rate_annualized": annualize(realized_rate),
            "total_return_rate_annualized": annualize(total_return_rate),
            "action": REINVESTED if (categories == "income_reinvested").any() else DISTRIBUTED,
            "net_flow": capital_flow - income_paid,
            "capital_flow": capital_flow,
            "transaction_count": int(len(group)),
        })

        gaap_balance = gaap_end

    return rows


# ------------------------------------------------------------
# Timeframe windows (chart toggles)
# ------------------------------------------------------------

def filter_timeframe(rows: pd.DataFrame, timeframe: str = "all") -> pd.DataFrame:
    """
    "1yr": last four quarters (all of them if fewer).
    "5yr": quarters in the latest year and the four before it.
    "all": everything.
    """
    if timeframe not in TIMEFRAMES:
        raise ValueError(f"Unsupported timeframe: {timeframe}")
    if timeframe == "all" or rows.empty:
        return rows
    if timeframe == "1yr":
        return rows.tail(4)

    latest_year = rows["year"].max()
    return rows[rows["year"] >= latest_year - 4]
