import logging
import os

from dotenv import load_dotenv

# ============================================================
# ENVIRONMENT (SECURE LOAD)
# ============================================================

# Load the .env file immediately so every constant below sees it
load_dotenv()

EQUITY_API_URL = os.environ.get(
    "EQUITY_API_URL",
    "https://acpinvestordashboard-byg9fdazdea0cfhq.westus-01.azurewebsites.net/equity",
)
EQUITY_API_TIMEOUT = float(os.environ.get("EQUITY_API_TIMEOUT", "10"))

# Investor ids offered from the live endpoint, comma separated ("" disables)
EQUITY_API_INVESTORS = [
    i.strip() for i in os.environ.get("EQUITY_API_INVESTORS", "boe").split(",") if i.strip()
]

# Bundled <name>.json datasets, one per investor
DATA_DIR = os.environ.get("DASHBOARD_DATA_DIR", "data")

LOG_LEVEL = os.environ.get("DASHBOARD_LOG_LEVEL", "INFO")

# ============================================================
# RAW TRANSACTION SCHEMA
# ============================================================
AMOUNT_FIELD = "Actual_Transaction_Amount"
TYPE_FIELD = "Transaction_Type"
INVESTOR_FIELD = "Investor"

# First field that parses wins; later fields are fallbacks
DATE_FIELD_PRECEDENCE = ("Effective_Date", "Tran_Date")

# ============================================================
# QUARTER CUTOVER POLICY
# ============================================================
# Earnings posted on or before this day of the month belong to the
# previous quarter's close.
QUARTER_CUTOFF_DAY = 5

# Prefix match, so "-Adj" / " - Adj" variants are included
EARNINGS_TYPE_PREFIXES = (
    "Income Paid",
    "Income Reinvestment",
    "Unrealized Gains/Losses",
)

# ============================================================
# RETURN CONVENTIONS
# ============================================================
# Quarterly rates are annualized as simple rate * 4 (not compounded)
ANNUALIZATION_FACTOR = 4

# Where transaction types nobody recognises end up:
#   "other"    -> tracked separately, excluded from balances and returns
#   "realized" -> folded into realized (paid) income
UNCLASSIFIED_POLICY = os.environ.get("UNCLASSIFIED_POLICY", "other")
UNCLASSIFIED_POLICIES = ("other", "realized")

TIMEFRAMES = ("1yr", "5yr", "all")

# ============================================================
# GLOBAL COLOR PALETTE
# ============================================================
GLOBAL_PALETTE = [
    "#4C6A92",  # steel blue
    "#8C9CB1",  # soft gray-blue
    "#C0504D",  # muted red
    "#D79E9C",  # soft red-gray
    "#9BBB59",  # olive green
    "#C5D6A4",  # light olive
    "#8064A2",  # muted purple
    "#B1A0C7",  # lavender gray
    "#4F81BD",  # corporate blue
    "#A5B5CF",  # cool gray-blue
    "#F2C200",  # muted gold (accent)
    "#D6B656",  # soft gold-gray
]

ACTION_COLORS = {
    "Reinvested": GLOBAL_PALETTE[0],
    "Distributed": GLOBAL_PALETTE[10],
}


def configure_logging(level=None):
    """Attach a single stream handler to the root logger. Entry points only."""
    level = level or LOG_LEVEL
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
