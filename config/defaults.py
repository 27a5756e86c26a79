"""Default configuration constants for the Presence & Budget Planner."""

import os

# Contract bounds used when a resource has no start/end date
MIN_BOUND = "0000-00-00"
MAX_BOUND = "9999-12-31"

# Share of a resource's cost booked on CHANGE (percent), used by the new-resource form
DEFAULT_RATIO_CHANGE = 30
RATIO_MIN = 0
RATIO_MAX = 100

# Scenario naming
INITIAL_DRAFT_NAME = "Draft Initial"
DRAFT_NAME_PREFIX = "DRAFT-"

# Owner used when the app runs without an authentication front
DEFAULT_OWNER_ID = os.environ.get("PLANNER_OWNER_ID", "local@planner")

# Display
CURRENCY_SYMBOL = "€"
MONTH_LABELS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

# Public holiday import (date.nager.at)
HOLIDAY_API_URL = os.environ.get(
    "PLANNER_HOLIDAY_API_URL", "https://date.nager.at/api/v3/PublicHolidays"
)
HOLIDAY_API_TIMEOUT = 10  # seconds

# Logging
LOG_LEVEL = os.environ.get("PLANNER_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Budget consumption above this share of an envelope is flagged in the dashboard
BUDGET_WARNING_PCT = 90.0
