"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

EARTH_RADIUS_M = 6_371_000
DEFAULT_WORK_START = "08:00"
DEFAULT_TIMEZONE = "Asia/Jakarta"
DEFAULT_HISTORY_LIMIT = 30
DEFAULT_ANNUAL_LEAVE_QUOTA = 12

MONEY_PLACES = Decimal("0.01")
HOURS_PLACES = Decimal("0.01")

LEAVE_ATTENDANCE_TYPE = "Leave (System)"
MANUAL_ATTENDANCE_TYPE = "Manual"
MANUAL_PAYMENT_METHOD = "MANUAL"
GLOBAL_PAYROLL_LOG_LIMIT = 100
