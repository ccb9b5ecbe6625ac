"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_LOCK_TIMEOUT_SECONDS = 5.0
DEFAULT_LIST_LIMIT = 500
LONG_ABSENCE_WORKING_DAYS = Decimal("15")
FULL_DAY = Decimal("1.0")
NO_POLICY_NAME = "No policy"

# Validator messages (errors block, warnings do not)
ERR_INVALID_RANGE = "Invalid date range"
ERR_OVERLAPPING = "Overlapping request"
ERR_NO_WORKING_DAYS = "No working days in range"
ERR_INSUFFICIENT_BALANCE = "Insufficient balance"
WARN_SPANS_YEARS = "Spans two fiscal years"
WARN_START_PASSED = "Start date already passed"
WARN_LONG_ABSENCE = "Long absence: consider splitting the request"

# Audited entities, named after their tables
AUDIT_POLICY = "vacation_policies"
AUDIT_BALANCE = "employee_vacation_balances"
AUDIT_REQUEST = "vacation_requests"
