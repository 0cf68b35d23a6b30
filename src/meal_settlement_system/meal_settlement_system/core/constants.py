"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_CANCELLATION_CUTOFF_HOUR = 8
DEFAULT_CANCELLATION_CUTOFF_MINUTE = 0

ZERO_AMOUNT = Decimal("0.00")
MONEY_QUANTUM = Decimal("0.01")

REFUND_DESCRIPTION = "Refund for cancelled meals ({count} pcs.)"

MYSQL_DUPLICATE_KEY_ERRNO = 1062
