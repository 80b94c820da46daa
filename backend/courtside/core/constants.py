# backend/courtside/core/constants.py
"""
Application-wide constants for the Courtside scheduling engine.
"""

BRAND_NAME = "Courtside"

API_TITLE = f"{BRAND_NAME} Scheduling API"
API_DESCRIPTION = "Court availability, bookings, blocks and monthly passes"
API_VERSION = "1.0.0"

# Grid
SLOT_MINUTES = 30
ALIGNED_MINUTES = (0, 30)

# Recurrence limits
MAX_BOOKING_REPEAT_WEEKS = 3
MAX_BLOCK_REPEAT_WEEKS = 52
MAX_ADMIN_BOOKING_REPEAT_WEEKS = 52

# Monthly pass request window (days before the first day of next month)
PASS_REQUEST_OPENS_DAYS = 14
PASS_OPEN_TO_ALL_DAYS = 7

# Calendar defaults (0 = Sunday ... 6 = Saturday)
ALL_WEEKDAYS = (0, 1, 2, 3, 4, 5, 6)
DEFAULT_OPENING_TIME = "08:00"
DEFAULT_CLOSING_TIME = "23:00"

HOLIDAY_CLOSED_NOTICE = "Holiday: closed"
HOLIDAY_SPECIAL_HOURS_NOTICE = "Holiday with special hours"
NOTICE_SEPARATOR = " • "

# Availability alerts
MIN_ALERT_DURATION_MINUTES = 30
ALERT_BATCH_SIZE = 50
