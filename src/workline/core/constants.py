"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_LATE_GRACE_MINUTES = 5
DEFAULT_ROTATING_MINUTES = 1
DEFAULT_STATIC_HOURS = 24
DEFAULT_POLL_INTERVAL_SECONDS = 60
DEFAULT_HISTORY_DAYS = 7

QR_IMAGE_BOX_SIZE = 10
QR_IMAGE_BORDER = 1
