"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_ACCESS_TOKEN_TTL_SECONDS = 60 * 60 * 24
DEFAULT_REFRESH_TOKEN_TTL_SECONDS = 60 * 60 * 24 * 7
JWT_ALGORITHM = "HS256"

MIN_PASSWORD_LENGTH = 6
MIN_FULL_NAME_LENGTH = 2

NO_SHIFT_LABEL = "No Shift"
NO_RATE_LABEL = "N/A"
OFF_DAY_NOTE = "outside working days"

WORKING_DAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)
