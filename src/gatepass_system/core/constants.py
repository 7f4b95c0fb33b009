"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEPARTMENT_OPTIONS = (
    "IT",
    "HR",
    "Quality",
    "R&D",
    "Sales and Marketing",
    "Production/Manufacturing",
)

RICO_UNITS = (
    "Bawal",
    "Pathredi",
    "Dharuhera",
    "Chennai",
    "Hosur",
    "Gurugram",
    "Haridwar",
)

OTHER_DEPARTMENT_LABEL = "Other"

PASS_ID_PREFIX = "PASS"
VIP_PASS_ID_PREFIX = "VIP"
VIP_ACCESS_ID_PREFIX = "VIPKEY"
QR_PAYLOAD_PREFIX = "RICO-PASS"

REQUIRED_PASS_FIELDS = ("name", "phone", "personToMeet", "visitType")

ALLOWED_ANALYTICS_RANGES = frozenset({7, 14, 30, 180, 365})
DEFAULT_ANALYTICS_RANGE = 7

HISTORY_MIN_DAYS = 1
HISTORY_MAX_DAYS = 3650

NAME_SUGGESTION_LIMIT = 10
CHECK_VISITOR_SUGGESTION_LIMIT = 8

VIP_LOG_DEFAULT_LIMIT = 30
VIP_LOG_MIN_LIMIT = 1
VIP_LOG_MAX_LIMIT = 200

VIP_DEFAULT_LABEL = "VIP"
VIP_DEFAULT_DEPARTMENT = "IT"
VIP_DEFAULT_UNIT = "Gurugram"
VIP_PHONE_ATTEMPTS = 30

ID_INSERT_MAX_ATTEMPTS = 50
