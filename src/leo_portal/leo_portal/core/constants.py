"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_HISTORY_LIMIT = 30

EARTH_RADIUS_METERS = 6371000
DEFAULT_ATTENDANCE_RADIUS_METERS = 500

ACTIVE_LEO_THRESHOLD = 3
LEADERSHIP_KEYWORDS = ("president", "secretary", "treasurer", "director")

SYSTEM_ACTOR = "system"
PARTICIPATION_CATEGORY = "participation"

PLACEHOLDER_PHOTO_URL = "https://placehold.co/100x100.png"
DEFAULT_TIMEZONE = "Asia/Colombo"

INCOME_CATEGORIES = ("membership_fees", "donations", "fundraising", "sponsorships", "other")
EXPENSE_CATEGORIES = ("event_costs", "charity_donations", "administrative", "travel", "supplies", "other")

MONTHLY_POINT_FIELDS = (
    "chair_sec_tre_points",
    "oc_points",
    "meeting_points",
    "club_project_points",
    "district_project_points",
    "multiple_project_points",
)

DEFAULT_PASSWORD_RESET_MAX_AGE_SECONDS = 3600
