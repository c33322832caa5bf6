"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
NOTIFICATIONS_LIMIT = 50
LOGIN_HISTORY_LIMIT = 10
RECENT_REVIEWS_LIMIT = 10
LEADERBOARD_LIMIT = 10

OTP_TTL_MINUTES = 10
MIN_PASSWORD_LENGTH = 6

CURRENCY = "AZN"
DEFAULT_COMMISSION_PERCENT = 10.0
COMMISSION_SETTING_KEY = "platform_commission_percent"

# Flat urgency surcharge when an order has no estimated price yet.
FLAT_URGENCY_FEES = {"TODAY": 10.0, "URGENT": 25.0}

DEFAULT_CANCEL_REASON = "İstifadəçi tərəfindən ləğv edildi"

MAX_UPLOAD_MB = 5
UPLOAD_FOLDERS = frozenset({"uploads", "avatars", "orders", "portfolio", "reviews"})
UPLOAD_MIME_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
    "application/pdf": "pdf",
}

MASTER_ANALYTICS_MONTHS = 6
ADMIN_ANALYTICS_MONTHS = 12
ANALYTICS_PERIOD_DAYS = 30
ANALYTICS_TOP_LIMIT = 5
ADMIN_RECENT_REVIEWS_LIMIT = 5
MONTH_LABELS = ("Yan", "Fev", "Mar", "Apr", "May", "İyn", "İyl", "Avq", "Sen", "Okt", "Noy", "Dek")
