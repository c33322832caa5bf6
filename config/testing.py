SECRET_KEY = "test-secret"

# In-memory SQLite; tables are created on app start
SQLALCHEMY_DATABASE_URI = "sqlite://"
SQLALCHEMY_TRACK_MODIFICATIONS = False

TESTING = True
DEBUG = False
LOG_LEVEL = "WARNING"
LOG_FILE = None

AUTO_INIT_DB = True
AUTO_SEED_DB = False

SESSION_DAYS = 7

EMAIL_BACKEND = "console"
RESEND_API_KEY = ""
EMAIL_FROM = "UstaBul <test@ustabul.az>"
OTP_TTL_MINUTES = 10
OTP_EXPOSE_CODE = True
REQUIRE_EMAIL_VERIFICATION = False

KAPITAL_BANK_MERCHANT_ID = ""
KAPITAL_BANK_SECRET = ""
KAPITAL_BANK_API_URL = "https://api.kapitalbank.az/v1"
PAYMENT_RETURN_URL = "http://localhost/payment/result"

UPLOAD_ROOT = "uploads-test"
MAX_UPLOAD_MB = 5
