from .config import Config, env_flag

SECRET_KEY = Config.SECRET_KEY
SQLALCHEMY_DATABASE_URI = Config.SQLALCHEMY_DATABASE_URI
SQLALCHEMY_TRACK_MODIFICATIONS = False

DEBUG = True
LOG_LEVEL = "DEBUG"
LOG_FILE = Config.LOG_FILE

# Create tables on startup (idempotent) and optionally load demo data
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "1")

SESSION_DAYS = Config.SESSION_DAYS

EMAIL_BACKEND = "console" if not Config.RESEND_API_KEY else Config.EMAIL_BACKEND
RESEND_API_KEY = Config.RESEND_API_KEY
EMAIL_FROM = Config.EMAIL_FROM
OTP_TTL_MINUTES = Config.OTP_TTL_MINUTES
OTP_EXPOSE_CODE = env_flag("OTP_EXPOSE_CODE", "1")
REQUIRE_EMAIL_VERIFICATION = Config.REQUIRE_EMAIL_VERIFICATION

KAPITAL_BANK_MERCHANT_ID = Config.KAPITAL_BANK_MERCHANT_ID
KAPITAL_BANK_SECRET = Config.KAPITAL_BANK_SECRET
KAPITAL_BANK_API_URL = Config.KAPITAL_BANK_API_URL
PAYMENT_RETURN_URL = Config.PAYMENT_RETURN_URL

UPLOAD_ROOT = Config.UPLOAD_ROOT
MAX_UPLOAD_MB = Config.MAX_UPLOAD_MB
