import os

from .config import Config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
SQLALCHEMY_DATABASE_URI = Config.SQLALCHEMY_DATABASE_URI
SQLALCHEMY_TRACK_MODIFICATIONS = False
SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True, "pool_recycle": 280}

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL
LOG_FILE = Config.LOG_FILE or "logs/ustabul.log"

AUTO_INIT_DB = Config.AUTO_INIT_DB
AUTO_SEED_DB = Config.AUTO_SEED_DB

SESSION_DAYS = Config.SESSION_DAYS
SESSION_COOKIE_SECURE = True
SESSION_COOKIE_HTTPONLY = True

EMAIL_BACKEND = Config.EMAIL_BACKEND
RESEND_API_KEY = Config.RESEND_API_KEY
EMAIL_FROM = Config.EMAIL_FROM
OTP_TTL_MINUTES = Config.OTP_TTL_MINUTES
OTP_EXPOSE_CODE = False
REQUIRE_EMAIL_VERIFICATION = Config.REQUIRE_EMAIL_VERIFICATION

KAPITAL_BANK_MERCHANT_ID = Config.KAPITAL_BANK_MERCHANT_ID
KAPITAL_BANK_SECRET = Config.KAPITAL_BANK_SECRET
KAPITAL_BANK_API_URL = Config.KAPITAL_BANK_API_URL
PAYMENT_RETURN_URL = Config.PAYMENT_RETURN_URL

UPLOAD_ROOT = Config.UPLOAD_ROOT
MAX_UPLOAD_MB = Config.MAX_UPLOAD_MB
