import os
import urllib.parse


def env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "ustabul-dev-secret"

    # Database (MySQL through mysql-connector)
    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "ustabul")

    _encoded_password = urllib.parse.quote_plus(DB_PASSWORD)
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL") or (
        f"mysql+mysqlconnector://{DB_USER}:{_encoded_password}@{DB_HOST}:{DB_PORT}/{DB_NAME}?charset=utf8mb4"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    AUTO_INIT_DB = env_flag("AUTO_INIT_DB")
    AUTO_SEED_DB = env_flag("AUTO_SEED_DB")

    SESSION_DAYS = int(os.environ.get("SESSION_DAYS", "7"))
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_FILE = os.environ.get("LOG_FILE") or None

    # E-mail: "resend" or "console"
    EMAIL_BACKEND = os.environ.get("EMAIL_BACKEND", "resend")
    RESEND_API_KEY = os.environ.get("RESEND_API_KEY", "")
    EMAIL_FROM = os.environ.get("EMAIL_FROM", "UstaBul <noreply@ustabul.az>")
    OTP_TTL_MINUTES = int(os.environ.get("OTP_TTL_MINUTES", "10"))
    OTP_EXPOSE_CODE = env_flag("OTP_EXPOSE_CODE")
    REQUIRE_EMAIL_VERIFICATION = env_flag("REQUIRE_EMAIL_VERIFICATION")

    # Kapital Bank; empty merchant id means demo mode
    KAPITAL_BANK_MERCHANT_ID = os.environ.get("KAPITAL_BANK_MERCHANT_ID", "")
    KAPITAL_BANK_SECRET = os.environ.get("KAPITAL_BANK_SECRET", "")
    KAPITAL_BANK_API_URL = os.environ.get("KAPITAL_BANK_API_URL", "https://api.kapitalbank.az/v1")
    PAYMENT_RETURN_URL = os.environ.get("PAYMENT_RETURN_URL", "http://localhost:5000/payment/result")

    UPLOAD_ROOT = os.environ.get("UPLOAD_ROOT", "uploads")
    MAX_UPLOAD_MB = int(os.environ.get("MAX_UPLOAD_MB", "5"))
