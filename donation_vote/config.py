import os
from datetime import timedelta
from pathlib import Path
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent  # project root (where wsgi.py is)
load_dotenv(BASE_DIR / ".env")


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def engine_options(database_uri: str) -> dict:
    """Pool settings, plus connect and lock timeouts when the driver is psycopg2."""
    options = {
        "pool_pre_ping": True,
        "pool_timeout": int(os.getenv("DB_POOL_TIMEOUT_SECONDS", "10")),
    }
    if database_uri.startswith(("postgresql", "postgres:")):
        lock_ms = int(os.getenv("DB_LOCK_TIMEOUT_MS", "5000"))
        statement_ms = int(os.getenv("DB_STATEMENT_TIMEOUT_MS", "15000"))
        options["connect_args"] = {
            "connect_timeout": int(os.getenv("DB_CONNECT_TIMEOUT_SECONDS", "5")),
            "options": f"-c lock_timeout={lock_ms} -c statement_timeout={statement_ms}",
        }
    return options


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'donation_vote.db'}")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Every storage call must give up eventually; failures surface as StorageError.
    SQLALCHEMY_ENGINE_OPTIONS = engine_options(SQLALCHEMY_DATABASE_URI)

    # Operator access (trigger source + reporting)
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "jwt-dev-secret")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(
        minutes=int(os.getenv("JWT_ACCESS_TOKEN_EXPIRES_MIN", "30"))
    )
    OPERATOR_ROLES = ("OPERATOR", "SYSTEM_ADMIN")

    # Vote tokens
    TOKEN_EXPIRY_HOURS = int(os.getenv("TOKEN_EXPIRY_HOURS", "24"))
    TOKEN_ISSUE_MAX_ATTEMPTS = int(os.getenv("TOKEN_ISSUE_MAX_ATTEMPTS", "3"))
    VOTE_PAGE_URL = os.getenv("VOTE_PAGE_URL", "http://localhost:5000/vote")
    # Gate: only these resources need a live token; hiding can be switched off
    PROTECTED_RESOURCES = tuple(
        r.strip() for r in os.getenv("PROTECTED_RESOURCES", "vote").split(",") if r.strip()
    )
    HIDE_PROTECTED_RESOURCES = _env_bool("HIDE_PROTECTED_RESOURCES", "true")

    # Mail (SMTP)
    MAIL_SERVER = os.getenv("MAIL_SERVER", "smtp.gmail.com")
    MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
    MAIL_USE_TLS = _env_bool("MAIL_USE_TLS", "true")
    MAIL_USE_SSL = _env_bool("MAIL_USE_SSL", "false")
    MAIL_USERNAME = os.getenv("MAIL_USERNAME")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", MAIL_USERNAME)

    # Email templates
    LINK_EMAIL_SUBJECT = os.getenv("LINK_EMAIL_SUBJECT", "Your one-time voting link (Order #{order_id})")
    LINK_EMAIL_BODY = os.getenv(
        "LINK_EMAIL_BODY",
        "Hi {customer_name},\n\n"
        "Thanks for your purchase! Click the one-time link below to cast your vote:\n\n"
        "{link}\n\n"
        "This link expires in {expiry_hours} hours and can only be used once.",
    )
    CONFIRM_EMAIL_SUBJECT = os.getenv("CONFIRM_EMAIL_SUBJECT", "Vote received - thank you!")
    CONFIRM_EMAIL_BODY = os.getenv(
        "CONFIRM_EMAIL_BODY",
        "Hi {customer_name},\n\nWe received your vote for \"{platform}\". Order #{order_id}.\n\nThanks!",
    )
    NOTIFICATION_EMAIL_ENABLED = _env_bool("NOTIFICATION_EMAIL_ENABLED", "false")
    NOTIFICATION_EMAIL_RECIPIENT = os.getenv("NOTIFICATION_EMAIL_RECIPIENT", "")
    NOTIFICATION_EMAIL_SUBJECT = os.getenv("NOTIFICATION_EMAIL_SUBJECT", "New Vote Submission - Order #{order_id}")
    NOTIFICATION_EMAIL_BODY = os.getenv(
        "NOTIFICATION_EMAIL_BODY",
        "New vote submission received:\n\n"
        "Customer: {customer_name}\n"
        "Email: {customer_email}\n"
        "Platform: {platform}\n"
        "Order ID: {order_id}\n"
        "Submission Date: {submission_date}\n\n"
        "This is an automated notification.",
    )

    SWAGGER = {"title": "Donation Vote API", "uiversion": 3}
