"""Settings shared by every environment; the env modules import and override these."""

import os


def _flag(name: str, default: str = "0") -> bool:
    return bool(int(os.getenv(name, default)))


SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "leo_portal"),
}

DEBUG = False
TESTING = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Apply database/schema.sql on startup (idempotent) and optionally seed demo accounts
AUTO_INIT_DB = _flag("AUTO_INIT_DB")
AUTO_SEED_DB = _flag("AUTO_SEED_DB")

# Attendance
ATTENDANCE_RADIUS_METERS = float(os.getenv("ATTENDANCE_RADIUS_METERS", "500"))
OFFLINE_QUEUE_PATH = os.getenv("OFFLINE_QUEUE_PATH", "instance/offline_attendance.json")
PORTAL_BASE_URL = os.getenv("PORTAL_BASE_URL", "http://localhost:5000")
PASSWORD_RESET_MAX_AGE_SECONDS = int(os.getenv("PASSWORD_RESET_MAX_AGE_SECONDS", "3600"))

# Documents
UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "instance/uploads")
MAX_CONTENT_LENGTH = int(os.getenv("MAX_UPLOAD_MB", "16")) * 1024 * 1024

# Mail (Flask-Mail)
MAIL_SERVER = os.getenv("MAIL_SERVER", "smtp.gmail.com")
MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
MAIL_USE_TLS = _flag("MAIL_USE_TLS", "1")
MAIL_USE_SSL = _flag("MAIL_USE_SSL")
MAIL_USERNAME = os.getenv("MAIL_USERNAME")
MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", MAIL_USERNAME or "noreply@leoclub.lk")
MAIL_ENABLED = _flag("MAIL_ENABLED", "1")

# AI proposals and drafts (Gemini)
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
AI_TIMEOUT_SECONDS = float(os.getenv("AI_TIMEOUT_SECONDS", "30"))

# Google Sheet user mirror
GOOGLE_SHEET_ID = os.getenv("GOOGLE_SHEET_ID")
GOOGLE_SERVICE_ACCOUNT_EMAIL = os.getenv("GOOGLE_SERVICE_ACCOUNT_EMAIL")
GOOGLE_PRIVATE_KEY = os.getenv("GOOGLE_PRIVATE_KEY")

# Push notifications (Firebase Cloud Messaging)
FIREBASE_CREDENTIALS_PATH = os.getenv("FIREBASE_CREDENTIALS_PATH")

# Scheduled jobs
ENABLE_SCHEDULER = _flag("ENABLE_SCHEDULER")
SCHEDULER_TIMEZONE = os.getenv("SCHEDULER_TIMEZONE", "Asia/Colombo")
