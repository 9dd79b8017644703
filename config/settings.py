import os

def env_bool(key, default=False):
    return os.getenv(key, str(default)).lower() in ("1", "true", "yes", "on")

def env_int(key, default):
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default

SECRET_KEY = os.getenv("SECRET_KEY", "dev")

# Per-program audit log files (one JSON object per line). Unset disables file output.
PROGRAM_LOG_DIR = os.getenv("PROGRAM_LOG_DIR", "")

SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = env_int("SMTP_PORT", 587)
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASS = os.getenv("SMTP_PASS", "")
EMAIL_FROM = os.getenv("EMAIL_FROM", "noreply@rosterapp.org")
EMAIL_FROM_NAME = os.getenv("EMAIL_FROM_NAME", "Roster App")
