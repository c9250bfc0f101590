import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./rentalcore.db")

# Security - CRITICAL: No default secret key in production
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    import warnings

    warnings.warn(
        "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

# Frontend base URL for redirects
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

# Every row is scoped by tenant; requests without an X-Tenant-ID header use this one
DEFAULT_TENANT_ID = os.getenv("DEFAULT_TENANT_ID", "11111111-1111-1111-1111-111111111111")

# Google Calendar OAuth Configuration
# The redirect URI must match the one registered in the Google Cloud console
GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET")
GOOGLE_REDIRECT_URI = os.getenv(
    "GOOGLE_REDIRECT_URI", "http://localhost:8000/google-calendar/callback"
)

# Fernet key for crew refresh tokens (generate with: python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())")
# When unset, a key is derived from SECRET_KEY
GOOGLE_CALENDAR_ENCRYPTION_KEY = os.getenv("GOOGLE_CALENDAR_ENCRYPTION_KEY")

# IANA zone used for event days, default call windows and human-readable times
CALENDAR_TIMEZONE = os.getenv("CALENDAR_TIMEZONE", "UTC")

# Outbound HTTP timeout for Google APIs (seconds)
GOOGLE_API_TIMEOUT = float(os.getenv("GOOGLE_API_TIMEOUT", "15"))

# CORS origins, comma separated
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", f"{FRONTEND_URL},http://localhost:5173").split(",")
