import os

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}

APP_ENV = os.getenv("APP_ENV", "development")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./edu.db")

SESSION_SECRET_KEY = os.getenv("SESSION_SECRET_KEY", "change-me")
SESSION_ALGORITHM = os.getenv("SESSION_ALGORITHM", "HS256")
SESSION_LIFETIME_HOURS = int(os.getenv("SESSION_LIFETIME_HOURS", "24"))
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "session")
SESSION_COOKIE_SECURE = _get_bool(os.getenv("SESSION_COOKIE_SECURE"), default=False)

BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

# Well-known first-run admin. The password must be changed with
# `python -m portal.manage set-password` after the first start.
BOOTSTRAP_ADMIN_EMAIL = os.getenv("BOOTSTRAP_ADMIN_EMAIL", "admin@edu.com")
BOOTSTRAP_ADMIN_PASSWORD = os.getenv("BOOTSTRAP_ADMIN_PASSWORD", "admin123")
BOOTSTRAP_ADMIN_NAME = os.getenv("BOOTSTRAP_ADMIN_NAME", "Admin")

def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and SESSION_SECRET_KEY == "change-me":
        raise RuntimeError("SESSION_SECRET_KEY must be set in production.")
