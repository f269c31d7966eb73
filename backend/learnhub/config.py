import os


def _normalize_database_url(url: str) -> str:
    # Render/Heroku sometimes provide postgres:// which SQLAlchemy expects as postgresql://
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


def _int_env(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


class Config:
    # Base directory of the backend (one level above this `learnhub` package)
    BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    INSTANCE_DIR = os.path.join(BACKEND_DIR, "instance")

    LEARNHUB_ENV = (os.getenv("LEARNHUB_ENV", "dev") or "dev").strip().lower()
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")

    _default_sqlite_path = os.path.join(INSTANCE_DIR, "learnhub.db").replace("\\", "/")
    _db_url = os.getenv("SQLALCHEMY_DATABASE_URI") or os.getenv("DATABASE_URL") or f"sqlite:///{_default_sqlite_path}"
    SQLALCHEMY_DATABASE_URI = _normalize_database_url(_db_url)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # CORS: comma-separated origins for the web client
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")

    LOG_LEVEL = (os.getenv("LOG_LEVEL", "INFO") or "INFO").strip().upper()

    JWT_TTL_SECONDS = _int_env("JWT_TTL_SECONDS", 60 * 60 * 24 * 7)
    PROMOTION_COOLDOWN_DAYS = _int_env("PROMOTION_COOLDOWN_DAYS", 30)

    # Transactional email over an HTTP mail API. Unset URL disables email.
    MAIL_API_URL = os.getenv("MAIL_API_URL", "")
    MAIL_API_KEY = os.getenv("MAIL_API_KEY", "")
    MAIL_FROM = os.getenv("MAIL_FROM", "no-reply@learnhub.local")

    AUTO_CREATE_TABLES = LEARNHUB_ENV not in ("prod", "production")


def is_production(env: str) -> bool:
    return (env or "").strip().lower() in ("prod", "production")
