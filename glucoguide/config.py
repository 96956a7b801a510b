import os


def normalize_database_url(url: str) -> str:
    if url.startswith("postgres://"):
        return "postgresql+psycopg://" + url[len("postgres://") :]
    if url.startswith("postgresql://"):
        return "postgresql+psycopg://" + url[len("postgresql://") :]
    return url


def env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
    SQLALCHEMY_DATABASE_URI = normalize_database_url(
        os.getenv("DATABASE_URL", "sqlite:///dev.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    # Day boundaries for the meal ledger and streaks are evaluated in this zone.
    APP_TIME_ZONE = os.getenv("APP_TIME_ZONE", "UTC")

    SEED_REFERENCE_FOODS = env_flag("SEED_REFERENCE_FOODS", "true")
    REFERENCE_FOODS_URL = os.getenv("REFERENCE_FOODS_URL")
    REFERENCE_FOODS_TIMEOUT = float(os.getenv("REFERENCE_FOODS_TIMEOUT", "8.0"))

    LEADERBOARD_DEFAULT_LIMIT = int(os.getenv("LEADERBOARD_DEFAULT_LIMIT", "20"))
