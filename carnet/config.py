import os


def _csv_env(name: str, default: str):
    raw = os.getenv(name, default)
    return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "carnet-digital-secret-key-change-me")

    SQLALCHEMY_DATABASE_URI = os.getenv("SQLALCHEMY_DATABASE_URI", "sqlite:///carnet.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "carnet-digital-jwt-secret-key-change-me")

    # Sesiones: 7 días, igual que el portal web
    SESSION_TTL_DAYS = int(os.getenv("SESSION_TTL_DAYS", "7"))

    PASSWORD_HISTORY_LIMIT = int(os.getenv("PASSWORD_HISTORY_LIMIT", "10"))
    # "sha256" = digest hex sin sal (compatible con los hashes existentes)
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "sha256")

    EXPIRING_SOON_DAYS = int(os.getenv("EXPIRING_SOON_DAYS", "30"))

    INSTITUTIONAL_EMAIL_DOMAINS = _csv_env("INSTITUTIONAL_EMAIL_DOMAINS", "udp.edu,unipacifico.edu.co")

    CARD_CODE_PREFIX = os.getenv("CARD_CODE_PREFIX", "UPAC-")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
