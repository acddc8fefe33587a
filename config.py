import os
from dotenv import load_dotenv
load_dotenv()


def _env_bool(name, default):
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///schoolkpi.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    WTF_CSRF_ENABLED = _env_bool("WTF_CSRF_ENABLED", True)
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    # default page size for paginated listings
    PAGE_SIZE = int(os.getenv("PAGE_SIZE", "20"))
    MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "100"))


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    WTF_CSRF_ENABLED = False
    # no redis in tests: jobs run inline
    REDIS_URL = None
