# campus_events/core/config.py
import os
from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}

def _default_database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    data_dir = os.path.abspath(os.getenv("DATA_DIR", "./data"))
    os.makedirs(data_dir, exist_ok=True)
    return f"sqlite:///{os.path.join(data_dir, 'events.db')}"

class Settings(BaseModel):
    DATABASE_URL: str = Field(default_factory=_default_database_url)
    SECRET_KEY: str = Field(default_factory=lambda: os.getenv("SECRET_KEY", "CHANGE_ME_SUPER_SECRET"))
    ALGORITHM: str = Field(default_factory=lambda: os.getenv("ALGORITHM", "HS256"))
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default_factory=lambda: int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30")))
    LOG_LEVEL: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    LOG_JSON: bool = Field(default_factory=lambda: _env_bool("LOG_JSON", "false"))
    AUTO_MIGRATE: bool = Field(default_factory=lambda: _env_bool("AUTO_MIGRATE", "true"))
    SEED_DEMO_DATA: bool = Field(default_factory=lambda: _env_bool("SEED_DEMO_DATA", "true"))
    MONTHLY_GROWTH_BUCKETS: int = Field(default_factory=lambda: int(os.getenv("MONTHLY_GROWTH_BUCKETS", "12")))
    TOP_EVENTS_LIMIT: int = Field(default_factory=lambda: int(os.getenv("TOP_EVENTS_LIMIT", "10")))

settings = Settings()
