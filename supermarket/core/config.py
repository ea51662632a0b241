import os
import logging
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


logger = logging.getLogger(__name__)

class Settings(BaseSettings):
    # --- APP BASICS ---
    app_name: str = "Supermarket POS"
    environment: str = "development"
    log_level: str = "INFO"
    log_json: bool = True

    # --- STORAGE ---
    database_url: str = "sqlite+aiosqlite:///./supermarket.db"
    backup_dir: Path = Field(default=Path("./backup"))
    timezone: str = "Asia/Shanghai"

    # --- BEHAVIOUR ---
    category_cache_ttl_seconds: float = Field(default=300, ge=0)
    auto_backup_days: int = 1
    auto_lock_minutes: int = Field(default=5, ge=0)
    top_selling_products_count: int = Field(default=10, gt=0)

    # --- SECURITY ---
    lock_password: str | None = None


    @field_validator("database_url")
    @classmethod
    def force_async_driver(cls, v: str) -> str:
        # The store only talks to the engine through AsyncSession
        if v.startswith("sqlite:///"):
            return v.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        return v

    def __init__(self, **values):
        super().__init__(**values)

        # Desktop builds keep their data next to the user profile
        user_data = os.environ.get("SUPERMARKET_USER_DATA")

        if user_data:
            logger.info("User data directory detected. Storing backups under it.")
            self.backup_dir = Path(user_data) / "backup"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


    model_config = SettingsConfigDict(
        # System environment variables always override the .env file.
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="allow",
        case_sensitive=False
    )

settings = Settings()
