from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Data-access configuration loaded from environment variables / .env file."""

    app_env: str = Field(default="development", alias="APP_ENV")

    # Database (SQLite via aiosqlite for local dev; any async SQLAlchemy URL works)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./dal_dev.db",
        alias="DATABASE_URL",
    )
    sql_echo: bool = Field(default=False, alias="SQL_ECHO")

    # Ordering direction tokens: "asc" sorts ascending, anything else descending.
    # When strict, only "asc" / "desc" are accepted.
    strict_order_direction: bool = Field(
        default=False, alias="DAL_STRICT_ORDER_DIRECTION",
    )

    log_level: str | None = Field(default=None, alias="LOG_LEVEL")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
        "extra": "ignore",
    }

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

settings = Settings()
