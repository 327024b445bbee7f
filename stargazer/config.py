"""
Stargazer Backend — Application Configuration
==============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Values come from environment variables (or a .env file), are validated
       on load, and are exposed through the module-level `settings` singleton.
Who:   Imported by the database layer, the app factory, and the entrypoint.
"""


from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults; a fresh checkout runs against
    ./stars.db without any configuration.
    """

    # ── Database ──────────────────────────────────────────────────────────
    # What: SQLAlchemy async driver name used to build the connection URL
    database_driver: str = Field(
        default="sqlite+aiosqlite",
        description="SQLAlchemy async driver, e.g. sqlite+aiosqlite",
    )

    # What: Path to the database file, or a full URL (its scheme is replaced
    # by database_driver)
    database_uri: str = Field(
        default="./stars.db",
        description="Database file path or connection URL",
    )

    # Pool sizing only applies to server databases; SQLite ignores it.
    db_pool_size: int = Field(default=5, ge=1, le=100)
    db_max_overflow: int = Field(default=10, ge=0, le=50)
    db_pool_pre_ping: bool = Field(default=True)

    # What: Startup connection retry (tenacity)
    # The first connection is retried before the process gives up.
    db_connect_attempts: int = Field(default=3, ge=1, le=20)
    db_connect_wait: float = Field(default=1.0, ge=0, le=60)

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("database_uri")
    @classmethod
    def validate_database_uri(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("database_uri must not be empty")
        return v.strip()

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # DATABASE_URI and database_uri both work
        "extra": "ignore",
    }


# Singleton instance — imported throughout the application
settings = Settings()
