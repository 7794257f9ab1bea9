"""PACER — Central Configuration via Pydantic Settings."""

import os
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # ── Database ──
    database_url: str = ""

    # ── App ──
    log_level: str = "INFO"
    scheduler_enabled: bool = True
    goal_review_hour: int = 6  # Daily goal review at 6 AM

    # ── Reporting ──
    currency: str = "RON"  # Display only; values are never converted
    top_products_limit: int = 10
    default_date_range: str = "30d"  # 7d | 30d | 90d

    @property
    def effective_database_url(self) -> str:
        """Return PostgreSQL URL if set, otherwise fall back to SQLite."""
        if self.database_url:
            return self.database_url
        # Vercel has a read-only filesystem; use /tmp for SQLite
        if os.environ.get("VERCEL"):
            return "sqlite:////tmp/pacer.db"
        return "sqlite:///./pacer.db"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
