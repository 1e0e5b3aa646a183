from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TOKEN_SIGNING_SECRET = "horder-dev-token-secret-change-me"
DEFAULT_ADMIN_PASSWORD = "admin123"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="HORDER_", extra="ignore")

    app_name: str = "Horder Back Office"
    env: str = "dev"
    api_host: str = "0.0.0.0"
    api_port: int = 5001
    log_level: str = "INFO"

    database_url: str = "sqlite+pysqlite:///./horder.db"

    # Calendar windows (today / this month / custom range) are evaluated here.
    report_timezone: str = "Asia/Ho_Chi_Minh"
    recent_orders_limit: int = Field(default=5, ge=1)

    bootstrap_demo_on_startup: bool = False

    auth_enabled: bool = True
    token_signing_secret: str = DEFAULT_TOKEN_SIGNING_SECRET
    token_ttl_seconds: int = Field(default=7 * 24 * 3600, ge=60)
    default_admin_username: str = "admin"
    default_admin_password: str = DEFAULT_ADMIN_PASSWORD

    def model_post_init(self, __context) -> None:
        if self.env.lower() == "dev":
            return

        insecure_items: list[str] = []
        if self.token_signing_secret == DEFAULT_TOKEN_SIGNING_SECRET:
            insecure_items.append("HORDER_TOKEN_SIGNING_SECRET")
        if self.default_admin_password == DEFAULT_ADMIN_PASSWORD:
            insecure_items.append("HORDER_DEFAULT_ADMIN_PASSWORD")

        if insecure_items:
            raise ValueError(
                "insecure default secrets are not allowed outside dev mode; set env vars: "
                + ", ".join(sorted(insecure_items))
            )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
