from functools import lru_cache

from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    database_url: str | None = None
    db_host: str = "localhost"
    db_port: int = 5432
    db_user: str = "food"
    db_password: str = "food"
    db_name: str = "food_delivery"
    db_pool_size: int = 10
    db_pool_timeout: float = 30

    paystack_secret_key: str = ""
    paystack_public_key: str = ""
    paystack_base_url: str = "https://api.paystack.co"

    frontend_url: str = "http://localhost:5173"
    allow_origins: str = ""
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return URL.create(
            "postgresql+psycopg",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        ).render_as_string(hide_password=False)

    @property
    def cors_origins(self) -> list[str]:
        extra = [item.strip() for item in self.allow_origins.split(",") if item.strip()]
        origins = [self.frontend_url, *extra]
        return list(dict.fromkeys(origin for origin in origins if origin))

    @property
    def payment_callback_url(self) -> str:
        return f"{self.frontend_url.rstrip('/')}/payment/callback"


@lru_cache
def get_settings() -> Settings:
    return Settings()
