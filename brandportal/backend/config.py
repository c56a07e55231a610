"""Application configuration."""
from functools import lru_cache
from pydantic_settings import BaseSettings
from pydantic import ConfigDict


class Settings(BaseSettings):
    model_config = ConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")
    app_env: str = "development"
    debug: bool = True
    cors_origins: str = "*"

    database_url: str | None = None
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "brandportal"
    postgres_user: str = "brandportal"
    postgres_password: str = "changeme"

    redis_host: str = "localhost"
    redis_port: int = 6379
    settings_cache_backend: str = "local"  # local|redis
    settings_cache_redis_key: str = "brandportal:settings:version"

    admin_default_username: str = "admin"
    admin_default_email: str = "admin@localhost"
    admin_default_password: str = "changeme"

    jwt_secret: str = "your-jwt-secret-min-32-chars"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60

    upload_dir: str = "/app/storage/uploads"
    upload_url_prefix: str = "/uploads"
    max_upload_mb: int = 5

    default_company_name: str = "SD Tech Pros"
    default_site_title: str = "SD Tech Pros Client Portal"
    default_primary_color: str = "#3b82f6"


@lru_cache
def get_settings() -> Settings:
    return Settings()
