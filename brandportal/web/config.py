"""Web-layer configuration and the hardcoded fallbacks used when settings cannot be fetched."""
from pydantic import ConfigDict
from pydantic_settings import BaseSettings

DEFAULT_PUBLIC_SETTINGS = {
    "companyName": "SD Tech Pros",
    "logoPath": None,
    "primaryColor": "#3b82f6",
    "theme": "light",
    "radius": 0.5,
    "siteTitle": "SD Tech Pros Client Portal",
    "siteDescription": "",
    "favicon": None,
}

DEFAULT_FAVICON = "/favicon.ico"


class WebConfig(BaseSettings):
    model_config = ConfigDict(env_prefix="BRANDPORTAL_WEB_", env_file=".env", env_file_encoding="utf-8", extra="ignore")

    base_url: str = "http://localhost:8000"
    api_prefix: str = "/api"
    timeout_seconds: float = 15.0
    read_retries: int = 1
