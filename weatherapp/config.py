"""Application configuration pulled from environment variables via pydantic."""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration (``WEATHERAPP_*`` variables)."""
    model_config = SettingsConfigDict(env_prefix="WEATHERAPP_", extra="ignore")

    openweather_api_key: str | None = None
    openweather_base_url: str = "https://api.openweathermap.org/data/2.5"
    geocoding_url: str = "https://nominatim.openstreetmap.org/search"
    icon_base_url: str = "https://openweathermap.org/img/wn"
    http_timeout_seconds: float = 5.0
    user_agent: str = "weatherapp/0.1"
    concurrent_fetches: bool = True
    log_level: str = "INFO"

    @field_validator("openweather_base_url", "geocoding_url", "icon_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")

    @field_validator("http_timeout_seconds", mode="after")
    @classmethod
    def positive_timeout(cls, v: float) -> float:
        """Reject zero/negative timeouts; every request must be bounded."""
        if v <= 0:
            raise ValueError("http_timeout_seconds must be positive")
        return v


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4, exclude={'openweather_api_key'})}")
