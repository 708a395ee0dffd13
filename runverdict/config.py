"""Service configuration pulled from environment variables via pydantic."""
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from runverdict.domain import AqiSource
from runverdict.errors import ConfigurationError
from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the morning run verdict."""
    model_config = SettingsConfigDict(env_prefix="RUNVERDICT_", extra="ignore", populate_by_name=True)

    # Netiv HaLamed-Heh
    location_name: str = "Netiv HaLamed-Heh"
    latitude: float = 31.68778
    longitude: float = 34.98361
    timezone: str = "Asia/Jerusalem"
    target_hour: int = Field(default=6, ge=0, le=23)

    greeting_name: str | None = "Nitay"
    aqi_source: AqiSource = AqiSource.AUTO
    air_hourly_vars: list[str] = Field(default_factory=lambda: ["pm2_5", "pm10", "us_aqi"])
    weather_hourly_vars: list[str] = Field(
        default_factory=lambda: ["temperature_2m", "relative_humidity_2m", "wind_speed_10m"]
    )
    forecast_source: str = "open_meteo"
    forecast_days: int = Field(default=2, ge=1, le=7)
    http_timeout_seconds: float = 10.0
    allow_partial_upstream: bool = False

    ntfy_base_url: str = "https://ntfy.sh"
    ntfy_topic: str | None = Field(
        default=None,
        validation_alias=AliasChoices("RUNVERDICT_NTFY_TOPIC", "NTFY_TOPIC"),
    )
    ntfy_title: str = "Morning run"
    ntfy_click_url: str | None = "https://chat.openai.com"
    ntfy_priority: int = Field(default=5, ge=1, le=5)

    api_key: str | None = None
    log_level: str = "INFO"

    @field_validator("ntfy_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")

    @property
    def tzinfo(self) -> ZoneInfo:
        """The configured zone. Names the tz database does not know raise ConfigurationError."""
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigurationError(f"Unknown timezone '{self.timezone}'") from exc


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4)}")
