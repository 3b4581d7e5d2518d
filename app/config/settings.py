from pathlib import Path

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL

REQUIRED_STRAVA_SETTINGS = {
    "strava_refresh_token": "STRAVA_REFRESH_TOKEN",
    "strava_client_id": "STRAVA_CLIENT_ID",
    "strava_client_secret": "STRAVA_CLIENT_SECRET",
    "strava_club_id": "STRAVA_CLUB_ID",
}


def build_database_url(
    *,
    user: str,
    password: str,
    host: str,
    port: int,
    name: str,
) -> str:
    """Build a database URL from individual connection parameters.

    Credentials are escaped, so passwords may contain URL delimiters.
    Falls back to a local SQLite file when no database name is configured.

    ⚠️ WARNING: SQLite is meant for local development only.
    Set DATABASE_URL or the DB_* variables to use PostgreSQL.
    """
    if name:
        db_url = URL.create(
            drivername="postgresql+psycopg2",
            username=user or None,
            password=password or None,
            host=host or None,
            port=port,
            database=name,
        )
        logger.info(f"Using database assembled from DB_* settings: host={host} port={port} name={name}")
        return db_url.render_as_string(hide_password=False)

    db_path = Path(__file__).parent.parent.parent / "club_activities.db"
    db_url = f"sqlite:///{db_path.resolve()}"
    logger.warning(
        f"⚠️ Using SQLite database (LOCAL DEV ONLY): {db_url}\n"
        "⚠️ Set DATABASE_URL or DB_NAME/DB_USER/DB_PASSWORD/DB_HOST/DB_PORT to use PostgreSQL."
    )
    return db_url


class Settings(BaseSettings):
    strava_access_token: str = Field(default="", validation_alias="STRAVA_ACCESS_TOKEN")
    strava_refresh_token: str = Field(default="", validation_alias="STRAVA_REFRESH_TOKEN")
    strava_client_id: str = Field(default="", validation_alias="STRAVA_CLIENT_ID")
    strava_client_secret: str = Field(default="", validation_alias="STRAVA_CLIENT_SECRET")
    strava_club_id: str = Field(default="", validation_alias="STRAVA_CLUB_ID")
    strava_api_base_url: str = Field(
        default="https://www.strava.com/api/v3",
        validation_alias="STRAVA_API_BASE_URL",
    )
    strava_token_url: str = Field(
        default="https://www.strava.com/oauth/token",
        validation_alias="STRAVA_TOKEN_URL",
    )
    activities_per_page: int = Field(default=200, validation_alias="ACTIVITIES_PER_PAGE")
    request_timeout_seconds: float = Field(default=15.0, validation_alias="REQUEST_TIMEOUT_SECONDS")

    database_url: str = Field(default="", validation_alias="DATABASE_URL")
    db_user: str = Field(default="", validation_alias="DB_USER")
    db_password: str = Field(default="", validation_alias="DB_PASSWORD")
    db_host: str = Field(default="localhost", validation_alias="DB_HOST")
    db_port: int = Field(default=5432, validation_alias="DB_PORT")
    db_name: str = Field(default="", validation_alias="DB_NAME")

    sync_interval_minutes: int = Field(default=15, validation_alias="SYNC_INTERVAL_MINUTES")
    sync_on_startup: bool = Field(default=False, validation_alias="SYNC_ON_STARTUP")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")
    log_json: bool = Field(default=False, validation_alias="LOG_JSON")

    host: str = Field(default="127.0.0.1", validation_alias="HOST")
    port: int = Field(default=3000, validation_alias="PORT")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(sorted(valid_levels))}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @model_validator(mode="after")
    def warn_missing_strava_settings(self) -> "Settings":
        """Warn once about missing Strava settings.

        Empty values are allowed so the service can start for local
        development; syncing will fail until they are set.
        """
        missing = [env for field, env in REQUIRED_STRAVA_SETTINGS.items() if not getattr(self, field)]
        if missing:
            logger.warning(f"⚠️ {', '.join(missing)} not set; club activity sync will not work until they are.")
        return self

    @field_validator("activities_per_page")
    @classmethod
    def validate_per_page(cls, value: int) -> int:
        if not 1 <= value <= 200:
            raise ValueError(f"ACTIVITIES_PER_PAGE must be between 1 and 200, got {value}")
        return value

    @model_validator(mode="after")
    def resolve_database_url(self) -> "Settings":
        if self.database_url:
            logger.info("Using DATABASE_URL from environment")
            return self
        self.database_url = build_database_url(
            user=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            name=self.db_name,
        )
        return self


settings = Settings()
