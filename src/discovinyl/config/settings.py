"""Application settings loaded from environment variables and .env."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from discovinyl.domain.exceptions import ConfigurationError

# Hey future me - HS256 with a short secret is brute-forceable offline. 32 chars is the
# floor the app refuses to start below, don't lower it to "make dev easier".
MIN_JWT_SECRET_LENGTH = 32


class AuthSettings(BaseSettings):
    """Google login and session token settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    google_client_id: str = Field(default="", description="Google OAuth client id")
    google_client_secret: str = Field(default="", description="Google OAuth client secret")
    google_callback_url: str = Field(
        default="http://localhost:5000/api/auth/google/callback",
        description="Redirect URI registered with Google",
    )
    jwt_secret: str = Field(default="", description="HMAC secret for session tokens")
    jwt_expires_days: int = Field(default=7, ge=1, description="Session token lifetime")


class SheetsSettings(BaseSettings):
    """Google Sheets backing store settings."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_", env_file=".env", extra="ignore"
    )

    sheets_id: str = Field(default="", description="Spreadsheet id")
    service_account_email: str = Field(default="", description="Service account email")
    private_key: str = Field(default="", description="Service account private key (PEM)")
    sheet_name: str = Field(default="Vinyl_Collection", description="Preferred tab name")
    table_name: str = Field(default="Vinyl Collection", description="Named table fallback")

    # Yo, .env files can't hold real newlines so the PEM arrives with literal "\n" pairs.
    # Without this the RSA key fails to load and every sheet call dies with a cryptic error.
    @field_validator("private_key")
    @classmethod
    def _unescape_newlines(cls, value: str) -> str:
        return value.replace("\\n", "\n")


class CacheSettings(BaseSettings):
    """Spreadsheet read cache settings."""

    model_config = SettingsConfigDict(
        env_file=".env", extra="ignore", populate_by_name=True
    )

    enabled: bool = Field(default=True, validation_alias="ENABLE_CACHE")
    ttl_seconds: int = Field(default=300, ge=0, validation_alias="CACHE_TTL")
    invalidation_interval_seconds: int = Field(
        default=1800, ge=1, validation_alias="CACHE_INVALIDATION_INTERVAL"
    )


class MusicBrainzSettings(BaseSettings):
    """MusicBrainz API identification."""

    model_config = SettingsConfigDict(
        env_prefix="MUSICBRAINZ_", env_file=".env", extra="ignore"
    )

    app_name: str = Field(default="DiscoVinylApp")
    app_version: str = Field(default="1.0")
    contact: str = Field(default="https://github.com/disco-vinyl/disco")


class ObservabilitySettings(BaseSettings):
    """Logging output settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_json_format: bool = Field(default=False, description="Emit JSON log lines")


class Settings(BaseSettings):
    """Root application settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = Field(default="Disco API")
    environment: Literal["development", "production", "test"] = Field(
        default="development"
    )
    log_level: str = Field(default="INFO")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000)
    frontend_url: str = Field(default="http://localhost:3000")
    allow_public_read: bool = Field(
        default=False, description="Serve catalog reads without a session token"
    )

    auth: AuthSettings = Field(default_factory=AuthSettings)
    sheets: SheetsSettings = Field(default_factory=SheetsSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    musicbrainz: MusicBrainzSettings = Field(default_factory=MusicBrainzSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    # Listen future me, this is the "refuse to start" gate. The lifespan calls it before
    # anything else, so a half-configured deploy dies at boot with ONE message listing every
    # missing variable instead of 401s and sheet errors trickling in at request time.
    def validate_startup(self) -> None:
        """Validate that all required configuration is present.

        Raises:
            ConfigurationError: If required values are missing or invalid
        """
        required = {
            "GOOGLE_CLIENT_ID": self.auth.google_client_id,
            "GOOGLE_CLIENT_SECRET": self.auth.google_client_secret,
            "JWT_SECRET": self.auth.jwt_secret,
            "GOOGLE_SHEETS_ID": self.sheets.sheets_id,
            "GOOGLE_SERVICE_ACCOUNT_EMAIL": self.sheets.service_account_email,
            "GOOGLE_PRIVATE_KEY": self.sheets.private_key,
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        if len(self.auth.jwt_secret) < MIN_JWT_SECRET_LENGTH:
            raise ConfigurationError(
                f"JWT_SECRET must be at least {MIN_JWT_SECRET_LENGTH} characters long"
            )

        if not 1 <= self.port <= 65535:
            raise ConfigurationError(f"Invalid PORT configuration: {self.port}")


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
