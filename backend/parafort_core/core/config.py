from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PRODUCTION_ENVIRONMENTS = ("production", "prod", "staging")
REQUIRED_IN_PRODUCTION = (
    "database_url",
    "jwt_secret_key",
    "stripe_secret_key",
    "stripe_publishable_key",
    "stripe_webhook_secret",
    "aws_region",
)
INSECURE_JWT_SECRETS = {"change-me", "changeme", "secret", "local-dev-only-secret"}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "ParaFort Core"
    environment: str = Field(default="development")
    debug: bool = Field(default=False)

    @field_validator("debug", mode="before")
    @classmethod
    def _coerce_debug(cls, v: object) -> bool:
        if isinstance(v, str):
            return v.strip().lower() in ("1", "true", "yes")
        return bool(v)

    database_url: str = Field(default="sqlite+aiosqlite:///./parafort.db")
    redis_url: str = Field(default="")
    frontend_base_url: str = Field(default="https://parafort.com")
    cors_origins: list[str] = Field(default_factory=lambda: ["https://parafort.com", "https://www.parafort.com"])

    jwt_secret_key: str = Field(default="local-dev-only-secret")
    jwt_algorithm: str = Field(default="HS256")
    jwt_access_token_expire_minutes: int = Field(default=60)

    # Stripe
    stripe_secret_key: str = Field(default="")
    stripe_publishable_key: str = Field(default="")
    stripe_webhook_secret: str = Field(default="")

    # Email delivery (SES)
    ses_from_email: str = Field(default="noreply@parafort.com")
    ses_configuration_set: str = Field(default="")
    aws_region: str = Field(default="")
    support_email: str = Field(default="support@parafort.com")

    # Checkout
    verification_code_ttl_minutes: int = Field(default=10)
    verification_max_attempts: int = Field(default=5)
    default_expedited_fee: Decimal = Field(default=Decimal("75"))
    checkout_session_ttl_seconds: int = Field(default=24 * 60 * 60)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in PRODUCTION_ENVIRONMENTS

    @model_validator(mode="after")
    def _require_production_secrets(self) -> "Settings":
        if not self.is_production:
            return self
        missing = sorted(name.upper() for name in REQUIRED_IN_PRODUCTION if not getattr(self, name))
        if missing:
            raise ValueError(f"Missing required settings for {self.environment}: {', '.join(missing)}")
        if self.jwt_secret_key in INSECURE_JWT_SECRETS:
            raise ValueError("JWT_SECRET_KEY is a placeholder; generate a random key for this environment.")
        if self.database_url.startswith("sqlite"):
            raise ValueError(f"DATABASE_URL must point at PostgreSQL in {self.environment}.")
        return self

    @field_validator("ses_from_email", "support_email")
    @classmethod
    def _validate_email_address(cls, v: str) -> str:
        if v and "@" not in v:
            raise ValueError(f"Expected an email address, got: {v!r}")
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
