"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads happen here. No module should call os.getenv()
or os.environ.get() directly -- the app lifespan calls get_settings() once and
passes the resulting Settings object into TokenService and the stores.

Design patterns used:
  Immutable value object: Settings is frozen. It is built once at process
      start and shared by reference; request handling never re-reads the
      environment.

  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  @model_validator(mode="after"): cross-field validation after every field is
      resolved. Used for the SECRET_KEY / DATABASE_URL startup checks.

Security notes:
  SECRET_KEY shorter than 32 bytes (256 bits) is rejected outright. HS256
  signing relies on key entropy -- a short key weakens every issued token.

  A missing SECRET_KEY or DATABASE_URL is a hard startup failure in every
  mode. The process refuses to start rather than run with a throwaway key.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, or rankings/.
"""

import logging
from functools import lru_cache

from pydantic import ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("ranker.config")

_MIN_KEY_BYTES = 32


class ConfigurationError(RuntimeError):
    """Raised at startup when the configuration is missing or unsafe."""


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    Environment variable name mapping: field names are uppercased automatically.
    E.g. `secret_key` reads from SECRET_KEY, `database_url` from DATABASE_URL.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # Empty string is the sentinel for "not configured"; the validator below
    # raises, so callers never see "".
    secret_key: str = ""
    database_url: str = ""

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    token_expire_days: int = 7
    jwt_issuer: str = ""
    jwt_audience: str = ""
    # Issuer/audience checks are off unless explicitly enabled.
    validate_issuer: bool = False
    validate_audience: bool = False

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_startup_requirements(self) -> "Settings":
        """Refuse to build a Settings object the service cannot run safely with.

        - SECRET_KEY must be present and at least 32 bytes once UTF-8 encoded.
        - DATABASE_URL must be present.
        - Enabling issuer/audience validation requires the matching value.
        """
        if not self.secret_key:
            raise ValueError("SECRET_KEY is required. Set SECRET_KEY in your environment or .env file.")
        if len(self.secret_key.encode("utf-8")) < _MIN_KEY_BYTES:
            raise ValueError(f"SECRET_KEY must be at least {_MIN_KEY_BYTES} bytes.")
        if not self.database_url:
            raise ValueError("DATABASE_URL is required.")
        if self.token_expire_days <= 0:
            raise ValueError("TOKEN_EXPIRE_DAYS must be positive.")
        if self.validate_issuer and not self.jwt_issuer:
            raise ValueError("VALIDATE_ISSUER is enabled but JWT_ISSUER is empty.")
        if self.validate_audience and not self.jwt_audience:
            raise ValueError("VALIDATE_AUDIENCE is enabled but JWT_AUDIENCE is empty.")
        return self


def load_settings(**overrides) -> Settings:
    """Build Settings from the environment, raising ConfigurationError if invalid.

    Keyword overrides take precedence over environment variables (tests pass
    secret_key / database_url this way).
    """
    try:
        settings = Settings(**overrides)
    except ValidationError as exc:
        messages = "; ".join(err["msg"] for err in exc.errors())
        logger.error("Invalid configuration: %s", messages)
        raise ConfigurationError(messages) from exc
    if not settings.validate_issuer:
        logger.warning("JWT issuer validation is disabled")
    if not settings.validate_audience:
        logger.warning("JWT audience validation is disabled")
    return settings


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return load_settings()
