from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vcli.core.config import (
    DEFAULT_SERVERS,
    DEFAULT_TIMEOUT,
    InvalidationSettings,
    clamp_timeout,
)


class VCLIEnvSettings(BaseSettings):
    """Raw invalidation settings read from `VCLI_*` environment variables or `.env`."""

    model_config = SettingsConfigDict(
        env_prefix="VCLI_", env_file=".env", extra="ignore"
    )

    enabled: bool = Field(True, description="Send CLI invalidations at all.")
    servers: str = Field(
        DEFAULT_SERVERS,
        description="Space separated management endpoints (host:port).",
    )
    control_key: str = Field("", description="Shared secret from varnishd -S.")
    timeout: int = Field(
        DEFAULT_TIMEOUT,
        description="Seconds applied to connect and every read/write (minimum 1).",
    )
    method: str = Field("BAN", description="BAN or PURGE.")
    debug: bool = Field(False, description="Emit one diagnostic line per attempt.")
    log_file: str | None = Field(
        None, description="Append diagnostic lines to this file when debug is on."
    )

    @field_validator("timeout", mode="before")
    @classmethod
    def timeout_falls_back_to_default(cls, v: object) -> int:
        return clamp_timeout(v)

    def to_invalidation_settings(self) -> InvalidationSettings:
        return InvalidationSettings.from_raw(
            enabled=self.enabled,
            servers=self.servers,
            control_key=self.control_key,
            timeout=self.timeout,
            method=self.method,
            debug=self.debug,
            log_file=self.log_file,
        )
