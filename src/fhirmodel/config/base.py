"""Base configuration settings."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ModelSettings(BaseSettings):
    """Object model settings.

    Values are read from the environment with the ``FHIR_MODEL_`` prefix,
    e.g. ``FHIR_MODEL_CHECK_REFERENCE_TYPES=false``.
    """

    model_config = SettingsConfigDict(
        env_prefix="FHIR_MODEL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Validation
    check_control_chars: bool = Field(
        default=True,
        description="Reject strings containing control characters below U+0020",
    )
    check_reference_types: bool = Field(
        default=True,
        description="Check Reference values against the allowed target resource types",
    )

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"  # console or json

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate the log renderer name."""
        if v not in ("console", "json"):
            raise ValueError("log_format must be 'console' or 'json'")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize the log level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level
