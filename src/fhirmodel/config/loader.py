"""Configuration loader."""

from functools import lru_cache

from fhirmodel.config.base import ModelSettings


@lru_cache()
def get_settings() -> ModelSettings:
    """Get cached settings instance."""
    return ModelSettings()


def reload_settings() -> ModelSettings:
    """Drop the cached settings and read the environment again."""
    get_settings.cache_clear()
    return get_settings()
