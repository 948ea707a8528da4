"""Configuration module for the FHIR object model."""

from fhirmodel.config.base import ModelSettings
from fhirmodel.config.loader import get_settings, reload_settings

__all__ = ["ModelSettings", "get_settings", "reload_settings"]
