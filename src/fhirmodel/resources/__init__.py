"""FHIR resource types."""

from fhirmodel.resources.base import DomainResource, Resource
from fhirmodel.resources.plan_definition import PlanDefinition
from fhirmodel.resources.testscript import TestScript

__all__ = ["DomainResource", "PlanDefinition", "Resource", "TestScript"]
