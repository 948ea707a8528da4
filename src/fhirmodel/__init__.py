"""fhirmodel: an immutable, builder-based object model for HL7 FHIR.

Importing the package loads the bundled data types and resources so that
choice elements and reference checks can resolve types by FHIR name.
"""

from fhirmodel import resources, types  # noqa: F401  (populates the type registry)
from fhirmodel.core import Builder, FHIRModel
from fhirmodel.utils.exceptions import FHIRModelException, ModelValidationError

__version__ = "0.1.0"

__all__ = ["Builder", "FHIRModel", "FHIRModelException", "ModelValidationError", "__version__"]
