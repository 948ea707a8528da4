"""Model metadata support.

Keeps the registry of model classes by FHIR type name and derives
per-class :class:`ElementInfo` records from the pydantic field definitions.
Everything generic in the framework (validation, builders, the tree walk)
is driven by this metadata instead of per-class code.
"""

from dataclasses import dataclass, field
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    FrozenSet,
    List,
    Optional,
    Tuple,
    Type,
    Union,
    get_args,
    get_origin,
)

from fhirmodel.core.annotations import Binding, Choice, ReferenceTarget, Required, Summary
from fhirmodel.utils.logging import get_logger

if TYPE_CHECKING:
    from fhirmodel.core.model import FHIRModel

logger = get_logger(__name__)

_TYPE_REGISTRY: Dict[str, type] = {}
_ELEMENT_INFO_CACHE: Dict[type, Tuple["ElementInfo", ...]] = {}


@dataclass(frozen=True)
class ElementInfo:
    """Metadata for one element of a model class."""

    name: str
    attr: str
    type: type
    declaring_type: type
    required: bool = False
    repeating: bool = False
    choice: Optional[Choice] = None
    reference_targets: Tuple[str, ...] = ()
    binding: Optional[Binding] = None
    summary: bool = False
    choice_element_names: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_choice(self) -> bool:
        """Return True for choice elements."""
        return self.choice is not None

    def choice_types(self) -> Tuple[type, ...]:
        """Resolve the allowed types of a choice element."""
        if self.choice is None:
            return ()
        return resolve_types(self.choice.types)


def register_type(cls: type) -> None:
    """Register a model class under its FHIR type name."""
    name = getattr(cls, "fhir_type_name")()
    existing = _TYPE_REGISTRY.get(name)
    if existing is not None and existing is not cls:
        logger.debug(
            "model_type_replaced",
            type_name=name,
            previous=f"{existing.__module__}.{existing.__qualname__}",
        )
    _TYPE_REGISTRY[name] = cls


def get_data_type(type_name: str) -> Optional[type]:
    """Return the model class registered under ``type_name``, if any."""
    return _TYPE_REGISTRY.get(type_name)


def get_model_classes() -> List[type]:
    """Return every registered model class."""
    return list(_TYPE_REGISTRY.values())


def get_resource_type(name: str) -> Optional[type]:
    """Return the resource class for a resource type name."""
    from fhirmodel.resources.base import Resource

    cls = _TYPE_REGISTRY.get(name)
    if isinstance(cls, type) and issubclass(cls, Resource):
        return cls
    return None


def is_resource_type(name: str) -> bool:
    """Return True if ``name`` is a FHIR resource type name.

    Resource types without a model class in this package are recognized
    through the ResourceType value set.
    """
    from fhirmodel.types.codes import ResourceTypeCode

    return get_resource_type(name) is not None or name in ResourceTypeCode.codes()


def resolve_types(types: Tuple[Union[type, str], ...]) -> Tuple[type, ...]:
    """Resolve a mix of classes and registered type names into classes."""
    resolved = []
    for t in types:
        if isinstance(t, str):
            cls = _TYPE_REGISTRY.get(t)
            if cls is None:
                raise LookupError(f"Unknown FHIR type name: {t}")
            resolved.append(cls)
        else:
            resolved.append(t)
    return tuple(resolved)


def _unwrap(annotation: Any) -> Tuple[type, bool]:
    """Return the element type of a field annotation and whether it repeats."""
    origin = get_origin(annotation)
    if origin in (tuple, list):
        args = [a for a in get_args(annotation) if a is not Ellipsis]
        return _unwrap(args[0])[0], True
    if origin is Union:
        args = [a for a in get_args(annotation) if a is not type(None)]
        return _unwrap(args[0])
    return annotation, False


def get_element_info(
    model_class: Type["FHIRModel"], name: Optional[str] = None
) -> Any:
    """Return element metadata for ``model_class``.

    Args:
        model_class: A model class
        name: Element name or attribute name; when omitted all elements are
            returned in declaration order

    Returns:
        A tuple of ElementInfo, or the single matching ElementInfo (None when
        the class has no such element)
    """
    infos = _ELEMENT_INFO_CACHE.get(model_class)
    if infos is None:
        infos = _collect_element_info(model_class)
        _ELEMENT_INFO_CACHE[model_class] = infos
    if name is None:
        return infos
    for info in infos:
        if info.name == name or info.attr == name:
            return info
    return None


def _collect_element_info(model_class: Type["FHIRModel"]) -> Tuple[ElementInfo, ...]:
    if not model_class.__pydantic_complete__:
        model_class.model_rebuild()

    declaring: Dict[str, type] = {}
    for base in reversed(model_class.__mro__):
        for attr in getattr(base, "__annotations__", {}):
            declaring.setdefault(attr, base)

    infos = []
    for attr, field_info in model_class.model_fields.items():
        element_type, repeating = _unwrap(field_info.annotation)
        choice = None
        required = summary = False
        reference_targets: Tuple[str, ...] = ()
        binding = None
        for marker in field_info.metadata:
            if isinstance(marker, Required):
                required = True
            elif isinstance(marker, Choice):
                choice = marker
            elif isinstance(marker, ReferenceTarget):
                reference_targets = marker.resource_types
            elif isinstance(marker, Binding):
                binding = marker
            elif isinstance(marker, Summary):
                summary = True
        name = field_info.alias or attr
        choice_names: FrozenSet[str] = frozenset()
        if choice is not None:
            choice_names = frozenset(name + t for t in choice.type_names())
        infos.append(
            ElementInfo(
                name=name,
                attr=attr,
                type=element_type,
                declaring_type=declaring.get(attr, model_class),
                required=required,
                repeating=repeating,
                choice=choice,
                reference_targets=reference_targets,
                binding=binding,
                summary=summary,
                choice_element_names=choice_names,
            )
        )
    return tuple(infos)


def clear_caches() -> None:
    """Forget derived element metadata (used after classes are rebuilt)."""
    _ELEMENT_INFO_CACHE.clear()


def get_element_names(model_class: Type["FHIRModel"]) -> List[str]:
    """Return the FHIR element names of ``model_class`` in declaration order."""
    return [info.name for info in get_element_info(model_class)]


def get_required_elements(model_class: Type["FHIRModel"]) -> List[ElementInfo]:
    """Return the required elements of ``model_class`` in declaration order."""
    return [info for info in get_element_info(model_class) if info.required]


def is_choice_element(model_class: Type["FHIRModel"], name: str) -> bool:
    """Return True if ``name`` is a choice element of ``model_class``."""
    info = get_element_info(model_class, name)
    return info is not None and info.is_choice


def is_repeating_element(model_class: Type["FHIRModel"], name: str) -> bool:
    """Return True if ``name`` is a repeating element of ``model_class``."""
    info = get_element_info(model_class, name)
    return info is not None and info.repeating


def is_required_element(model_class: Type["FHIRModel"], name: str) -> bool:
    """Return True if ``name`` is a required element of ``model_class``."""
    info = get_element_info(model_class, name)
    return info is not None and info.required


def get_choice_element_types(model_class: Type["FHIRModel"], name: str) -> Tuple[type, ...]:
    """Return the allowed types of a choice element, or an empty tuple."""
    info = get_element_info(model_class, name)
    if info is None:
        return ()
    return info.choice_types()


def get_choice_element_name(name: str, type_: type) -> str:
    """Return the serialized name of a choice element for a concrete type.

    ``get_choice_element_name("offset", Duration)`` is ``"offsetDuration"``.
    """
    return name + type_.__name__


def get_choice_element_info(
    model_class: Type["FHIRModel"], type_specific_name: str
) -> Optional[ElementInfo]:
    """Return the choice element a type-suffixed name such as ``timingAge`` belongs to."""
    for info in get_element_info(model_class):
        if info.is_choice and type_specific_name in info.choice_element_names:
            return info
    return None


def get_reference_target_types(model_class: Type["FHIRModel"], name: str) -> Tuple[str, ...]:
    """Return the allowed target resource types of a Reference element."""
    info = get_element_info(model_class, name)
    if info is None:
        return ()
    return info.reference_targets
