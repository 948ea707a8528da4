"""Generic builder for model types.

A Builder stages element values and materializes a validated immutable
instance on :meth:`Builder.build`::

    related = (
        RelatedAction.builder("step-1", ActionRelationshipType.AFTER)
        .offset(Duration.builder().value(30).unit("min").build())
        .build()
    )

Builders are not thread-safe; confine each one to a single thread.
"""

from typing import Any, Callable, Dict, Generic, List, Type, TypeVar

from fhirmodel.core import model_support
from fhirmodel.utils.exceptions import FHIRModelException
from fhirmodel.utils.logging import get_logger

logger = get_logger(__name__)

M = TypeVar("M")


class Builder(Generic[M]):
    """Mutable accumulator for the elements of one model type.

    Element setters are generated from the type's metadata and accessed as
    attributes; each returns the builder for chaining. For repeating
    elements a single list or tuple argument replaces the collection, any
    other arguments are appended.
    """

    def __init__(self, model_class: Type[M], *required: Any, **fields: Any):
        """Initialize the builder.

        Args:
            model_class: Model type to build
            *required: Values for the required elements, in declaration order
            **fields: Further elements, by attribute or FHIR name

        Raises:
            TypeError: If more positional values are given than the type has
                required elements
        """
        self._model_class = model_class
        self._infos = {info.attr: info for info in model_support.get_element_info(model_class)}
        self._aliases = {info.name: info.attr for info in self._infos.values()}
        self._values: Dict[str, Any] = {}

        required_infos = model_support.get_required_elements(model_class)
        if len(required) > len(required_infos):
            raise TypeError(
                f"{model_class.__name__}.builder() takes {len(required_infos)} "
                f"required values but {len(required)} were given"
            )
        for info, value in zip(required_infos, required):
            self._set(info.attr, value)
        self.update(**fields)

    @property
    def model_class(self) -> Type[M]:
        """Model type this builder produces."""
        return self._model_class

    def _resolve(self, name: str) -> str:
        if name in self._infos:
            return name
        if name in self._aliases:
            return self._aliases[name]
        raise AttributeError(
            f"{self._model_class.__name__} has no element named '{name}'"
        )

    def _set(self, attr: str, value: Any) -> None:
        if self._infos[attr].repeating:
            if value is None:
                self._values[attr] = []
            elif isinstance(value, (list, tuple)):
                self._values[attr] = list(value)
            else:
                self._values[attr] = [value]
        elif value is None:
            self._values.pop(attr, None)
        else:
            self._values[attr] = value

    def _append(self, attr: str, values: Any) -> None:
        self._values.setdefault(attr, []).extend(values)

    def __getattr__(self, name: str) -> Callable[..., "Builder[M]"]:
        if name.startswith("_"):
            raise AttributeError(name)
        attr = self._resolve(name)
        repeating = self._infos[attr].repeating

        def setter(*values: Any) -> "Builder[M]":
            if repeating:
                if len(values) == 1 and isinstance(values[0], (list, tuple)):
                    self._set(attr, values[0])
                else:
                    self._append(attr, values)
            elif len(values) != 1:
                raise TypeError(f"Element '{name}' takes exactly one value")
            else:
                self._set(attr, values[0])
            return self

        setter.__name__ = name
        return setter

    def update(self, **fields: Any) -> "Builder[M]":
        """Set several elements at once; repeating elements are replaced.

        A single value given for a repeating element becomes a one-item list.
        """
        for name, value in fields.items():
            self._set(self._resolve(name), value)
        return self

    def get(self, name: str) -> Any:
        """Return the staged value of an element (a copy for repeating elements)."""
        attr = self._resolve(name)
        value = self._values.get(attr)
        if self._infos[attr].repeating:
            return list(value or [])
        return value

    def build(self) -> M:
        """Validate the staged values and return a new immutable instance.

        The builder is left unchanged and may be used again.

        Raises:
            ModelValidationError: If a structural check fails
            pydantic.ValidationError: If a value has the wrong type altogether
        """
        values: Dict[str, Any] = {}
        for attr, value in self._values.items():
            values[attr] = tuple(value) if isinstance(value, list) else value
        try:
            return self._model_class(**values)
        except FHIRModelException as e:
            logger.debug(
                "model_build_failed",
                model_type=self._model_class.fhir_type_name(),
                error_code=e.code,
                error=str(e),
            )
            raise

    def __repr__(self) -> str:
        staged: List[str] = sorted(self._values)
        return f"Builder({self._model_class.__name__}, staged={staged})"
