"""FHIR primitive types.

Primitives are Elements that carry a scalar ``value`` alongside the usual
``id`` and ``extension``. A raw Python value supplied where a primitive is
expected is wrapped automatically, so ``Id.of("step-1")`` and
``RelatedAction.builder("step-1", ...)`` are equivalent.

The type hierarchy follows FHIR specialization: ``Id``, ``Code`` and
``Markdown`` are Strings; ``Canonical``, ``Url``, ``Oid`` and ``Uuid`` are
Uris; ``PositiveInt`` and ``UnsignedInt`` are Integers. A choice element that
allows a base type therefore also accepts its specializations.
"""

import base64
import binascii
import re
from datetime import date, datetime, time
from decimal import Decimal as PyDecimal
from typing import Annotated, Any, ClassVar, Optional, Type, TypeVar, Union

import defusedxml.ElementTree as DefusedET
from defusedxml import DefusedXmlException
from pydantic import BaseModel, StrictBool, StrictBytes, StrictInt, StrictStr, field_validator, model_validator

from fhirmodel.core import validation
from fhirmodel.core.annotations import Required
from fhirmodel.core.model import Element
from fhirmodel.utils.exceptions import InvalidValue

P = TypeVar("P", bound="Primitive")

MIN_INTEGER = -2147483648
MAX_INTEGER = 2147483647

XHTML_NAMESPACE = "http://www.w3.org/1999/xhtml"

_PARTIAL_DATE = re.compile(r"([0-9]([0-9]([0-9][1-9]|[1-9]0)|[1-9]00)|[1-9]000)(-(0[1-9]|1[0-2]))?")
_FULL_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_OID = re.compile(r"urn:oid:[0-2](\.(0|[1-9][0-9]*))+")
_UUID = re.compile(r"urn:uuid:[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}")


class Primitive(Element):
    """Base class of the primitive types."""

    abstract_model: ClassVar[bool] = True

    value: Any = None

    @model_validator(mode="before")
    @classmethod
    def _wrap_scalar(cls, data: Any) -> Any:
        if isinstance(data, (dict, BaseModel)):
            return data
        return {"value": data}

    @classmethod
    def of(cls: Type[P], value: Any) -> P:
        """Return an instance wrapping ``value``."""
        return cls(value=value)

    def has_value(self) -> bool:
        return self.value is not None

    def has_children(self) -> bool:
        return len(self.extension) > 0

    def __str__(self) -> str:
        return "" if self.value is None else str(self.value)


class Boolean(Primitive):
    """Value of "true" or "false"."""

    fhir_type = "boolean"

    value: Optional[StrictBool] = None


Boolean.TRUE = Boolean(value=True)
Boolean.FALSE = Boolean(value=False)


class Integer(Primitive):
    """A signed 32-bit integer."""

    fhir_type = "integer"

    value: Optional[StrictInt] = None

    min_value: ClassVar[int] = MIN_INTEGER

    def _validate(self) -> None:
        super()._validate()
        validation.check_value_range(self.value, self.min_value, MAX_INTEGER)


class PositiveInt(Integer):
    """An integer with a value that is positive (e.g. >0)."""

    fhir_type = "positiveInt"
    min_value: ClassVar[int] = 1


class UnsignedInt(Integer):
    """An integer with a value that is not negative (e.g. >= 0)."""

    fhir_type = "unsignedInt"
    min_value: ClassVar[int] = 0


class Decimal(Primitive):
    """A rational number with implicit precision."""

    fhir_type = "decimal"

    value: Optional[PyDecimal] = None

    @field_validator("value", mode="before")
    @classmethod
    def _float_as_text(cls, v: Any) -> Any:
        # keep the written precision of floats
        if isinstance(v, float):
            return str(v)
        return v


class String(Primitive):
    """A sequence of Unicode characters."""

    fhir_type = "string"

    value: Optional[StrictStr] = None

    def _validate(self) -> None:
        super()._validate()
        validation.check_string(self.value)


class Markdown(String):
    """A string that may contain GitHub Flavored Markdown syntax."""

    fhir_type = "markdown"


class Id(String):
    """Any combination of letters, numerals, "-" and ".", up to 64 characters."""

    fhir_type = "id"

    def _validate(self) -> None:
        validation.check_id(self.value)
        super()._validate()


class Code(String):
    """A string without leading, trailing or repeated whitespace."""

    fhir_type = "code"

    def _validate(self) -> None:
        validation.check_code(self.value)
        super()._validate()


class Uri(Primitive):
    """A Uniform Resource Identifier reference (RFC 3986)."""

    fhir_type = "uri"

    value: Optional[StrictStr] = None

    def _validate(self) -> None:
        super()._validate()
        validation.check_uri(self.value)


class Url(Uri):
    """A Uniform Resource Locator (RFC 1738)."""

    fhir_type = "url"


class Canonical(Uri):
    """A URI that refers to a resource by its canonical URL, with optional ``|version``."""

    fhir_type = "canonical"


class Oid(Uri):
    """An OID represented as a URI (RFC 3001), e.g. ``urn:oid:1.2.3.4.5``."""

    fhir_type = "oid"

    def _validate(self) -> None:
        super()._validate()
        validation.check_pattern(self.value, _OID)


class Uuid(Uri):
    """A UUID represented as a URI (RFC 4122), e.g. ``urn:uuid:...``."""

    fhir_type = "uuid"

    def _validate(self) -> None:
        super()._validate()
        validation.check_pattern(self.value, _UUID)


class Base64Binary(Primitive):
    """A stream of bytes, base64 encoded on the wire (RFC 4648)."""

    fhir_type = "base64Binary"

    value: Optional[StrictBytes] = None

    @classmethod
    def of_encoded(cls, text: str) -> "Base64Binary":
        """Return an instance holding the decoded bytes of base64 ``text``.

        Raises:
            InvalidValue: If ``text`` is not valid base64
        """
        validation.validate_base64(text)
        try:
            return cls(value=base64.b64decode(text, validate=True))
        except binascii.Error as e:
            raise InvalidValue(f"Invalid base64 string: {e}") from e

    def encoded(self) -> Optional[str]:
        """Return the value as a base64 string."""
        if self.value is None:
            return None
        return base64.b64encode(self.value).decode("ascii")


def _parse_date_text(v: Any) -> Any:
    if isinstance(v, str) and _FULL_DATE.fullmatch(v):
        try:
            return date.fromisoformat(v)
        except ValueError as e:
            raise InvalidValue(f"Invalid date value: '{v}'") from e
    return v


def _check_partial_date(v: Any) -> None:
    if isinstance(v, str) and not _PARTIAL_DATE.fullmatch(v):
        raise InvalidValue(
            f"Date value: '{v}' must be a year (YYYY), a year and month (YYYY-MM) or a full date"
        )


class Date(Primitive):
    """A date, or partial date (year or year-month) as used in human communication.

    Full dates are held as :class:`datetime.date`; partial dates keep their
    ``YYYY`` / ``YYYY-MM`` text.
    """

    fhir_type = "date"

    value: Optional[Union[date, StrictStr]] = None

    @field_validator("value", mode="before")
    @classmethod
    def _parse_text(cls, v: Any) -> Any:
        if isinstance(v, datetime):
            raise InvalidValue("Date value must not have a time component")
        return _parse_date_text(v)

    def _validate(self) -> None:
        super()._validate()
        _check_partial_date(self.value)


class DateTime(Primitive):
    """A date, date-time or partial date.

    If hours and minutes are specified, a time zone SHALL be populated.
    """

    fhir_type = "dateTime"

    value: Optional[Union[datetime, date, StrictStr]] = None

    @field_validator("value", mode="before")
    @classmethod
    def _parse_text(cls, v: Any) -> Any:
        if isinstance(v, str) and "T" in v:
            try:
                return datetime.fromisoformat(v)
            except ValueError as e:
                raise InvalidValue(f"Invalid dateTime value: '{v}'") from e
        return _parse_date_text(v)

    def _validate(self) -> None:
        super()._validate()
        if isinstance(self.value, datetime) and self.value.tzinfo is None:
            raise InvalidValue(f"DateTime value: '{self.value}' must include a time zone")
        _check_partial_date(self.value)


class Instant(Primitive):
    """An instant in time, known at least to the second, with a time zone."""

    fhir_type = "instant"

    value: Optional[datetime] = None

    def _validate(self) -> None:
        super()._validate()
        if self.value is not None and self.value.tzinfo is None:
            raise InvalidValue(f"Instant value: '{self.value}' must include a time zone")


class Time(Primitive):
    """A time during the day, with no date and no time zone."""

    fhir_type = "time"

    value: Optional[time] = None

    def _validate(self) -> None:
        super()._validate()
        if self.value is not None and self.value.tzinfo is not None:
            raise InvalidValue(f"Time value: '{self.value}' must not include a time zone")


class Xhtml(Primitive):
    """Limited XHTML content: a single ``div`` element in the XHTML namespace."""

    fhir_type = "xhtml"

    value: Annotated[Optional[StrictStr], Required()] = None

    def _validate(self) -> None:
        super()._validate()
        validation.check_max_length(self.value)
        try:
            root = DefusedET.fromstring(self.value, forbid_dtd=True)
        except DefusedET.ParseError as e:
            raise InvalidValue(f"Invalid XHTML content: {e}") from e
        except DefusedXmlException as e:
            raise InvalidValue(f"XHTML content must not declare a DTD or entities: {e}") from e
        if root.tag != f"{{{XHTML_NAMESPACE}}}div":
            raise InvalidValue(
                f"XHTML content must be a single div element in the {XHTML_NAMESPACE} namespace"
            )
