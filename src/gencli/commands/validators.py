# ==================================================================================================
#                         Validators: pydantic adapter
# ==================================================================================================
#
# The rest of the command subsystem never looks at pydantic types directly.
# It talks to validators through a small capability interface:
#
#   kind()         -> "string" | "number" | ... | "optional" | "nullable" | "default"
#   unwrap()       -> inner validator for wrapper kinds, else None
#   description()  -> help text, if any
#
# `FieldValidator` implements that interface on top of a type annotation plus
# pydantic field settings (default, description). It also knows how to hand
# itself to pydantic (`field_definition`) so the decoder can build a model.
#

import collections.abc
import datetime
import decimal
import enum
import pathlib
import types
from dataclasses import dataclass, replace
from typing import Annotated, Any, Callable, List, Literal, Optional, Protocol, Tuple, Union, get_args, get_origin

from pydantic import BaseModel, Field, TypeAdapter, ValidationError
from pydantic.fields import FieldInfo
from pydantic_core import PydanticUndefined

from gencli.constants import UNKNOWN_KIND
from gencli.errors import CommandValidationError

# ==================================================================================================
#                                   TYPES
# ==================================================================================================

class Validator(Protocol):
    """
    Introspection capability the analyzer relies on.

    `unwrap` and `description` are optional: the analyzer probes for them and
    degrades gracefully when they are missing.
    """

    def kind(self) -> str: ...


class SchemaField(Validator, Protocol):
    """A validator that can also describe itself as a pydantic model field."""

    def field_definition(self) -> Tuple[Any, FieldInfo]: ...


@dataclass(frozen=True)
class FieldValidator:
    """
    Validator backed by a pydantic-compatible type annotation.

    Parameters
    ----------
    annotation
        Any type pydantic can validate (``str``, ``list[int]``, ``Literal[...]``,
        ``Annotated[int, Field(gt=0)]``, a ``BaseModel`` subclass, ...).
    default_value
        Default used when the input omits the field. ``PydanticUndefined``
        means the field is required.
    default_factory
        Zero-argument callable producing the default (takes precedence).
    doc
        Help text surfaced by the CLI.

    Usage example
    -------------
        tags = array(str).describe("Tags to apply").optional()
        retries = integer().default(3)
    """

    annotation: Any
    default_value: Any = PydanticUndefined
    default_factory: Optional[Callable[[], Any]] = None
    doc: Optional[str] = None

    # ---------------------------------------------------------------- capability interface

    def kind(self) -> str:
        """Report the wrapper or core kind of this validator."""
        if self.has_default():
            return "optional" if self.default_value is None and self.default_factory is None else "default"
        return annotation_kind(self.annotation)

    def unwrap(self) -> Optional["FieldValidator"]:
        """Peel one wrapper layer; core kinds return None."""
        if self.has_default():
            return replace(self, default_value=PydanticUndefined, default_factory=None)

        inner = _strip_annotated(self.annotation)
        if annotation_kind(inner) == "nullable":
            members = tuple(m for m in get_args(inner) if m is not type(None))
            core = members[0] if len(members) == 1 else Union[members]
            return replace(self, annotation=core)
        return None

    def description(self) -> Optional[str]:
        """Help text attached to this validator, if any."""
        return self.doc

    # ---------------------------------------------------------------- builders

    def optional(self) -> "FieldValidator":
        """Allow the value to be absent (or None); absent values become None."""
        return replace(self, annotation=Optional[self.annotation], default_value=None, default_factory=None)

    def default(self, value: Any = PydanticUndefined, *, factory: Optional[Callable[[], Any]] = None) -> "FieldValidator":
        """Fill in `value` (or the result of `factory`) when the input omits the field."""
        return replace(self, default_value=value, default_factory=factory)

    def describe(self, text: str) -> "FieldValidator":
        """Attach help text."""
        return replace(self, doc=text)

    # ---------------------------------------------------------------- pydantic glue

    def has_default(self) -> bool:
        """True when the field may be omitted from the input."""
        return self.default_factory is not None or self.default_value is not PydanticUndefined

    def field_definition(self) -> Tuple[Any, FieldInfo]:
        """Return the ``(annotation, FieldInfo)`` pair accepted by `pydantic.create_model`."""
        if self.default_factory is not None:
            return self.annotation, Field(default_factory=self.default_factory, description=self.doc)
        return self.annotation, Field(default=self.default_value, description=self.doc)

    def parse(self, value: Any) -> Any:
        """
        Validate and coerce a single value.

        Raises
        ------
        CommandValidationError
            When pydantic rejects the value.
        """
        try:
            return TypeAdapter(self.annotation).validate_python(value)
        except ValidationError as exc:
            raise CommandValidationError.from_pydantic(exc) from exc


# ==================================================================================================
#                                   HELPERS
# ==================================================================================================

def _strip_annotated(annotation: Any) -> Any:
    while get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]
    return annotation


def annotation_kind(annotation: Any) -> str:
    """
    Classify a type annotation into one of the validator kinds.

    Parameters
    ----------
    annotation
        Type annotation to inspect.

    Returns
    -------
    str
        ``nullable`` for ``X | None``; otherwise a core kind such as ``string``
        or ``array``. Unrecognized annotations report ``unknown``.
    """
    annotation = _strip_annotated(annotation)
    origin = get_origin(annotation)

    if origin is Union or origin is types.UnionType:
        return "nullable" if type(None) in get_args(annotation) else "union"
    if origin is Literal:
        return "enum"
    if origin is not None:
        # list[str] -> list, collections.abc.Sequence[int] -> Sequence, ...
        annotation = origin

    if not isinstance(annotation, type):
        return UNKNOWN_KIND

    # Order matters: bool is an int, str is a Sequence, IntEnum is an int.
    if issubclass(annotation, bool):
        return "boolean"
    if issubclass(annotation, enum.Enum):
        return "enum"
    if issubclass(annotation, (int, float, decimal.Decimal)):
        return "number"
    if issubclass(annotation, (str, bytes, pathlib.PurePath)):
        return "string"
    if issubclass(annotation, (datetime.date, datetime.time)):
        return "date"
    if issubclass(annotation, BaseModel) or issubclass(annotation, collections.abc.Mapping):
        return "object"
    if issubclass(annotation, (collections.abc.Sequence, collections.abc.Set)):
        return "array"
    return UNKNOWN_KIND


def field(annotation: Any) -> FieldValidator:
    """
    Wrap an arbitrary annotation.

    ``Annotated[..., Field(description=...)]`` contributes its description.
    """
    doc = None
    if get_origin(annotation) is Annotated:
        doc = FieldInfo.from_annotation(annotation).description
    return FieldValidator(annotation=annotation, doc=doc)


def as_validator(value: Any) -> SchemaField:
    """Accept a ready validator or a bare annotation (``int``, ``list[str]``, ...)."""
    if callable(getattr(value, "kind", None)) and callable(getattr(value, "field_definition", None)):
        return value
    return field(value)


def string() -> FieldValidator:
    """Required text value."""
    return FieldValidator(str)


def number() -> FieldValidator:
    """Required floating-point value."""
    return FieldValidator(float)


def integer() -> FieldValidator:
    """Required integer value (kind ``number``)."""
    return FieldValidator(int)


def boolean() -> FieldValidator:
    """Boolean value; rendered as a value-less flag."""
    return FieldValidator(bool)


def array(item: Any = str) -> FieldValidator:
    """List of `item` values."""
    return FieldValidator(List[item])


def choice(*values: Any) -> FieldValidator:
    """One of a fixed set of literal values."""
    if not values:
        raise ValueError("choice() needs at least one value")
    return FieldValidator(Literal[values])
