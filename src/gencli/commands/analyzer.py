# ==================================================================================================
#                         Type descriptor analyzer
# ==================================================================================================
#
# Turns an arbitrary validator into a normalized `TypeDescriptor`:
#
#   optional(default(array(str)))  ->  TypeDescriptor("array", is_optional=True, ...)
#
# Only wrapper kinds (optional / nullable / default) are unwrapped; the first
# core kind reached becomes the base kind. Anything that cannot be introspected
# degrades to "unknown". Pure: no logging, no errors.
#

from dataclasses import dataclass
from typing import Any, Optional

from gencli.constants import MAX_UNWRAP_DEPTH, UNKNOWN_KIND, WRAPPER_KINDS

# ==================================================================================================
#                                   TYPES
# ==================================================================================================

@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """
    Normalized summary of a validator.

    Parameters
    ----------
    base_kind
        First non-wrapper kind (``string``, ``number``, ``array``, ...).
    is_optional
        True when at least one wrapper layer was present.
    description
        First description found while unwrapping.

    Usage example
    -------------
        info = analyze(array(str).optional())
        assert info.base_kind == "array" and info.is_optional
    """

    base_kind: str
    is_optional: bool = False
    description: Optional[str] = None


# ==================================================================================================
#                                   HELPERS
# ==================================================================================================

def _kind_of(validator: Any) -> str:
    kind = getattr(validator, "kind", None)
    if not callable(kind):
        return UNKNOWN_KIND
    value = kind()
    return value if isinstance(value, str) and value else UNKNOWN_KIND


def _description_of(validator: Any) -> Optional[str]:
    description = getattr(validator, "description", None)
    if callable(description):
        description = description()
    return description if isinstance(description, str) else None


# ==================================================================================================
#                                   CORE LOGIC
# ==================================================================================================

def analyze(validator: Any) -> TypeDescriptor:
    """
    Derive the CLI-relevant descriptor of `validator`.

    Parameters
    ----------
    validator
        Any object; ideally one implementing the `Validator` protocol.

    Returns
    -------
    TypeDescriptor
        Base kind, optionality and description.

    Usage example
    -------------
        analyze(integer().default(3))   # TypeDescriptor("number", True, None)
        analyze(object())               # TypeDescriptor("unknown", False, None)
    """
    current = validator
    is_optional = False
    description: Optional[str] = None

    for _ in range(MAX_UNWRAP_DEPTH):
        if description is None:
            description = _description_of(current)

        kind = _kind_of(current)
        if kind not in WRAPPER_KINDS:
            return TypeDescriptor(base_kind=kind, is_optional=is_optional, description=description)

        is_optional = True
        unwrap = getattr(current, "unwrap", None)
        inner = unwrap() if callable(unwrap) else None
        if inner is None:
            # Opaque wrapper: report its own kind as the base kind.
            return TypeDescriptor(base_kind=kind, is_optional=True, description=description)
        current = inner

    return TypeDescriptor(base_kind=UNKNOWN_KIND, is_optional=is_optional, description=description)
