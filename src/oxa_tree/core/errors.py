"""
OXA Tree Exception Definitions

Two families live here:

- ``ErrorKind``: the kinds of violation the validator collects and reports.
  These are never raised; they are recorded on ``Violation`` entries.
- ``OxaError`` subclasses: raised for registry, promotion, transform, path and
  I/O failures, where partial success is not meaningful.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Violation kinds reported by the validator"""

    UNKNOWN_TYPE = "UnknownTypeError"
    CONTENT_SHAPE = "ContentShapeError"
    MISSING_FIELD = "MissingFieldError"
    FIELD_TYPE = "FieldTypeError"
    UNEXPECTED_FIELD = "UnexpectedFieldError"
    INVALID_CHILD_CLASS = "InvalidChildClassError"


class OxaError(Exception):
    """OXA tree base exception"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class SchemaError(OxaError):
    """
    Schema definition error

    Raised when a type schema is malformed, e.g. a badly formed type name,
    a field shadowing one of the base fields, or a promotion that targets an
    undeclared field.
    """

    pass


class DuplicateTypeError(SchemaError):
    """
    Duplicate type error

    Raised when registering a schema whose name is already taken by a
    different schema that is not a compatible evolution of it.
    """

    pass


class UnknownTypeError(OxaError):
    """Type name not present in the schema registry"""

    pass


class RegistryFrozenError(OxaError):
    """Registration attempted after the registry was frozen"""

    pass


class PromotionConflictError(OxaError):
    """
    Promotion conflict error

    Raised when promoting (or demoting) a field would overwrite a different
    value already held at the destination.
    """

    pass


class TransformError(OxaError):
    """Transform rule produced an action that cannot be applied"""

    pass


class PathError(OxaError):
    """Invalid tree path, or a path that does not address a node"""

    pass


class DocumentLoadError(OxaError):
    """Document or schema file could not be read or parsed"""

    pass


class DocumentValidationError(OxaError):
    """
    Document validation error

    Raised only on request (``ValidationResult.raise_if_invalid``); the
    validator itself always returns its violations.
    """

    pass
