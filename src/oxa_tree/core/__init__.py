"""OXA tree core data model"""

from .errors import (
    ErrorKind,
    OxaError,
    SchemaError,
    DuplicateTypeError,
    UnknownTypeError,
    RegistryFrozenError,
    PromotionConflictError,
    TransformError,
    PathError,
    DocumentLoadError,
    DocumentValidationError,
)
from .schema import (
    BASE_FIELDS,
    Category,
    ChildContentClass,
    ContentClass,
    FieldKind,
    FieldSpec,
    Promotion,
    TypeSchema,
)
from .nodes import Node, RawNode, element, text
from .path import PathResolver, TreePath, ROOT
from .registry import SchemaRegistry, create_default_registry
from .catalog import REFERENCE_SCHEMAS
from .validator import ValidationResult, Validator, Violation, validate
from .document import dump, dumps, load_document, load_raw, loads

__all__ = [
    # Errors
    "ErrorKind",
    "OxaError",
    "SchemaError",
    "DuplicateTypeError",
    "UnknownTypeError",
    "RegistryFrozenError",
    "PromotionConflictError",
    "TransformError",
    "PathError",
    "DocumentLoadError",
    "DocumentValidationError",
    # Schema
    "BASE_FIELDS",
    "Category",
    "ChildContentClass",
    "ContentClass",
    "FieldKind",
    "FieldSpec",
    "Promotion",
    "TypeSchema",
    # Nodes
    "Node",
    "RawNode",
    "element",
    "text",
    # Path
    "PathResolver",
    "TreePath",
    "ROOT",
    # Registry
    "SchemaRegistry",
    "create_default_registry",
    "REFERENCE_SCHEMAS",
    # Validator
    "ValidationResult",
    "Validator",
    "Violation",
    "validate",
    # Document
    "dump",
    "dumps",
    "load_document",
    "load_raw",
    "loads",
]
