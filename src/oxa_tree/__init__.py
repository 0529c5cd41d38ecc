"""
OXA Tree - schema-driven document tree engine

Supports:
- registering node type schemas
- validating raw document trees with full violation reports
- traversing, transforming and migrating validated trees
"""

__version__ = "0.1.0"

from .core import (
    # Errors
    ErrorKind,
    OxaError,
    SchemaError,
    DuplicateTypeError,
    UnknownTypeError,
    PromotionConflictError,
    TransformError,
    DocumentLoadError,
    DocumentValidationError,
    # Core classes
    Node,
    TypeSchema,
    FieldSpec,
    Promotion,
    ContentClass,
    ChildContentClass,
    Category,
    FieldKind,
    SchemaRegistry,
    create_default_registry,
    Validator,
    ValidationResult,
    Violation,
    PathResolver,
    validate,
    load_document,
)
from .engine import (
    KEEP,
    REMOVE,
    SKIP,
    STOP,
    Replace,
    ReplaceChildren,
    by_type,
    demote,
    find,
    promote,
    transform,
    visit,
    walk,
)
from .config import EngineConfig, load_config_from_env, load_config_from_file

__all__ = [
    "__version__",
    # Errors
    "ErrorKind",
    "OxaError",
    "SchemaError",
    "DuplicateTypeError",
    "UnknownTypeError",
    "PromotionConflictError",
    "TransformError",
    "DocumentLoadError",
    "DocumentValidationError",
    # Core
    "Node",
    "TypeSchema",
    "FieldSpec",
    "Promotion",
    "ContentClass",
    "ChildContentClass",
    "Category",
    "FieldKind",
    "SchemaRegistry",
    "create_default_registry",
    "Validator",
    "ValidationResult",
    "Violation",
    "PathResolver",
    "validate",
    "load_document",
    # Engine
    "KEEP",
    "REMOVE",
    "SKIP",
    "STOP",
    "Replace",
    "ReplaceChildren",
    "by_type",
    "demote",
    "find",
    "promote",
    "transform",
    "visit",
    "walk",
    # Config
    "EngineConfig",
    "load_config_from_env",
    "load_config_from_file",
]
