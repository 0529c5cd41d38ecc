"""
Schema Registry

The single source of truth for node types: maps type names to ``TypeSchema``
entries. Registration is a write that belongs to an initialization phase;
once populated, the registry is only read by the validator and by tooling.
Calling ``freeze()`` closes the initialization phase explicitly.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Union

import yaml

from .catalog import REFERENCE_SCHEMAS
from .errors import (
    DocumentLoadError,
    DuplicateTypeError,
    RegistryFrozenError,
    SchemaError,
    UnknownTypeError,
)
from .nodes import Node
from .schema import INLINE_PREFIX, TypeSchema, is_inline_name, root_name

logger = logging.getLogger(__name__)

SchemaLike = Union[TypeSchema, Mapping[str, Any]]


class SchemaRegistry:
    """
    Schema registry

    Lookups are case-sensitive, matching the capitalized naming convention.
    """

    def __init__(self, schemas: Optional[Iterable[SchemaLike]] = None):
        self._schemas: Dict[str, TypeSchema] = {}
        self._lock = threading.RLock()
        self._frozen = False
        if schemas:
            self.register_many(schemas)

    def register(self, schema: SchemaLike) -> TypeSchema:
        """
        Register a type schema

        Re-registering an identical schema is a no-op. A different schema for
        a taken name replaces the registered one only when it is a compatible
        evolution of it.

        Args:
            schema: TypeSchema or schema description mapping

        Returns:
            The schema now registered under the name

        Raises:
            DuplicateTypeError: Incompatible schema already registered
            RegistryFrozenError: Registry was frozen
            SchemaError: Invalid schema description
        """
        if not isinstance(schema, TypeSchema):
            schema = TypeSchema.from_dict(schema)

        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(
                    f"Cannot register {schema.name}: registry is frozen",
                    details={"name": schema.name},
                )

            existing = self._schemas.get(schema.name)
            if existing is not None:
                if existing == schema:
                    return existing
                if not schema.is_compatible_with(existing):
                    raise DuplicateTypeError(
                        f"Type {schema.name} is already registered with an "
                        f"incompatible schema (version {existing.version})",
                        details={
                            "name": schema.name,
                            "registered_version": existing.version,
                            "new_version": schema.version,
                        },
                    )
                logger.info(
                    "Upgrading type %s from version %d to %d",
                    schema.name,
                    existing.version,
                    schema.version,
                )
            else:
                logger.info("Registering type %s", schema.name)

            self._schemas[schema.name] = schema
            return schema

    def register_many(self, schemas: Iterable[SchemaLike]) -> List[TypeSchema]:
        """Register several schemas in order"""
        return [self.register(schema) for schema in schemas]

    def load_file(self, path: Union[str, Path]) -> List[TypeSchema]:
        """
        Register schemas from a YAML or JSON file

        The file holds either a list of schema descriptions or a mapping with
        a ``types`` list.

        Raises:
            DocumentLoadError: File cannot be read or has the wrong shape
            SchemaError: An entry is not a valid schema description
        """
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                if path.suffix.lower() == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise DocumentLoadError(
                f"Cannot read schema file {path}: {e}", details={"path": str(path)}
            ) from e

        if isinstance(data, Mapping):
            data = data.get("types")
        if not isinstance(data, list):
            raise DocumentLoadError(
                f"Schema file {path} must contain a list of types",
                details={"path": str(path)},
            )

        logger.debug("Loading %d schemas from %s", len(data), path)
        return self.register_many(data)

    def resolve(self, type_name: str) -> TypeSchema:
        """
        Get the schema for a type

        Raises:
            UnknownTypeError: Type not registered
        """
        schema = self._schemas.get(type_name)
        if schema is None:
            raise UnknownTypeError(
                f"Unknown node type: {type_name!r}", details={"type": type_name}
            )
        return schema

    def get(self, type_name: str) -> Optional[TypeSchema]:
        """Get the schema for a type, or None"""
        return self._schemas.get(type_name)

    def names(self) -> List[str]:
        """Get all registered type names, in registration order"""
        return list(self._schemas)

    def is_inline_variant_of(self, type_name: str, block_name: Optional[str] = None) -> bool:
        """
        Check whether a type is the inline counterpart of a block type

        ``InlineCode`` is the inline variant of ``Code`` when both are
        registered.

        Args:
            type_name: Candidate inline type
            block_name: Restrict the check to this block type

        Returns:
            Whether type_name is a registered inline variant
        """
        if type_name not in self._schemas or not is_inline_name(type_name):
            return False
        root = root_name(type_name)
        if block_name is not None and block_name != root:
            return False
        return root in self._schemas

    def block_counterpart(self, type_name: str) -> Optional[str]:
        """Get the block type an inline variant belongs to"""
        if self.is_inline_variant_of(type_name):
            return root_name(type_name)
        return None

    def inline_counterpart(self, type_name: str) -> Optional[str]:
        """Get the inline variant of a block type"""
        candidate = f"{INLINE_PREFIX}{type_name}"
        if self.is_inline_variant_of(candidate, type_name):
            return candidate
        return None

    def field_value(self, node: Node, name: str) -> Any:
        """
        Get a typed field, falling back to the schema default

        Raises:
            UnknownTypeError: Node type not registered
        """
        if node.has(name):
            return node.get(name)
        spec = self.resolve(node.type).fields.get(name)
        if spec is None:
            raise SchemaError(
                f"Type {node.type} declares no field '{name}'",
                details={"type": node.type, "field": name},
            )
        return spec.default

    def freeze(self) -> None:
        """End the registration phase; later registrations fail"""
        with self._lock:
            self._frozen = True
        logger.debug("Registry frozen with %d types", len(self._schemas))

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)

    def __iter__(self) -> Iterator[TypeSchema]:
        return iter(list(self._schemas.values()))

    def __repr__(self) -> str:
        return f"SchemaRegistry({len(self._schemas)} types)"


def create_default_registry() -> SchemaRegistry:
    """Create a registry holding the reference type set"""
    return SchemaRegistry(REFERENCE_SCHEMAS)
