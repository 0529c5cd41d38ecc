"""
OXA Type Schemas

Node types are described as data, not as Python classes: a ``TypeSchema``
states the content class of a type, its typed fields, the class of children
it accepts, and the ``data`` keys that were promoted into first-class fields.
Schemas can be built in code or parsed from YAML/JSON descriptions, which may
use either snake_case or the camelCase keys of the RFC examples.
"""

import re
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import SchemaError

TYPE_NAME_PATTERN = re.compile(r"^[A-Z][A-Za-z0-9]*$")

INLINE_PREFIX = "Inline"

# Keys every node may carry regardless of its schema
BASE_FIELDS = frozenset({"type", "children", "value", "data"})


class ContentClass(str, Enum):
    """Whether a node carries ``value``, ``children``, or neither"""

    LEAF = "leaf"
    CONTAINER = "container"
    EMPTY = "empty"


class ChildContentClass(str, Enum):
    """Class of children a container accepts"""

    BLOCK = "block"
    INLINE = "inline"
    ANY = "any"


class Category(str, Enum):
    """Structural level of a node type itself"""

    BLOCK = "block"
    INLINE = "inline"


class FieldKind(str, Enum):
    """Kinds of typed fields (and of leaf values)"""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    NODE_LIST = "nodeList"
    SCALAR = "scalar"

    def matches(self, value: Any) -> bool:
        """
        Check whether a raw value has this kind

        Elements of a ``nodeList`` are not inspected here; the validator
        checks them as nodes.
        """
        if self is FieldKind.STRING:
            return isinstance(value, str)
        if self is FieldKind.NUMBER:
            # bool is a subclass of int, need to exclude it
            return isinstance(value, (int, float)) and not isinstance(value, bool)
        if self is FieldKind.BOOLEAN:
            return isinstance(value, bool)
        if self is FieldKind.OBJECT:
            return isinstance(value, dict)
        if self is FieldKind.NODE_LIST:
            return isinstance(value, list)
        return isinstance(value, (str, int, float, bool))


# Kinds a leaf value may be declared with
VALUE_KINDS = frozenset(
    {FieldKind.STRING, FieldKind.NUMBER, FieldKind.BOOLEAN, FieldKind.SCALAR}
)


def kind_name(value: Any) -> str:
    """Describe a raw value with the vocabulary of ``FieldKind``"""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, dict):
        return "object"
    if isinstance(value, list):
        return "array"
    return type(value).__name__


class FieldSpec(BaseModel):
    """Declaration of one typed field"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: FieldKind
    required: bool = False
    default: Optional[Any] = Field(None, alias="defaultValue")

    @model_validator(mode="after")
    def check_default(self) -> "FieldSpec":
        if self.default is not None and not self.kind.matches(self.default):
            raise SchemaError(
                f"Default value {self.default!r} does not match kind '{self.kind.value}'",
                details={"kind": self.kind.value, "default": self.default},
            )
        return self


class Promotion(BaseModel):
    """
    A ``data`` key that was promoted to a first-class field

    The legacy form (value under ``data[data_key]``) stays acceptable input
    while the compatibility window is open: indefinitely when ``until`` is
    None, otherwise for schema versions up to and including ``until``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    data_key: str = Field(alias="dataKey")
    field: str
    since: int = Field(1, ge=1)
    until: Optional[int] = None

    def is_open(self, version: int) -> bool:
        """Whether the legacy ``data`` form is accepted at this schema version"""
        return self.until is None or version <= self.until


class TypeSchema(BaseModel):
    """
    Structural schema of one node type

    - name: type name, ``[A-Z][A-Za-z0-9]*``
    - content_class: leaf (``value``), container (``children``) or empty
    - fields: typed fields beyond the four base fields
    - child_content_class: class of children a container accepts
    - category: the type's own class, checked against parents' child class
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    content_class: ContentClass = Field(alias="contentClass")
    fields: Dict[str, FieldSpec] = Field(default_factory=dict)
    child_content_class: Optional[ChildContentClass] = Field(None, alias="childContentClass")
    category: Optional[Category] = None
    value_kind: FieldKind = Field(FieldKind.STRING, alias="valueKind")
    version: int = Field(1, ge=1)
    promotions: List[Promotion] = Field(default_factory=list)
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate type name format"""
        if not TYPE_NAME_PATTERN.match(v):
            raise SchemaError(
                f"Invalid type name: {v!r}. Expected a capitalized identifier",
                details={"name": v},
            )
        return v

    @field_validator("fields")
    @classmethod
    def validate_fields(cls, v: Dict[str, FieldSpec]) -> Dict[str, FieldSpec]:
        """Typed fields must not shadow the base fields"""
        shadowed = sorted(BASE_FIELDS.intersection(v))
        if shadowed:
            raise SchemaError(
                f"Fields shadow base node fields: {', '.join(shadowed)}",
                details={"fields": shadowed},
            )
        return v

    @model_validator(mode="after")
    def validate_shape(self) -> "TypeSchema":
        """Fill derived defaults and check cross-field consistency"""
        if self.content_class is ContentClass.CONTAINER:
            if self.child_content_class is None:
                object.__setattr__(self, "child_content_class", ChildContentClass.ANY)
        elif self.child_content_class is not None:
            raise SchemaError(
                f"Type {self.name} declares childContentClass but is not a container",
                details={"name": self.name, "content_class": self.content_class.value},
            )

        if self.value_kind not in VALUE_KINDS:
            raise SchemaError(
                f"Type {self.name} declares valueKind '{self.value_kind.value}'; "
                "values are limited to scalar kinds",
                details={"name": self.name, "value_kind": self.value_kind.value},
            )

        if self.category is None:
            category = Category.INLINE if is_inline_name(self.name) else Category.BLOCK
            object.__setattr__(self, "category", category)

        for promotion in self.promotions:
            if promotion.field not in self.fields:
                raise SchemaError(
                    f"Type {self.name} promotes data key '{promotion.data_key}' "
                    f"to undeclared field '{promotion.field}'",
                    details={"name": self.name, "field": promotion.field},
                )
        return self

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TypeSchema":
        """
        Create schema from a description mapping

        Raises:
            SchemaError: The description is not a mapping or is invalid
        """
        if not isinstance(data, Mapping):
            raise SchemaError(
                f"Schema description must be a mapping, got {kind_name(data)}: {data!r}",
                details={"got": kind_name(data)},
            )
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            name = data.get("name")
            raise SchemaError(
                f"Invalid schema description for {name!r}: {e}",
                details={"name": name, "errors": e.errors(include_url=False)},
            ) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a description mapping (camelCase keys)"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @property
    def is_container(self) -> bool:
        return self.content_class is ContentClass.CONTAINER

    @property
    def is_leaf(self) -> bool:
        return self.content_class is ContentClass.LEAF

    @property
    def is_empty(self) -> bool:
        return self.content_class is ContentClass.EMPTY

    def required_fields(self) -> List[str]:
        """Names of required fields, in declaration order"""
        return [name for name, spec in self.fields.items() if spec.required]

    def defaults(self) -> Dict[str, Any]:
        """Declared default values"""
        return {
            name: spec.default
            for name, spec in self.fields.items()
            if spec.default is not None
        }

    def promotion_for(self, field_name: str) -> Optional[Promotion]:
        """Get the promotion that produced a field, if any"""
        for promotion in self.promotions:
            if promotion.field == field_name:
                return promotion
        return None

    def is_compatible_with(self, previous: "TypeSchema") -> bool:
        """
        Check whether this schema is a compatible evolution of ``previous``

        A compatible successor keeps the structural classes, has a higher
        version, keeps every previous field with the same kind, and only adds
        required fields that are covered by a promotion (so documents still
        carrying the value under ``data`` stay valid).
        """
        if self.name != previous.name:
            return False
        if (
            self.content_class != previous.content_class
            or self.child_content_class != previous.child_content_class
            or self.category != previous.category
            or self.value_kind != previous.value_kind
        ):
            return False
        if self.version <= previous.version:
            return False

        for name, spec in previous.fields.items():
            current = self.fields.get(name)
            if current is None or current.kind != spec.kind:
                return False

        for name, spec in self.fields.items():
            newly_required = spec.required and not (
                name in previous.fields and previous.fields[name].required
            )
            if newly_required and self.promotion_for(name) is None:
                return False

        return True


def is_inline_name(type_name: str) -> bool:
    """Whether a type name follows the ``Inline`` variant naming convention"""
    return (
        type_name.startswith(INLINE_PREFIX)
        and len(type_name) > len(INLINE_PREFIX)
        and type_name[len(INLINE_PREFIX)].isupper()
    )


def root_name(type_name: str) -> str:
    """Strip the ``Inline`` prefix from an inline variant name"""
    if is_inline_name(type_name):
        return type_name[len(INLINE_PREFIX) :]
    return type_name
