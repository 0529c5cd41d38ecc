"""
Document Validation System

Checks raw node trees against the schema registry and the universal base
shape rules. Validation never stops at the first problem: every violation in
the tree is collected with the path of the node it belongs to, so authoring
tools can present all problems at once.

Order of checks per node (root first, children after):
1. type present and registered (otherwise the subtree is skipped)
2. content shape (value / children / neither)
3. typed fields (missing, wrong kind, unexpected)
4. child content class (block / inline nesting)
5. descent into children and node list fields (explicit stack)
6. data bucket is a JSON-like mapping
"""

import copy
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .errors import DocumentValidationError, ErrorKind, UnknownTypeError
from .nodes import Node, RawNode
from .path import ROOT, PathResolver, TreePath
from .registry import SchemaRegistry, create_default_registry
from .schema import BASE_FIELDS, ChildContentClass, FieldKind, TypeSchema, kind_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Violation:
    """A single rule failure, addressable by tree path"""

    path: TreePath
    kind: ErrorKind
    message: str
    type_name: Optional[str] = None

    @property
    def location(self) -> str:
        """Display form of the path"""
        return PathResolver.format(self.path)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a report entry"""
        return {
            "path": list(self.path),
            "kind": self.kind.value,
            "message": self.message,
            "typeName": self.type_name,
        }

    def __str__(self) -> str:
        return f"{self.location}: {self.kind.value}: {self.message}"


class ValidationResult:
    """
    Validation result

    Attributes:
        node: Typed tree, set only when there are no violations
        violations: All violations found
        warnings: Accepted but deprecated input (legacy data forms)
    """

    def __init__(
        self,
        violations: Optional[List[Violation]] = None,
        warnings: Optional[List[str]] = None,
        node: Optional[Node] = None,
    ):
        self.violations = violations or []
        self.warnings = warnings or []
        self.node = node

    @property
    def valid(self) -> bool:
        return not self.violations

    @property
    def ok(self) -> bool:
        return self.valid

    def add_violation(self, violation: Violation) -> None:
        """Add a violation"""
        self.violations.append(violation)

    def add_warning(self, warning: str) -> None:
        """Add a warning"""
        self.warnings.append(warning)

    def kinds(self) -> List[ErrorKind]:
        """Violation kinds in report order"""
        return [v.kind for v in self.violations]

    def to_report(self) -> List[Dict[str, Any]]:
        """Violations as a list of report entries"""
        return [v.to_dict() for v in self.violations]

    def raise_if_invalid(self) -> Node:
        """
        Return the typed tree, or raise if validation failed

        Raises:
            DocumentValidationError: There were violations
        """
        if not self.valid or self.node is None:
            raise DocumentValidationError(
                f"Document has {len(self.violations)} violation(s)",
                {"violations": self.to_report()},
            )
        return self.node

    def __repr__(self) -> str:
        return (
            f"ValidationResult("
            f"valid={self.valid!r}, "
            f"violations={len(self.violations)}, "
            f"warnings={len(self.warnings)}"
            f")"
        )


class Validator:
    """
    Document validator

    Pure and side-effect-free: the raw input is never mutated, and the typed
    tree it produces holds copies of the input's data.
    """

    def __init__(
        self,
        registry: Optional[SchemaRegistry] = None,
        allow_deprecated_data: bool = True,
        check_data_json: bool = True,
    ) -> None:
        self.registry = registry if registry is not None else create_default_registry()
        self.allow_deprecated_data = allow_deprecated_data
        self.check_data_json = check_data_json
        self.logger = logging.getLogger(self.__class__.__name__)

    def validate(self, raw: Any) -> ValidationResult:
        """
        Validate a raw tree

        Args:
            raw: Root RawNode

        Returns:
            ValidationResult: typed tree on success, violations otherwise
        """
        result = ValidationResult()
        self._check_node(raw, ROOT, result)

        if result.valid:
            result.node = self._build(raw)

        self.logger.debug(
            "Validated tree: %d violation(s), %d warning(s)",
            len(result.violations),
            len(result.warnings),
        )
        return result

    def revalidate(self, node: Node) -> ValidationResult:
        """Validate a typed tree again, e.g. after a transform"""
        return self.validate(node.to_dict())

    def _check_node(self, raw: Any, path: TreePath, result: ValidationResult) -> None:
        """
        Check a node and its subtree

        Nodes are checked in depth-first order, parent before children and
        children before node list elements, using an explicit stack.
        """
        stack: List[Tuple[Any, TreePath]] = [(raw, path)]
        while stack:
            current, current_path = stack.pop()
            schema = self._resolve(current, current_path, result)
            if schema is None:
                continue

            self._check_content_shape(current, schema, current_path, result)
            self._check_fields(current, schema, current_path, result)
            self._check_data(current, schema, current_path, result)

            pending: List[Tuple[Any, TreePath]] = []
            children = current.get("children")
            if isinstance(children, list):
                if schema.is_container:
                    self._check_child_classes(children, schema, current_path, result)
                for idx, child in enumerate(children):
                    pending.append((child, current_path + (idx,)))

            for name, spec in schema.fields.items():
                items = current.get(name)
                if spec.kind is FieldKind.NODE_LIST and isinstance(items, list):
                    for idx, item in enumerate(items):
                        pending.append((item, current_path + (name, idx)))

            stack.extend(reversed(pending))

    def _resolve(
        self, raw: Any, path: TreePath, result: ValidationResult
    ) -> Optional[TypeSchema]:
        """Resolve the node's schema, recording UNKNOWN_TYPE on failure"""
        if not isinstance(raw, dict):
            result.add_violation(
                Violation(
                    path=path,
                    kind=ErrorKind.UNKNOWN_TYPE,
                    message=f"Expected a node object, but got {kind_name(raw)}",
                )
            )
            return None

        type_name = raw.get("type")
        if not isinstance(type_name, str) or not type_name:
            message = (
                "Node has no type"
                if type_name is None
                else f"Node type must be a non-empty string, but got {kind_name(type_name)}"
            )
            result.add_violation(
                Violation(path=path, kind=ErrorKind.UNKNOWN_TYPE, message=message)
            )
            return None

        try:
            return self.registry.resolve(type_name)
        except UnknownTypeError as e:
            result.add_violation(
                Violation(
                    path=path,
                    kind=ErrorKind.UNKNOWN_TYPE,
                    message=e.message,
                    type_name=type_name,
                )
            )
            return None

    def _check_content_shape(
        self, raw: RawNode, schema: TypeSchema, path: TreePath, result: ValidationResult
    ) -> None:
        """Check the exactly-one-of value/children rule for the content class"""
        has_value = "value" in raw
        has_children = "children" in raw
        problems = []

        if schema.is_leaf:
            if not has_value:
                problems.append("requires value")
            if has_children:
                problems.append("must not have children")
        elif schema.is_container:
            if not has_children:
                problems.append("requires children")
            elif not isinstance(raw["children"], list):
                problems.append(f"children must be an array, got {kind_name(raw['children'])}")
            if has_value:
                problems.append("must not have a value")
        else:
            if has_value:
                problems.append("must not have a value")
            if has_children:
                problems.append("must not have children")

        if problems:
            result.add_violation(
                Violation(
                    path=path,
                    kind=ErrorKind.CONTENT_SHAPE,
                    message=(
                        f"{schema.content_class.value.capitalize()} type {schema.name} "
                        + " and ".join(problems)
                    ),
                    type_name=schema.name,
                )
            )

        if schema.is_leaf and has_value and not schema.value_kind.matches(raw["value"]):
            result.add_violation(
                Violation(
                    path=path,
                    kind=ErrorKind.FIELD_TYPE,
                    message=(
                        f"Field 'value' expected {schema.value_kind.value}, "
                        f"but got {kind_name(raw['value'])}"
                    ),
                    type_name=schema.name,
                )
            )

    def _check_fields(
        self, raw: RawNode, schema: TypeSchema, path: TreePath, result: ValidationResult
    ) -> None:
        """Check declared fields and reject stray top-level keys"""
        data = raw.get("data")
        legacy_keys = data if isinstance(data, dict) else {}

        for name, spec in schema.fields.items():
            promotion = schema.promotion_for(name)
            in_legacy_form = promotion is not None and promotion.data_key in legacy_keys

            if name not in raw:
                window_open = in_legacy_form and promotion.is_open(schema.version)
                if window_open and self.allow_deprecated_data:
                    message = (
                        f"{PathResolver.format(path)}: {schema.name}.data.{promotion.data_key} "
                        f"is deprecated; use the '{name}' field"
                    )
                    result.add_warning(message)
                    self.logger.debug("Accepted legacy data form: %s", message)
                elif spec.required:
                    detail = ""
                    if in_legacy_form:
                        detail = f" (data.{promotion.data_key} is no longer accepted)"
                    result.add_violation(
                        Violation(
                            path=path,
                            kind=ErrorKind.MISSING_FIELD,
                            message=f"Required field '{name}' is missing{detail}",
                            type_name=schema.name,
                        )
                    )
                continue

            value = raw[name]
            if not spec.kind.matches(value):
                result.add_violation(
                    Violation(
                        path=path,
                        kind=ErrorKind.FIELD_TYPE,
                        message=(
                            f"Field '{name}' expected {spec.kind.value}, "
                            f"but got {kind_name(value)}"
                        ),
                        type_name=schema.name,
                    )
                )

        for key in raw:
            if key in BASE_FIELDS or key in schema.fields:
                continue
            result.add_violation(
                Violation(
                    path=path,
                    kind=ErrorKind.UNEXPECTED_FIELD,
                    message=(
                        f"Unexpected field '{key}' on {schema.name}; "
                        "extension fields belong under 'data'"
                    ),
                    type_name=schema.name,
                )
            )

    def _check_data(
        self, raw: RawNode, schema: TypeSchema, path: TreePath, result: ValidationResult
    ) -> None:
        """Check that data is an opaque JSON-like mapping"""
        if "data" not in raw:
            return

        data = raw["data"]
        if not isinstance(data, dict):
            message = f"Field 'data' expected object, but got {kind_name(data)}"
        elif self.check_data_json and not is_json_like(data):
            message = "Field 'data' must hold only JSON-compatible values with string keys"
        else:
            return

        result.add_violation(
            Violation(
                path=path,
                kind=ErrorKind.FIELD_TYPE,
                message=message,
                type_name=schema.name,
            )
        )

    def _check_child_classes(
        self,
        children: List[Any],
        schema: TypeSchema,
        path: TreePath,
        result: ValidationResult,
    ) -> None:
        """Check each child's category against the parent's child content class"""
        expected = schema.child_content_class
        if expected is None or expected is ChildContentClass.ANY:
            return

        for idx, child in enumerate(children):
            # Children without a resolvable type are reported by their own check
            if not isinstance(child, dict) or not isinstance(child.get("type"), str):
                continue
            child_schema = self.registry.get(child["type"])
            if child_schema is None or child_schema.category.value == expected.value:
                continue

            message = (
                f"{child_schema.category.value.capitalize()} node {child_schema.name} "
                f"at index {idx} is not allowed in {expected.value} content of {schema.name}"
            )
            if expected is ChildContentClass.INLINE:
                counterpart = self.registry.inline_counterpart(child_schema.name)
            else:
                counterpart = self.registry.block_counterpart(child_schema.name)
            if counterpart:
                message += f"; use {counterpart} instead"

            result.add_violation(
                Violation(
                    path=path + (idx,),
                    kind=ErrorKind.INVALID_CHILD_CLASS,
                    message=message,
                    type_name=child_schema.name,
                )
            )

    def _build(self, raw: RawNode) -> Node:
        """Build the typed tree; only called on a tree without violations"""
        # Reversed preorder puts every node after the nodes it holds
        order: List[RawNode] = []
        stack = [raw]
        while stack:
            current = stack.pop()
            order.append(current)
            stack.extend(self._held_nodes(current))

        built: Dict[int, Node] = {}
        for current in reversed(order):
            schema = self.registry.resolve(current["type"])

            fields: Dict[str, Any] = {}
            for key, value in current.items():
                if key in BASE_FIELDS:
                    continue
                if schema.fields[key].kind is FieldKind.NODE_LIST:
                    fields[key] = tuple(built[id(item)] for item in value)
                else:
                    fields[key] = copy.deepcopy(value)

            children = None
            if "children" in current:
                children = tuple(built[id(child)] for child in current["children"])

            built[id(current)] = Node(
                type=current["type"],
                children=children,
                value=current.get("value"),
                data=copy.deepcopy(current["data"]) if "data" in current else None,
                fields=fields,
            )

        return built[id(raw)]

    def _held_nodes(self, raw: RawNode) -> List[RawNode]:
        """Raw children and node list elements of a valid raw node"""
        held = list(raw.get("children", []))
        for name, spec in self.registry.resolve(raw["type"]).fields.items():
            if spec.kind is FieldKind.NODE_LIST and name in raw:
                held.extend(raw[name])
        return held


def is_json_like(value: Any) -> bool:
    """Check that a value is built only from JSON types"""
    if value is None or isinstance(value, (str, bool, int, float)):
        return True
    if isinstance(value, dict):
        return all(isinstance(k, str) and is_json_like(v) for k, v in value.items())
    if isinstance(value, list):
        return all(is_json_like(v) for v in value)
    return False


def validate(
    raw: Any,
    registry: Optional[SchemaRegistry] = None,
    allow_deprecated_data: bool = True,
) -> ValidationResult:
    """
    Validate a raw tree with a fresh validator

    Args:
        raw: Root RawNode
        registry: Schema registry (defaults to the reference type set)
        allow_deprecated_data: Accept legacy data forms of promoted fields

    Returns:
        ValidationResult
    """
    return Validator(registry, allow_deprecated_data=allow_deprecated_data).validate(raw)
