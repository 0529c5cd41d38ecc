"""
Field Promotion

Node types evolve by starting new fields under ``data`` and later promoting
them to first-class, validated properties. ``promote`` and ``demote`` move
values between the two places for every node of one type:

    promote: data[key] -> node.fields[mapping[key]]
    demote:  node.fields[mapping[key]] -> data[key]

Both are total over a tree (absent keys are skipped) and fail only on a
genuine conflict, where the destination already holds a different value.
For a tree without such overlaps, ``demote(promote(t, ty, m), ty, m) == t``.

Nodes held in node list fields (``CodeCell.outputs``) are migrated along
with the rest of the tree. A promoted list of raw nodes is validated
and stored as typed nodes, the form a node list field holds.
"""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional, cast

from ..core.errors import PromotionConflictError, SchemaError
from ..core.nodes import Node, dump_field_value
from ..core.registry import SchemaRegistry
from ..core.schema import FieldKind, FieldSpec, TypeSchema
from ..core.validator import Validator
from .transform import KEEP, Action, Replace, Rule, transform

logger = logging.getLogger(__name__)


def promote(
    tree: Node,
    type_name: str,
    mapping: Mapping[str, str],
    registry: Optional[SchemaRegistry] = None,
) -> Node:
    """
    Move data keys to first-class fields

    Args:
        tree: Validated root node
        type_name: Type whose nodes are migrated
        mapping: data key -> field name
        registry: When given, target fields must be declared by the type
            and node list values are validated against it

    Returns:
        New tree; emptied data buckets are kept as ``{}``

    Raises:
        PromotionConflictError: A field already holds a different value
        SchemaError: A target field is not declared by the type's schema
        DocumentValidationError: A promoted node list holds invalid nodes
    """
    specs: Dict[str, FieldSpec] = {}
    if registry is not None:
        schema = registry.resolve(type_name)
        _check_declared(schema, mapping.values())
        specs = schema.fields

    def rule(node: Node) -> Action:
        if node.type != type_name or not node.data:
            return KEEP

        moving = [key for key in mapping if key in node.data]
        if not moving:
            return KEEP

        data = dict(node.data)
        fields = dict(node.fields)
        for key in moving:
            field = mapping[key]
            value = _typed_value(data.pop(key), specs.get(field), registry)
            if field in fields and fields[field] != value:
                raise PromotionConflictError(
                    f"Cannot promote {type_name}.data.{key}: field '{field}' "
                    f"already holds a different value",
                    {"type": type_name, "data_key": key, "field": field},
                )
            fields[field] = value

        logger.debug("Promoted %s on %s", ", ".join(moving), type_name)
        return Replace(node.model_copy(update={"data": data, "fields": fields}))

    return _run(tree, rule)


def demote(
    tree: Node,
    type_name: str,
    mapping: Mapping[str, str],
    registry: Optional[SchemaRegistry] = None,
) -> Node:
    """
    Move first-class fields back under data

    Produces output for consumers of an older schema version.

    Args:
        tree: Validated root node
        type_name: Type whose nodes are migrated
        mapping: data key -> field name (same mapping as for ``promote``)
        registry: When given, mapped fields must be declared by the type

    Returns:
        New tree; a data bucket is created where needed

    Raises:
        PromotionConflictError: The data bucket already holds a different value
        SchemaError: A mapped field is not declared by the type's schema
    """
    if registry is not None:
        _check_declared(registry.resolve(type_name), mapping.values())

    def rule(node: Node) -> Action:
        if node.type != type_name:
            return KEEP

        moving = [key for key, field in mapping.items() if field in node.fields]
        if not moving:
            return KEEP

        data: Dict[str, Any] = dict(node.data or {})
        fields = dict(node.fields)
        for key in moving:
            field = mapping[key]
            value = fields.pop(field)
            if key in data and data[key] != value:
                raise PromotionConflictError(
                    f"Cannot demote {type_name}.{field}: data key '{key}' "
                    f"already holds a different value",
                    {"type": type_name, "data_key": key, "field": field},
                )
            data[key] = dump_field_value(value)

        logger.debug("Demoted %s on %s", ", ".join(moving), type_name)
        return Replace(node.model_copy(update={"data": data, "fields": fields}))

    return _run(tree, rule)


def promotion_mapping(schema: TypeSchema) -> Dict[str, str]:
    """Get the data key -> field mapping a schema declares"""
    return {p.data_key: p.field for p in schema.promotions}


def _typed_value(
    value: Any, spec: Optional[FieldSpec], registry: Optional[SchemaRegistry]
) -> Any:
    """Convert a promoted node list to typed nodes"""
    if spec is not None:
        if spec.kind is not FieldKind.NODE_LIST:
            return value
    elif not _is_raw_node_list(value):
        return value
    if not isinstance(value, list):
        # Left for revalidation to report
        return value
    validator = Validator(registry)
    return tuple(validator.validate(item).raise_if_invalid() for item in value)


def _is_raw_node_list(value: Any) -> bool:
    return isinstance(value, list) and all(
        isinstance(item, dict) and isinstance(item.get("type"), str) for item in value
    )


def _run(tree: Node, rule: Rule) -> Node:
    # Rules never remove nodes, so the root always survives
    return cast(Node, transform(tree, rule, node_lists=True))


def _check_declared(schema: TypeSchema, fields: Iterable[str]) -> None:
    undeclared = sorted(set(fields) - set(schema.fields))
    if undeclared:
        raise SchemaError(
            f"Type {schema.name} declares no field(s): {', '.join(undeclared)}",
            {"type": schema.name, "fields": undeclared},
        )
