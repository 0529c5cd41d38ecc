"""
OXA Node Model

Two representations of a document node:

- ``RawNode``: untrusted mapping as produced by a JSON/YAML parser
- ``Node``: validated, immutable record over the same data

``Node`` keeps the four base fields (``type``, ``children``, ``value``,
``data``) as attributes and every type-specific field in ``fields``.
``None`` marks an absent base field; an empty ``data`` mapping is present.
"""

import copy
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .schema import ContentClass

RawNode = Dict[str, Any]

Scalar = Union[str, int, float, bool]


class Node(BaseModel):
    """
    Document tree node

    Instances are immutable; every ``with_*``/``without_*`` method returns a
    new node that shares unchanged children with the original.
    """

    model_config = ConfigDict(frozen=True)

    type: str
    children: Optional[Tuple["Node", ...]] = None
    value: Optional[Scalar] = None
    data: Optional[Dict[str, Any]] = None
    fields: Dict[str, Any] = Field(default_factory=dict)

    @property
    def content_class(self) -> ContentClass:
        """Content class derived from which base field is present"""
        if self.children is not None:
            return ContentClass.CONTAINER
        if self.value is not None:
            return ContentClass.LEAF
        return ContentClass.EMPTY

    @property
    def is_container(self) -> bool:
        return self.children is not None

    @property
    def is_leaf(self) -> bool:
        return self.children is None and self.value is not None

    def get(self, name: str, default: Any = None) -> Any:
        """Get a typed field value"""
        return self.fields.get(name, default)

    def has(self, name: str) -> bool:
        """Check if a typed field is present"""
        return name in self.fields

    def with_fields(self, **updates: Any) -> "Node":
        """Return a copy with typed fields set"""
        return self.model_copy(update={"fields": {**self.fields, **updates}})

    def without_fields(self, *names: str) -> "Node":
        """Return a copy with typed fields removed"""
        remaining = {k: v for k, v in self.fields.items() if k not in names}
        return self.model_copy(update={"fields": remaining})

    def with_children(self, children: Iterable["Node"]) -> "Node":
        """Return a copy with a new children sequence"""
        return self.model_copy(update={"children": tuple(children)})

    def with_data(self, data: Optional[Dict[str, Any]]) -> "Node":
        """Return a copy with a new data bucket (None removes it)"""
        return self.model_copy(update={"data": data})

    def to_dict(self) -> RawNode:
        """
        Serialize back to the raw shape

        Key order: ``type``, typed fields, ``value``, ``children``, ``data``.
        Works on an explicit stack, so tree depth is not bounded by the
        interpreter's recursion limit.
        """
        root: RawNode = {}
        stack: List[Tuple["Node", RawNode]] = [(self, root)]
        while stack:
            node, out = stack.pop()
            out["type"] = node.type
            for name, field_value in node.fields.items():
                if is_node_list(field_value):
                    out[name] = [{} for _ in field_value]
                    stack.extend(zip(field_value, out[name]))
                else:
                    out[name] = copy.deepcopy(field_value)
            if node.value is not None:
                out["value"] = node.value
            if node.children is not None:
                out["children"] = [{} for _ in node.children]
                stack.extend(zip(node.children, out["children"]))
            if node.data is not None:
                out["data"] = copy.deepcopy(node.data)
        return root

    def __repr__(self) -> str:
        if self.children is not None:
            return f"Node({self.type}, children={len(self.children)})"
        if self.value is not None:
            return f"Node({self.type}, value={self.value!r})"
        return f"Node({self.type})"


Node.model_rebuild()


def is_node_list(value: Any) -> bool:
    """Whether a typed field value holds nodes"""
    return isinstance(value, tuple) and all(isinstance(v, Node) for v in value)


def dump_field_value(value: Any) -> Any:
    """Serialize a typed field value; node lists become raw lists"""
    if is_node_list(value):
        return [v.to_dict() for v in value]
    return copy.deepcopy(value)


def text(value: str) -> Node:
    """Shorthand for a Text leaf"""
    return Node(type="Text", value=value)


def element(type_name: str, *children: Node, **fields: Any) -> Node:
    """Shorthand for a container node"""
    return Node(type=type_name, children=tuple(children), fields=fields)
