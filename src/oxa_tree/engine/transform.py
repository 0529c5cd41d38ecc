"""
Tree Transform

Copy-on-write structural rewriting. A rule sees each node after its children
were rewritten (bottom-up), so a parent's rule observes the transformed
children, and independent rewrite passes compose without re-validation in
between. Rules are local: they see a node and its already transformed
children, never ancestors.

Rules return one of:
- ``KEEP`` (or None): leave the node as it is
- ``Replace(node)``: put another node in its place
- ``Replace(node, stop=True)``: put another node in its place and end the transform
- ``REMOVE``: drop the node from its parent's children
- ``ReplaceChildren(children)``: keep the node, swap its children
- ``STOP``: keep the node and end the transform

The rewrite runs on an explicit stack, so tree depth is not bounded by the
interpreter's recursion limit.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple, Union

from ..core.errors import TransformError
from ..core.nodes import Node, is_node_list
from .traversal import STOP, Signal

logger = logging.getLogger(__name__)


class Keep:
    """Leave the node unchanged"""

    def __repr__(self) -> str:
        return "KEEP"


class RemoveSelf:
    """Drop the node from its parent"""

    def __repr__(self) -> str:
        return "REMOVE"


@dataclass(frozen=True)
class Replace:
    """Substitute another node, optionally ending the transform"""

    node: Node
    stop: bool = False


@dataclass(frozen=True)
class ReplaceChildren:
    """Keep the node but give it new children"""

    children: Tuple[Node, ...]

    def __init__(self, children: Sequence[Node]):
        object.__setattr__(self, "children", tuple(children))


KEEP = Keep()
REMOVE = RemoveSelf()

Action = Union[Keep, RemoveSelf, Replace, ReplaceChildren, Signal, None]
Rule = Callable[[Node], Action]

# None slot: children; str slot: a node list field
Slot = Optional[str]


@dataclass
class _Frame:
    """A node whose held nodes are being rewritten"""

    node: Node
    slot: Slot
    items: List[Tuple[Slot, Node]]
    position: int = 0
    results: List[Tuple[Slot, Optional[Node]]] = field(default_factory=list)
    changed: bool = False

    def rebuild(self) -> Node:
        """Apply the rewritten held nodes to a copy of the node"""
        if not self.changed:
            return self.node

        update = {}
        if self.node.children is not None:
            update["children"] = tuple(
                n for slot, n in self.results if slot is None and n is not None
            )
        rewritten_lists = {slot for slot, _ in self.results if slot is not None}
        if rewritten_lists:
            fields = dict(self.node.fields)
            for name in rewritten_lists:
                fields[name] = tuple(
                    n for slot, n in self.results if slot == name and n is not None
                )
            update["fields"] = fields
        return self.node.model_copy(update=update)


class _Run:
    """State of one transform call"""

    def __init__(self, rule: Rule, node_lists: bool = False):
        self.rule = rule
        self.node_lists = node_lists
        self.stopped = False
        self.rewrites = 0

    def items(self, node: Node) -> List[Tuple[Slot, Node]]:
        """Nodes held by a node, in rewrite order"""
        held: List[Tuple[Slot, Node]] = [(None, child) for child in node.children or ()]
        if self.node_lists:
            for name, value in node.fields.items():
                if is_node_list(value):
                    held.extend((name, item) for item in value)
        return held

    def apply(self, tree: Node) -> Optional[Node]:
        """Transform a tree; None means the root was removed"""
        stack = [_Frame(tree, None, self.items(tree))]
        while True:
            frame = stack[-1]
            if not self.stopped and frame.position < len(frame.items):
                slot, child = frame.items[frame.position]
                frame.position += 1
                stack.append(_Frame(child, slot, self.items(child)))
                continue

            # After a stop, the rest of the tree is kept as it was
            frame.results.extend(frame.items[frame.position :])
            frame.position = len(frame.items)

            result: Optional[Node] = frame.rebuild()
            if not self.stopped:
                result = self._act(result, self.rule(result))

            stack.pop()
            if not stack:
                return result
            parent = stack[-1]
            if result is not frame.node:
                parent.changed = True
            parent.results.append((frame.slot, result))

    def _act(self, node: Node, action: Action) -> Optional[Node]:
        if action is None or isinstance(action, Keep):
            return node
        if action is STOP:
            self.stopped = True
            logger.debug("Transform stopped at %s", node.type)
            return node

        self.rewrites += 1
        if isinstance(action, RemoveSelf):
            return None
        if isinstance(action, Replace):
            if not isinstance(action.node, Node):
                raise TransformError(
                    f"Replacement for {node.type} is not a node: {type(action.node).__name__}",
                    {"type": node.type},
                )
            if action.stop:
                self.stopped = True
                logger.debug("Transform stopped at %s", node.type)
            return action.node
        if isinstance(action, ReplaceChildren):
            return _replace_children(node, action)

        raise TransformError(
            f"Rule returned an unknown action for {node.type}: {action!r}",
            {"type": node.type},
        )


def _replace_children(node: Node, action: ReplaceChildren) -> Node:
    if not node.is_container:
        raise TransformError(
            f"Cannot replace children of {node.type}: not a container",
            {"type": node.type, "content_class": node.content_class.value},
        )
    return node.with_children(action.children)


def transform(tree: Node, rule: Rule, node_lists: bool = False) -> Optional[Node]:
    """
    Rewrite a tree bottom-up

    The input tree is left untouched; unchanged subtrees are shared between
    input and output. When the rule returns ``STOP`` the rewrites made so far
    are kept and the rest of the tree is returned as it was.

    Args:
        tree: Root node
        rule: Rewrite rule
        node_lists: Also rewrite nodes held in node list fields (``outputs``)

    Returns:
        The new tree, or None if the root was removed

    Raises:
        TransformError: The rule returned an action that cannot be applied
    """
    run = _Run(rule, node_lists)
    result = run.apply(tree)
    logger.debug("Transform applied %d rewrite(s)", run.rewrites)
    return result


def compose(*rules: Rule) -> Rule:
    """
    Chain rules into one

    The first rule returning anything other than KEEP decides; a
    ``Replace`` result is passed on to the following rules, and a later
    action applies to the replacement.
    """

    def composed(node: Node) -> Action:
        current = node
        replaced = False
        for rule in rules:
            action = rule(current)
            if action is None or isinstance(action, Keep):
                continue
            if isinstance(action, Replace):
                current = action.node
                replaced = True
                if action.stop:
                    return action
                continue
            if not replaced:
                return action
            if not isinstance(current, Node):
                # Rejected by transform as a bad replacement
                return Replace(current)
            if action is STOP:
                return Replace(current, stop=True)
            if isinstance(action, ReplaceChildren):
                return Replace(_replace_children(current, action))
            return action
        return Replace(current) if replaced else KEEP

    return composed


def apply_passes(tree: Node, *rules: Rule) -> Optional[Node]:
    """Run independent transform passes one after another"""
    current: Optional[Node] = tree
    for rule in rules:
        if current is None:
            break
        current = transform(current, rule)
    return current
