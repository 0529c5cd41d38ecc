"""
Tree Traversal

Type-agnostic walking over validated trees. Walks follow ``children`` only:
node list fields and ``data`` never participate in traversal.

Order is depth-first, parent before children, left-to-right among siblings,
and is the same for every walk over the same tree.
"""

import logging
from enum import Enum
from typing import Callable, Iterator, List, Optional, Tuple, Union

from ..core.nodes import Node
from ..core.path import ROOT, TreePath
from ..core.registry import SchemaRegistry
from ..core.schema import Category, ContentClass

logger = logging.getLogger(__name__)


class Signal(str, Enum):
    """Control values a visitor callback may return"""

    CONTINUE = "continue"
    SKIP = "skip"
    STOP = "stop"


CONTINUE = Signal.CONTINUE
SKIP = Signal.SKIP
STOP = Signal.STOP

Predicate = Callable[[Node], bool]
Visitor = Callable[[Node, TreePath], Optional[Signal]]


def visit(
    tree: Node,
    predicate: Optional[Predicate],
    on_enter: Optional[Visitor],
    on_leave: Optional[Visitor] = None,
) -> bool:
    """
    Walk a tree, calling back on matching nodes

    ``on_enter`` runs before a node's children and ``on_leave`` after them;
    both receive ``(node, path)`` and run only for nodes the predicate
    accepts (a None predicate accepts every node). ``on_enter`` may return
    ``SKIP`` to leave the node's children out, or ``STOP`` to end the walk.
    ``on_leave`` may return ``STOP`` as well.

    Args:
        tree: Root node
        predicate: Node filter, or None
        on_enter: Callback before children, or None
        on_leave: Callback after children, or None

    Returns:
        True if the walk completed, False if a callback stopped it
    """
    stack: List[Tuple[Node, TreePath, bool]] = [(tree, ROOT, False)]
    while stack:
        node, path, leaving = stack.pop()
        if leaving:
            if on_leave is not None and on_leave(node, path) is STOP:
                logger.debug("Walk stopped early")
                return False
            continue

        matched = predicate is None or predicate(node)
        signal = None
        if matched and on_enter is not None:
            signal = on_enter(node, path)
        if signal is STOP:
            logger.debug("Walk stopped early")
            return False

        if matched:
            stack.append((node, path, True))
        if signal is not SKIP and node.children:
            for idx in range(len(node.children) - 1, -1, -1):
                stack.append((node.children[idx], path + (idx,), False))

    return True


def walk(tree: Node) -> Iterator[Tuple[TreePath, Node]]:
    """
    Iterate over ``(path, node)`` pairs in depth-first order

    Lazy: nodes are produced as the walk reaches them. Each call starts a
    new walk from the root.
    """
    stack = [(ROOT, tree)]
    while stack:
        path, node = stack.pop()
        yield path, node
        if node.children:
            # Reversed so the leftmost child is popped first
            for idx in range(len(node.children) - 1, -1, -1):
                stack.append((path + (idx,), node.children[idx]))


def find(tree: Node, predicate: Optional[Predicate] = None) -> Iterator[Node]:
    """
    Iterate over matching nodes in depth-first order

    Args:
        tree: Root node
        predicate: Node filter, or None for every node

    Returns:
        Lazy iterator; call again to walk again
    """
    for _, node in walk(tree):
        if predicate is None or predicate(node):
            yield node


def find_first(tree: Node, predicate: Optional[Predicate] = None) -> Optional[Node]:
    """Get the first matching node, or None"""
    return next(find(tree, predicate), None)


def count(tree: Node, predicate: Optional[Predicate] = None) -> int:
    """Count matching nodes"""
    return sum(1 for _ in find(tree, predicate))


def by_type(*type_names: str) -> Predicate:
    """Predicate matching nodes of the given types"""
    names = frozenset(type_names)
    return lambda node: node.type in names


def by_content_class(*classes: Union[ContentClass, str]) -> Predicate:
    """Predicate matching nodes of the given content classes"""
    wanted = frozenset(ContentClass(c) for c in classes)
    return lambda node: node.content_class in wanted


def by_category(registry: SchemaRegistry, category: Union[Category, str]) -> Predicate:
    """Predicate matching nodes whose registered type has the given category"""
    wanted = Category(category)

    def predicate(node: Node) -> bool:
        schema = registry.get(node.type)
        return schema is not None and schema.category is wanted

    return predicate
