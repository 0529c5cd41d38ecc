"""
Tree Path Resolver

A tree path addresses one node by the sequence of steps from the root:

- an int step selects ``children[i]``
- a str step followed by an int step selects element i of a ``nodeList`` field

Paths are tuples, e.g. ``(0, 2)`` or ``(1, "outputs", 0)``. Their display form
follows the state path syntax:

- Root is $
- ``.children[0]`` for a child step
- ``.outputs[0]`` for a node list step
"""

import re
from typing import List, Optional, Tuple, Union

from .errors import PathError
from .nodes import Node

PathStep = Union[int, str]
TreePath = Tuple[PathStep, ...]

ROOT: TreePath = ()


class PathResolver:
    """
    Path Resolver

    Supported syntax:
    - $                         -> Root
    - $.children[0]             -> First child
    - $.children[0].outputs[1]  -> Node list element under a child
    """

    SEGMENT_PATTERN = re.compile(
        r"\.(?P<field>[a-zA-Z_]\w*)"  # .field
        r"\[(?P<index>\d+)\]"  # [index]
    )

    @classmethod
    def format(cls, path: TreePath) -> str:
        """
        Render a tree path

        Args:
            path: Tuple of steps

        Returns:
            Display string, e.g. "$.children[0].children[2]"

        Raises:
            PathError: A field step is not followed by an index
        """
        parts = ["$"]
        pending_field: Optional[str] = None
        for step in path:
            if isinstance(step, str):
                if pending_field is not None:
                    raise PathError(f"Field step '{pending_field}' not followed by an index")
                pending_field = step
                continue
            field = pending_field or "children"
            parts.append(f".{field}[{step}]")
            pending_field = None
        if pending_field is not None:
            raise PathError(f"Field step '{pending_field}' not followed by an index")
        return "".join(parts)

    @classmethod
    def parse(cls, path: str) -> TreePath:
        """
        Parse path string into a tree path

        Args:
            path: Path string, e.g. "$.children[0].outputs[1]"

        Returns:
            Tuple of steps

        Raises:
            PathError: Invalid path format
        """
        if not path.startswith("$"):
            raise PathError(f"Path must start with $: {path}")

        steps: List[PathStep] = []
        rest = path[1:]  # Skip $

        while rest:
            match = cls.SEGMENT_PATTERN.match(rest)
            if not match:
                raise PathError(f"Invalid path syntax at: {rest}")

            field = match.group("field")
            if field != "children":
                steps.append(field)
            steps.append(int(match.group("index")))

            rest = rest[match.end() :]

        return tuple(steps)

    @classmethod
    def get(cls, tree: Node, path: Union[TreePath, str]) -> Node:
        """
        Get the node a path addresses

        Raises:
            PathError: The path leaves the tree
        """
        if isinstance(path, str):
            path = cls.parse(path)

        current = tree
        field: Optional[str] = None
        for step in path:
            if isinstance(step, str):
                field = step
                continue
            if field is None:
                sequence = current.children
            else:
                sequence = current.get(field)
                if not isinstance(sequence, tuple):
                    raise PathError(
                        f"Node {current.type} has no node list '{field}'",
                        {"path": cls.format(path), "field": field},
                    )
            if sequence is None or step >= len(sequence):
                raise PathError(
                    f"Index {step} out of range at {current.type}",
                    {"path": cls.format(path), "index": step},
                )
            current = sequence[step]
            field = None

        return current

    @classmethod
    def is_ancestor(cls, path_a: TreePath, path_b: TreePath) -> bool:
        """
        Check whether path_a addresses an ancestor of (or the same node as) path_b
        """
        if len(path_a) > len(path_b):
            return False
        return path_b[: len(path_a)] == path_a

    @classmethod
    def parent(cls, path: TreePath) -> TreePath:
        """
        Get the parent path

        Raises:
            PathError: Root path has no parent
        """
        if not path:
            raise PathError("Root path has no parent")
        parent = path[:-1]
        if parent and isinstance(parent[-1], str):
            parent = parent[:-1]
        return parent
