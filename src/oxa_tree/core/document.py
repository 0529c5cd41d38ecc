"""
Document Loading and Dumping

Reads raw trees from YAML or JSON and writes typed or raw trees back. The
format follows the file suffix (``.json`` is JSON, anything else YAML) unless
given explicitly. Parsing only produces RawNodes; validation is separate.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from .errors import DocumentLoadError
from .nodes import Node, RawNode
from .registry import SchemaRegistry
from .validator import ValidationResult, Validator

logger = logging.getLogger(__name__)

FORMATS = ("json", "yaml")


def detect_format(path: Union[str, Path]) -> str:
    """Get the serialization format for a file name"""
    suffix = Path(path).suffix.lower()
    return "json" if suffix == ".json" else "yaml"


def loads(text: str, fmt: str = "json") -> RawNode:
    """
    Parse a raw tree from text

    Raises:
        DocumentLoadError: Malformed text, or the root is not a mapping
    """
    if fmt not in FORMATS:
        raise DocumentLoadError(f"Unsupported format: {fmt}", {"format": fmt})

    try:
        data = json.loads(text) if fmt == "json" else yaml.safe_load(text)
    except (ValueError, yaml.YAMLError) as e:
        raise DocumentLoadError(f"Cannot parse {fmt} document: {e}", {"format": fmt}) from e

    if not isinstance(data, dict):
        raise DocumentLoadError(
            f"Document root must be a mapping, got {type(data).__name__}",
            {"format": fmt},
        )
    return data


def load_raw(path: Union[str, Path], fmt: Optional[str] = None) -> RawNode:
    """
    Load a raw tree from a file

    Raises:
        DocumentLoadError: File cannot be read or parsed
    """
    path = Path(path)
    fmt = fmt or detect_format(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        raise DocumentLoadError(f"Cannot read {path}: {e}", {"path": str(path)}) from e

    logger.debug("Loading %s document %s", fmt, path)
    try:
        return loads(text, fmt)
    except DocumentLoadError as e:
        e.details["path"] = str(path)
        raise


def load_document(
    path: Union[str, Path],
    registry: Optional[SchemaRegistry] = None,
    validator: Optional[Validator] = None,
) -> ValidationResult:
    """Load a file and validate it"""
    validator = validator or Validator(registry)
    return validator.validate(load_raw(path))


def dumps(tree: Union[Node, RawNode], fmt: str = "json") -> str:
    """Serialize a tree to text"""
    data: Any = tree.to_dict() if isinstance(tree, Node) else tree
    if fmt == "json":
        return json.dumps(data, indent=2, ensure_ascii=False)
    if fmt == "yaml":
        return yaml.safe_dump(data, allow_unicode=True, sort_keys=False)
    raise DocumentLoadError(f"Unsupported format: {fmt}", {"format": fmt})


def dump(tree: Union[Node, RawNode], path: Union[str, Path], fmt: Optional[str] = None) -> None:
    """Write a tree to a file"""
    path = Path(path)
    text = dumps(tree, fmt or detect_format(path))
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
    logger.debug("Wrote %s", path)
