"""Shared fixtures"""

from typing import Any, Dict

import pytest

from oxa_tree.core.registry import SchemaRegistry, create_default_registry
from oxa_tree.core.validator import Validator


@pytest.fixture
def registry() -> SchemaRegistry:
    return create_default_registry()


@pytest.fixture
def validator(registry: SchemaRegistry) -> Validator:
    return Validator(registry)


@pytest.fixture
def article() -> Dict[str, Any]:
    """A small document using most reference types"""
    return {
        "type": "Document",
        "title": "Phase transitions",
        "children": [
            {
                "type": "Heading",
                "level": 1,
                "children": [{"type": "Text", "value": "Introduction"}],
            },
            {
                "type": "Paragraph",
                "children": [
                    {"type": "Text", "value": "We study "},
                    {
                        "type": "Strong",
                        "children": [{"type": "Text", "value": "ice"}],
                    },
                    {"type": "Text", "value": " using "},
                    {"type": "InlineCode", "value": "numpy"},
                ],
                "data": {"note": "draft"},
            },
            {"type": "ThematicBreak"},
            {"type": "Code", "language": "python", "value": "x = 1"},
            {
                "type": "CodeCell",
                "code": "plot()",
                "language": "python",
                "isHidden": True,
                "outputs": [{"type": "Paragraph", "children": []}],
            },
        ],
    }
