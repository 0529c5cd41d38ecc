"""Traversal, transform and promotion over validated trees"""

from .traversal import (
    CONTINUE,
    SKIP,
    STOP,
    Signal,
    by_category,
    by_content_class,
    by_type,
    count,
    find,
    find_first,
    visit,
    walk,
)
from .transform import (
    KEEP,
    REMOVE,
    Keep,
    RemoveSelf,
    Replace,
    ReplaceChildren,
    apply_passes,
    compose,
    transform,
)
from .promotion import demote, promote, promotion_mapping

__all__ = [
    # Traversal
    "CONTINUE",
    "SKIP",
    "STOP",
    "Signal",
    "by_category",
    "by_content_class",
    "by_type",
    "count",
    "find",
    "find_first",
    "visit",
    "walk",
    # Transform
    "KEEP",
    "REMOVE",
    "Keep",
    "RemoveSelf",
    "Replace",
    "ReplaceChildren",
    "apply_passes",
    "compose",
    "transform",
    # Promotion
    "demote",
    "promote",
    "promotion_mapping",
]
