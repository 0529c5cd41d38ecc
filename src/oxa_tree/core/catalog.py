"""
Reference Node Types

The reference type set used by the default registry. Every entry is plain
schema data; adding a type is a ``SchemaRegistry.register`` call.
"""

from typing import List

from .schema import (
    Category,
    ChildContentClass,
    ContentClass,
    FieldKind,
    FieldSpec,
    Promotion,
    TypeSchema,
)

DOCUMENT = TypeSchema(
    name="Document",
    content_class=ContentClass.CONTAINER,
    child_content_class=ChildContentClass.BLOCK,
    category=Category.BLOCK,
    fields={"title": FieldSpec(kind=FieldKind.STRING)},
    description="Root of a document",
)

HEADING = TypeSchema(
    name="Heading",
    content_class=ContentClass.CONTAINER,
    child_content_class=ChildContentClass.INLINE,
    category=Category.BLOCK,
    fields={"level": FieldSpec(kind=FieldKind.NUMBER, required=True)},
    description="Section heading; level 1 is the document's top level",
)

PARAGRAPH = TypeSchema(
    name="Paragraph",
    content_class=ContentClass.CONTAINER,
    child_content_class=ChildContentClass.INLINE,
    category=Category.BLOCK,
)

THEMATIC_BREAK = TypeSchema(
    name="ThematicBreak",
    content_class=ContentClass.EMPTY,
    category=Category.BLOCK,
)

CODE = TypeSchema(
    name="Code",
    content_class=ContentClass.LEAF,
    category=Category.BLOCK,
    fields={"language": FieldSpec(kind=FieldKind.STRING)},
    description="Block of source code, not executed",
)

CODE_CELL = TypeSchema(
    name="CodeCell",
    content_class=ContentClass.EMPTY,
    category=Category.BLOCK,
    fields={
        "code": FieldSpec(kind=FieldKind.STRING, required=True),
        "language": FieldSpec(kind=FieldKind.STRING),
        "isEchoed": FieldSpec(kind=FieldKind.BOOLEAN, default=True),
        "isHidden": FieldSpec(kind=FieldKind.BOOLEAN, default=False),
        "outputs": FieldSpec(kind=FieldKind.NODE_LIST),
    },
    description="Executable block of code; outputs are filled in by an execution engine",
)

TEXT = TypeSchema(
    name="Text",
    content_class=ContentClass.LEAF,
    category=Category.INLINE,
)

EMPHASIS = TypeSchema(
    name="Emphasis",
    content_class=ContentClass.CONTAINER,
    child_content_class=ChildContentClass.INLINE,
    category=Category.INLINE,
)

STRONG = TypeSchema(
    name="Strong",
    content_class=ContentClass.CONTAINER,
    child_content_class=ChildContentClass.INLINE,
    category=Category.INLINE,
)

INLINE_CODE = TypeSchema(
    name="InlineCode",
    content_class=ContentClass.LEAF,
    category=Category.INLINE,
    fields={"language": FieldSpec(kind=FieldKind.STRING)},
)

CODE_EXPR = TypeSchema(
    name="CodeExpr",
    content_class=ContentClass.EMPTY,
    category=Category.INLINE,
    fields={
        "code": FieldSpec(kind=FieldKind.STRING, required=True),
        "language": FieldSpec(kind=FieldKind.STRING),
        "outputs": FieldSpec(kind=FieldKind.NODE_LIST),
    },
    description="Inline executable expression",
)

# alt/src started out under data; version 2 promoted them
IMAGE = TypeSchema(
    name="Image",
    content_class=ContentClass.EMPTY,
    category=Category.INLINE,
    version=2,
    fields={
        "src": FieldSpec(kind=FieldKind.STRING, required=True),
        "alt": FieldSpec(kind=FieldKind.STRING),
    },
    promotions=[
        Promotion(data_key="src", field="src", since=2),
        Promotion(data_key="alt", field="alt", since=2),
    ],
)

REFERENCE_SCHEMAS: List[TypeSchema] = [
    DOCUMENT,
    HEADING,
    PARAGRAPH,
    THEMATIC_BREAK,
    CODE,
    CODE_CELL,
    TEXT,
    EMPHASIS,
    STRONG,
    INLINE_CODE,
    CODE_EXPR,
    IMAGE,
]
