"""
SchemaRegistry Unit Tests
"""

import json

import pytest

from oxa_tree.core.errors import (
    DocumentLoadError,
    DuplicateTypeError,
    RegistryFrozenError,
    SchemaError,
    UnknownTypeError,
)
from oxa_tree.core.nodes import Node
from oxa_tree.core.registry import SchemaRegistry
from oxa_tree.core.schema import FieldKind, FieldSpec, Promotion, TypeSchema


def figure(version: int = 1, **fields: FieldSpec) -> TypeSchema:
    return TypeSchema(
        name="Figure",
        content_class="container",
        child_content_class="block",
        version=version,
        fields=fields or {"label": FieldSpec(kind=FieldKind.STRING)},
    )


class TestRegistration:
    """Test registering schemas"""

    def test_register_and_resolve(self):
        registry = SchemaRegistry()
        schema = registry.register(figure())
        assert registry.resolve("Figure") is schema
        assert "Figure" in registry
        assert len(registry) == 1

    def test_register_mapping(self):
        registry = SchemaRegistry()
        schema = registry.register({"name": "Math", "contentClass": "leaf"})
        assert schema.is_leaf
        assert registry.names() == ["Math"]

    def test_register_invalid_mapping(self):
        with pytest.raises(SchemaError):
            SchemaRegistry().register({"name": "math", "contentClass": "leaf"})

    def test_identical_registration_is_idempotent(self):
        registry = SchemaRegistry()
        first = registry.register(figure())
        assert registry.register(figure()) is first
        assert len(registry) == 1

    def test_incompatible_registration_rejected(self):
        registry = SchemaRegistry()
        registry.register(figure())
        with pytest.raises(DuplicateTypeError) as exc_info:
            registry.register(figure(label=FieldSpec(kind=FieldKind.NUMBER)))
        assert exc_info.value.details["name"] == "Figure"
        assert registry.resolve("Figure").fields["label"].kind is FieldKind.STRING

    def test_duplicate_is_schema_error(self):
        registry = SchemaRegistry([figure()])
        with pytest.raises(SchemaError):
            registry.register(TypeSchema(name="Figure", content_class="empty"))

    def test_compatible_upgrade_replaces(self):
        registry = SchemaRegistry([figure()])
        upgraded = figure(
            2,
            label=FieldSpec(kind=FieldKind.STRING),
            numbered=FieldSpec(kind=FieldKind.BOOLEAN, default=True),
        )
        assert registry.register(upgraded) is upgraded
        assert registry.resolve("Figure").version == 2

    def test_order_preserved(self, registry):
        assert registry.names()[:3] == ["Document", "Heading", "Paragraph"]
        assert [s.name for s in registry] == registry.names()

    def test_unknown_type(self, registry):
        with pytest.raises(UnknownTypeError) as exc_info:
            registry.resolve("code")
        assert exc_info.value.details["type"] == "code"
        assert registry.get("code") is None


class TestFreeze:
    """Test the end of the registration phase"""

    def test_register_after_freeze(self, registry):
        registry.freeze()
        assert registry.is_frozen
        with pytest.raises(RegistryFrozenError):
            registry.register(figure())

    def test_reads_after_freeze(self, registry):
        registry.freeze()
        assert registry.resolve("Text").is_leaf


class TestInlineVariants:
    """Test the Inline naming convention"""

    def test_reference_pair(self, registry):
        assert registry.is_inline_variant_of("InlineCode")
        assert registry.is_inline_variant_of("InlineCode", "Code")
        assert not registry.is_inline_variant_of("InlineCode", "Paragraph")
        assert registry.inline_counterpart("Code") == "InlineCode"
        assert registry.block_counterpart("InlineCode") == "Code"

    def test_no_counterpart(self, registry):
        assert registry.inline_counterpart("Paragraph") is None
        assert registry.block_counterpart("Text") is None
        assert not registry.is_inline_variant_of("Code")

    def test_unregistered_block(self):
        registry = SchemaRegistry([{"name": "InlineMath", "contentClass": "leaf"}])
        assert not registry.is_inline_variant_of("InlineMath")


class TestFieldValue:
    """Test field lookup with schema defaults"""

    def test_present_field(self, registry):
        cell = Node(type="CodeCell", fields={"code": "1", "isEchoed": False})
        assert registry.field_value(cell, "isEchoed") is False

    def test_default(self, registry):
        cell = Node(type="CodeCell", fields={"code": "1"})
        assert registry.field_value(cell, "isEchoed") is True
        assert registry.field_value(cell, "language") is None

    def test_undeclared_field(self, registry):
        with pytest.raises(SchemaError):
            registry.field_value(Node(type="CodeCell", fields={"code": "1"}), "colour")


class TestLoadFile:
    """Test loading schema files"""

    def test_yaml_types_mapping(self, tmp_path):
        path = tmp_path / "schemas.yaml"
        path.write_text(
            "types:\n"
            "  - name: Math\n"
            "    contentClass: leaf\n"
            "  - name: InlineMath\n"
            "    contentClass: leaf\n",
            encoding="utf-8",
        )
        registry = SchemaRegistry()
        loaded = registry.load_file(path)
        assert [s.name for s in loaded] == ["Math", "InlineMath"]
        assert registry.inline_counterpart("Math") == "InlineMath"

    def test_json_list(self, tmp_path):
        path = tmp_path / "schemas.json"
        path.write_text(
            json.dumps([{"name": "Math", "contentClass": "leaf"}]), encoding="utf-8"
        )
        registry = SchemaRegistry()
        registry.load_file(path)
        assert "Math" in registry

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "schemas.yaml"
        path.write_text("name: Math\n", encoding="utf-8")
        with pytest.raises(DocumentLoadError):
            SchemaRegistry().load_file(path)

    def test_entry_not_a_mapping(self, tmp_path):
        path = tmp_path / "schemas.yaml"
        path.write_text("- Text\n", encoding="utf-8")
        with pytest.raises(SchemaError, match="must be a mapping"):
            SchemaRegistry().load_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(DocumentLoadError):
            SchemaRegistry().load_file(tmp_path / "missing.yaml")

    def test_promotions_loaded(self, tmp_path):
        path = tmp_path / "figure.yaml"
        path.write_text(
            "- name: Figure\n"
            "  contentClass: container\n"
            "  version: 2\n"
            "  fields:\n"
            "    label: {kind: string, required: true}\n"
            "  promotions:\n"
            "    - {dataKey: label, field: label, since: 2}\n",
            encoding="utf-8",
        )
        registry = SchemaRegistry()
        registry.load_file(path)
        assert registry.resolve("Figure").promotions == [
            Promotion(data_key="label", field="label", since=2)
        ]
