"""
TypeSchema Unit Tests

Tests schema construction, derived defaults and compatibility rules
"""

import pytest

from oxa_tree.core.errors import SchemaError
from oxa_tree.core.schema import (
    Category,
    ChildContentClass,
    ContentClass,
    FieldKind,
    FieldSpec,
    Promotion,
    TypeSchema,
    is_inline_name,
    root_name,
)


class TestFieldKind:
    """Test kind matching of raw values"""

    def test_string(self):
        assert FieldKind.STRING.matches("x")
        assert not FieldKind.STRING.matches(1)

    def test_number_excludes_bool(self):
        """bool is a subclass of int but is not a number"""
        assert FieldKind.NUMBER.matches(1)
        assert FieldKind.NUMBER.matches(1.5)
        assert not FieldKind.NUMBER.matches(True)

    def test_boolean(self):
        assert FieldKind.BOOLEAN.matches(False)
        assert not FieldKind.BOOLEAN.matches(0)

    def test_object_and_node_list(self):
        assert FieldKind.OBJECT.matches({})
        assert not FieldKind.OBJECT.matches([])
        assert FieldKind.NODE_LIST.matches([])
        assert not FieldKind.NODE_LIST.matches({})

    def test_scalar(self):
        for value in ("a", 1, 2.5, True):
            assert FieldKind.SCALAR.matches(value)
        assert not FieldKind.SCALAR.matches(None)
        assert not FieldKind.SCALAR.matches([1])


class TestTypeSchemaConstruction:
    """Test schema construction and validation"""

    def test_container_defaults_to_any_children(self):
        schema = TypeSchema(name="Section", content_class=ContentClass.CONTAINER)
        assert schema.child_content_class is ChildContentClass.ANY

    def test_category_derived_from_inline_prefix(self):
        assert TypeSchema(name="InlineMath", content_class="leaf").category is Category.INLINE
        assert TypeSchema(name="Math", content_class="leaf").category is Category.BLOCK

    def test_explicit_category_kept(self):
        schema = TypeSchema(name="Text", content_class="leaf", category="inline")
        assert schema.category is Category.INLINE

    @pytest.mark.parametrize("name", ["code", "", "Code-Block", "1Code", "Code Block"])
    def test_invalid_name(self, name):
        with pytest.raises(SchemaError):
            TypeSchema(name=name, content_class="leaf")

    def test_field_shadowing_base_field(self):
        with pytest.raises(SchemaError):
            TypeSchema(
                name="Bad",
                content_class="leaf",
                fields={"data": FieldSpec(kind=FieldKind.OBJECT)},
            )

    def test_child_class_on_leaf_rejected(self):
        with pytest.raises(SchemaError):
            TypeSchema(name="Bad", content_class="leaf", child_content_class="inline")

    def test_value_kind_limited_to_scalars(self):
        with pytest.raises(SchemaError):
            TypeSchema(name="Bad", content_class="leaf", value_kind="object")

    def test_promotion_to_undeclared_field(self):
        with pytest.raises(SchemaError):
            TypeSchema(
                name="Figure",
                content_class="empty",
                promotions=[Promotion(data_key="src", field="src")],
            )

    def test_default_must_match_kind(self):
        with pytest.raises(SchemaError):
            FieldSpec(kind=FieldKind.BOOLEAN, default="yes")


class TestTypeSchemaDescriptions:
    """Test parsing and dumping schema descriptions"""

    def test_from_camel_case_dict(self):
        schema = TypeSchema.from_dict(
            {
                "name": "Figure",
                "contentClass": "container",
                "childContentClass": "block",
                "version": 2,
                "fields": {
                    "label": {"kind": "string", "required": True},
                    "numbered": {"kind": "boolean", "defaultValue": True},
                },
                "promotions": [{"dataKey": "label", "field": "label", "since": 2}],
            }
        )
        assert schema.content_class is ContentClass.CONTAINER
        assert schema.child_content_class is ChildContentClass.BLOCK
        assert schema.fields["label"].required is True
        assert schema.defaults() == {"numbered": True}
        assert schema.promotion_for("label").data_key == "label"

    def test_from_dict_invalid_kind(self):
        with pytest.raises(SchemaError):
            TypeSchema.from_dict(
                {"name": "Figure", "contentClass": "empty", "fields": {"x": {"kind": "date"}}}
            )

    def test_from_dict_missing_content_class(self):
        with pytest.raises(SchemaError):
            TypeSchema.from_dict({"name": "Figure"})

    @pytest.mark.parametrize("description", ["Text", ["Text"], None, 3])
    def test_from_dict_not_a_mapping(self, description):
        with pytest.raises(SchemaError, match="must be a mapping"):
            TypeSchema.from_dict(description)

    def test_to_dict_roundtrip(self):
        schema = TypeSchema(
            name="Heading",
            content_class="container",
            child_content_class="inline",
            fields={"level": FieldSpec(kind=FieldKind.NUMBER, required=True)},
        )
        assert TypeSchema.from_dict(schema.to_dict()) == schema

    def test_required_fields(self):
        schema = TypeSchema(
            name="CodeCell",
            content_class="empty",
            fields={
                "code": FieldSpec(kind="string", required=True),
                "language": FieldSpec(kind="string"),
            },
        )
        assert schema.required_fields() == ["code"]


class TestCompatibility:
    """Test schema evolution rules"""

    def base(self) -> TypeSchema:
        return TypeSchema(
            name="Image",
            content_class="empty",
            category="inline",
            fields={"title": FieldSpec(kind="string")},
        )

    def test_promoting_required_field_is_compatible(self):
        successor = TypeSchema(
            name="Image",
            content_class="empty",
            category="inline",
            version=2,
            fields={
                "title": FieldSpec(kind="string"),
                "src": FieldSpec(kind="string", required=True),
            },
            promotions=[Promotion(data_key="src", field="src", since=2)],
        )
        assert successor.is_compatible_with(self.base())

    def test_new_optional_field_is_compatible(self):
        successor = self.base().model_copy(
            update={
                "version": 2,
                "fields": {
                    "title": FieldSpec(kind="string"),
                    "width": FieldSpec(kind="number"),
                },
            }
        )
        assert successor.is_compatible_with(self.base())

    def test_same_version_is_not_compatible(self):
        changed = self.base().model_copy(
            update={"fields": {"title": FieldSpec(kind="string"), "w": FieldSpec(kind="number")}}
        )
        assert not changed.is_compatible_with(self.base())

    def test_new_required_field_without_promotion(self):
        successor = self.base().model_copy(
            update={
                "version": 2,
                "fields": {
                    "title": FieldSpec(kind="string"),
                    "src": FieldSpec(kind="string", required=True),
                },
            }
        )
        assert not successor.is_compatible_with(self.base())

    def test_removed_field_is_not_compatible(self):
        successor = self.base().model_copy(update={"version": 2, "fields": {}})
        assert not successor.is_compatible_with(self.base())

    def test_changed_field_kind_is_not_compatible(self):
        successor = self.base().model_copy(
            update={"version": 2, "fields": {"title": FieldSpec(kind="number")}}
        )
        assert not successor.is_compatible_with(self.base())

    def test_changed_content_class_is_not_compatible(self):
        successor = TypeSchema(name="Image", content_class="leaf", category="inline", version=2,
                               fields={"title": FieldSpec(kind="string")})
        assert not successor.is_compatible_with(self.base())


class TestPromotionWindow:
    """Test compatibility windows of promotions"""

    def test_open_ended_window(self):
        assert Promotion(data_key="a", field="a").is_open(99)

    def test_bounded_window(self):
        promotion = Promotion(data_key="a", field="a", since=2, until=3)
        assert promotion.is_open(3)
        assert not promotion.is_open(4)


class TestNaming:
    """Test inline naming helpers"""

    def test_is_inline_name(self):
        assert is_inline_name("InlineCode")
        assert not is_inline_name("Inline")
        assert not is_inline_name("Inlined")
        assert not is_inline_name("Code")

    def test_root_name(self):
        assert root_name("InlineCode") == "Code"
        assert root_name("Code") == "Code"
