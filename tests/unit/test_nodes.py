"""
Node Model Unit Tests
"""

import pytest
from pydantic import ValidationError

from oxa_tree.core.nodes import Node, dump_field_value, element, text
from oxa_tree.core.schema import ContentClass


class TestNode:
    """Test the immutable node record"""

    def test_content_class(self):
        assert text("a").content_class is ContentClass.LEAF
        assert element("Paragraph").content_class is ContentClass.CONTAINER
        assert Node(type="ThematicBreak").content_class is ContentClass.EMPTY

    def test_empty_children_is_container(self):
        node = element("Paragraph")
        assert node.children == ()
        assert node.is_container

    def test_frozen(self):
        node = text("a")
        with pytest.raises(ValidationError):
            node.value = "b"

    def test_boolean_value_kept(self):
        assert Node(type="Flag", value=True).value is True
        assert Node(type="Count", value=3).value == 3

    def test_field_access(self):
        node = Node(type="Code", value="x", fields={"language": "python"})
        assert node.get("language") == "python"
        assert node.has("language")
        assert node.get("missing", "none") == "none"
        assert not node.has("missing")


class TestCopyOnWrite:
    """Test with_* helpers"""

    def test_with_fields(self):
        node = Node(type="Code", value="x")
        changed = node.with_fields(language="r")
        assert changed.get("language") == "r"
        assert not node.has("language")

    def test_without_fields(self):
        node = Node(type="Code", value="x", fields={"language": "r"})
        assert node.without_fields("language").fields == {}
        assert node.get("language") == "r"

    def test_with_children_shares_siblings(self):
        a, b = text("a"), text("b")
        parent = element("Paragraph", a, b)
        changed = parent.with_children([parent.children[0], text("c")])
        assert changed.children[0] is a
        assert parent.children[1] is b

    def test_with_data(self):
        node = text("a").with_data({"k": 1})
        assert node.data == {"k": 1}
        assert node.with_data(None).data is None


class TestToDict:
    """Test serialization back to the raw shape"""

    def test_key_order(self):
        node = Node(
            type="Heading",
            children=(text("Hi"),),
            data={"id": "intro"},
            fields={"level": 1},
        )
        assert list(node.to_dict()) == ["type", "level", "children", "data"]

    def test_absent_fields_omitted(self):
        assert Node(type="ThematicBreak").to_dict() == {"type": "ThematicBreak"}

    def test_empty_data_kept(self):
        assert Node(type="ThematicBreak", data={}).to_dict() == {
            "type": "ThematicBreak",
            "data": {},
        }

    def test_node_list_field(self):
        cell = Node(
            type="CodeCell",
            fields={"code": "1+1", "outputs": (text("2"),)},
        )
        assert cell.to_dict()["outputs"] == [{"type": "Text", "value": "2"}]

    def test_data_is_copied(self):
        node = Node(type="ThematicBreak", data={"tags": ["a"]})
        raw = node.to_dict()
        raw["data"]["tags"].append("b")
        assert node.data == {"tags": ["a"]}


class TestDumpFieldValue:
    """Test typed field serialization"""

    def test_scalar(self):
        assert dump_field_value("x") == "x"

    def test_node_tuple(self):
        assert dump_field_value((text("a"),)) == [{"type": "Text", "value": "a"}]

    def test_object_copied(self):
        value = {"a": [1]}
        dumped = dump_field_value(value)
        assert dumped == value
        assert dumped is not value
