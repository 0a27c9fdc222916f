"""Unit tests for schema parsing and field tree rendering."""

import copy

import pytest


def _nested_objects(depth):
    node = {"type": "string"}
    for _ in range(depth):
        node = {"type": "object", "properties": {"child": node}}
    return node


def _descend(view):
    """Follow the first child until a leaf or a truncation marker."""
    levels = 0
    while view.children and not view.children[0].truncated:
        view = view.children[0]
        levels += 1
    return view, levels


class TestSchemaNodeParsing:

    @pytest.mark.unit
    def test_object_with_properties(self):
        from crdviz.models import NodeKind, SchemaNode

        node = SchemaNode.from_dict({
            "type": "object",
            "description": "A widget",
            "properties": {"size": {"type": "integer"}},
            "required": ["size"],
        })
        assert node.kind is NodeKind.OBJECT
        assert node.description == "A widget"
        assert node.required == frozenset({"size"})
        assert node.properties["size"].type == "integer"

    @pytest.mark.unit
    def test_untyped_node_is_object(self):
        from crdviz.models import NodeKind, SchemaNode

        assert SchemaNode.from_dict({}).kind is NodeKind.OBJECT

    @pytest.mark.unit
    def test_int_or_string_is_scalar(self):
        from crdviz.models import NodeKind, SchemaNode

        node = SchemaNode.from_dict({"x-kubernetes-int-or-string": True})
        assert node.kind is NodeKind.SCALAR
        assert node.int_or_string is True

    @pytest.mark.unit
    def test_type_list_with_null_is_nullable(self):
        from crdviz.models import SchemaNode

        node = SchemaNode.from_dict({"type": ["string", "null"]})
        assert node.type is None
        assert node.nullable is True
        assert node.union_types == ("string",)

    @pytest.mark.unit
    def test_any_of_types_collected(self):
        from crdviz.models import SchemaNode

        node = SchemaNode.from_dict({
            "anyOf": [{"type": "integer"}, {"type": "string"}, {"type": "integer"}],
        })
        assert node.union_types == ("integer", "string")

    @pytest.mark.unit
    def test_malformed_fragments_degrade(self):
        from crdviz.models import SchemaNode

        node = SchemaNode.from_dict({
            "type": "object",
            "properties": ["not", "a", "mapping"],
            "required": ["a", 3],
        })
        assert node.properties is None
        assert node.required == frozenset({"a"})

        array = SchemaNode.from_dict({"type": "array", "items": [{"type": "string"}]})
        assert array.items is None

        assert SchemaNode.from_dict("garbage") == SchemaNode()

    @pytest.mark.unit
    def test_children_built_from_existing_nodes(self):
        from crdviz.models import SchemaNode

        leaf = SchemaNode(type="boolean")
        node = SchemaNode(type="object", raw_properties={"enabled": leaf})
        assert node.properties["enabled"] is leaf

    @pytest.mark.unit
    def test_equality_includes_children(self):
        from crdviz.models import SchemaNode

        with_child = SchemaNode.from_dict({"type": "object", "properties": {"x": {"type": "string"}}})
        without_child = SchemaNode.from_dict({"type": "object"})
        assert with_child != without_child
        assert with_child == SchemaNode.from_dict(
            {"type": "object", "properties": {"x": {"type": "string"}}}
        )

        string_array = SchemaNode.from_dict({"type": "array", "items": {"type": "string"}})
        int_array = SchemaNode.from_dict({"type": "array", "items": {"type": "integer"}})
        assert string_array != int_array


class TestTypeLabel:

    @pytest.mark.unit
    @pytest.mark.parametrize("schema,expected", [
        ({"type": "string"}, "string"),
        ({"type": "string", "nullable": True}, "string (nullable)"),
        ({}, "object"),
        ({"nullable": True}, "object (nullable)"),
        ({"x-kubernetes-int-or-string": True}, "integer|string"),
        ({"type": ["integer", "null"]}, "integer (nullable)"),
        ({"oneOf": [{"type": "boolean"}, {"type": "string"}]}, "boolean|string"),
    ])
    def test_labels(self, schema, expected):
        from crdviz.models import SchemaNode
        from crdviz.schema_tree import type_label

        assert type_label(SchemaNode.from_dict(schema)) == expected


class TestRender:

    @pytest.mark.unit
    def test_name_and_tags_scenario(self):
        from crdviz.models import SchemaNode
        from crdviz.schema_tree import render

        schema = SchemaNode.from_dict({
            "type": "object",
            "properties": {
                "tags": {"type": "array", "items": {"type": "string"}},
                "name": {"type": "string"},
            },
            "required": ["name"],
        })
        tree = render(schema)

        assert [c.field_name for c in tree.children] == ["name", "tags"]
        name, tags = tree.children
        assert name.required is True
        assert name.type_label == "string"
        assert name.children == []
        assert tags.required is False
        assert tags.type_label == "array"
        assert len(tags.children) == 1
        element = tags.children[0]
        assert element.field_name == "[]"
        assert element.type_label == "string"
        assert element.children == []

    @pytest.mark.unit
    def test_open_object_is_leaf(self):
        from crdviz.models import SchemaNode
        from crdviz.schema_tree import render

        tree = render(SchemaNode.from_dict({
            "type": "object",
            "x-kubernetes-preserve-unknown-fields": True,
        }))
        assert tree.type_label == "object"
        assert tree.children == []

    @pytest.mark.unit
    def test_array_without_items_is_leaf(self):
        from crdviz.models import SchemaNode
        from crdviz.schema_tree import render

        assert render(SchemaNode.from_dict({"type": "array"})).children == []

    @pytest.mark.unit
    def test_array_of_arrays(self):
        from crdviz.models import SchemaNode
        from crdviz.schema_tree import render

        tree = render(SchemaNode.from_dict({
            "type": "array",
            "items": {"type": "array", "items": {"type": "integer"}},
        }))
        inner = tree.children[0]
        assert inner.field_name == "[]"
        assert inner.type_label == "array"
        assert inner.children[0].field_name == "[]"
        assert inner.children[0].type_label == "integer"

    @pytest.mark.unit
    def test_required_name_missing_from_properties(self):
        from crdviz.models import SchemaNode
        from crdviz.schema_tree import render

        tree = render(SchemaNode.from_dict({
            "type": "object",
            "properties": {"present": {"type": "string"}},
            "required": ["present", "absent"],
        }))
        assert [c.field_name for c in tree.children] == ["present"]
        assert tree.children[0].required is True

    @pytest.mark.unit
    def test_case_variants_are_distinct_fields(self):
        from crdviz.models import SchemaNode
        from crdviz.schema_tree import render

        tree = render(SchemaNode.from_dict({
            "type": "object",
            "properties": {
                "b": {"type": "string"},
                "B": {"type": "integer"},
                "a": {"type": "boolean"},
            },
            "required": ["b"],
        }))
        assert [c.field_name for c in tree.children] == ["B", "a", "b"]
        assert [c.required for c in tree.children] == [False, False, True]

    @pytest.mark.unit
    def test_untyped_node_with_properties_renders_children(self):
        from crdviz.models import SchemaNode
        from crdviz.schema_tree import render

        tree = render(SchemaNode.from_dict({"properties": {"x": {"type": "number"}}}))
        assert tree.type_label == "object"
        assert [c.field_name for c in tree.children] == ["x"]

    @pytest.mark.unit
    def test_scalar_ignores_stray_properties(self):
        from crdviz.models import SchemaNode
        from crdviz.schema_tree import render

        tree = render(SchemaNode.from_dict({
            "type": "string",
            "properties": {"x": {"type": "string"}},
        }))
        assert tree.children == []

    @pytest.mark.unit
    def test_display_attributes_carried(self):
        from crdviz.models import SchemaNode
        from crdviz.schema_tree import render

        tree = render(SchemaNode.from_dict({
            "type": "object",
            "properties": {
                "mode": {
                    "type": "string",
                    "enum": ["Fast", "Safe"],
                    "default": "Safe",
                    "description": "How to run",
                },
                "when": {"type": "string", "format": "date-time"},
            },
        }), field_name="Widget")
        data = tree.to_dict()
        assert data["fieldName"] == "Widget"
        mode, when = data["children"]
        assert mode["enum"] == ["Fast", "Safe"]
        assert mode["default"] == "Safe"
        assert mode["description"] == "How to run"
        assert when["format"] == "date-time"
        assert "enum" not in when
        assert "truncated" not in when

    @pytest.mark.unit
    def test_render_is_deterministic_and_pure(self):
        from crdviz.models import SchemaNode
        from crdviz.schema_tree import render

        raw = {
            "type": "object",
            "properties": {
                "spec": {
                    "type": "object",
                    "properties": {
                        "zeta": {"type": "string"},
                        "alpha": {"type": "array", "items": {"type": "object"}},
                    },
                    "required": ["zeta"],
                },
                "status": {"type": "object", "nullable": True},
            },
        }
        snapshot = copy.deepcopy(raw)
        node = SchemaNode.from_dict(raw)

        first = render(node, "Widget").to_dict()
        second = render(node, "Widget").to_dict()

        assert first == second
        assert raw == snapshot


class TestDepthCeiling:

    @pytest.mark.unit
    def test_deep_schema_is_truncated(self):
        from crdviz.models import SchemaNode
        from crdviz.schema_tree import MAX_DEPTH, TRUNCATED_FIELD_NAME, render

        tree = render(SchemaNode.from_dict(_nested_objects(10000)))

        last, levels = _descend(tree)
        assert levels == MAX_DEPTH
        assert len(last.children) == 1
        marker = last.children[0]
        assert marker.truncated is True
        assert marker.field_name == TRUNCATED_FIELD_NAME
        assert marker.children == []

    @pytest.mark.unit
    def test_self_referencing_schema_terminates(self):
        from crdviz.models import SchemaNode
        from crdviz.schema_tree import render

        raw = {"type": "object", "properties": {}}
        raw["properties"]["self"] = raw

        tree = render(SchemaNode.from_dict(raw), max_depth=5)
        last, levels = _descend(tree)
        assert levels == 5
        assert last.children[0].truncated is True

    @pytest.mark.unit
    def test_shallow_schema_has_no_marker(self):
        from crdviz.models import SchemaNode
        from crdviz.schema_tree import MAX_DEPTH, render

        tree = render(SchemaNode.from_dict(_nested_objects(MAX_DEPTH)))
        last, levels = _descend(tree)
        assert levels == MAX_DEPTH
        assert last.children == []
        assert last.type_label == "string"

    @pytest.mark.unit
    def test_leaf_at_ceiling_gets_no_marker(self):
        from crdviz.models import SchemaNode
        from crdviz.schema_tree import render

        tree = render(SchemaNode.from_dict({
            "type": "object",
            "properties": {
                "leaf": {"type": "string"},
                "open": {"type": "object"},
                "nested": {"type": "object", "properties": {"x": {"type": "string"}}},
            },
        }), max_depth=1)
        children = {c.field_name: c for c in tree.children}
        assert children["leaf"].children == []
        assert children["open"].children == []
        assert children["nested"].children[0].truncated is True

    @pytest.mark.unit
    def test_invalid_max_depth(self):
        from crdviz.models import SchemaNode
        from crdviz.schema_tree import render

        with pytest.raises(ValueError):
            render(SchemaNode(), max_depth=0)


class TestCountFields:

    @pytest.mark.unit
    def test_counts_views_but_not_markers(self):
        from crdviz.models import SchemaNode
        from crdviz.schema_tree import count_fields, render

        tree = render(SchemaNode.from_dict({
            "type": "object",
            "properties": {
                "a": {"type": "string"},
                "b": {"type": "array", "items": {"type": "string"}},
            },
        }))
        assert count_fields(tree) == 4

        truncated = render(SchemaNode.from_dict(_nested_objects(3)), max_depth=1)
        assert count_fields(truncated) == 2
