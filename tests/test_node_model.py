"""
Node model tests

Kind immutability, typed attribute views, fragment flattening and the
mapping form used by AST files.
"""

import pytest

from vaultpress.models.node import (
    Node,
    NodeKind,
    ROLE_TITLE,
    CalloutAttributes,
    fragments_flatten,
    tree_flatten,
    tree_walk,
    node_fromDict,
    node_toDict,
)


class TestNodeBasics:
    """Construction, kind immutability and helpers"""

    def test_kind_cannot_change(self):
        """Assigning kind on an existing node raises"""
        node = Node.text("hello")
        with pytest.raises(AttributeError):
            node.kind = NodeKind.HTML_INLINE
        assert node.kind is NodeKind.TEXT

    def test_value_and_children_are_mutable(self):
        node = Node(NodeKind.PARAGRAPH)
        node.children.append(Node.text("a"))
        node.value = "x"
        assert node.children[0].value == "a"

    def test_defaults_not_shared(self):
        a, b = Node(NodeKind.PARAGRAPH), Node(NodeKind.PARAGRAPH)
        a.attributes["k"] = 1
        a.children.append(Node.text("x"))
        assert b.attributes == {}
        assert b.children == []

    def test_role_helpers_keep_order(self):
        title = Node(NodeKind.PARAGRAPH, role=ROLE_TITLE, children=[Node.text("T")])
        body = [Node.text("1"), Node.text("2"), Node.text("3")]
        callout = Node(NodeKind.CALLOUT, children=[body[0], title, body[1], body[2]])

        assert callout.child_withRole(ROLE_TITLE) is title
        assert [c.value for c in callout.children_withoutRole(ROLE_TITLE)] == ["1", "2", "3"]
        assert Node(NodeKind.CALLOUT).child_withRole(ROLE_TITLE) is None

    def test_children_replace_copies(self):
        node = Node(NodeKind.IMAGE, attributes={"url": "a.png"})
        copy = node.children_replace([])
        copy.attributes["url"] = "img/a.png"
        assert node.attributes["url"] == "a.png"
        assert copy.kind is NodeKind.IMAGE

    def test_plain_text(self):
        node = Node(NodeKind.PARAGRAPH, children=[
            Node.text("Hello "),
            Node(NodeKind.STRONG, children=[Node.text("big")]),
            Node.text(" world"),
        ])
        assert node.plainText_get() == "Hello big world"


class TestTypedAttributes:
    """Typed views over the open attribute bag"""

    def test_callout_defaults_to_note(self):
        assert Node(NodeKind.CALLOUT).attributes_typed() == CalloutAttributes(calloutType="note")

    def test_unknown_keys_ignored(self):
        node = Node(NodeKind.CODE_BLOCK, attributes={"lang": "python", "meta": "x"})
        assert node.attributes_typed().lang == "python"
        assert node.attr("meta") == "x"

    def test_none_values_take_defaults(self):
        node = Node(NodeKind.WIKI_LINK, attributes={"file": "A", "alias": None})
        ref = node.attributes_typed()
        assert ref.file == "A"
        assert ref.alias == ""
        assert ref.linkType == "article"

    def test_table_align_is_tuple(self):
        node = Node(NodeKind.TABLE, attributes={"align": ["left", None]})
        assert node.attributes_typed().align == ("left", None)

    def test_kind_without_view(self):
        assert Node.text("x").attributes_typed() is None

    def test_attr_default(self):
        node = Node(NodeKind.HEADING, attributes={"level": None})
        assert node.attr("level", 1) == 1


class TestFragments:
    """Nop containers and flattening"""

    def test_flatten_nested(self):
        nodes = [
            Node.text("a"),
            Node.fragment([Node.text("b"), Node.fragment([Node.text("c")]), Node.text("d")]),
            Node.text("e"),
        ]
        assert [n.value for n in fragments_flatten(nodes)] == ["a", "b", "c", "d", "e"]

    def test_flatten_idempotent(self):
        nodes = [Node.fragment([Node.fragment([Node.text("x")])]), Node.text("y")]
        once = fragments_flatten(nodes)
        assert fragments_flatten(once) == once

    def test_empty_fragment_disappears(self):
        assert fragments_flatten([Node.fragment([]), Node.text("x")]) == [Node.text("x")]

    def test_tree_flatten_removes_every_nop(self):
        tree = Node(NodeKind.DOCUMENT, children=[
            Node(NodeKind.BLOCK_QUOTE, children=[
                Node.fragment([Node.text("a"), Node.fragment([Node.text("b")])]),
            ]),
        ])
        flat = tree_flatten(tree)
        assert all(not n.is_fragment for n in tree_walk(flat))
        assert [n.value for n in flat.children[0].children] == ["a", "b"]
        assert tree_flatten(flat) == flat

    def test_tree_flatten_root_fragment_becomes_document(self):
        flat = tree_flatten(Node.fragment([Node.text("a"), Node.text("b")]))
        assert flat.kind is NodeKind.DOCUMENT
        assert len(flat.children) == 2

    def test_tree_flatten_unchanged_returns_same_node(self):
        tree = Node(NodeKind.DOCUMENT, children=[Node(NodeKind.PARAGRAPH, children=[Node.text("a")])])
        assert tree_flatten(tree) is tree

    def test_tree_walk_document_order(self):
        tree = Node(NodeKind.DOCUMENT, children=[
            Node(NodeKind.PARAGRAPH, children=[Node.text("1"), Node.text("2")]),
            Node.text("3"),
        ])
        assert [n.value for n in tree_walk(tree) if n.kind is NodeKind.TEXT] == ["1", "2", "3"]


class TestMappingForm:
    """Conversion from and to the flat AST mapping"""

    def test_from_dict(self):
        data = {
            "type": "Callout",
            "calloutType": "warning",
            "children": [
                {"type": "Paragraph", "role": "title", "children": [{"type": "Text", "value": "Heads up"}]},
                {"type": "Paragraph", "children": [{"type": "Text", "value": "Check X"}]},
            ],
        }
        node = node_fromDict(data)
        assert node.kind is NodeKind.CALLOUT
        assert node.attributes == {"calloutType": "warning"}
        assert node.children[0].role == ROLE_TITLE
        assert node.children[1].children[0].value == "Check X"

    def test_to_dict_inverse(self):
        data = {"type": "Image", "url": "a.png", "alt": "A"}
        assert node_toDict(node_fromDict(data)) == data

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Bogus"):
            node_fromDict({"type": "Bogus"})

    def test_missing_type(self):
        with pytest.raises(ValueError):
            node_fromDict({"value": "x"})
