"""Tests for the Node/Layer tree model."""

import pytest

from ndf.nodes import Layer, Node


# ---------------------------------------------------------------------------
# Node.add_entry / append
# ---------------------------------------------------------------------------

def test_add_entry_fills_one_layer():
    root = Node()
    root.add_entry("A", "1")
    root.add_entry("B", "2")
    assert len(root) == 1
    assert list(root[0].keys()) == ["A", "B"]


def test_add_entry_repeated_key_opens_layer():
    root = Node()
    root.add_entry("A", "1")
    root.add_entry("B")
    root.add_entry("A", "2")
    assert len(root) == 2
    assert root[0].get_value("A") == "1"
    assert root[1].get_value("A") == "2"


def test_add_entry_returns_node():
    root = Node()
    child = root.add_entry("Block")
    child.add_entry("Inner", "x")
    assert root[0]["Block"] is child
    assert child[0]["Inner"].value == "x"


def test_append_drops_keyless_node():
    root = Node()
    root.append(Node(value="orphan"))
    assert root.children == []


def test_str_and_is_root():
    assert str(Node(key="A")) == ""
    assert str(Node(key="A", value="1")) == "1"
    assert Node().is_root()
    assert not Node(key="").is_root()


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

def test_first_and_find_all():
    root = Node()
    root.add_entry("A", "1")
    root.add_entry("A", "2")
    root.add_entry("B", "3")
    assert root.first("A").value == "1"
    assert [node.value for node in root.find_all("A")] == ["1", "2"]
    assert root.first("missing") is None


def test_walk_is_preorder():
    root = Layer.from_text("A{B:1;C{D:2;}}E:3;")
    node = Node(children=[root])
    assert [n.key for n in node.walk()] == [None, "A", "B", "C", "D", "E"]


def test_walk_deep_tree():
    root = Node()
    current = root
    for _ in range(5000):
        current = current.add_entry("N")
    assert sum(1 for _ in root.walk()) == 5001


# ---------------------------------------------------------------------------
# Layer
# ---------------------------------------------------------------------------

class TestLayer:
    def test_add_and_get(self):
        layer = Layer()
        layer.add(Node(key="A", value="1"))
        assert "A" in layer
        assert layer.get_value("A") == "1"
        assert layer.get_value("B") is None
        assert layer.get("B") is None

    def test_add_duplicate_raises(self):
        layer = Layer()
        layer.add(Node(key="A"))
        with pytest.raises(KeyError):
            layer.add(Node(key="A"))

    def test_add_without_key_raises(self):
        with pytest.raises(ValueError):
            Layer().add(Node())

    def test_remove(self):
        layer = Layer()
        node = Node(key="A")
        layer.add(node)
        assert layer.remove("A") is node
        assert layer.remove("A") is None
        assert not layer

    def test_equality_is_order_sensitive(self):
        first = Layer({"A": Node(key="A", value="1"), "B": Node(key="B", value="2")})
        same = Layer({"A": Node(key="A", value="1"), "B": Node(key="B", value="2")})
        swapped = Layer({"B": Node(key="B", value="2"), "A": Node(key="A", value="1")})
        assert first == same
        assert first != swapped

    def test_from_text(self):
        layer = Layer.from_text("A:1;B:2;A:3;")
        assert list(layer.keys()) == ["A", "B"]
        assert Layer.from_text("") == Layer()

    def test_to_text(self):
        layer = Layer.from_text("A:1;B{C:2;}")
        assert layer.to_text(pretty=False) == "A:1;B{C:2;}"
        assert layer.to_text() == "A:1;\nB\n{\n\tC:2;\n}"


# ---------------------------------------------------------------------------
# Copying and rewriting values
# ---------------------------------------------------------------------------

def test_clone_is_deep():
    original = Node(children=[Layer.from_text("A{B:1;}")])
    copy = original.clone()
    assert copy == original
    copy[0]["A"][0]["B"].value = "2"
    copy[0]["A"].add_entry("C")
    assert original[0]["A"][0]["B"].value == "1"
    assert len(original[0]["A"]) == 1


def test_layer_clone():
    layer = Layer.from_text("A:1;")
    copy = layer.clone()
    copy["A"].value = "2"
    assert layer["A"].value == "1"


def test_replace_values_exact_match():
    root = Node(children=[Layer.from_text("A:x;B:xx;C{D:x;}")])
    root.replace_values("x", "y")
    layer = root[0]
    assert layer["A"].value == "y"
    assert layer["B"].value == "xx"
    assert layer["C"][0]["D"].value == "y"


def test_substitute_inside_values():
    root = Node(children=[Layer.from_text("Name:Sword N;Sub{Label:N of N;}")])
    root.substitute("N", "3")
    layer = root[0]
    assert layer["Name"].value == "Sword 3"
    assert layer["Sub"][0]["Label"].value == "3 of 3"
    assert list(layer.keys()) == ["Name", "Sub"]
