# tests/dom/test_node_model.py
import pytest

from a11y_auditor.dom.core import AuditContext, Node
from a11y_auditor.model import AuditOptions, format_locator, parse_locator


@pytest.fixture
def tree():
    """
    #document
      main
        h1 "Title"
        p  "Hello " b "world"
    """
    return Node(tag="#document", children=[
        Node(tag="main", children=[
            Node(tag="h1", children=[Node.text_node("Title")]),
            Node(tag="p", children=[
                Node.text_node("Hello "),
                Node(tag="b", children=[Node.text_node("world")]),
            ]),
        ]),
    ])


def test_parent_links_and_paths(tree):
    main = tree.children[0]
    bold = main.children[1].children[1]

    assert main.parent is tree
    assert tree.parent is None
    assert bold.path() == (0, 1, 1)
    assert bold.locator == "/0/1/1"
    assert tree.path() == ()
    assert tree.locator == "/"


def test_ancestors_are_root_first(tree):
    bold = tree.children[0].children[1].children[1]
    assert [a.tag for a in bold.ancestors()] == ["#document", "main", "p"]


def test_walk_is_document_order(tree):
    tags = [n.tag for n in tree.walk()]
    assert tags == ["#document", "main", "h1", "text", "p", "text", "b", "text"]
    assert [n.tag for n in tree.iter_elements()] == ["#document", "main", "h1", "p", "b"]


def test_text_content_concatenates_runs(tree):
    paragraph = tree.children[0].children[1]
    assert paragraph.text_content() == "Hello world"
    assert tree.text_content() == "TitleHello world"


def test_child_elements_skips_text(tree):
    paragraph = tree.children[0].children[1]
    assert [c.tag for c in paragraph.child_elements()] == ["b"]
    assert paragraph.child_elements("i") == []


def test_tag_and_attribute_normalization():
    node = Node(tag=" IMG ", attrs={"SRC": "a.png", "class": ["hero", "wide"], "hidden": None})
    assert node.tag == "img"
    assert node.attribute("src") == "a.png"
    assert node.attribute("Class") == "hero wide"
    assert node.has_attribute("hidden")
    assert node.attribute("hidden") == ""
    assert node.classes == ["hero", "wide"]


def test_role_uses_first_token():
    assert Node(tag="div", attrs={"role": " Button link"}).role == "button"
    assert Node(tag="div").role == ""


@pytest.mark.parametrize("tag, attrs, expected", [
    ("h1", {}, 1),
    ("h6", {}, 6),
    ("div", {"role": "heading", "aria-level": "4"}, 4),
    ("div", {"role": "heading"}, 2),
    ("div", {"role": "heading", "aria-level": "x"}, 2),
    ("p", {}, None),
])
def test_heading_level(tag, attrs, expected):
    assert Node(tag=tag, attrs=attrs).level == expected


def test_locator_helpers():
    assert parse_locator("/0/2/1") == (0, 2, 1)
    assert parse_locator("/") == ()
    assert parse_locator([1, 2]) == (1, 2)
    assert format_locator((3, 0)) == "/3/0"
    with pytest.raises(ValueError):
        parse_locator("/a/b")
    with pytest.raises(ValueError):
        parse_locator((0, -1))


def test_audit_context_heading_stack():
    ctx = AuditContext(Node(tag="#document"), AuditOptions())
    assert ctx.previous_heading_level is None
    for level in (1, 2, 3):
        ctx.push_heading(level)
    ctx.push_heading(2)
    assert ctx.heading_stack == [1, 2]
    assert ctx.previous_heading_level == 2


def test_audit_context_id_lookups():
    root = Node(tag="#document", children=[
        Node(tag="label", attrs={"for": "email"}, children=[Node.text_node("E-mail")]),
        Node(tag="input", attrs={"id": "email"}),
        Node(tag="span", attrs={"id": "hint"}, children=[Node.text_node("We never share it")]),
        Node(tag="span", attrs={"id": "hint"}, children=[Node.text_node("duplicate")]),
    ])
    ctx = AuditContext(root, AuditOptions())

    assert ctx.ids == {"email", "hint"}
    assert ctx.label_targets == {"email"}
    assert ctx.text_of_ids("hint missing") == "We never share it"
    assert ctx.text_of_ids(None) == ""
