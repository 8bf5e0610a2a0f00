# tests/dom/test_qngine.py
import pytest

from a11y_auditor.dom.core import Hit, Node, audit_rule
from a11y_auditor.dom.qngine import INTERNAL_RULE_ERROR, QNGINE, audit
from a11y_auditor.dom.registry import DEFAULT_REGISTRY, RuleRegistry
from a11y_auditor.errors import InvalidOptions, MalformedTree
from a11y_auditor.model import AuditOptions, Category, Severity

BUSY_PAGE = """
<div class="page">
  <ul><li><a href="/">Home</a></li><li><a href="/a">About</a></li><li><a href="/c">Contact</a></li></ul>
  <h1>Welcome</h1>
  <h3>News</h3>
  <img src="hero.jpg">
  <img src="team.png" alt="team.png">
  <a href="/more" target="_blank">Read more</a>
  <input type="text" name="q">
  <div onclick="toggle()">Menu</div>
  <button aria-hidden="true"><i class="fa fa-bars"></i></button>
  <a href="/x" tabindex="2" style="outline: none">X</a>
  <p style="color: #999; background: #fff" aria-describedby="gone">Faint text</p>
</div>
"""


@pytest.fixture
def engine():
    return QNGINE()


@audit_rule("always-broken", Category.IMAGES, Severity.WARNING, tags=("img",))
def always_broken(node, ctx):
    """Fails on every image."""
    raise RuntimeError("boom")


@audit_rule("broken-once", Category.STRUCTURE, Severity.WARNING, tags=("h3",))
def broken_once(node, ctx):
    """Fails on h3 headings."""
    raise KeyError("level")


# --- Acceptance scenarios ---

def test_image_without_alt_gives_one_error(audit_html):
    report = audit_html("<main><img src='cat.png'></main>")
    findings = report.for_rule("img-alt-missing")

    assert len(findings) == 1
    assert findings[0].severity == Severity.ERROR
    assert findings[0].node_path == (0, 0)


def test_empty_alt_is_decorative(audit_html):
    report = audit_html("<main><img src='cat.png' alt=''></main>")
    assert report.for_rule("img-alt-missing") == []
    assert report.for_rule("img-alt-generic") == []


def test_skipped_heading_level(audit_html):
    report = audit_html("<main><h1>A</h1><h3>B</h3></main>")
    findings = report.for_rule("heading-skip")

    assert len(findings) == 1
    assert findings[0].severity == Severity.WARNING
    assert findings[0].tag == "h3"


def test_vague_new_tab_link_gets_both_findings_on_one_path(audit_html):
    report = audit_html("<main><a target='_blank'>Click here</a></main>")
    vague = report.for_rule("link-text-vague")
    new_tab = report.for_rule("link-new-tab-unlabeled")

    assert len(vague) == 1 and len(new_tab) == 1
    assert vague[0].node_path == new_tab[0].node_path == (0, 0)


def test_label_association_removes_unlabeled_input(audit_html):
    assert len(audit_html("<main><input></main>").for_rule("form-input-unlabeled")) == 1
    assert audit_html("<main><label for='x'>Name</label><input id='x'></main>").for_rule("form-input-unlabeled") == []


def test_failing_rule_is_isolated(builder):
    registry = RuleRegistry(list(DEFAULT_REGISTRY.all_rules()) + [always_broken])
    root = builder.parse("<main><img src='a.png'><img src='b.png'></main>")

    report = QNGINE(registry).run_audit(root)
    internal = report.for_rule(INTERNAL_RULE_ERROR)

    assert len(internal) == 1
    assert internal[0].details["failed_rule"] == "always-broken"
    assert internal[0].severity == Severity.ERROR
    assert internal[0].category == Category.IMAGES
    assert "always-broken" in internal[0].message
    # every failure is counted, only the first one becomes a finding
    assert report.rule_errors == 2
    assert [f.node_path for f in report.for_rule("img-alt-missing")] == [(0, 0), (0, 1)]


def test_each_failing_rule_reports_once(builder):
    registry = RuleRegistry(list(DEFAULT_REGISTRY.all_rules()) + [always_broken, broken_once])
    root = builder.parse("<main><h1>t</h1><h3>s</h3><img src='a.png'></main>")

    report = QNGINE(registry).run_audit(root)
    failed = sorted(f.details["failed_rule"] for f in report.for_rule(INTERNAL_RULE_ERROR))

    assert failed == ["always-broken", "broken-once"]
    assert len(report.for_rule("heading-skip")) == 1


def test_disabled_failing_rule_does_not_run(builder):
    registry = RuleRegistry(list(DEFAULT_REGISTRY.all_rules()) + [always_broken])
    root = builder.parse("<main><img src='a.png'></main>")

    report = QNGINE(registry).run_audit(root, disabled_rules=["always-broken"])
    assert report.rule_errors == 0
    assert report.for_rule(INTERNAL_RULE_ERROR) == []


# --- Properties ---

def test_audit_is_deterministic(builder):
    first = audit(builder.parse(BUSY_PAGE))
    second = audit(builder.parse(BUSY_PAGE))
    assert first == second
    assert first.to_json() == second.to_json()


def test_findings_are_ordered_by_severity_then_document_order(audit_html):
    report = audit_html(BUSY_PAGE)
    keys = [f.sort_key() for f in report.findings]

    assert len(report.findings) > 10
    assert keys == sorted(keys)
    ranks = [f.severity.rank for f in report.findings]
    assert ranks == sorted(ranks)


def test_every_busy_page_category_is_hit(audit_html):
    categories = {f.category for f in audit_html(BUSY_PAGE).findings}
    assert categories >= {
        Category.STRUCTURE, Category.IMAGES, Category.LINKS_FORMS, Category.ARIA,
        Category.KEYBOARD_FOCUS, Category.CONTRAST, Category.ICONS,
    }


def test_category_filter(audit_html):
    full = audit_html(BUSY_PAGE)
    images_only = audit_html(BUSY_PAGE, categories=["images"])

    assert images_only.findings
    assert {f.category for f in images_only.findings} == {Category.IMAGES}
    assert images_only.findings == tuple(f for f in full.findings if f.category == Category.IMAGES)


def test_min_severity_filter(audit_html):
    full = audit_html(BUSY_PAGE)
    errors_only = audit_html(BUSY_PAGE, min_severity="error")

    assert errors_only.findings == tuple(f for f in full.findings if f.severity == Severity.ERROR)
    assert all(f.severity != Severity.ADVISORY for f in audit_html(BUSY_PAGE, min_severity="warning").findings)


def test_no_duplicate_rule_path_pairs(audit_html):
    report = audit_html(BUSY_PAGE)
    pairs = [(f.rule_id, f.node_path) for f in report.findings]
    assert len(pairs) == len(set(pairs))


def test_every_path_resolves_to_the_reported_node(run_html):
    report, root = run_html(BUSY_PAGE)
    for finding in report.findings:
        node = root
        for index in finding.node_path:
            node = node.children[index]
        assert node.tag == finding.tag or (finding.node_path == () and node is root)


def test_audit_does_not_mutate_tree(builder):
    root = builder.parse(BUSY_PAGE)
    before = root.model_dump()
    audit(root)
    assert root.model_dump() == before


def test_report_counters(run_html):
    report, root = run_html("<main><p>Hello</p></main>")
    assert report.nodes_visited == len(list(root.walk()))
    assert report.rules_applied > 0
    assert report.rule_errors == 0


def test_hand_built_tree(engine):
    root = Node(tag="#document", children=[
        Node(tag="main", children=[Node(tag="img", attrs={"src": "a.png"})]),
    ])
    report = engine.run_audit(root)
    assert [f.rule_id for f in report.findings] == ["img-alt-missing"]


def test_custom_registry_only_runs_its_rules(builder):
    @audit_rule("no-marquee", Category.STRUCTURE, Severity.ERROR, tags=("marquee",))
    def no_marquee(node, ctx):
        """Marquee is not allowed."""
        return [Hit("Marquee found")]

    report = QNGINE(RuleRegistry([no_marquee])).run_audit(builder.parse("<marquee>hi</marquee><img src=x>"))
    assert [(f.rule_id, f.node_path) for f in report.findings] == [("no-marquee", (0,))]


# --- Errors ---

def test_node_linked_into_its_own_children(engine):
    root = Node(tag="div", children=[Node(tag="p")])
    root.children.append(root)

    with pytest.raises(MalformedTree) as exc_info:
        engine.run_audit(root)
    assert exc_info.value.path == (1,)


def test_cycle_with_consistent_parent_links(engine):
    outer = Node(tag="div")
    inner = Node(tag="section", children=[outer])
    outer.children.append(inner)
    outer.model_post_init(None)  # relinks inner under outer, closing the loop

    with pytest.raises(MalformedTree) as exc_info:
        engine.run_audit(outer)
    assert exc_info.value.path == (0, 0)


def test_no_rule_sees_a_cyclic_tree():
    calls = []

    @audit_rule("count-documents", Category.STRUCTURE, Severity.ADVISORY, scope="document")
    def count_documents(node, ctx):
        """Records document-level invocations."""
        calls.append(node.tag)
        return [Hit(f"{sum(1 for _ in node.iter_elements())} elements")]

    root = Node(tag="div", children=[Node(tag="p")])
    root.children.append(root)

    with pytest.raises(MalformedTree):
        QNGINE(RuleRegistry([count_documents])).run_audit(root)
    assert calls == []


def test_shared_child_is_malformed(engine):
    shared = Node(tag="span")
    first = Node(tag="div", children=[shared])
    second = Node(tag="div", children=[shared])
    root = Node(tag="#document", children=[first, second])

    with pytest.raises(MalformedTree):
        engine.run_audit(root)


def test_non_node_root(engine):
    with pytest.raises(MalformedTree):
        engine.run_audit({"tag": "div"})


@pytest.mark.parametrize("options", [
    {"categories": ["images", "colour"]},
    {"min_severity": "fatal"},
    {"disabled_rules": ["img-alt-missing", "no-such-rule"]},
    {"layout_data": {"/0/x": {"width": 1, "height": 1}}},
    {"color_data": {"/0": {"foreground": "#000"}}},
    {"tables": {"icon_class_pattern": "(unclosed"}},
    {"min_severty": "error"},
    {"tables": {"touch_target_min": 24}},
])
def test_invalid_options(engine, options):
    with pytest.raises(InvalidOptions):
        engine.run_audit(Node(tag="#document"), options)


def test_misspelled_override_is_rejected(engine):
    with pytest.raises(InvalidOptions):
        engine.run_audit(Node(tag="#document"), min_severty="error")


def test_invalid_options_type(engine):
    with pytest.raises(InvalidOptions):
        engine.run_audit(Node(tag="#document"), ["images"])


def test_options_are_validated_before_traversal(engine):
    root = Node(tag="div", children=[Node(tag="p")])
    root.children.append(root)
    with pytest.raises(InvalidOptions):
        engine.run_audit(root, min_severity="fatal")


def test_overrides_win_over_options(audit_html):
    options = AuditOptions(categories=[Category.STRUCTURE])
    report = audit_html("<div><img src='a.png'></div>", options, categories="images")
    assert [f.rule_id for f in report.findings] == ["img-alt-missing"]
