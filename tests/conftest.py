# tests/conftest.py
import pytest

from a11y_auditor.dom.builder import DOMBuilder
from a11y_auditor.dom.qngine import QNGINE


@pytest.fixture
def builder():
    return DOMBuilder()


@pytest.fixture
def run_html(builder):
    """
    Parses markup and audits it in one go.
    Returns (report, root); keep `root` referenced while inspecting nodes,
    parent links are weak.
    """
    engine = QNGINE()

    def _run(html, options=None, **overrides):
        root = builder.parse(html)
        return engine.run_audit(root, options, **overrides), root

    return _run


@pytest.fixture
def audit_html(run_html):
    """Like run_html, but only returns the report."""
    def _audit(html, options=None, **overrides):
        report, _ = run_html(html, options, **overrides)
        return report

    return _audit
