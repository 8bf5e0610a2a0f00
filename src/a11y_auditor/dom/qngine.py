# src/a11y_auditor/dom/qngine.py
import logging
from typing import Any, Dict, List, Optional, Set, Tuple, Union

from pydantic import ValidationError

from ..errors import InvalidOptions, MalformedTree
from ..model import AuditOptions, Finding, NodePath, Severity, format_locator
from ..report import Report
from .core import AuditContext, Node, RuleDefinition
from .registry import DEFAULT_REGISTRY, RuleRegistry

logger = logging.getLogger(__name__)

INTERNAL_RULE_ERROR = "internal-rule-error"


class _FindingCollector:
    """Accumulates findings for one run, deduplicating on (rule id, path)."""

    def __init__(self):
        self.findings: List[Finding] = []
        self.rule_errors = 0
        self.rules_applied = 0
        self._seen: Set[Tuple[str, NodePath]] = set()
        self._failed_rules: Set[str] = set()

    def add(self, findings: List[Finding]) -> None:
        for finding in findings:
            key = (finding.rule_id, finding.node_path)
            if key in self._seen:
                continue
            self._seen.add(key)
            self.findings.append(finding)

    def rule_failed(self, rule: RuleDefinition, path: NodePath, tag: str, exc: Exception) -> bool:
        """
        Counts the failure; the first failure of a rule becomes an
        internal-rule-error finding. Returns True when a finding was recorded.
        """
        self.rule_errors += 1
        if rule.rule_id in self._failed_rules:
            return False
        self._failed_rules.add(rule.rule_id)
        self.findings.append(Finding(
            rule_id=INTERNAL_RULE_ERROR,
            severity=Severity.ERROR,
            category=rule.category,
            node_path=path,
            tag=tag,
            message=f"Rule '{rule.rule_id}' failed: {type(exc).__name__}: {exc}",
            suggestion="Defect in the rule implementation; results of other rules are unaffected.",
            details={"failed_rule": rule.rule_id, "exception": type(exc).__name__},
        ))
        return True


class QNGINE:
    """
    Quality Engine (QNGINE) for auditing node trees.

    It walks the tree once in document order and applies every enabled rule
    whose tag filter accepts the node. Document-level rules run once against
    the root. The engine holds no per-run state, so one instance can serve
    any number of audits.
    """

    def __init__(self, registry: Optional[RuleRegistry] = None):
        self.registry = registry or DEFAULT_REGISTRY

    def resolve_options(
            self,
            options: Union[AuditOptions, Dict[str, Any], None] = None,
            **overrides: Any,
    ) -> AuditOptions:
        """Validates options before any traversal; raises InvalidOptions."""
        if isinstance(options, AuditOptions):
            raw = dict(options)
        elif options is None:
            raw = {}
        elif isinstance(options, dict):
            raw = dict(options)
        else:
            raise InvalidOptions(f"Unsupported options type: {type(options).__name__}")
        raw.update({k: v for k, v in overrides.items() if v is not None})

        try:
            resolved = AuditOptions.model_validate(raw)
        except ValidationError as e:
            raise InvalidOptions(f"Invalid audit options: {e}") from e

        unknown = sorted(r for r in resolved.disabled_rules if r not in self.registry)
        if unknown:
            raise InvalidOptions(f"Unknown rule id(s) in disabled_rules: {', '.join(unknown)}")
        return resolved

    def run_audit(
            self,
            tree: Node,
            options: Union[AuditOptions, Dict[str, Any], None] = None,
            **overrides: Any,
    ) -> Report:
        """
        Runs the audit suite on a node tree.

        Args:
            tree (Node): Root of the tree; must not be mutated until the call returns.
            options: AuditOptions, a dict of option fields, or None for defaults.
            **overrides: Individual option fields that take precedence over `options`.

        Returns:
            Report: Findings filtered by min_severity and sorted by severity, then document order.

        Raises:
            InvalidOptions: Unknown option, category, severity or rule id.
            MalformedTree: Cycle or broken parent link; checked before any rule runs.
        """
        opts = self.resolve_options(options, **overrides)
        if not isinstance(tree, Node):
            raise MalformedTree(f"Audit root must be a Node, got {type(tree).__name__}")

        active = {
            r.rule_id for r in self.registry.all_rules()
            if r.category in opts.categories and r.rule_id not in opts.disabled_rules
        }
        # Rules and the lazy context indexes walk the tree freely, so they only run on a sound one.
        nodes_visited = self._check_structure(tree)
        ctx = AuditContext(tree, opts)
        collector = _FindingCollector()

        # --- Document Level Checks ---
        ctx.current, ctx.current_path = tree, ()
        for rule in self.registry.document_rules():
            if rule.rule_id in active:
                self._apply(rule, tree, ctx, collector)

        # --- Traversal ---
        self._traverse(tree, ctx, active, collector)

        findings = [f for f in collector.findings if f.severity.at_least(opts.min_severity)]
        findings.sort(key=lambda f: f.sort_key())

        logger.debug(
            "Audit finished: %d findings (%d rule errors) over %d nodes",
            len(findings), collector.rule_errors, nodes_visited,
        )
        return Report(
            findings=tuple(findings),
            rule_errors=collector.rule_errors,
            nodes_visited=nodes_visited,
            rules_applied=collector.rules_applied,
        )

    @staticmethod
    def _check_structure(tree: Node) -> int:
        """
        Raises MalformedTree on a cycle, a shared node or a child whose parent
        link points elsewhere. Returns the number of nodes in the tree.
        """
        visited: Set[int] = set()
        stack: List[Tuple[Node, NodePath]] = [(tree, ())]
        while stack:
            node, path = stack.pop()
            if id(node) in visited:
                raise MalformedTree(f"Cycle detected: node at {format_locator(path)} was already visited", path)
            visited.add(id(node))
            for index in range(len(node.children) - 1, -1, -1):
                child = node.children[index]
                child_path = path + (index,)
                if not isinstance(child, Node):
                    raise MalformedTree(f"Child at {format_locator(child_path)} is not a Node", child_path)
                if child.parent is not node:
                    raise MalformedTree(
                        f"Node at {format_locator(child_path)} is not linked to the parent it appears under",
                        child_path,
                    )
                stack.append((child, child_path))
        return len(visited)

    def _traverse(self, tree: Node, ctx: AuditContext, active: Set[str], collector: _FindingCollector) -> None:
        # (node, path, depth); reversed pushes keep pre-order
        stack: List[Tuple[Node, NodePath, int]] = [(tree, (), 0)]

        while stack:
            node, path, depth = stack.pop()

            # The ancestor stack holds root..parent for the node at `depth`.
            del ctx.ancestors[depth:]

            if not node.is_text:
                ctx.current, ctx.current_path = node, path
                for rule in self.registry.rules_for_tag(node.tag):
                    if rule.rule_id in active:
                        self._apply(rule, node, ctx, collector)

                # Track global state after the node's own rules saw the previous heading
                level = node.level
                if level is not None:
                    ctx.push_heading(level)

            ctx.ancestors.append(node)
            for index in range(len(node.children) - 1, -1, -1):
                stack.append((node.children[index], path + (index,), depth + 1))

        ctx.current = None

    def _apply(self, rule: RuleDefinition, node: Node, ctx: AuditContext, collector: _FindingCollector) -> None:
        collector.rules_applied += 1
        try:
            collector.add(rule.evaluate(node, ctx))
        except Exception as e:
            first = collector.rule_failed(rule, ctx.current_path, node.tag, e)
            if first:
                logger.error(f"Rule {rule.rule_id} failed at {format_locator(ctx.current_path)}: {e}", exc_info=True)
            else:
                logger.debug(f"Rule {rule.rule_id} failed again at {format_locator(ctx.current_path)}: {e}")


def audit(
        tree: Node,
        options: Union[AuditOptions, Dict[str, Any], None] = None,
        **overrides: Any,
) -> Report:
    """Audits `tree` with the built-in rule catalog."""
    return QNGINE().run_audit(tree, options, **overrides)
