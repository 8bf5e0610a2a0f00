# src/a11y_auditor/dom/registry.py
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from ..model import Category
from .core import RuleDefinition
from .rules import aria, contrast, icons, images, keyboard_focus, links_forms, structure, touch_target

logger = logging.getLogger(__name__)

# Fixed order: it is the evaluation order of rules on a node.
RULE_MODULES = (structure, images, links_forms, aria, keyboard_focus, contrast, icons, touch_target)


class RuleRegistry:
    """
    Catalog of audit rules.

    Built once from a fixed list of rules and read-only afterwards, so a single
    instance is shared by every audit run (including concurrent ones).
    """

    def __init__(self, rules: Iterable[RuleDefinition]):
        ordered: List[RuleDefinition] = []
        by_id: Dict[str, RuleDefinition] = {}
        for rule in rules:
            if rule.rule_id in by_id:
                raise ValueError(f"Duplicate rule id: {rule.rule_id}")
            by_id[rule.rule_id] = rule
            ordered.append(rule)

        self._rules: Tuple[RuleDefinition, ...] = tuple(ordered)
        self._by_id = by_id

        # Tag index used by the engine to skip rules that cannot match a node
        node_rules = [r for r in self._rules if r.scope == "node"]
        tagged = {tag for r in node_rules for tag in (r.tags or ())}
        self._any_tag = tuple(r for r in node_rules if r.tags is None)
        self._tag_index = {
            tag: tuple(r for r in node_rules if r.tags is None or tag in r.tags)
            for tag in tagged
        }

        logger.debug("Rule registry built with %d rules", len(self._rules))

    def all_rules(self) -> Tuple[RuleDefinition, ...]:
        return self._rules

    def rules_for(self, category: Category) -> Tuple[RuleDefinition, ...]:
        category = Category(category)
        return tuple(r for r in self._rules if r.category == category)

    def get(self, rule_id: str) -> Optional[RuleDefinition]:
        return self._by_id.get(rule_id)

    def __contains__(self, rule_id: str) -> bool:
        return rule_id in self._by_id

    def __len__(self) -> int:
        return len(self._rules)

    def document_rules(self) -> Tuple[RuleDefinition, ...]:
        return tuple(r for r in self._rules if r.scope == "document")

    def rules_for_tag(self, tag: str) -> Tuple[RuleDefinition, ...]:
        """Node-scope rules that may fire on `tag`, in registry order."""
        return self._tag_index.get(tag, self._any_tag)

    def rule_ids(self) -> List[str]:
        return [r.rule_id for r in self._rules]


def _builtin_rules() -> List[RuleDefinition]:
    rules: List[RuleDefinition] = []
    for module in RULE_MODULES:
        rules.extend(module.RULES)
    return rules


# The process-wide built-in catalog.
DEFAULT_REGISTRY = RuleRegistry(_builtin_rules())


def all_rules() -> Tuple[RuleDefinition, ...]:
    return DEFAULT_REGISTRY.all_rules()


def rules_for(category: Category) -> Tuple[RuleDefinition, ...]:
    return DEFAULT_REGISTRY.rules_for(category)
