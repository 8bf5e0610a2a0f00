# src/a11y_auditor/handlers/rules_handler.py
import argparse
from typing import List

from a11y_auditor.dom.registry import DEFAULT_REGISTRY
from a11y_auditor.model import Category


def handle_rules(args: List[str]) -> int:
    """Lists the registered rules, optionally for one category."""
    parser = argparse.ArgumentParser(prog="a11y-audit rules")
    parser.add_argument("--category", type=str, default=None, help="Only list rules of this category.")
    try:
        parsed_args = parser.parse_args(args)
    except SystemExit as e:
        return 0 if e.code == 0 else 1

    if parsed_args.category:
        try:
            category = Category(parsed_args.category.strip().lower())
        except ValueError:
            valid = ", ".join(c.value for c in Category)
            print(f"❌ Unknown category '{parsed_args.category}'. Valid categories: {valid}")
            return 1
        rules = DEFAULT_REGISTRY.rules_for(category)
    else:
        rules = DEFAULT_REGISTRY.all_rules()

    print(f"{'RULE':<26} {'CATEGORY':<15} {'SEVERITY':<9} {'WCAG':<7} DESCRIPTION")
    print("-" * 90)
    for rule in rules:
        print(f"{rule.rule_id:<26} {rule.category.value:<15} {rule.severity.value:<9} "
              f"{rule.wcag or '-':<7} {rule.description}")
    return 0
