# src/a11y_auditor/handlers/ignore_handler.py
import argparse
from typing import Iterable, List

from a11y_auditor.dom.registry import DEFAULT_REGISTRY
from a11y_auditor.managers.audit_ignore_manager import AuditIgnoreManager
from a11y_auditor.utils.path_utils import PathUtils


def handle_ignore(args: List[str]) -> int:
    """Maintains the project's rule and message ignore lists."""
    parser = argparse.ArgumentParser(prog="a11y-audit ignore")
    parser.add_argument("--project", type=str, default="default", help="Project name.")
    parser.add_argument("--rules", type=str, help="Rule ids to disable (comma separated).")
    parser.add_argument("--rules-reset", action="store_true", help="Clear the rule ignore list.")
    parser.add_argument("--messages", type=str, help="Message fragments to hide (comma separated).")
    parser.add_argument("--messages-reset", action="store_true", help="Clear the message ignore list.")
    parser.add_argument("--list", action="store_true", help="Show both ignore lists.")
    try:
        parsed_args = parser.parse_args(args)
    except SystemExit as e:
        return 0 if e.code == 0 else 1

    ignore_manager = AuditIgnoreManager(parsed_args.project, PathUtils.get_cache_root())

    if parsed_args.rules:
        unknown = sorted(set(_split(parsed_args.rules)) - set(DEFAULT_REGISTRY.rule_ids()))
        if unknown:
            print(f"❌ Unknown rule ids: {', '.join(unknown)}")
            return 1

    if ignore_manager.update_ignore_list('rule', parsed_args.rules, parsed_args.rules_reset):
        print(f"✅ Rule ignore list updated ({len(ignore_manager.ignored_rules)} entries).")
    if ignore_manager.update_ignore_list('message', parsed_args.messages, parsed_args.messages_reset):
        print(f"✅ Message ignore list updated ({len(ignore_manager.ignored_messages)} entries).")

    if parsed_args.list:
        _print_ignore_list("rule", ignore_manager.ignored_rules)
        _print_ignore_list("message", ignore_manager.ignored_messages)
    return 0


def _split(value: str) -> List[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


def _print_ignore_list(label: str, items: Iterable[str]) -> None:
    print(f"\n📋 Ignored {label}s:")
    print("-" * 40)
    items = sorted(items)
    if not items:
        print("  (List is empty)")
    for item in items:
        print(f"  - {item}")
    print("-" * 40)
