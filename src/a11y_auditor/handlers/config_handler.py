# src/a11y_auditor/handlers/config_handler.py
import json
from typing import List

from a11y_auditor.managers.config_manager import config_manager

USAGE = """
Usage:
  config list                Print every setting as JSON.
  config get <key>           Print one setting, e.g. output.fail_on
  config set <key> <value>   Change a setting for this run, e.g. engine.min_severity warning
  config reset               Discard changes and reload settings.json.
"""


def _list(args: List[str]) -> int:
    print(json.dumps(config_manager.get_all(), indent=2))
    return 0


def _get(args: List[str]) -> int:
    if not args:
        print("Usage: config get <key>")
        return 1
    value = config_manager.get_nested(args[0])
    if value is None:
        print(f"❌ Unknown config key '{args[0]}'.")
        return 1
    print(json.dumps(value) if isinstance(value, (dict, list)) else value)
    return 0


def _set(args: List[str]) -> int:
    if len(args) < 2:
        print("Usage: config set <key> <value>")
        return 1
    key_path, raw = args[0], " ".join(args[1:]).strip('"')
    if not config_manager.set_nested(key_path, raw):
        print(f"❌ Could not set '{key_path}'.")
        return 1
    stored = config_manager.get_nested(key_path)
    print(f"✅ Config updated: {key_path} = {stored} (type: {type(stored).__name__})")
    return 0


def _reset(args: List[str]) -> int:
    config_manager.reset()
    print("✅ Configuration has been reset from settings.json.")
    return 0


SUBCOMMANDS = {"list": _list, "get": _get, "set": _set, "reset": _reset}


def handle_config(args: List[str]) -> int:
    """'config' command: inspect or tweak the audit settings."""
    if not args:
        print(USAGE)
        return 1
    subcommand = SUBCOMMANDS.get(args[0])
    if subcommand is None:
        print(f"❌ Unknown subcommand 'config {args[0]}'.{USAGE}")
        return 1
    return subcommand(args[1:])
