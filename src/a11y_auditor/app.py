# src/a11y_auditor/app.py
import argparse
import logging
import sys
from typing import Callable, Dict, List, Optional

from a11y_auditor.handlers.audit_handler import handle_run
from a11y_auditor.handlers.config_handler import handle_config
from a11y_auditor.handlers.ignore_handler import handle_ignore
from a11y_auditor.handlers.rules_handler import handle_rules
from a11y_auditor.managers.config_manager import config_manager
from a11y_auditor.utils.configure_logging import configure_logger

logger = logging.getLogger(__name__)

COMMANDS: Dict[str, Callable[[List[str]], int]] = {
    "run": handle_run,
    "rules": handle_rules,
    "config": handle_config,
    "ignore": handle_ignore,
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="a11y-audit",
        description="Automated accessibility audit for HTML documents.",
        epilog=f"Commands: {', '.join(COMMANDS)}. Use '<command> --help' for details.",
    )
    parser.add_argument("--log-level", type=str, default=None, help="Override debug.level from settings.json.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point of the a11y-audit command. Returns the process exit code."""
    argv = list(sys.argv[1:] if argv is None else argv)

    # Global options come before the command name; the rest belongs to the handler.
    split = next((i for i, arg in enumerate(argv) if arg in COMMANDS), len(argv))
    parser = _build_parser()
    try:
        parsed_args = parser.parse_args(argv[:split])
    except SystemExit as e:
        return 0 if e.code == 0 else 1

    configure_logger(
        parsed_args.log_level or config_manager.get_nested("debug.level", "WARNING"),
        silenced_loggers=config_manager.get_nested("debug.silenced_loggers", {}),
    )

    if split == len(argv):
        parser.print_help()
        return 1

    command, command_args = argv[split], argv[split + 1:]
    logger.debug("Dispatching command '%s' with %s", command, command_args)
    return COMMANDS[command](command_args)


if __name__ == "__main__":
    sys.exit(main())
