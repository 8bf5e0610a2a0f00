# src/a11y_auditor/managers/audit_ignore_manager.py
import json
import logging
from pathlib import Path
from typing import Iterable, Optional, Set

from a11y_auditor.model import Finding
from a11y_auditor.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)


class AuditIgnoreManager:
    """
    Manages the per-project suppression lists: rule ids that are switched off
    for every run, and message fragments (e.g. a known image src) whose
    findings are hidden from the results.
    """

    def __init__(self, project: str, cache_dir: Path):
        self.project = project
        self.project_dir = PathUtils.get_project_dir(project, Path(cache_dir))

        self.rule_ignore_file = self.project_dir / "rule_ignore.json"
        self.message_ignore_file = self.project_dir / "message_ignore.json"

        self.ignored_rules: Set[str] = self._load(self.rule_ignore_file)
        self.ignored_messages: Set[str] = self._load(self.message_ignore_file)

    def _load(self, path: Path) -> Set[str]:
        """Loads a JSON list and returns it as a set."""
        if path.exists():
            try:
                with open(path, 'r', encoding="utf-8") as f:
                    return set(json.load(f))
            except (OSError, ValueError) as e:
                logger.warning(f"Could not read ignore file {path}: {e}")
        return set()

    def _save(self, path: Path, data: Set[str]) -> None:
        """Saves a set as a sorted JSON list."""
        try:
            with open(path, 'w', encoding="utf-8") as f:
                json.dump(sorted(data), f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.error(f"Could not save ignore file {path}: {e}")

    def update_ignore_list(self, type_: str, items: Optional[str] = None, reset: bool = False) -> bool:
        """
        Updates the 'rule' or 'message' list from a comma separated string and saves it.
        Returns True when the list changed.
        """
        if type_ not in ("rule", "message"):
            raise ValueError(f"Unknown ignore list type: {type_}")
        target_set = self.ignored_rules if type_ == 'rule' else self.ignored_messages
        target_file = self.rule_ignore_file if type_ == 'rule' else self.message_ignore_file

        modified = False

        if reset:
            target_set.clear()
            modified = True

        if items:
            new_items = [i.strip() for i in items.split(',') if i.strip()]
            if new_items:
                target_set.update(new_items)
                modified = True

        if modified:
            self._save(target_file, target_set)

        return modified

    def is_hidden(self, finding: Finding) -> bool:
        """True when the finding's message contains an ignored fragment."""
        return any(fragment in finding.message for fragment in self.ignored_messages)

    def unknown_rules(self, known_rule_ids: Iterable[str]) -> Set[str]:
        return self.ignored_rules - set(known_rule_ids)
