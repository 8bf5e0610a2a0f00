# src/a11y_auditor/managers/config_manager.py
import json
import logging
from typing import Any, Dict, List, Optional

from a11y_auditor.dom.heuristics import HeuristicTables
from a11y_auditor.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

_TRUTHY = ("1", "true", "yes", "on")


class ConfigManager:
    """
    Process-wide audit settings.

    Values come from the packaged settings.json. Changes made through
    set_nested() only live in memory until reset() reloads the file.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            instance = super(ConfigManager, cls).__new__(cls)
            instance._config = {}
            instance.reset()
            cls._instance = instance
        return cls._instance

    def get_all(self) -> Dict[str, Any]:
        return self._config

    def get_nested(self, key_path: str, default: Optional[Any] = None) -> Any:
        """Dotted lookup, e.g. 'output.fail_on'. Missing or null values give `default`."""
        node: Any = self._config
        for part in key_path.split('.'):
            if not isinstance(node, dict):
                return default
            node = node.get(part)
        return default if node is None else node

    def set_nested(self, key_path: str, value: Any) -> bool:
        parts: List[str] = key_path.split('.')
        section = self._config
        for part in parts[:-1]:
            section = section.setdefault(part, {})
            if not isinstance(section, dict):
                logger.error("Cannot set '%s': '%s' holds a value, not a section.", key_path, part)
                return False

        leaf = parts[-1]
        if section.get(leaf) is not None:
            value = self._coerce(section[leaf], value, key_path)
        section[leaf] = value
        logger.info("Setting changed: %s = %r", key_path, value)
        return True

    @staticmethod
    def _coerce(current: Any, raw: Any, key_path: str) -> Any:
        """Values typed on the command line take the type of the setting they replace."""
        if isinstance(current, str) or not isinstance(raw, str):
            return raw
        if isinstance(current, bool):
            return raw.strip().lower() in _TRUTHY
        if isinstance(current, list):
            return [item.strip() for item in raw.split(",") if item.strip()]
        try:
            return type(current)(raw)
        except (TypeError, ValueError):
            logger.warning("Could not cast '%s' for %s to %s; keeping the text.",
                           raw, key_path, type(current).__name__)
            return raw

    def reset(self):
        """Reloads settings.json, discarding in-memory changes."""
        settings_file = PathUtils.get_settings_file()
        if not settings_file.exists():
            logger.warning("No settings file at %s, running with defaults.", settings_file)
            self._config = {}
            return
        try:
            with open(settings_file, "r", encoding="utf-8") as f:
                self._config = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Unreadable settings file %s: %s", settings_file, e)
            self._config = {}
            return
        logger.debug("Settings loaded from %s", settings_file)

    def heuristic_tables(self) -> HeuristicTables:
        """Default rule tables with the 'rules' section layered on top."""
        overrides = self.get_nested("rules", {}) or {}
        unknown = sorted(k for k in overrides if k not in HeuristicTables.model_fields)
        if unknown:
            logger.warning("Ignoring unknown rule settings: %s", ", ".join(unknown))
        return HeuristicTables(**{k: v for k, v in overrides.items() if k not in unknown})


config_manager = ConfigManager()
