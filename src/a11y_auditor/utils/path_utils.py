# src/a11y_auditor/utils/path_utils.py
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class PathUtils:
    """
    A central utility for reliably retrieving package, cache and user paths.
    """

    # --- Package paths ---

    @staticmethod
    def get_package_root() -> Path:
        """Directory of the installed a11y_auditor package (holds settings.json)."""
        return Path(__file__).resolve().parent.parent

    @staticmethod
    def get_settings_file() -> Path:
        return PathUtils.get_package_root() / "settings.json"

    # --- Working paths ---

    @staticmethod
    def get_cache_root(base_dir: Optional[Path] = None) -> Path:
        """
        Root directory for per-project audit state (suppression lists).
        Lives in the current working directory unless `base_dir` is given.
        (e.g., /path/to/site/.a11y_audit_cache)
        """
        return (base_dir or Path.cwd()) / ".a11y_audit_cache"

    @staticmethod
    def get_project_dir(project: str, base_dir: Optional[Path] = None) -> Path:
        """
        Returns the directory for a specific project.
        Creates the directory if it doesn't exist.
        """
        root = base_dir if base_dir else PathUtils.get_cache_root()
        path = root / project
        path.mkdir(parents=True, exist_ok=True)
        return path
