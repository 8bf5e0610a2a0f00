# src/a11y_auditor/controllers/audit_controller.py
import logging
from collections import Counter, defaultdict
from concurrent.futures import ProcessPoolExecutor
from functools import partial
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from a11y_auditor.dom.builder import DOMBuilder
from a11y_auditor.dom.qngine import QNGINE
from a11y_auditor.errors import AuditError
from a11y_auditor.managers.audit_ignore_manager import AuditIgnoreManager
from a11y_auditor.model import AuditOptions
from a11y_auditor.report import Report

logger = logging.getLogger(__name__)


def _worker_audit_file(path: str, options: AuditOptions) -> Dict[str, Any]:
    """
    Worker function to audit a single HTML file, possibly in a separate process.
    Each call builds its own tree; the rule registry is shared read-only.
    """
    try:
        tree = DOMBuilder().parse_file(path)
        report = QNGINE().run_audit(tree, options)
        return {"path": path, "report": report}
    except (OSError, UnicodeError, AuditError) as e:
        logger.error(f"Worker failed on {path}: {e}")
        return {"path": path, "error": str(e)}


class AuditController:
    """
    Orchestrates auditing a batch of HTML files: validates options once,
    fans files out to worker processes, applies the project's suppression
    lists and aggregates per-rule statistics.
    """

    def __init__(self, ignore_manager: Optional[AuditIgnoreManager] = None, engine: Optional[QNGINE] = None):
        self.ignore_manager = ignore_manager
        self.engine = engine or QNGINE()

        # Results Buffers
        self.reports: Dict[str, Report] = {}
        self.errors: Dict[str, str] = {}
        self.stats = defaultdict(Counter)

    def prepare_options(self, options: Union[AuditOptions, Dict[str, Any], None] = None) -> AuditOptions:
        """Resolves options and folds in the project's ignored rules. Raises InvalidOptions."""
        opts = self.engine.resolve_options(options)
        if not self.ignore_manager or not self.ignore_manager.ignored_rules:
            return opts

        known = set(self.engine.registry.rule_ids())
        unknown = self.ignore_manager.unknown_rules(known)
        if unknown:
            logger.warning(f"Ignoring unknown rule ids in ignore list: {', '.join(sorted(unknown))}")
        disabled = set(opts.disabled_rules) | (self.ignore_manager.ignored_rules & known)
        return self.engine.resolve_options(opts, disabled_rules=disabled)

    def run_audit(
            self,
            paths: Iterable[str],
            options: Union[AuditOptions, Dict[str, Any], None] = None,
            workers: int = 1,
            progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> Dict[str, Any]:
        """Audits every file and returns a summary; reports are kept on the controller."""
        opts = self.prepare_options(options)
        tasks = sorted({str(p) for p in paths})
        total = len(tasks)

        # Reset Buffers
        self.reports = {}
        self.errors = {}
        self.stats = defaultdict(Counter)

        func = partial(_worker_audit_file, options=opts)
        if workers > 1 and total > 1:
            with ProcessPoolExecutor(max_workers=workers) as executor:
                self._collect(executor.map(func, tasks), total, progress_callback)
        else:
            self._collect(map(func, tasks), total, progress_callback)

        files_with_findings = sum(1 for r in self.reports.values() if r.findings)
        total_findings = sum(len(r.findings) for r in self.reports.values())
        logger.info(f"Audited {total} files: {total_findings} findings, {len(self.errors)} failures")

        return {
            "total_files": total,
            "files_with_findings": files_with_findings,
            "total_findings": total_findings,
            "failed_files": len(self.errors),
            "rule_errors": sum(r.rule_errors for r in self.reports.values()),
            "stats": self.stats,
        }

    def _collect(self, results: Iterable[Dict[str, Any]], total: int, progress_callback) -> None:
        for i, result in enumerate(results):
            if progress_callback:
                progress_callback(i + 1, total)

            path = result["path"]
            if "error" in result:
                self.errors[path] = result["error"]
                continue

            report: Report = result["report"]
            if self.ignore_manager and self.ignore_manager.ignored_messages:
                report = report.filtered(lambda f: not self.ignore_manager.is_hidden(f))

            self.reports[path] = report
            for finding in report.findings:
                self.stats[finding.category.value][finding.rule_id] += 1

    # --- Result Getters ---
    def get_reports(self) -> Dict[str, Report]:
        return dict(sorted(self.reports.items()))

    def get_errors(self) -> Dict[str, str]:
        return dict(sorted(self.errors.items()))

    def get_breakdown(self) -> List[Dict[str, Any]]:
        return [
            {"category": cat, "rule": rule, "count": count}
            for cat, rules in sorted(self.stats.items())
            for rule, count in sorted(rules.items())
        ]
