# src/a11y_auditor/report.py
import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import pandas as pd
from pydantic import BaseModel, ConfigDict

from .model import Category, Finding, Severity

RECORD_COLUMNS = ["Source", "Severity", "Category", "Rule", "WCAG", "Path", "Tag", "Message", "Suggestion"]


class Report(BaseModel):
    """
    Result of one audit run.

    `findings` is ordered by severity (error first) then document order;
    grouping by category is a view over that order, never a re-sort.
    """
    model_config = ConfigDict(frozen=True)

    findings: Tuple[Finding, ...] = ()
    rule_errors: int = 0
    nodes_visited: int = 0
    rules_applied: int = 0

    # --- Queries ---

    def count_by_severity(self) -> Dict[Severity, int]:
        counts = {s: 0 for s in Severity}
        for f in self.findings:
            counts[f.severity] += 1
        return counts

    def count_by_category(self) -> Dict[Category, int]:
        counts = {c: 0 for c in Category}
        for f in self.findings:
            counts[f.category] += 1
        return counts

    def group_by_category(self) -> Dict[Category, List[Finding]]:
        """Non-empty categories in catalog order, each keeping report order."""
        groups: Dict[Category, List[Finding]] = {}
        for category in Category:
            members = [f for f in self.findings if f.category == category]
            if members:
                groups[category] = members
        return groups

    def for_rule(self, rule_id: str) -> List[Finding]:
        return [f for f in self.findings if f.rule_id == rule_id]

    @property
    def has_errors(self) -> bool:
        return any(f.severity == Severity.ERROR for f in self.findings)

    def worst_severity(self) -> Optional[Severity]:
        return self.findings[0].severity if self.findings else None

    def filtered(self, predicate: Callable[[Finding], bool]) -> "Report":
        """New report holding the findings that satisfy `predicate`, order preserved."""
        return Report(
            findings=tuple(f for f in self.findings if predicate(f)),
            rule_errors=self.rule_errors,
            nodes_visited=self.nodes_visited,
            rules_applied=self.rules_applied,
        )

    # --- Serialization ---

    def summary(self) -> Dict[str, Any]:
        return {
            "total_findings": len(self.findings),
            "by_severity": {s.value: n for s, n in self.count_by_severity().items()},
            "by_category": {c.value: n for c, n in self.count_by_category().items() if n},
            "rule_errors": self.rule_errors,
            "nodes_visited": self.nodes_visited,
            "rules_applied": self.rules_applied,
        }

    def to_structured(self) -> Dict[str, Any]:
        return {
            "summary": self.summary(),
            "findings": [_finding_dict(f) for f in self.findings],
            "groups": [
                {"category": category.value, "findings": [_finding_dict(f) for f in members]}
                for category, members in self.group_by_category().items()
            ],
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_structured(), indent=indent, ensure_ascii=False)

    def to_text(self, title: str = "Accessibility audit") -> str:
        counts = self.count_by_severity()
        lines = [
            f"{title}: {len(self.findings)} findings "
            f"({counts[Severity.ERROR]} error, {counts[Severity.WARNING]} warning, "
            f"{counts[Severity.ADVISORY]} advisory), {self.rule_errors} rule errors"
        ]
        for category, members in self.group_by_category().items():
            lines.append("")
            lines.append(f"[{category.value}]")
            for f in members:
                wcag = f" (WCAG {f.wcag})" if f.wcag else ""
                lines.append(f"  {f.severity.value.upper():<8} {f.rule_id:<24} {f.locator:<14} {f.message}{wcag}")
                if f.suggestion:
                    lines.append(f"  {'':<8} {'':<24} {'':<14} -> {f.suggestion}")
        return "\n".join(lines)

    def to_records(self, source: str = "") -> List[Dict[str, Any]]:
        """Flat rows in report order, one per finding (used for CSV/Excel export)."""
        return [
            {
                "Source": source,
                "Severity": f.severity.value,
                "Category": f.category.value,
                "Rule": f.rule_id,
                "WCAG": f.wcag or "",
                "Path": f.locator,
                "Tag": f.tag,
                "Message": f.message,
                "Suggestion": f.suggestion or "",
            }
            for f in self.findings
        ]

    def to_dataframe(self, source: str = "") -> pd.DataFrame:
        return pd.DataFrame(self.to_records(source), columns=RECORD_COLUMNS)


def _finding_dict(f: Finding) -> Dict[str, Any]:
    data = f.model_dump(mode="json")
    data["locator"] = f.locator
    return data
