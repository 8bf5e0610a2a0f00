# src/a11y_auditor/controllers/report_controller.py
import json
import logging
from pathlib import Path
from typing import Any, Dict

import pandas as pd

from a11y_auditor.model import Category, Severity
from a11y_auditor.report import RECORD_COLUMNS, Report

logger = logging.getLogger(__name__)

SUPPORTED_EXPORTS = (".csv", ".json", ".xlsx")


class ReportController:
    """
    Turns the reports of a batch into presentation formats: console text,
    JSON documents and flat tables (CSV / Excel) built with pandas.
    Every format keeps the report's own ordering and grouping.
    """

    def __init__(self, reports: Dict[str, Report]):
        self.reports = dict(sorted(reports.items()))

    # --- Tables ---

    def findings_df(self) -> pd.DataFrame:
        frames = [r.to_dataframe(source) for source, r in self.reports.items() if r.findings]
        if not frames:
            return pd.DataFrame(columns=RECORD_COLUMNS)
        return pd.concat(frames, ignore_index=True)

    def summary_df(self) -> pd.DataFrame:
        rows = []
        for source, report in self.reports.items():
            counts = report.count_by_severity()
            row = {"Source": source, "Total": len(report.findings), "Rule errors": report.rule_errors}
            row.update({s.value: counts[s] for s in Severity})
            rows.append(row)
        columns = ["Source", "Total"] + [s.value for s in Severity] + ["Rule errors"]
        return pd.DataFrame(rows, columns=columns)

    def category_breakdown_df(self) -> pd.DataFrame:
        """Findings per category and severity over the whole batch."""
        df = self.findings_df()
        if df.empty:
            return pd.DataFrame(columns=["Category"] + [s.value for s in Severity])
        table = pd.crosstab(df["Category"], df["Severity"])
        order = [c.value for c in Category if c.value in table.index]
        table = table.reindex(index=order, columns=[s.value for s in Severity], fill_value=0)
        return table.reset_index()

    # --- Rendering ---

    def render_text(self) -> str:
        blocks = [report.to_text(title=source) for source, report in self.reports.items()]
        return "\n\n".join(blocks)

    def render_json(self) -> str:
        payload: Dict[str, Any] = {source: r.to_structured() for source, r in self.reports.items()}
        return json.dumps(payload, indent=2, ensure_ascii=False)

    # --- Export ---

    def export(self, output: Path) -> Path:
        """Writes the batch to .csv, .json or .xlsx, chosen by file suffix."""
        output = Path(output)
        suffix = output.suffix.lower()
        if suffix not in SUPPORTED_EXPORTS:
            raise ValueError(f"Unsupported export format '{suffix}'. Use one of: {', '.join(SUPPORTED_EXPORTS)}")

        output.parent.mkdir(parents=True, exist_ok=True)
        if suffix == ".csv":
            self.findings_df().to_csv(output, index=False)
        elif suffix == ".json":
            output.write_text(self.render_json(), encoding="utf-8")
        else:
            with pd.ExcelWriter(output) as writer:
                self.findings_df().to_excel(writer, sheet_name="findings", index=False)
                self.summary_df().to_excel(writer, sheet_name="summary", index=False)
                self.category_breakdown_df().to_excel(writer, sheet_name="categories", index=False)

        logger.info(f"Exported {len(self.reports)} report(s) to {output}")
        return output
