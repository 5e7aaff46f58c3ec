"""
Excel report generator for reconciliation and fixed-expense results.
Creates multi-sheet workbooks with formatted output.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Optional
import logging

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Border, Side
from openpyxl.worksheet.worksheet import Worksheet

from ..config import ReconConfig, SheetConfig
from ..models.merchant import FixedExpense, FixedExpenseReport, ScoreBucket
from ..models.transaction import ReconciliationResult
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)

# Style definitions
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
FIXED_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
AMBIGUOUS_FILL = PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid")
NOT_FIXED_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)

BUCKET_FILLS = {
    ScoreBucket.HIGH_CONFIDENCE_FIXED: FIXED_FILL,
    ScoreBucket.AMBIGUOUS: AMBIGUOUS_FILL,
    ScoreBucket.HIGH_CONFIDENCE_NOT_FIXED: NOT_FIXED_FILL,
}


class ExcelReportGenerator:
    """Generates Excel reports for reconciliation and fixed-expense runs."""

    def __init__(self, config: ReconConfig):
        """
        Initialize the report generator.

        Args:
            config: Application configuration
        """
        self.config = config
        self.sheet_config = config.output.sheets

    def generate_reconciliation_report(
        self,
        result: ReconciliationResult,
        output_path: Path,
        new_filename: str = "",
        existing_filename: str = "",
    ) -> Path:
        """
        Write a reconciliation workbook.

        Args:
            result: Reconciliation result to report
            output_path: Path for output file
            new_filename: Name of the new-transactions file, for the summary
            existing_filename: Name of the existing-transactions file

        Returns:
            Path to generated report
        """
        logger.info(f"Generating reconciliation report: {output_path}")
        wb = self._new_workbook()

        summary_sheet = self.sheet_config.summary
        if summary_sheet.enabled:
            stats = result.stats
            self._write_key_values(
                wb.create_sheet(summary_sheet.name),
                "Pending Reconciliation Summary",
                [
                    ("New File:", new_filename),
                    ("Existing File:", existing_filename),
                    ("Generated At:", datetime.now().strftime("%Y-%m-%d %H:%M:%S")),
                    ("Total New Transactions:", stats.total_new),
                    ("Pending Reconciled:", stats.pending_reconciled),
                    ("Duplicates Skipped:", stats.exact_duplicates_skipped),
                    ("New Posted Added:", stats.new_posted_added),
                    ("New Pending Added:", stats.new_pending_added),
                ],
            )

        insert_sheet = self.sheet_config.to_insert
        if insert_sheet.enabled:
            rows = [
                [
                    t.date,
                    t.merchant,
                    float(t.amount),
                    t.category or "",
                    t.description or "",
                    "pending" if t.is_pending else "posted",
                    t.reconciled_from_id or "",
                ]
                for t in result.transactions_to_insert
            ]
            self._write_table(
                wb.create_sheet(insert_sheet.name),
                [
                    "Date",
                    "Merchant",
                    "Amount",
                    "Category",
                    "Description",
                    "Status",
                    "Reconciled From",
                ],
                rows,
            )

        deleted_sheet = self.sheet_config.pending_deleted
        if deleted_sheet.enabled:
            rows = [
                [
                    r.reconciled_from_id,
                    r.transaction.date,
                    r.transaction.merchant,
                    float(r.transaction.amount),
                ]
                for r in result.reconciled_transactions
            ]
            self._write_table(
                wb.create_sheet(deleted_sheet.name),
                ["Pending ID", "Posted Date", "Posted Merchant", "Amount"],
                rows,
            )

        return self._save(wb, output_path)

    def generate_fixed_expense_report(
        self, report: FixedExpenseReport, output_path: Path, history_filename: str = ""
    ) -> Path:
        """
        Write a fixed-expense workbook.

        Args:
            report: Detection report
            output_path: Path for output file
            history_filename: Name of the history file, for the summary

        Returns:
            Path to generated report
        """
        logger.info(f"Generating fixed-expense report: {output_path}")
        wb = self._new_workbook()

        summary_sheet = self.sheet_config.summary
        if summary_sheet.enabled:
            counts = report.counts_by_bucket
            self._write_key_values(
                wb.create_sheet(summary_sheet.name),
                "Fixed Expense Summary",
                [
                    ("History File:", history_filename),
                    ("As Of:", report.as_of.isoformat() if report.as_of else ""),
                    ("Merchants Scored:", len(report.scored_merchants)),
                    ("High Confidence Fixed:", counts.get(ScoreBucket.HIGH_CONFIDENCE_FIXED.value, 0)),
                    ("Ambiguous:", counts.get(ScoreBucket.AMBIGUOUS.value, 0)),
                    (
                        "High Confidence Not Fixed:",
                        counts.get(ScoreBucket.HIGH_CONFIDENCE_NOT_FIXED.value, 0),
                    ),
                    ("Fixed Expenses:", len(report.expenses)),
                    ("Total Monthly:", f"${report.total_monthly:,.2f}"),
                ],
            )

        fixed_sheet = self.sheet_config.fixed_expenses
        if fixed_sheet.enabled:
            self._write_expenses(wb, fixed_sheet, report.expenses)

        scores_sheet = self.sheet_config.merchant_scores
        if scores_sheet.enabled:
            ws = wb.create_sheet(scores_sheet.name)
            headers = [
                "Merchant Key",
                "Original Name",
                "Count",
                "Months",
                "Median Interval",
                "Interval CV",
                "Day Concentration",
                "Amount Mean",
                "Amount RSTD",
                "Flags",
                "Score",
                "Bucket",
            ]
            rows = []
            fills = []
            for scored in report.scored_merchants:
                summary = scored.summary
                stats = summary.stats
                rows.append(
                    [
                        summary.merchant_key,
                        summary.original_name,
                        stats.count,
                        summary.unique_months,
                        stats.median_interval_days,
                        stats.interval_cv,
                        str(stats.day_concentration),
                        stats.amount_mean,
                        stats.amount_rstd,
                        ", ".join(stats.flags),
                        round(scored.rule_score.score, 3),
                        scored.bucket.value,
                    ]
                )
                fills.append(BUCKET_FILLS[scored.bucket])
            self._write_table(ws, headers, rows, fills)

        candidates_sheet = self.sheet_config.subscription_candidates
        if candidates_sheet.enabled:
            self._write_expenses(wb, candidates_sheet, report.subscription_candidates)

        return self._save(wb, output_path)

    def _write_expenses(
        self, wb: Workbook, sheet: SheetConfig, expenses: list[FixedExpense]
    ) -> None:
        rows = [
            [
                e.merchant_name,
                e.monthly_amount,
                e.occurrence_count,
                e.months_tracked,
                e.avg_day_of_month,
                e.last_occurrence_date,
                e.source,
                e.score,
                "yes" if e.is_maybe else "",
                "yes" if e.is_subscription else "",
            ]
            for e in expenses
        ]
        self._write_table(
            wb.create_sheet(sheet.name),
            [
                "Merchant",
                "Monthly Amount",
                "Occurrences",
                "Months",
                "Day Of Month",
                "Last Occurrence",
                "Source",
                "Score",
                "Maybe",
                "Subscription",
            ],
            rows,
        )

    def _new_workbook(self) -> Workbook:
        wb = Workbook()
        # Remove default sheet
        if wb.active:
            wb.remove(wb.active)
        return wb

    def _save(self, wb: Workbook, output_path: Path) -> Path:
        if not wb.sheetnames:
            raise ReportGenerationError("All report sheets are disabled")
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            raise ReportGenerationError(f"Failed to write report {output_path}: {e}") from e
        logger.info(f"Report saved: {output_path}")
        return output_path

    def _write_key_values(
        self, ws: Worksheet, title: str, items: list[tuple[str, Any]]
    ) -> None:
        ws["A1"] = title
        ws["A1"].font = Font(size=16, bold=True)
        ws.merge_cells("A1:D1")

        for i, (label, value) in enumerate(items, start=3):
            ws[f"A{i}"] = label
            ws[f"B{i}"] = value

        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 40

    def _write_table(
        self,
        ws: Worksheet,
        headers: list[str],
        rows: list[list[Any]],
        fills: Optional[list[PatternFill]] = None,
    ) -> None:
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.fill = HEADER_FILL
            cell.font = HEADER_FONT
            cell.border = THIN_BORDER

        for row_num, row_data in enumerate(rows, start=2):
            fill = fills[row_num - 2] if fills else None
            for col, value in enumerate(row_data, start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER
                if fill is not None:
                    cell.fill = fill

        self._auto_fit_columns(ws)

    def _auto_fit_columns(self, ws: Worksheet) -> None:
        """Auto-fit column widths based on content."""
        for column_cells in ws.columns:
            max_length = max(
                (len(str(cell.value)) for cell in column_cells if cell.value is not None),
                default=0,
            )
            ws.column_dimensions[column_cells[0].column_letter].width = min(max_length + 2, 50)
