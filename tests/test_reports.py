"""Tests for Excel report generation."""

from openpyxl import load_workbook
import pytest

from statement_recon.config import ReconConfig
from statement_recon.matching.engine import reconcile_pending_transactions
from statement_recon.models import ExistingTransaction, Transaction
from statement_recon.recurring.detector import FixedExpenseDetector
from statement_recon.reports import ExcelReportGenerator
from statement_recon.utils import ReportGenerationError


@pytest.fixture
def reconciliation_result():
    return reconcile_pending_transactions(
        [
            Transaction(date="2025-08-15", merchant="UBER *TRIP NYC", amount="-23.40"),
            Transaction(date="2025-08-15", merchant="SHELL OIL", amount="-40.00", is_pending=True),
        ],
        [
            ExistingTransaction(
                id="p1", date="2025-08-13", merchant="UBER PENDING", amount="-23.40", is_pending=True
            )
        ],
    )


class TestReconciliationReport:
    def test_sheets_and_rows(self, reconciliation_result, tmp_path):
        path = ExcelReportGenerator(ReconConfig()).generate_reconciliation_report(
            reconciliation_result, tmp_path / "out" / "recon.xlsx", "new.csv", "existing.csv"
        )
        wb = load_workbook(path)

        assert wb.sheetnames == ["Summary", "To Insert", "Pending To Delete"]
        assert wb["Summary"]["A1"].value == "Pending Reconciliation Summary"
        assert wb["Summary"]["B3"].value == "new.csv"

        to_insert = wb["To Insert"]
        assert to_insert.max_row == 3
        assert to_insert["B2"].value == "UBER *TRIP NYC"
        assert to_insert["G2"].value == "p1"
        assert to_insert["F3"].value == "pending"

        assert wb["Pending To Delete"]["A2"].value == "p1"

    def test_disabled_sheet(self, reconciliation_result, tmp_path):
        config = ReconConfig()
        config.output.sheets.pending_deleted.enabled = False
        path = ExcelReportGenerator(config).generate_reconciliation_report(
            reconciliation_result, tmp_path / "recon.xlsx"
        )
        assert "Pending To Delete" not in load_workbook(path).sheetnames

    def test_all_sheets_disabled(self, reconciliation_result, tmp_path):
        config = ReconConfig()
        sheets = config.output.sheets
        for sheet in (sheets.summary, sheets.to_insert, sheets.pending_deleted):
            sheet.enabled = False
        with pytest.raises(ReportGenerationError):
            ExcelReportGenerator(config).generate_reconciliation_report(
                reconciliation_result, tmp_path / "recon.xlsx"
            )


class TestFixedExpenseReport:
    def test_sheets_and_rows(self, expense_history, tmp_path):
        report = FixedExpenseDetector().detect(expense_history)
        path = ExcelReportGenerator(ReconConfig()).generate_fixed_expense_report(
            report, tmp_path / "fixed.xlsx", history_filename="history.csv"
        )
        wb = load_workbook(path)

        assert wb.sheetnames == [
            "Summary",
            "Fixed Expenses",
            "Merchant Scores",
            "Subscription Candidates",
        ]
        assert wb["Fixed Expenses"]["A2"].value == "WELLS MORTGAGE SERVICING"
        assert wb["Fixed Expenses"]["B2"].value == 1200.0

        scores = wb["Merchant Scores"]
        assert scores.max_row == 4
        assert [scores.cell(row=r, column=12).value for r in range(2, 5)] == [
            "high_confidence_fixed",
            "ambiguous",
            "high_confidence_not_fixed",
        ]
        assert wb["Subscription Candidates"]["A2"].value == "NETFLIX.COM"
