"""
Tests for the payroll module service.

Covers:
- Net salary posting to Cash or Bank
- Pay month validation (format, future months)
- One payment per employee and month
"""

from decimal import Decimal

import pytest

from ledger_kernel.exceptions import (
    DuplicateSalaryPaymentError,
    InvalidAmountError,
    InvalidPayPeriodError,
    TenantNotFoundError,
)
from ledger_kernel.selectors.journal_selector import JournalSelector
from ledger_modules.payroll.service import PayrollService, parse_pay_month, salary_reference


@pytest.fixture
def payroll(session, deterministic_clock, poster) -> PayrollService:
    return PayrollService(session, deterministic_clock, poster)


def _names(registry, tenant_id, entry) -> tuple[str, str]:
    return (
        registry.get(tenant_id, entry.debit_account_id).name,
        registry.get(tenant_id, entry.credit_account_id).name,
    )


class TestRecordSalaryPayment:

    def test_cash_payment(self, session, payroll, registry, seeded_tenant):
        entry_id = payroll.record_salary_payment(seeded_tenant, 7, "2023-12", "2500.00")

        entry = JournalSelector(session).get(seeded_tenant, entry_id)
        assert _names(registry, seeded_tenant, entry) == ("Salary Expense", "Cash")
        assert entry.amount == Decimal("2500.00")
        assert entry.description == "Salary paid for 2023-12"
        assert entry.reference_type == "salary"
        assert entry.reference_id == "7:2023-12"

    def test_bank_payment(self, session, payroll, registry, seeded_tenant):
        entry_id = payroll.record_salary_payment(
            seeded_tenant, 7, "2024-01", "1000", payment_method=" Bank ",
        )

        entry = JournalSelector(session).get(seeded_tenant, entry_id)
        assert _names(registry, seeded_tenant, entry)[1] == "Bank"

    def test_net_of_components(self, session, payroll, seeded_tenant):
        entry_id = payroll.record_salary_payment(
            seeded_tenant,
            8,
            "2023-11",
            "2000",
            allowance="150.50",
            bonus="200",
            deductions="350.50",
        )

        assert JournalSelector(session).get(seeded_tenant, entry_id).amount == Decimal("2000.00")

    def test_current_month_allowed(self, payroll, seeded_tenant):
        # deterministic clock sits in January 2024
        assert payroll.record_salary_payment(seeded_tenant, 9, "2024-01", "10")

    def test_duplicate_month_rejected(self, session, payroll, seeded_tenant):
        payroll.record_salary_payment(seeded_tenant, 7, "2023-12", "100")

        with pytest.raises(DuplicateSalaryPaymentError) as exc_info:
            payroll.record_salary_payment(seeded_tenant, 7, "2023-12", "100")

        assert exc_info.value.code == "DUPLICATE_SALARY_PAYMENT"
        assert exc_info.value.month == "2023-12"
        assert JournalSelector(session).count(seeded_tenant) == 1

    def test_other_employee_same_month(self, payroll, seeded_tenant):
        payroll.record_salary_payment(seeded_tenant, 7, "2023-12", "100")

        assert payroll.record_salary_payment(seeded_tenant, 8, "2023-12", "100")

    def test_future_month_rejected(self, session, payroll, seeded_tenant):
        with pytest.raises(InvalidPayPeriodError, match="future"):
            payroll.record_salary_payment(seeded_tenant, 7, "2024-02", "100")

        assert JournalSelector(session).count(seeded_tenant) == 0

    @pytest.mark.parametrize("month", ["2023-13", "2023-1", "Dec 2023", "", None])
    def test_malformed_month_rejected(self, payroll, seeded_tenant, month):
        with pytest.raises(InvalidPayPeriodError, match="YYYY-MM"):
            payroll.record_salary_payment(seeded_tenant, 7, month, "100")

    def test_deductions_exceeding_pay_rejected(self, session, payroll, seeded_tenant):
        with pytest.raises(InvalidAmountError, match="net salary"):
            payroll.record_salary_payment(
                seeded_tenant, 7, "2023-12", "100", deductions="100",
            )

        assert JournalSelector(session).count(seeded_tenant) == 0

    @pytest.mark.parametrize("base", ["-5", "abc", True])
    def test_invalid_component(self, payroll, seeded_tenant, base):
        with pytest.raises(InvalidAmountError):
            payroll.record_salary_payment(seeded_tenant, 7, "2023-12", base)

    def test_unknown_tenant(self, payroll, tenant_id):
        with pytest.raises(TenantNotFoundError):
            payroll.record_salary_payment(tenant_id, 7, "2023-12", "100")

    def test_logged(self, payroll, seeded_tenant, captured_logs):
        payroll.record_salary_payment(seeded_tenant, 7, "2023-12", "100", bonus="5")

        record = next(r for r in captured_logs() if r["message"] == "salary_payment_posted")
        assert record["employee_id"] == "7"
        assert record["net_amount"] == "105"

    def test_appears_in_profit_and_loss(
        self, session, payroll, seeded_tenant, deterministic_clock,
    ):
        from ledger_modules.reporting.service import ReportingService

        payroll.record_salary_payment(seeded_tenant, 7, "2023-12", "800")

        pl = ReportingService(session, deterministic_clock).profit_and_loss_dict(seeded_tenant)

        assert pl["expense_total"] == Decimal("800.00")
        assert pl["net_profit"] == Decimal("-800.00")


class TestHelpers:

    def test_parse_pay_month(self):
        assert parse_pay_month(" 2024-03 ") == (2024, 3)

    def test_salary_reference(self):
        assert salary_reference("emp-1", "2024-03") == "emp-1:2024-03"
