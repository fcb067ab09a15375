"""
Payroll Module Service - salary payment postings.

    Salary (cash):  Dr Salary Expense / Cr Cash    (net pay)
    Salary (bank):  Dr Salary Expense / Cr Bank    (net pay)

Net pay is base salary plus allowance and bonus, less deductions.  Each
employee is paid at most once per month; the entry's reference id
(``<employee_id>:<YYYY-MM>``) is the duplicate key.  The caller owns the
transaction.
"""

from __future__ import annotations

import re
from uuid import UUID

from sqlalchemy.orm import Session

from ledger_kernel.db.types import ZERO
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.exceptions import (
    DuplicateSalaryPaymentError,
    InvalidAmountError,
    InvalidPayPeriodError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.selectors.journal_selector import JournalSelector
from ledger_kernel.services.journal_posting import JournalPostingService
from ledger_modules._posting_helpers import coerce_total

logger = get_logger("modules.payroll.service")

SALARY_EXPENSE_ACCOUNT = "Salary Expense"
CASH_ACCOUNT = "Cash"
BANK_ACCOUNT = "Bank"

SALARY_REFERENCE_TYPE = "salary"
BANK_PAYMENT_METHOD = "bank"

_MONTH_PATTERN = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


def salary_reference(employee_id, month: str) -> str:
    return f"{employee_id}:{month}"


def parse_pay_month(month: object) -> tuple[int, int]:
    """
    Split a ``YYYY-MM`` string into (year, month).

    Raises:
        InvalidPayPeriodError: If the value is not in that format.
    """
    match = _MONTH_PATTERN.match(str(month).strip()) if month is not None else None
    if match is None:
        raise InvalidPayPeriodError(month, "month must be in YYYY-MM format")
    return int(match.group(1)), int(match.group(2))


class PayrollService:
    """Posts salary payments to the journal."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        poster: JournalPostingService | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._poster = poster or JournalPostingService(session, self._clock)
        self._journal = JournalSelector(session)

    def record_salary_payment(
        self,
        tenant_id: UUID,
        employee_id,
        month: str,
        base_salary,
        allowance=None,
        bonus=None,
        deductions=None,
        payment_method: str = "cash",
    ) -> UUID:
        """
        Post one month's net salary for an employee.

        Raises:
            InvalidPayPeriodError: Malformed month, or a month after the
                clock's current month.
            InvalidAmountError: A component is invalid or net pay is not
                positive.
            DuplicateSalaryPaymentError: The employee was already paid for
                the month.
        """
        year, month_number = parse_pay_month(month)
        now = self._clock.now()
        if (year, month_number) > (now.year, now.month):
            raise InvalidPayPeriodError(month, "cannot pay salary for a future month")
        period = f"{year:04d}-{month_number:02d}"

        net = (
            coerce_total(base_salary, "base_salary")
            + coerce_total(allowance, "allowance")
            + coerce_total(bonus, "bonus")
            - coerce_total(deductions, "deductions")
        )
        if net <= ZERO:
            raise InvalidAmountError(net, "net salary must be positive")

        reference_id = salary_reference(employee_id, period)
        if self._journal.by_reference(tenant_id, SALARY_REFERENCE_TYPE, reference_id):
            logger.warning(
                "salary_payment_duplicate",
                extra={
                    "tenant_id": str(tenant_id),
                    "employee_id": str(employee_id),
                    "month": period,
                },
            )
            raise DuplicateSalaryPaymentError(str(employee_id), period)

        method = (payment_method or "cash").strip().lower()
        credit_account = BANK_ACCOUNT if method == BANK_PAYMENT_METHOD else CASH_ACCOUNT
        entry_id = self._poster.post_entry(
            tenant_id=tenant_id,
            debit_account=SALARY_EXPENSE_ACCOUNT,
            credit_account=credit_account,
            amount=net,
            description=f"Salary paid for {period}",
            reference_id=reference_id,
            reference_type=SALARY_REFERENCE_TYPE,
        )
        logger.info(
            "salary_payment_posted",
            extra={
                "tenant_id": str(tenant_id),
                "employee_id": str(employee_id),
                "month": period,
                "payment_method": method,
                "net_amount": str(net),
            },
        )
        return entry_id
