"""
Reporting Module Service (``ledger_modules.reporting.service``).

Responsibility
--------------
Orchestrates report generation -- trial balance, balance sheet, profit &
loss, the per-account ledger, the VAT summary and the daybook -- by bridging the account registry and ``JournalSelector`` to the
pure aggregation engine and the pure functions in ``statements.py``.  This
is a **read-only** service.

Architecture position
---------------------
**Modules layer** -- thin glue.  Constructor: ``session`` + ``clock`` +
``config``.

Invariants enforced
-------------------
* Read-only -- no mutations to the journal or the chart.
* Tenant scoping -- accounts and entries are both filtered on tenant_id.
* No stored balances -- every report re-aggregates the journal.
* Short-circuit -- when the tenant has no account of the relevant types the
  empty report is returned without querying journal entries.

Failure modes
-------------
* Core queries (accounts, entries) -> SQLAlchemyError propagates.
* Supplementary trial balance ``entry_count`` query -> SQLAlchemyError is
  logged as a warning and the count degrades to 0.
* Unknown account in ``account_ledger`` -> AccountNotFoundError.
* ``start`` not before ``end`` -> ValueError.
"""

from __future__ import annotations

from collections.abc import Collection
from datetime import UTC, date, datetime, time, timedelta
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ledger_engines.aggregation import AccountTotals, accumulate
from ledger_kernel.db.types import ensure_utc
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dtos import AccountRef
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import (
    BALANCE_SHEET_TYPES,
    PROFIT_AND_LOSS_TYPES,
    AccountType,
    normalize_account_name,
)
from ledger_kernel.selectors.journal_selector import JournalSelector
from ledger_kernel.services.account_registry import AccountRegistry
from ledger_modules.reporting.config import ReportingConfig
from ledger_modules.reporting.models import (
    AccountLedgerReport,
    BalanceSheetReport,
    DaybookReport,
    ProfitAndLossReport,
    ReportType,
    TrialBalanceReport,
    VatSummaryReport,
)
from ledger_modules.reporting.statements import (
    build_account_ledger,
    build_balance_sheet,
    build_daybook,
    build_profit_and_loss,
    build_trial_balance,
    build_vat_summary,
    render_to_dict,
)

logger = get_logger("modules.reporting.service")


class ReportingService:
    """
    Financial report generation service.

    Contract
    --------
    * ``trial_balance`` / ``balance_sheet`` / ``profit_and_loss`` return
      typed report dataclasses with unrounded figures.
    * ``*_dict`` variants return the rendered response shapes.

    Non-goals
    ---------
    * No closing entries or comparative columns.  Only the VAT summary and
      the daybook take a date window.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: ReportingConfig | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or ReportingConfig.with_defaults()
        self._registry = AccountRegistry(session, self._clock)
        self._journal = JournalSelector(session)

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _account_totals(
        self,
        tenant_id: UUID,
        report_type: ReportType,
        types: Collection[AccountType] | None = None,
    ) -> list[AccountTotals]:
        """
        Load the tenant's accounts (filtered by type) and accumulate the
        journal entries touching them.
        """
        accounts = self._registry.list_by_type(tenant_id, types)
        if not accounts:
            logger.info(
                "report_short_circuit_no_accounts",
                extra={
                    "tenant_id": str(tenant_id),
                    "report_type": report_type.value,
                },
            )
            return []

        entries = self._journal.entries_touching(
            tenant_id, [a.account_id for a in accounts],
        )
        return accumulate(accounts=accounts, entries=entries)

    def _account_names(self, tenant_id: UUID) -> dict[UUID, str]:
        return {a.account_id: a.name for a in self._registry.list_by_type(tenant_id)}

    @staticmethod
    def _check_window(start: datetime | None, end: datetime | None) -> None:
        if start is None or end is None:
            return
        if ensure_utc(start) >= ensure_utc(end):
            raise ValueError("start must be before end")

    def _entry_count(self, tenant_id: UUID) -> int:
        """Supplementary count; storage failures degrade to 0."""
        if not self._config.include_entry_count:
            return 0
        try:
            return self._journal.count(tenant_id)
        except SQLAlchemyError:
            logger.warning(
                "entry_count_unavailable",
                extra={"tenant_id": str(tenant_id)},
                exc_info=True,
            )
            return 0

    # =========================================================================
    # Public API
    # =========================================================================

    def trial_balance(self, tenant_id: UUID) -> TrialBalanceReport:
        """Every account of the tenant with its debit and credit totals."""
        totals = self._account_totals(tenant_id, ReportType.TRIAL_BALANCE)
        entry_count = self._entry_count(tenant_id) if totals else 0
        report = build_trial_balance(totals, entry_count=entry_count)
        logger.info(
            "trial_balance_built",
            extra={
                "tenant_id": str(tenant_id),
                "account_count": len(report.lines),
                "total_debit": str(report.total_debit),
                "total_credit": str(report.total_credit),
                "is_balanced": report.is_balanced,
            },
        )
        if not report.is_balanced:
            logger.error(
                "trial_balance_out_of_balance",
                extra={
                    "tenant_id": str(tenant_id),
                    "difference": str(report.difference),
                },
            )
        return report

    def balance_sheet(self, tenant_id: UUID) -> BalanceSheetReport:
        """Asset, liability and equity accounts with section totals."""
        totals = self._account_totals(
            tenant_id, ReportType.BALANCE_SHEET, BALANCE_SHEET_TYPES,
        )
        report = build_balance_sheet(totals)
        logger.info(
            "balance_sheet_built",
            extra={
                "tenant_id": str(tenant_id),
                "asset_total": str(report.asset_total),
                "liability_total": str(report.liability_total),
                "equity_total": str(report.equity_total),
            },
        )
        return report

    def profit_and_loss(self, tenant_id: UUID) -> ProfitAndLossReport:
        """Income and expense accounts with net profit."""
        totals = self._account_totals(
            tenant_id, ReportType.PROFIT_AND_LOSS, PROFIT_AND_LOSS_TYPES,
        )
        report = build_profit_and_loss(totals)
        logger.info(
            "profit_and_loss_built",
            extra={
                "tenant_id": str(tenant_id),
                "income_total": str(report.income_total),
                "expense_total": str(report.expense_total),
                "net_profit": str(report.net_profit),
            },
        )
        return report

    def account_ledger(
        self,
        tenant_id: UUID,
        account_ref: AccountRef,
    ) -> AccountLedgerReport:
        """
        Chronological entries of one account with a running balance.

        ``account_ref`` is an account id or name of the tenant.

        Raises:
            AccountNotFoundError: If the account is unknown to the tenant.
        """
        account = self._registry.get(
            tenant_id, self._registry.resolve_ref(tenant_id, account_ref),
        )
        entries = self._journal.entries_touching(tenant_id, [account.account_id])
        report = build_account_ledger(
            account, entries, self._account_names(tenant_id),
        )
        logger.info(
            "account_ledger_built",
            extra={
                "tenant_id": str(tenant_id),
                "account_id": str(account.account_id),
                "line_count": len(report.lines),
                "closing_balance": str(report.closing_balance),
            },
        )
        return report

    def vat_summary(
        self,
        tenant_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> VatSummaryReport:
        """VAT on sales less VAT on purchases for entries in ``[start, end)``."""
        self._check_window(start, end)
        config = self._config
        wanted = {
            normalize_account_name(name)
            for name in (
                config.sales_account,
                config.vat_output_account,
                config.vat_input_account,
            )
        }
        accounts = [
            a for a in self._registry.list_by_type(tenant_id)
            if normalize_account_name(a.name) in wanted
        ]
        if not accounts:
            logger.info(
                "report_short_circuit_no_accounts",
                extra={
                    "tenant_id": str(tenant_id),
                    "report_type": ReportType.VAT_SUMMARY.value,
                },
            )
            totals: list[AccountTotals] = []
        else:
            entries = self._journal.entries_touching(
                tenant_id, [a.account_id for a in accounts], start=start, end=end,
            )
            totals = accumulate(accounts=accounts, entries=entries)

        report = build_vat_summary(
            totals,
            sales_account=config.sales_account,
            vat_output_account=config.vat_output_account,
            vat_input_account=config.vat_input_account,
            start=start,
            end=end,
        )
        logger.info(
            "vat_summary_built",
            extra={
                "tenant_id": str(tenant_id),
                "sales_vat": str(report.sales_vat),
                "purchase_vat": str(report.purchase_vat),
                "vat_payable": str(report.vat_payable),
            },
        )
        return report

    def daybook(
        self,
        tenant_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> DaybookReport:
        """Every entry of the tenant in ``[start, end)``, oldest first."""
        self._check_window(start, end)
        entries = self._journal.listing(tenant_id, start=start, end=end)
        report = build_daybook(
            entries, self._account_names(tenant_id), start=start, end=end,
        )
        logger.info(
            "daybook_built",
            extra={"tenant_id": str(tenant_id), "entry_count": len(report.lines)},
        )
        return report

    @staticmethod
    def day_window(day: date) -> tuple[datetime, datetime]:
        """The UTC ``[start, end)`` window covering one calendar day."""
        start = datetime.combine(day, time.min, tzinfo=UTC)
        return start, start + timedelta(days=1)

    # =========================================================================
    # Rendered responses
    # =========================================================================

    def trial_balance_dict(self, tenant_id: UUID) -> dict:
        return render_to_dict(
            self.trial_balance(tenant_id), self._config.display_precision,
        )

    def balance_sheet_dict(self, tenant_id: UUID) -> dict:
        return render_to_dict(
            self.balance_sheet(tenant_id),
            self._config.display_precision,
            hide_zero=self._config.hide_zero_balance_sheet_lines,
        )

    def profit_and_loss_dict(self, tenant_id: UUID) -> dict:
        return render_to_dict(
            self.profit_and_loss(tenant_id), self._config.display_precision,
        )

    def account_ledger_dict(self, tenant_id: UUID, account_ref: AccountRef) -> dict:
        return render_to_dict(
            self.account_ledger(tenant_id, account_ref),
            self._config.display_precision,
        )

    def vat_summary_dict(
        self,
        tenant_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> dict:
        return render_to_dict(
            self.vat_summary(tenant_id, start, end), self._config.display_precision,
        )

    def daybook_dict(
        self,
        tenant_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> dict:
        return render_to_dict(
            self.daybook(tenant_id, start, end), self._config.display_precision,
        )
