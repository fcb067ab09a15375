"""
ledger_services.ledger_api -- External request/response facade.

Responsibility:
    The one entry point HTTP handlers and jobs call.  Each call opens its own
    session from a sessionmaker, runs one kernel/module operation inside
    ``session_scope`` (commit on success, rollback on any exception) and
    returns plain response data: dicts of strings, Decimals and lists, or a
    new id.

Architecture position:
    Services -- top layer.  May import ledger_kernel, ledger_config,
    ledger_engines and ledger_modules.

Invariants enforced:
    - Tenant scoping: every method takes an already-authenticated tenant id
      and passes it to every query.
    - Atomicity: a write is committed entirely or not at all.
    - Storage translation: ``SQLAlchemyError`` from core queries surfaces as
      ``StorageFailureError`` chained to the original (``raise ... from``).
      Nothing is retried.
    - Validation first: posting requests are validated before a session is
      opened.

Failure modes:
    - LedgerError subclasses from the kernel and modules propagate unchanged.
    - StorageFailureError for database failures.
    - ValueError for malformed identifiers.

Usage:
    from ledger_kernel.db.engine import init_engine_from_url, create_tables
    from ledger_services.ledger_api import LedgerAPI

    init_engine_from_url("postgresql://...")
    create_tables()
    api = LedgerAPI()
    api.seed_default_accounts(tenant_id)
    api.post_journal_entry(tenant_id, "Cash", "Sales", "100.00", "Cash sale")
    api.get_trial_balance(tenant_id)
"""

from __future__ import annotations

from collections.abc import Generator, Mapping
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ledger_kernel.db.engine import get_session_factory, session_scope
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dtos import AccountRef, PostingRequest
from ledger_kernel.exceptions import StorageFailureError
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.account import AccountType
from ledger_kernel.models.journal import DEFAULT_REFERENCE_TYPE
from ledger_kernel.services.account_registry import AccountRegistry
from ledger_kernel.services.journal_posting import JournalPostingService
from ledger_modules.ap.service import PurchaseLedgerService
from ledger_modules.ar.service import CustomerSubledgerService
from ledger_modules.payroll.service import PayrollService
from ledger_modules.reporting.config import ReportingConfig
from ledger_modules.reporting.service import ReportingService

logger = get_logger("services.ledger_api")


def _as_uuid(value: UUID | str, field_name: str) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise ValueError(f"{field_name} is not a valid identifier: {value!r}") from None


class LedgerAPI:
    """
    Request/response facade over the ledger.

    Contract:
        Stateless apart from its collaborators; safe to share between
        threads because every call takes a fresh session from the factory.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session] | None = None,
        clock: Clock | None = None,
        config: ReportingConfig | None = None,
        default_chart: Mapping[str, AccountType] | None = None,
    ):
        self._session_factory = session_factory or get_session_factory()
        self._clock = clock or SystemClock()
        self._config = config or ReportingConfig.with_defaults()
        self._default_chart = default_chart

    # =========================================================================
    # Internal helpers
    # =========================================================================

    @contextmanager
    def _scope(
        self,
        operation: str,
        tenant_id: UUID,
    ) -> Generator[Session, None, None]:
        """Session scope with tenant log context and storage translation."""
        with LogContext.bind(tenant_id=tenant_id):
            try:
                with session_scope(self._session_factory) as session:
                    yield session
            except SQLAlchemyError as exc:
                logger.error(
                    "storage_failure",
                    extra={"operation": operation},
                    exc_info=True,
                )
                raise StorageFailureError(operation, str(exc)) from exc

    def _registry(self, session: Session) -> AccountRegistry:
        return AccountRegistry(session, self._clock, self._default_chart)

    def _poster(self, session: Session) -> JournalPostingService:
        return JournalPostingService(session, self._clock, self._registry(session))

    def _reporting(self, session: Session) -> ReportingService:
        return ReportingService(session, self._clock, self._config)

    def _receivables(self, session: Session) -> CustomerSubledgerService:
        return CustomerSubledgerService(
            session, self._clock, self._config, self._poster(session),
        )

    def _payables(self, session: Session) -> PurchaseLedgerService:
        return PurchaseLedgerService(session, self._clock, self._poster(session))

    def _payroll(self, session: Session) -> PayrollService:
        return PayrollService(session, self._clock, self._poster(session))

    # =========================================================================
    # Chart of accounts
    # =========================================================================

    def seed_default_accounts(self, tenant_id: UUID | str) -> int:
        """Seed the default chart for a new tenant; 0 if already seeded."""
        tid = _as_uuid(tenant_id, "tenant_id")
        with self._scope("seed_default_accounts", tid) as session:
            return self._registry(session).seed_defaults(tid)

    def create_account(
        self,
        tenant_id: UUID | str,
        name: str,
        account_type: AccountType | str,
        parent_id: UUID | str | None = None,
    ) -> UUID:
        """Add a custom account to the tenant's chart and return its id."""
        tid = _as_uuid(tenant_id, "tenant_id")
        parent = _as_uuid(parent_id, "parent_id") if parent_id is not None else None
        with self._scope("create_account", tid) as session:
            info = self._registry(session).create_account(
                tid, name, account_type, parent,
            )
            return info.account_id

    # =========================================================================
    # Reports
    # =========================================================================

    def get_trial_balance(self, tenant_id: UUID | str) -> dict:
        tid = _as_uuid(tenant_id, "tenant_id")
        with self._scope("get_trial_balance", tid) as session:
            return self._reporting(session).trial_balance_dict(tid)

    def get_balance_sheet(self, tenant_id: UUID | str) -> dict:
        tid = _as_uuid(tenant_id, "tenant_id")
        with self._scope("get_balance_sheet", tid) as session:
            return self._reporting(session).balance_sheet_dict(tid)

    def get_profit_and_loss(self, tenant_id: UUID | str) -> dict:
        tid = _as_uuid(tenant_id, "tenant_id")
        with self._scope("get_profit_and_loss", tid) as session:
            return self._reporting(session).profit_and_loss_dict(tid)

    def get_account_ledger(
        self,
        tenant_id: UUID | str,
        account: AccountRef,
    ) -> dict:
        """Entries of one account (id or name) with a running balance."""
        tid = _as_uuid(tenant_id, "tenant_id")
        with self._scope("get_account_ledger", tid) as session:
            return self._reporting(session).account_ledger_dict(tid, account)

    def get_vat_summary(
        self,
        tenant_id: UUID | str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> dict:
        tid = _as_uuid(tenant_id, "tenant_id")
        with self._scope("get_vat_summary", tid) as session:
            return self._reporting(session).vat_summary_dict(tid, start, end)

    def get_daybook(
        self,
        tenant_id: UUID | str,
        day: date | None = None,
    ) -> dict:
        """The tenant's journal, oldest first; one UTC day when ``day`` is given."""
        tid = _as_uuid(tenant_id, "tenant_id")
        start = end = None
        if day is not None:
            start, end = ReportingService.day_window(day)
        with self._scope("get_daybook", tid) as session:
            return self._reporting(session).daybook_dict(tid, start, end)

    # =========================================================================
    # Journal
    # =========================================================================

    def post_journal_entry(
        self,
        tenant_id: UUID | str,
        debit_account: AccountRef,
        credit_account: AccountRef,
        amount: Any,
        description: str,
        reference_id: str | None = None,
        reference_type: str = DEFAULT_REFERENCE_TYPE,
    ) -> UUID:
        """Post one balanced entry and return its id."""
        request = PostingRequest(
            tenant_id=_as_uuid(tenant_id, "tenant_id"),
            debit_account=debit_account,
            credit_account=credit_account,
            amount=amount,
            description=description,
            reference_id=reference_id,
            reference_type=reference_type,
        )
        return self.post_request(request)

    def post_journal_payload(
        self,
        tenant_id: UUID | str,
        payload: Mapping[str, Any],
    ) -> UUID:
        """Post from a loose request body; missing fields are reported together."""
        request = PostingRequest.from_dict(_as_uuid(tenant_id, "tenant_id"), payload)
        return self.post_request(request)

    def post_request(self, request: PostingRequest) -> UUID:
        with self._scope("post_journal_entry", request.tenant_id) as session:
            return self._poster(session).post(request)

    # =========================================================================
    # Customer sub-ledger
    # =========================================================================

    def get_customer_ledger(
        self,
        tenant_id: UUID | str,
        customer_id: UUID | str,
    ) -> dict:
        tid = _as_uuid(tenant_id, "tenant_id")
        cid = _as_uuid(customer_id, "customer_id")
        with self._scope("get_customer_ledger", tid) as session:
            return self._receivables(session).get_customer_ledger(tid, cid)

    def get_customer_ageing(
        self,
        tenant_id: UUID | str,
        as_of: datetime | None = None,
    ) -> dict[str, list[dict]]:
        tid = _as_uuid(tenant_id, "tenant_id")
        with self._scope("get_customer_ageing", tid) as session:
            return self._receivables(session).get_customer_ageing(tid, as_of)

    def record_customer_payment(
        self,
        tenant_id: UUID | str,
        customer_id: UUID | str,
        invoice_id: UUID | str,
        amount: Any,
        method: str = "cash",
        note: str = "",
    ) -> UUID:
        """Record a payment and its journal entry; return the payment id."""
        tid = _as_uuid(tenant_id, "tenant_id")
        cid = _as_uuid(customer_id, "customer_id")
        iid = _as_uuid(invoice_id, "invoice_id")
        with self._scope("record_customer_payment", tid) as session:
            return self._receivables(session).record_payment(
                tid, cid, iid, amount, method=method, note=note,
            )

    def record_sale(
        self,
        tenant_id: UUID | str,
        invoice_id: UUID | str,
        invoice_number: str,
        net_total: Any,
        tax_total: Any = None,
        payment_method: str = "cash",
        cost_total: Any = None,
    ) -> list[UUID]:
        tid = _as_uuid(tenant_id, "tenant_id")
        with self._scope("record_sale", tid) as session:
            return self._receivables(session).record_sale(
                tid,
                _as_uuid(invoice_id, "invoice_id"),
                invoice_number,
                net_total,
                tax_total=tax_total,
                payment_method=payment_method,
                cost_total=cost_total,
            )

    # =========================================================================
    # Purchases
    # =========================================================================

    def record_purchase(
        self,
        tenant_id: UUID | str,
        purchase_id: Any,
        invoice_number: str,
        net_total: Any,
        tax_total: Any = None,
        payment_method: str = "cash",
    ) -> list[UUID]:
        tid = _as_uuid(tenant_id, "tenant_id")
        with self._scope("record_purchase", tid) as session:
            return self._payables(session).record_purchase(
                tid,
                purchase_id,
                invoice_number,
                net_total,
                tax_total=tax_total,
                payment_method=payment_method,
            )

    def record_supplier_payment(
        self,
        tenant_id: UUID | str,
        purchase_id: Any,
        amount: Any,
    ) -> UUID:
        tid = _as_uuid(tenant_id, "tenant_id")
        with self._scope("record_supplier_payment", tid) as session:
            return self._payables(session).record_supplier_payment(
                tid, purchase_id, amount,
            )

    # =========================================================================
    # Payroll
    # =========================================================================

    def record_salary_payment(
        self,
        tenant_id: UUID | str,
        employee_id: Any,
        month: str,
        base_salary: Any,
        allowance: Any = None,
        bonus: Any = None,
        deductions: Any = None,
        payment_method: str = "cash",
    ) -> UUID:
        """Post one month's net salary for an employee; return the entry id."""
        tid = _as_uuid(tenant_id, "tenant_id")
        with self._scope("record_salary_payment", tid) as session:
            return self._payroll(session).record_salary_payment(
                tid,
                employee_id,
                month,
                base_salary,
                allowance=allowance,
                bonus=bonus,
                deductions=deductions,
                payment_method=payment_method,
            )
