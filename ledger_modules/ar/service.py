"""
Accounts Receivable Module Service - customer sub-ledger and receivable postings.

Thin glue layer that:
1. Loads invoices and payments through ReceivablesSelector
2. Calls the sub-ledger engine for the customer statement
3. Calls AgingCalculator for receivable ageing
4. Calls JournalPostingService for sale and payment entries

All computation lives in engines.  All posting lives in the kernel.  The
caller owns the transaction boundary; this service only flushes.

Usage:
    service = CustomerSubledgerService(session, clock=clock)
    ledger = service.get_customer_ledger(tenant_id, customer_id)
    ageing = service.get_customer_ageing(tenant_id)
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Session

from ledger_engines.aging import AgingCalculator, AgingReport
from ledger_engines.subledger import StatementLine
from ledger_kernel.db.types import parse_amount
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.exceptions import InvoiceNotFoundError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.services.journal_posting import JournalPostingService
from ledger_modules._posting_helpers import RecipeLine, coerce_total, post_recipe
from ledger_modules.ar.models import (
    COGS_ACCOUNT,
    INVENTORY_ACCOUNT,
    RECEIVABLE_ACCOUNT,
    SALES_ACCOUNT,
    VAT_OUTPUT_ACCOUNT,
    PaymentMethod,
    settlement_account,
)
from ledger_modules.ar.orm import CustomerPayment
from ledger_modules.ar.selector import ReceivablesSelector
from ledger_modules.ar.statements import (
    build_ageing,
    build_customer_statement,
    render_ageing,
    render_statement,
)
from ledger_modules.reporting.config import ReportingConfig

logger = get_logger("modules.ar.service")


class CustomerSubledgerService:
    """
    Customer statements, receivable ageing and receivable postings.

    Engine composition:
    - build_statement: merge and running balance for one customer
    - AgingCalculator: open invoice ageing
    - JournalPostingService: sale and payment journal entries
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: ReportingConfig | None = None,
        poster: JournalPostingService | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or ReportingConfig.with_defaults()
        self._selector = ReceivablesSelector(session)
        self._poster = poster or JournalPostingService(session, self._clock)
        self._aging = AgingCalculator(self._config.ageing_buckets)

    # =========================================================================
    # Queries
    # =========================================================================

    def customer_statement(
        self,
        tenant_id: UUID,
        customer_id: UUID,
    ) -> tuple[StatementLine, ...]:
        """Invoices and payments of one customer, oldest first, with balance."""
        invoices = self._selector.invoices_for_customer(tenant_id, customer_id)
        payments = self._selector.payments_for_invoices(
            tenant_id, [inv.id for inv in invoices],
        )
        lines = build_customer_statement(invoices, payments)
        logger.info(
            "customer_ledger_built",
            extra={
                "tenant_id": str(tenant_id),
                "customer_id": str(customer_id),
                "invoice_count": len(invoices),
                "payment_count": len(payments),
            },
        )
        return lines

    def get_customer_ledger(self, tenant_id: UUID, customer_id: UUID) -> dict:
        """Rendered ``{customer_id, transactions}`` statement."""
        lines = self.customer_statement(tenant_id, customer_id)
        return render_statement(customer_id, lines, self._config.display_precision)

    def ageing_report(
        self,
        tenant_id: UUID,
        as_of: datetime | None = None,
    ) -> AgingReport:
        """
        Age the tenant's open invoices as of ``as_of`` (default: clock now).

        A tenant with no invoices gets an empty report without a payment
        query.
        """
        as_of = as_of or self._clock.now()
        invoices = self._selector.invoices_for_tenant(tenant_id)
        if not invoices:
            logger.info(
                "customer_ageing_no_invoices",
                extra={"tenant_id": str(tenant_id)},
            )
            return AgingReport(as_of=as_of, buckets=self._aging.buckets, items=())

        paid = self._selector.paid_by_invoice(
            tenant_id, [inv.id for inv in invoices],
        )
        return build_ageing(self._aging, invoices, paid, as_of)

    def get_customer_ageing(
        self,
        tenant_id: UUID,
        as_of: datetime | None = None,
    ) -> dict[str, list[dict]]:
        """Rendered bucket map, every bucket present."""
        report = self.ageing_report(tenant_id, as_of)
        return render_ageing(report, self._config.display_precision)

    # =========================================================================
    # Postings
    # =========================================================================

    def record_payment(
        self,
        tenant_id: UUID,
        customer_id: UUID,
        invoice_id: UUID,
        amount,
        method: str = PaymentMethod.CASH.value,
        note: str = "",
    ) -> UUID:
        """
        Record a customer payment against one of their invoices.

        Inserts the CustomerPayment and posts Dr Cash|Bank / Cr Accounts
        Receivable in the caller's transaction.

        Raises:
            InvalidAmountError: If amount is not a positive number.
            InvoiceNotFoundError: If the invoice does not belong to the tenant
                and customer.
        """
        value = parse_amount(amount)
        invoice = self._selector.get_invoice(tenant_id, invoice_id)
        if invoice is None or invoice.customer_id != customer_id:
            logger.warning(
                "payment_rejected_unknown_invoice",
                extra={
                    "tenant_id": str(tenant_id),
                    "customer_id": str(customer_id),
                    "invoice_id": str(invoice_id),
                },
            )
            raise InvoiceNotFoundError(str(invoice_id))

        normalized_method = (method or PaymentMethod.CASH.value).strip().lower()
        payment = CustomerPayment(
            tenant_id=tenant_id,
            invoice_id=invoice_id,
            customer_id=customer_id,
            amount=value,
            method=normalized_method,
            note=note or "",
            created_at=self._clock.now(),
        )
        self._session.add(payment)
        self._session.flush()

        post_recipe(
            self._poster,
            tenant_id,
            str(payment.id),
            [
                RecipeLine(
                    debit_account=settlement_account(normalized_method),
                    credit_account=RECEIVABLE_ACCOUNT,
                    amount=value,
                    description=f"Payment for Invoice #{invoice.invoice_number}",
                    reference_type="customer_payment",
                ),
            ],
        )
        logger.info(
            "customer_payment_recorded",
            extra={
                "tenant_id": str(tenant_id),
                "customer_id": str(customer_id),
                "invoice_id": str(invoice_id),
                "payment_id": str(payment.id),
                "amount": str(value),
                "method": normalized_method,
            },
        )
        return payment.id

    def record_sale(
        self,
        tenant_id: UUID,
        invoice_id: UUID,
        invoice_number: str,
        net_total,
        tax_total=None,
        payment_method: str = PaymentMethod.CASH.value,
        cost_total=None,
    ) -> list[UUID]:
        """
        Post the journal entries for a sales invoice.

        Cash-type sales debit Cash or Bank; credit sales
        (``payment_method == "credit"``) debit Accounts Receivable.  Net
        goes to Sales, tax to VAT Output, and a non-zero ``cost_total``
        moves stock from Inventory to Cost of Goods Sold.  Zero lines are
        skipped.

        Returns:
            Ids of the posted entries.
        """
        net = coerce_total(net_total, "net_total")
        tax = coerce_total(tax_total, "tax_total")
        cost = coerce_total(cost_total, "cost_total")

        method = (payment_method or PaymentMethod.CASH.value).strip().lower()
        if method == PaymentMethod.CREDIT.value:
            debit_account = RECEIVABLE_ACCOUNT
        else:
            debit_account = settlement_account(method)

        description = f"Invoice #{invoice_number}"
        entry_ids = post_recipe(
            self._poster,
            tenant_id,
            str(invoice_id),
            [
                RecipeLine(
                    debit_account=debit_account,
                    credit_account=SALES_ACCOUNT,
                    amount=net,
                    description=description,
                    reference_type="invoice_sale",
                ),
                RecipeLine(
                    debit_account=debit_account,
                    credit_account=VAT_OUTPUT_ACCOUNT,
                    amount=tax,
                    description=f"VAT Output for {description}",
                    reference_type="invoice_vat",
                ),
                RecipeLine(
                    debit_account=COGS_ACCOUNT,
                    credit_account=INVENTORY_ACCOUNT,
                    amount=cost,
                    description=f"COGS for {description}",
                    reference_type="invoice_cogs",
                ),
            ],
        )
        logger.info(
            "sale_posted",
            extra={
                "tenant_id": str(tenant_id),
                "invoice_id": str(invoice_id),
                "payment_method": method,
                "entry_count": len(entry_ids),
            },
        )
        return entry_ids
