"""
Pure customer statement and ageing transformations.

Bridge between AR DTOs (``models.py``) and the pure engines in
``ledger_engines.subledger`` / ``ledger_engines.aging``, plus the response
renderers.  ZERO I/O.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Mapping, Sequence
from uuid import UUID

from ledger_engines.aging import AgingCalculator, AgingReport, OpenItem
from ledger_engines.subledger import (
    StatementLine,
    build_statement,
    invoice_movement,
    payment_movement,
)
from ledger_kernel.db.types import DISPLAY_DECIMAL_PLACES, ZERO, round_money
from ledger_modules.ar.models import InvoiceInfo, PaymentInfo


def build_customer_statement(
    invoices: Sequence[InvoiceInfo],
    payments: Sequence[PaymentInfo],
) -> tuple[StatementLine, ...]:
    """
    Merge invoices (debits) and payments (credits) into a running statement.

    Storage order within each sequence is the tie-break after timestamp and
    type, so callers pass both lists in the order the selector returned them.
    """
    movements = [
        invoice_movement(inv.created_at, inv.invoice_number, inv.final_amount, seq)
        for seq, inv in enumerate(invoices)
    ]
    movements.extend(
        payment_movement(p.created_at, p.note, p.amount, seq)
        for seq, p in enumerate(payments)
    )
    return build_statement(movements)


def build_ageing(
    calculator: AgingCalculator,
    invoices: Sequence[InvoiceInfo],
    paid: Mapping[UUID, Decimal],
    as_of: datetime,
) -> AgingReport:
    """Age every invoice that still has an amount due."""
    items = [
        OpenItem(
            document_id=inv.id,
            counterparty_id=inv.customer_id,
            reference=inv.invoice_number,
            document_time=inv.created_at,
            amount=inv.final_amount,
            paid=paid.get(inv.id, ZERO),
        )
        for inv in invoices
    ]
    return calculator.generate_report(items=items, as_of=as_of)


def render_statement(
    customer_id: UUID,
    lines: Sequence[StatementLine],
    precision: int = DISPLAY_DECIMAL_PLACES,
) -> dict:
    """``{customer_id, transactions}`` with money quantized to ``precision``."""
    return {
        "customer_id": str(customer_id),
        "transactions": [
            {
                "date": line.date.isoformat(),
                "type": line.type.value,
                "description": line.description,
                "debit": round_money(line.debit, precision),
                "credit": round_money(line.credit, precision),
                "balance": round_money(line.balance, precision),
            }
            for line in lines
        ],
    }


def render_ageing(
    report: AgingReport,
    precision: int = DISPLAY_DECIMAL_PLACES,
) -> dict[str, list[dict]]:
    """One key per bucket (always all of them), rows in invoice order."""
    return {
        name: [
            {
                "invoice_id": str(aged.item.document_id),
                "customer_id": (
                    str(aged.item.counterparty_id)
                    if aged.item.counterparty_id is not None
                    else None
                ),
                "invoice_number": aged.item.reference,
                "amount": round_money(aged.item.amount, precision),
                "paid": round_money(aged.item.paid, precision),
                "due": round_money(aged.due, precision),
                "age": aged.age_days,
            }
            for aged in items
        ]
        for name, items in report.breakdown().items()
    }
