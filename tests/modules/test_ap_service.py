"""
Tests for the Accounts Payable module service.

Covers:
- Cash and credit purchases (inventory and VAT lines)
- Supplier payments
- Validation and zero-line skipping
"""

from decimal import Decimal

import pytest

from ledger_kernel.exceptions import InvalidAmountError, TenantNotFoundError
from ledger_kernel.selectors.journal_selector import JournalSelector
from ledger_modules.ap.service import PurchaseLedgerService


@pytest.fixture
def ap_service(session, deterministic_clock, poster) -> PurchaseLedgerService:
    return PurchaseLedgerService(session, deterministic_clock, poster)


def _names(registry, tenant_id, entry) -> tuple[str, str]:
    return (
        registry.get(tenant_id, entry.debit_account_id).name,
        registry.get(tenant_id, entry.credit_account_id).name,
    )


class TestRecordPurchase:

    def test_cash_purchase(self, session, ap_service, registry, seeded_tenant):
        entry_ids = ap_service.record_purchase(
            seeded_tenant, 42, "PO-42", "800.00", tax_total="40.00",
        )

        assert len(entry_ids) == 2
        entries = {
            e.description: e
            for e in JournalSelector(session).by_reference(seeded_tenant, "purchase", "42")
        }
        net = entries["Purchase #PO-42 - Inventory"]
        tax = entries["Purchase #PO-42 - VAT"]
        assert _names(registry, seeded_tenant, net) == ("Inventory", "Cash")
        assert net.amount == Decimal("800.00")
        assert _names(registry, seeded_tenant, tax) == ("VAT Input", "Cash")
        assert tax.amount == Decimal("40.00")

    def test_credit_purchase(self, session, ap_service, registry, seeded_tenant):
        ap_service.record_purchase(
            seeded_tenant, 43, "PO-43", "100", tax_total="5", payment_method="Credit",
        )

        entries = JournalSelector(session).by_reference(seeded_tenant, "purchase", "43")
        assert [_names(registry, seeded_tenant, e)[1] for e in entries] == [
            "Accounts Payable",
            "Accounts Payable",
        ]

    def test_zero_tax_skipped(self, ap_service, seeded_tenant):
        assert len(ap_service.record_purchase(seeded_tenant, 44, "PO-44", "100")) == 1

    def test_negative_total_rejected(self, session, ap_service, seeded_tenant):
        with pytest.raises(InvalidAmountError):
            ap_service.record_purchase(seeded_tenant, 45, "PO-45", "100", tax_total="-1")

        assert JournalSelector(session).count(seeded_tenant) == 0

    def test_sub_scale_total_rejected(self, session, ap_service, seeded_tenant):
        with pytest.raises(InvalidAmountError, match="decimal places"):
            ap_service.record_purchase(
                seeded_tenant, 47, "PO-47", "100", tax_total="0.0000000001",
            )

        assert JournalSelector(session).count(seeded_tenant) == 0

    def test_unknown_tenant(self, ap_service, tenant_id):
        with pytest.raises(TenantNotFoundError):
            ap_service.record_purchase(tenant_id, 46, "PO-46", "100")


class TestRecordSupplierPayment:

    def test_payment(self, session, ap_service, registry, seeded_tenant):
        entry_id = ap_service.record_supplier_payment(seeded_tenant, 42, "300.00")

        entry = JournalSelector(session).get(seeded_tenant, entry_id)
        assert _names(registry, seeded_tenant, entry) == ("Accounts Payable", "Cash")
        assert entry.amount == Decimal("300.00")
        assert entry.reference_type == "purchase_payment"
        assert entry.reference_id == "42"
        assert entry.description == "Payment for Purchase #42"

    @pytest.mark.parametrize("amount", [0, "-1", "x"])
    def test_invalid_amount(self, ap_service, seeded_tenant, amount):
        with pytest.raises(InvalidAmountError):
            ap_service.record_supplier_payment(seeded_tenant, 42, amount)

    def test_purchase_then_payment_settles_payable(
        self, session, ap_service, seeded_tenant, deterministic_clock,
    ):
        from ledger_modules.reporting.service import ReportingService

        ap_service.record_purchase(seeded_tenant, 7, "PO-7", "500", payment_method="credit")
        ap_service.record_supplier_payment(seeded_tenant, 7, "500")

        bs = ReportingService(session, deterministic_clock).balance_sheet_dict(seeded_tenant)

        assert "Accounts Payable" not in bs["liabilities"]
        assert bs["assets"] == {"Inventory": Decimal("500.00"), "Cash": Decimal("-500.00")}
