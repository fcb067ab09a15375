"""
Financial report invariant tests.

Verifies cross-report accounting invariants that must ALWAYS hold, for any
sequence of valid postings:
- TB debits = TB credits
- Balance sheet check (A - (L + E)) equals P&L net profit while no closing
  entries exist
- Reports of one tenant never move when another tenant posts

Property-based: postings are generated with hypothesis and written through
JournalPostingService into a fresh tenant per example.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from ledger_modules.reporting.service import ReportingService

ACCOUNT_NAMES = [
    "Cash",
    "Bank",
    "Inventory",
    "Accounts Receivable",
    "VAT Input",
    "Accounts Payable",
    "VAT Output",
    "Sales",
    "Cost of Goods Sold",
    "Salary Expense",
]

amounts = st.decimals(
    min_value=Decimal("0.01"),
    max_value=Decimal("100000"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)

postings = st.lists(
    st.tuples(
        st.sampled_from(ACCOUNT_NAMES),
        st.sampled_from(ACCOUNT_NAMES),
        amounts,
    ),
    max_size=25,
)

_settings = settings(
    max_examples=30,
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)


def _post_all(poster, tenant_id, generated) -> None:
    for debit, credit, amount in generated:
        poster.post_entry(tenant_id, debit, credit, amount, "generated")


class TestTrialBalanceInvariant:
    """TB must always balance: debits = credits."""

    @_settings
    @given(generated=postings)
    def test_debits_equal_credits(self, session, registry, poster, deterministic_clock, generated):
        tenant_id = uuid4()
        registry.seed_defaults(tenant_id)
        _post_all(poster, tenant_id, generated)

        report = ReportingService(session, deterministic_clock).trial_balance(tenant_id)

        assert report.is_balanced
        assert report.total_debit == sum((a for _, _, a in generated), Decimal("0"))

    @_settings
    @given(generated=postings)
    def test_rendered_difference_is_zero(
        self, session, registry, poster, deterministic_clock, generated,
    ):
        tenant_id = uuid4()
        registry.seed_defaults(tenant_id)
        _post_all(poster, tenant_id, generated)

        tb = ReportingService(session, deterministic_clock).trial_balance_dict(tenant_id)

        assert tb["totals"]["difference"] == Decimal("0.00")


class TestBalanceSheetEquation:
    """Without closing entries, A - (L + E) is exactly the unclosed profit."""

    @_settings
    @given(generated=postings)
    def test_balance_check_equals_net_profit(
        self, session, registry, poster, deterministic_clock, generated,
    ):
        tenant_id = uuid4()
        registry.seed_defaults(tenant_id)
        _post_all(poster, tenant_id, generated)
        service = ReportingService(session, deterministic_clock)

        bs = service.balance_sheet(tenant_id)
        pl = service.profit_and_loss(tenant_id)

        assert bs.balance_check == pl.net_profit


class TestTenantIndependence:

    @_settings
    @given(ours=postings, theirs=postings)
    def test_other_tenant_postings_invisible(
        self, session, registry, poster, deterministic_clock, ours, theirs,
    ):
        tenant_id, other_id = uuid4(), uuid4()
        registry.seed_defaults(tenant_id)
        registry.seed_defaults(other_id)
        _post_all(poster, tenant_id, ours)
        service = ReportingService(session, deterministic_clock)
        before = service.trial_balance_dict(tenant_id)

        _post_all(poster, other_id, theirs)

        assert service.trial_balance_dict(tenant_id) == before
