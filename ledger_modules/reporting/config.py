"""
Reporting Configuration Schema.

Controls report formatting (display precision, zero-balance handling),
the ageing buckets used by the customer ageing report and the account
names the VAT summary reads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Self

from ledger_engines.aging import CUSTOMER_AGEING_BUCKETS, AgeBucket, validate_buckets
from ledger_kernel.db.types import DISPLAY_DECIMAL_PLACES
from ledger_kernel.logging_config import get_logger

logger = get_logger("modules.reporting.config")


@dataclass
class ReportingConfig:
    """
    Configuration schema for the reporting module.

    Controls formatting and report generation.
    """

    # Rounding precision for display
    display_precision: int = DISPLAY_DECIMAL_PLACES

    # Balance sheet maps omit accounts whose rounded balance is zero
    hide_zero_balance_sheet_lines: bool = True

    # Trial balance carries a supplementary journal entry count
    include_entry_count: bool = True

    # Customer ageing buckets, youngest first, covering every age from day 0
    ageing_buckets: tuple[AgeBucket, ...] = field(
        default_factory=lambda: CUSTOMER_AGEING_BUCKETS,
    )

    # Accounts behind the VAT summary, matched case-insensitively
    sales_account: str = "Sales"
    vat_output_account: str = "VAT Output"
    vat_input_account: str = "VAT Input"

    def __post_init__(self):
        if self.display_precision < 0:
            raise ValueError("display_precision cannot be negative")
        if not self.ageing_buckets:
            raise ValueError("ageing_buckets cannot be empty")
        names = [b.name for b in self.ageing_buckets]
        if len(set(names)) != len(names):
            raise ValueError("ageing bucket names must be unique")
        validate_buckets(self.ageing_buckets)
        for name in ("sales_account", "vat_output_account", "vat_input_account"):
            if not getattr(self, name).strip():
                raise ValueError(f"{name} cannot be blank")

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with standard defaults."""
        logger.debug("reporting_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """
        Create config from dictionary.

        ``ageing_buckets`` may be given as a list of
        ``{"name", "min_days", "max_days"}`` mappings.
        """
        data = dict(data)
        buckets = data.get("ageing_buckets")
        if buckets is not None:
            data["ageing_buckets"] = tuple(
                b if isinstance(b, AgeBucket) else AgeBucket(
                    name=str(b["name"]),
                    min_days=int(b["min_days"]),
                    max_days=None if b.get("max_days") is None else int(b["max_days"]),
                )
                for b in buckets
            )
        logger.info(
            "reporting_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)
