"""
ledger_config -- process-wide static configuration for the ledger.

Responsibility:
    Provides the default chart of accounts seeded for every new tenant as an
    immutable table keyed by account name -> account type.  The table is read
    from ``default_chart.yaml`` once per process and cached; callers receive
    the same read-only mapping on every call.

Architecture position:
    Configuration -- sits above ``ledger_kernel`` and below
    ``ledger_modules`` / ``ledger_services``.  The kernel does not import
    this package at module level; AccountRegistry accepts the table via its
    constructor and falls back to a lazy ``get_default_chart()`` call.

Invariants enforced:
    - Every entry has a non-empty name and one of the five account types.
    - Names are unique ignoring case.
    - The loaded table is immutable (``MappingProxyType`` over an ordered dict).

Failure modes:
    - ``FileNotFoundError`` -- chart file missing.
    - ``yaml.YAMLError`` -- malformed YAML.
    - ``ValueError`` -- structural validation failures.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import AccountType, normalize_account_name

logger = get_logger("config")

DEFAULT_CHART_PATH = Path(__file__).parent / "default_chart.yaml"


@dataclass(frozen=True)
class DefaultChart:
    """
    Immutable default chart-of-accounts table.

    ``accounts`` preserves file order, which is also the seeding order.
    """

    version: int
    accounts: Mapping[str, AccountType]

    def __len__(self) -> int:
        return len(self.accounts)

    def items(self):
        return self.accounts.items()


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_chart(data: dict[str, Any]) -> DefaultChart:
    """
    Parse and validate a chart definition.

    Raises:
        ValueError: on empty charts, unknown account types, blank or
            duplicate (case-insensitive) names.
    """
    rows = data.get("accounts") or []
    if not rows:
        raise ValueError("Default chart must define at least one account")

    accounts: dict[str, AccountType] = {}
    seen: set[str] = set()
    for row in rows:
        name = str(row.get("name") or "").strip()
        if not name:
            raise ValueError(f"Chart entry without a name: {row!r}")
        key = normalize_account_name(name)
        if key in seen:
            raise ValueError(f"Duplicate account name in chart: {name}")
        try:
            account_type = AccountType(str(row.get("type", "")).lower())
        except ValueError:
            raise ValueError(
                f"Unknown account type {row.get('type')!r} for account {name}"
            ) from None
        seen.add(key)
        accounts[name] = account_type

    return DefaultChart(
        version=int(data.get("version", 1)),
        accounts=MappingProxyType(accounts),
    )


def load_chart(path: Path) -> DefaultChart:
    """Load and validate a chart file (no caching)."""
    chart = parse_chart(load_yaml_file(path))
    logger.info(
        "default_chart_loaded",
        extra={
            "path": str(path),
            "version": chart.version,
            "account_count": len(chart),
        },
    )
    return chart


@lru_cache(maxsize=1)
def get_default_chart() -> DefaultChart:
    """The process-wide default chart, loaded once."""
    return load_chart(DEFAULT_CHART_PATH)


__all__ = [
    "DEFAULT_CHART_PATH",
    "DefaultChart",
    "get_default_chart",
    "load_chart",
    "parse_chart",
]
