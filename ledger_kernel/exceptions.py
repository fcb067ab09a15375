"""
Typed Exception Hierarchy for the Ledger Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the ledger (the report/API layer) must map failures to responses
without parsing message strings. Every exception therefore:
  1. Has a TYPED class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries structured DATA as attributes (not just a message string)

Example:
    try:
        api.post_journal_entry(tenant_id, "Cash", "Sales", amount, "Sale")
    except AccountNotFoundError as e:
        return {"error": e.code, "account": e.account}
    except InvalidAmountError as e:
        return {"error": e.code, "amount": e.amount}

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LedgerError (base)
    |
    +-- AccountError
    |   +-- AccountNotFoundError
    |   +-- DuplicateAccountError
    |   +-- InvalidAccountTypeError
    |
    +-- PostingError
    |   +-- InvalidAmountError
    |   +-- InvalidPostingRequestError
    |
    +-- TenantError
    |   +-- TenantNotFoundError
    |
    +-- SubledgerError
    |   +-- InvoiceNotFoundError
    |
    +-- PayrollError
    |   +-- InvalidPayPeriodError
    |   +-- DuplicateSalaryPaymentError
    |
    +-- ImmutabilityError
    |   +-- ImmutabilityViolationError
    |
    +-- StorageError
        +-- StorageFailureError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                     | When Raised
-------------|--------------------------|------------------------------------------
Account      | ACCOUNT_NOT_FOUND        | Name/id does not resolve for the tenant
             | DUPLICATE_ACCOUNT        | Name already used (case-insensitive)
             | INVALID_ACCOUNT_TYPE     | Type outside asset/liability/equity/...
-------------|--------------------------|------------------------------------------
Posting      | INVALID_AMOUNT           | Non-positive, non-finite, non-numeric
             | INVALID_POSTING_REQUEST  | Required request fields missing
-------------|--------------------------|------------------------------------------
Tenant       | TENANT_NOT_FOUND         | Tenant has no chart of accounts
-------------|--------------------------|------------------------------------------
Subledger    | INVOICE_NOT_FOUND        | Invoice not in tenant/customer scope
-------------|--------------------------|------------------------------------------
Payroll      | INVALID_PAY_PERIOD       | Month not YYYY-MM, or in the future
             | DUPLICATE_SALARY_PAYMENT | Employee already paid for that month
-------------|--------------------------|------------------------------------------
Immutability | IMMUTABILITY_VIOLATION   | UPDATE/DELETE of an append-only record
-------------|--------------------------|------------------------------------------
Storage      | STORAGE_FAILURE          | Persistence collaborator failed

===============================================================================
HANDLING PATTERNS
===============================================================================

1. AccountNotFoundError and InvalidAmountError are fatal to the posting
   attempt. They are raised before any write and are never retried.

2. StorageFailureError wraps the underlying driver error (chained via
   ``__cause__``). The kernel never retries it automatically.

3. Reports do not raise TenantNotFoundError: a tenant without accounts
   receives the empty/zero report shape.
"""


class LedgerError(Exception):
    """
    Base exception for all ledger kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "LEDGER_ERROR"


# Account-related exceptions


class AccountError(LedgerError):
    """Base exception for chart-of-accounts errors."""

    code: str = "ACCOUNT_ERROR"


class AccountNotFoundError(AccountError):
    """Account name or id does not resolve within the tenant."""

    code: str = "ACCOUNT_NOT_FOUND"

    def __init__(self, account: str, tenant_id: str | None = None):
        self.account = account
        self.tenant_id = tenant_id
        super().__init__(f"Account not found: {account}")


class DuplicateAccountError(AccountError):
    """An account with the same (case-insensitive) name already exists."""

    code: str = "DUPLICATE_ACCOUNT"

    def __init__(self, name: str, tenant_id: str):
        self.name = name
        self.tenant_id = tenant_id
        super().__init__(f"Account '{name}' already exists for tenant {tenant_id}")


class InvalidAccountTypeError(AccountError):
    """Account type is not one of the five supported types."""

    code: str = "INVALID_ACCOUNT_TYPE"

    def __init__(self, account_type: str):
        self.account_type = account_type
        super().__init__(f"Invalid account type: {account_type!r}")


# Posting-related exceptions


class PostingError(LedgerError):
    """Base exception for posting-related errors."""

    code: str = "POSTING_ERROR"


class InvalidAmountError(PostingError):
    """Amount is not a positive, finite decimal."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, amount: object, reason: str):
        self.amount = repr(amount)
        self.reason = reason
        super().__init__(f"Invalid amount {amount!r}: {reason}")


class InvalidPostingRequestError(PostingError):
    """Posting request is missing required fields."""

    code: str = "INVALID_POSTING_REQUEST"

    def __init__(self, missing_fields: list[str]):
        self.missing_fields = list(missing_fields)
        super().__init__(
            f"Posting request missing required fields: {', '.join(missing_fields)}"
        )


# Tenant-related exceptions


class TenantError(LedgerError):
    """Base exception for tenant-related errors."""

    code: str = "TENANT_ERROR"


class TenantNotFoundError(TenantError):
    """Tenant has no chart of accounts."""

    code: str = "TENANT_NOT_FOUND"

    def __init__(self, tenant_id: str):
        self.tenant_id = tenant_id
        super().__init__(f"Tenant has no chart of accounts: {tenant_id}")


# Subledger-related exceptions


class SubledgerError(LedgerError):
    """Base exception for customer sub-ledger errors."""

    code: str = "SUBLEDGER_ERROR"


class InvoiceNotFoundError(SubledgerError):
    """Invoice does not exist for the tenant/customer."""

    code: str = "INVOICE_NOT_FOUND"

    def __init__(self, invoice_id: str):
        self.invoice_id = invoice_id
        super().__init__(f"Invoice not found: {invoice_id}")


# Payroll-related exceptions


class PayrollError(LedgerError):
    """Base exception for salary posting errors."""

    code: str = "PAYROLL_ERROR"


class InvalidPayPeriodError(PayrollError):
    """Pay month is malformed or has not started yet."""

    code: str = "INVALID_PAY_PERIOD"

    def __init__(self, month: object, reason: str):
        self.month = str(month)
        self.reason = reason
        super().__init__(f"Invalid pay period {month!r}: {reason}")


class DuplicateSalaryPaymentError(PayrollError):
    """Employee already has a salary entry for the month."""

    code: str = "DUPLICATE_SALARY_PAYMENT"

    def __init__(self, employee_id: str, month: str):
        self.employee_id = employee_id
        self.month = month
        super().__init__(f"Salary already paid to {employee_id} for {month}")


# Immutability-related exceptions


class ImmutabilityError(LedgerError):
    """Base exception for immutability violations."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """
    Attempted to modify or delete an immutable record.

    JournalEntry and CustomerPayment rows are append-only.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )


# Storage-related exceptions


class StorageError(LedgerError):
    """Base exception for persistence failures."""

    code: str = "STORAGE_ERROR"


class StorageFailureError(StorageError):
    """The persistence collaborator failed or is unreachable."""

    code: str = "STORAGE_FAILURE"

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Storage failure during {operation}: {detail}")
