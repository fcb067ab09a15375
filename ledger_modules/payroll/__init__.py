"""
Payroll Module (``ledger_modules.payroll``).

Salary payment posting recipe.
"""

from ledger_modules.payroll.service import PayrollService, salary_reference

__all__ = ["PayrollService", "salary_reference"]
