"""
ledger_modules -- business modules built on the ledger kernel.

    reporting  trial balance, balance sheet, profit & loss, account ledger,
               VAT summary, daybook
    ar         customer sub-ledger, ageing, payments, sale postings
    ap         purchase and supplier payment postings
    payroll    salary payment postings

Modules may import ledger_kernel, ledger_config and ledger_engines.  The
kernel never imports a module at import time.
"""
