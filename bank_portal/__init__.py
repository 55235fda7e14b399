"""
Bank Portal

Retail-banking back office and customer portal: account opening, deposits,
withdrawals, transfers, loan origination and repayment, branch staff
administration and a notification feed. All money is handled as Decimal.
"""

__version__ = "1.0.0"
