"""
SaaSDesk - subscription billing back end.

Serves the administration console and subscriber portal:
- Subscription workflow (trial, card, bank transfer, pending payment)
- Invoices, transactions and subscription audit events
- Dashboard figures and subscriber billing summaries
- Notification emails
"""

__version__ = "1.0.0"
