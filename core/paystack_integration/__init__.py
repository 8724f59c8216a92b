"""
Paystack Integration Package
============================

Payment collection through Paystack for the student portal.

Structure
---------
- models.py      → Payment, PaymentEvent
- client.py      → Paystack REST client (requests)
- signature.py   → Webhook HMAC-SHA512 check
- reconciler.py  → The only code that changes a payment's status
- stats.py       → Reporting queries
- views.py       → API endpoints (initialize, verify, webhook, listings)
- urls.py        → Routes under /api/payments/

Author: Student Portal Development Team
Version: 1.0.0
"""
