"""
Core Package - Student Portal

Shared building blocks used across the portal apps:

- exceptions.py: domain exception hierarchy (NotFound, Conflict, InvalidState, ...)
- stats.py: grouping helper for the nested statistics endpoints
- paystack_integration/: Payment Reconciler and the Paystack gateway client

Author: Student Portal Development Team
Version: 1.0.0
"""
