"""
Student Portal - course registration and student accounts.

Sub-packages:
- users: Profiles, authentication endpoints
- courses: Course catalogue and the Registration Ledger
"""
