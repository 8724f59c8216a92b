"""
Admin Dashboard - Student Portal

Read-only aggregate view over students, courses, registrations and payments
for administrators.
"""
