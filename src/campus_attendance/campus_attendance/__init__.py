"""Campus Attendance package.

Multi-tenant school/college attendance tracking organized by feature
modules (directory, sessions, attendance, redemption, reports) with a thin
Flask controller layer over service/repository layers.
"""
