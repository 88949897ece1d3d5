"""Event Attendance package.

Organized by feature modules (scoring, access, attendance, sessions, events, ...)
with a thin Flask controller layer over service/repository layers.
"""
