"""Attendance Reconciliation package.

Organized by feature modules (identity, punches, attendance, audit, migration, ...)
with a thin Flask controller layer over service/repository layers.
"""
