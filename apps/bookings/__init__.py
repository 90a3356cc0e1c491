"""Bookings app package.

This app encapsulates the booking lifecycle: interval allocation per
unit, the charge ledger, the status machine and the deposit gate on
check-in. Writes run as command handlers inside one database transaction
that locks the unit or booking row before any guard is evaluated.
"""
