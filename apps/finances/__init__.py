"""Finances app package.

Payments recorded against bookings and the ledger that reconciles them
with each booking's bill into one outstanding balance and payment status.
Gateway settlement is not handled here; every payment is entered or
confirmed by front-desk staff.
"""
