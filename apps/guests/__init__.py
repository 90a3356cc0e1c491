"""Guests app package.

Guest records are the live profile; bookings keep their own snapshot of
the same details, refreshed only when a caller explicitly asks for it.
"""
