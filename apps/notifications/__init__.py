"""Notifications app package.

Plain transactional emails sent after a booking or payment commits. The
booking engine never waits on them: domain events are handed to Celery
after commit and any failure is only logged.
"""
