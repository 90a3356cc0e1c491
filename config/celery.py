import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("staydesk")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()

# Notification tasks are enqueued from on_commit hooks; a slow SMTP relay
# must not pile up retries on the worker.
app.conf.task_default_retry_delay = 60
app.conf.timezone = os.environ.get("TIME_ZONE", "Africa/Lagos")
