"""Celery app for fiscal submission and housekeeping tasks."""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "pos_project.settings")

app = Celery("pos_project")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
