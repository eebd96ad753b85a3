"""
Celery application for SPST.
Side effects (carrier emails, duties confirmations) run as tasks so they stay
outside the request transaction. Dev and tests set CELERY_TASK_ALWAYS_EAGER.
"""

import os
from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "spst.settings_dev")

app = Celery("spst")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
