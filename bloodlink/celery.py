# bloodlink/celery.py
"""
Celery configuration for donor / requester SMS notifications
"""
import os
from celery import Celery

# Set default Django settings
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'bloodlink.settings')

app = Celery('bloodlink')

# Load config from Django settings (prefix: CELERY_)
app.config_from_object('django.conf:settings', namespace='CELERY')

# Picks up donors/tasks.py
app.autodiscover_tasks()
