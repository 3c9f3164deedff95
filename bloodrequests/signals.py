# bloodrequests/signals.py
"""
Signals to confirm new blood requests by SMS
"""
import logging
from functools import partial

from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from bloodrequests.models import BloodRequest
from donors.tasks import queue_notification, send_registration_confirmation

logger = logging.getLogger(__name__)


@receiver(post_save, sender=BloodRequest)
def confirm_blood_request_registered(sender, instance, created, **kwargs):
    """Text the requester once a new blood request is stored"""
    if created:
        transaction.on_commit(partial(queue_notification, send_registration_confirmation, instance.phone, False))
        logger.info(f"Registration confirmation queued for blood request #{instance.id}")
