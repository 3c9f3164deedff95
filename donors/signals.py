# donors/signals.py
import logging
from functools import partial

from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from donors.models import Donor
from donors.tasks import queue_notification, send_registration_confirmation

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Donor)
def confirm_donor_registered(sender, instance, created, **kwargs):
    """Thank a newly registered donor by SMS"""
    if created:
        transaction.on_commit(partial(queue_notification, send_registration_confirmation, instance.phone, True))
        logger.info(f"Registration confirmation queued for donor #{instance.id}")
