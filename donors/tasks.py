# donors/tasks.py
"""
Celery tasks for SMS notifications.

Notifications are best effort: they are queued after the triggering
transaction commits and never affect the outcome of the request that
scheduled them.
"""
import logging

from celery import shared_task
from kombu.exceptions import OperationalError

from bloodrequests.models import BloodRequest
from donors.models import Donor
from otp.sms import send_sms

logger = logging.getLogger(__name__)


def queue_notification(task, *args):
    """Hand a notification task to the broker, logging instead of raising if it is unreachable."""
    try:
        task.delay(*args)
    except OperationalError as exc:
        logger.error(f"Could not queue {task.name}{args}: {exc}")


@shared_task
def notify_donor_of_request(donor_id, request_id):
    """Tell a newly linked donor that a patient needs their blood."""
    try:
        donor = Donor.objects.get(id=donor_id)
        blood_request = BloodRequest.objects.get(id=request_id)
    except (Donor.DoesNotExist, BloodRequest.DoesNotExist):
        logger.warning(f"Skipping donor notification: donor #{donor_id} or request #{request_id} no longer exists")
        return f"Donor {donor_id} or request {request_id} not found"

    message = (
        f"Urgent: A patient needs your {donor.blood_type} blood at {blood_request.hospital_name}. "
        f"Please check your donor dashboard for details."
    )
    send_sms(donor.phone, message)
    return f"Notified donor {donor_id} of request {request_id}"


@shared_task
def notify_requester_of_matches(request_id, count):
    """Tell the requester how many potential donors were found."""
    try:
        blood_request = BloodRequest.objects.get(id=request_id)
    except BloodRequest.DoesNotExist:
        logger.warning(f"Skipping requester notification: request #{request_id} no longer exists")
        return f"Request {request_id} not found"

    send_sms(blood_request.phone, f"Good news! {count} potential donor(s) have been found for your blood request.")
    return f"Notified requester of request {request_id}: {count} donor(s)"


@shared_task
def send_registration_confirmation(phone, is_donor=True):
    if is_donor:
        message = 'Thank you for registering as a blood donor! Your contribution can save lives.'
    else:
        message = 'Your blood request has been registered successfully. You will be notified when a donor is found.'

    send_sms(phone, message)
    return f"Registration confirmation sent to {phone}"
