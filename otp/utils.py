import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from bloodlink.exceptions import NotFound, VerificationFailed
from donors.models import phone_validator
from otp.models import PhoneVerification
from otp.sms import check_verification_code, send_verification_code

logger = logging.getLogger(__name__)


def _clean_phone(phone):
    phone = str(phone or '').strip()
    if not phone:
        raise ValidationError({'phone': ['Phone number is required']})
    try:
        phone_validator(phone)
    except DjangoValidationError:
        raise ValidationError({'phone': ['Phone number must be exactly 10 digits']})
    return phone


def _current_verification(phone):
    """The live verification for `phone`. Expired records are removed and treated as missing."""
    verification = PhoneVerification.objects.filter(phone=phone).first()
    if verification is None:
        raise NotFound('No OTP request found for this phone number')

    if verification.is_expired:
        verification.delete()
        raise NotFound('OTP has expired, please request a new one')

    return verification


def send_otp(phone, donor_data=None):
    """Send a verification code and park the pending registration data until it is verified."""
    phone = _clean_phone(phone)
    sid = send_verification_code(phone)

    with transaction.atomic():
        PhoneVerification.objects.filter(phone=phone).delete()
        verification = PhoneVerification.objects.create(
            phone=phone,
            donor_data=donor_data or {},
            verification_sid=sid,
        )

    logger.info(f"OTP requested for {phone} ({sid})")
    return verification


def verify_otp(phone, code):
    """
    Check a verification code.

    Returns:
        the donor data stored by send_otp; the verification record is deleted
    """
    phone = _clean_phone(phone)
    if not code:
        raise ValidationError({'otp': ['OTP is required']})

    verification = _current_verification(phone)

    if not check_verification_code(phone, verification.verification_sid, code):
        raise VerificationFailed()

    donor_data = verification.donor_data
    verification.delete()

    logger.info(f"OTP verified for {phone}")
    return donor_data


def resend_otp(phone):
    phone = _clean_phone(phone)
    verification = _current_verification(phone)

    verification.verification_sid = send_verification_code(phone)
    verification.created_at = timezone.now()
    verification.save(update_fields=['verification_sid', 'created_at'])

    logger.info(f"OTP resent to {phone}")
    return verification
