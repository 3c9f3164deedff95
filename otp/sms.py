"""
SMS gateway.

Mock backend: messages are logged instead of sent, and verification accepts
only the configured mock code.
"""
import logging
import re
import uuid

from django.conf import settings

logger = logging.getLogger(__name__)


def format_phone_number(phone):
    """Return `phone` in E.164 form, adding the configured country code to bare numbers."""
    phone = str(phone).strip()
    if phone.startswith('+'):
        return phone

    digits = re.sub(r'\D', '', phone)
    country_code = settings.BLOODLINK['SMS_COUNTRY_CODE']
    if len(digits) > 10 and digits.startswith(country_code):
        return f'+{digits}'
    return f'+{country_code}{digits}'


def send_sms(phone, message):
    """Send a text message. Returns the message sid."""
    to = format_phone_number(phone)
    sid = f'SM{uuid.uuid4().hex}'
    logger.info(f"[MOCK SMS] to {to}: {message} ({sid})")
    return sid


def send_verification_code(phone):
    """Start a phone verification. Returns the verification sid."""
    to = format_phone_number(phone)
    sid = f'VE{uuid.uuid4().hex}'
    logger.info(f"[MOCK SMS] verification code sent to {to} ({sid})")
    return sid


def check_verification_code(phone, verification_sid, code):
    """True when `code` is accepted for this verification."""
    approved = str(code).strip() == settings.BLOODLINK['OTP_MOCK_CODE']
    logger.info(
        f"[MOCK SMS] verification {verification_sid} for {format_phone_number(phone)}: "
        f"{'approved' if approved else 'rejected'}"
    )
    return approved
