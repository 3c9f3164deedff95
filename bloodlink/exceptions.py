# bloodlink/exceptions.py
"""
Named failures raised by the registries and the dispatch workflow.

They are DRF APIExceptions, so views let them propagate and the handler below
turns them into the `{"success": false, "error": ..., "code": ...}` envelope.
Field-level validation failures use DRF's own ValidationError.
"""
import logging

from django.core.exceptions import PermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class DuplicatePhone(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Phone number already registered. Please use a different phone number or login to your account.'
    default_code = 'duplicate_phone'


class InvalidCredentials(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Invalid credentials'
    default_code = 'invalid_credentials'


class NotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'
    default_code = 'not_found'


class IncompatibleBloodType(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Donor blood type is not compatible with this request.'
    default_code = 'incompatible_blood_type'


class AlreadyLinked(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request has already been sent to this donor'
    default_code = 'already_linked'


class InvalidStatusTransition(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'This status change is not allowed.'
    default_code = 'invalid_status_transition'


class LinkOutOfSync(APIException):
    """One half of a donor <-> request link was written and the other was not."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Donor and request records are out of sync.'
    default_code = 'link_out_of_sync'


class VerificationFailed(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid OTP'
    default_code = 'verification_failed'


def bloodlink_exception_handler(exc, context):
    """
    Wrap DRF's default error response in the API envelope.

    Validation errors keep their field -> messages mapping under "error" so
    every violated field is reported at once.
    """
    response = exception_handler(exc, context)
    if response is None:
        return None

    data = response.data
    if isinstance(data, dict) and set(data) == {'detail'}:
        error = data['detail']
    else:
        error = data

    if isinstance(exc, Http404):
        exc = exceptions.NotFound()
    elif isinstance(exc, PermissionDenied):
        exc = exceptions.PermissionDenied()

    code = getattr(exc, 'default_code', 'error')
    if response.status_code >= 500:
        view = context.get('view')
        logger.error(f"{exc.__class__.__name__} in {view.__class__.__name__ if view else 'unknown view'}: {error}")

    response.data = {
        'success': False,
        'error': error,
        'code': code,
    }
    return response
