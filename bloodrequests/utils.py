import logging

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from bloodlink.exceptions import NotFound
from bloodrequests.models import BloodRequest, DonorRequestEntry
from bloodrequests.serializers import BloodRequestSerializer
from donors.models import ACCEPTED, DONATED, PENDING, REJECTED
from donors.utils import validate_blood_type, validate_link_status

STATUS_FILTERS = [choice for choice, _ in BloodRequest.STATUS_CHOICES]

# Logger
logger = logging.getLogger(__name__)


def create_blood_request(data):
    """Validate and store a new blood request. All field violations are reported together."""
    serializer = BloodRequestSerializer(data=data)
    serializer.is_valid(raise_exception=True)

    with transaction.atomic():
        blood_request = serializer.save()

    logger.info(f"Blood request #{blood_request.id} created: {blood_request.blood_type} at {blood_request.hospital_name}")
    return blood_request


def get_blood_request(request_id, for_update=False):
    queryset = BloodRequest.objects.select_for_update() if for_update else BloodRequest.objects.all()
    try:
        return queryset.get(pk=request_id)
    except (BloodRequest.DoesNotExist, ValueError, TypeError):
        raise NotFound('Blood request not found')


def find_blood_requests(blood_type=None, status=None, phone=None):
    """Requests matching every given filter, newest first. 'all' means no filter."""
    queryset = BloodRequest.objects.all()

    if blood_type and blood_type != 'all':
        queryset = queryset.filter(blood_type=validate_blood_type(blood_type))

    if status and status != 'all':
        if status not in STATUS_FILTERS:
            raise ValidationError({'status': [f'"{status}" is not a valid status.']})
        queryset = queryset.filter(overall_status=status)

    if phone:
        queryset = queryset.filter(phone=phone)

    return list(queryset.prefetch_related('donor_requests__donor').order_by('-created_at', '-id'))


def refresh_overall_status(request_id):
    """Re-derive and persist the request's overall status from its donor entries."""
    blood_request = get_blood_request(request_id)
    blood_request.save(update_fields=['overall_status'])
    return blood_request


def link_donor(request_id, donor_id, status=PENDING):
    """
    Add the request-side entry for a donor. Idempotent by donor.

    Returns:
        (entry, created)
    """
    validate_link_status(status)
    entry, created = DonorRequestEntry.objects.get_or_create(
        blood_request_id=request_id,
        donor_id=donor_id,
        defaults={'status': status},
    )
    refresh_overall_status(request_id)

    if created:
        logger.info(f"Request #{request_id} linked to donor #{donor_id} ({status})")
    return entry, created


def get_donor_entry(request_id, donor_id):
    try:
        return DonorRequestEntry.objects.get(blood_request_id=request_id, donor_id=donor_id)
    except DonorRequestEntry.DoesNotExist:
        raise NotFound('Donor not found in request records')


def set_donor_status(request_id, donor_id, status):
    validate_link_status(status)
    entry = get_donor_entry(request_id, donor_id)

    entry.status = status
    entry.updated_at = timezone.now()
    entry.save(update_fields=['status', 'updated_at'])

    refresh_overall_status(request_id)
    return entry


def request_status_report(phone, blood_type=None):
    """
    The requester's view of their own requests.

    Requests for `phone`, narrowed to `blood_type` when that leaves at least
    one request, newest first. Each item carries every linked donor entry, the
    accepted/donated subset and per-status counts.
    """
    if not phone:
        raise ValidationError({'phone': ['Phone number is required']})

    queryset = BloodRequest.objects.filter(phone=phone)
    if blood_type:
        narrowed = queryset.filter(blood_type=blood_type)
        if narrowed.exists():
            queryset = narrowed

    report = []
    for blood_request in queryset.prefetch_related('donor_requests__donor').order_by('-created_at', '-id'):
        entries = list(blood_request.donor_requests.all())
        report.append({
            'request': blood_request,
            'donors': entries,
            'accepted_donors': [e for e in entries if e.status in (ACCEPTED, DONATED)],
            'counts': {
                PENDING: sum(1 for e in entries if e.status == PENDING),
                REJECTED: sum(1 for e in entries if e.status == REJECTED),
                DONATED: sum(1 for e in entries if e.status == DONATED),
            },
        })

    logger.info(f"Status report for {phone}: {len(report)} request(s)")
    return report
