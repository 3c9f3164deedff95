import logging
import math

from django.conf import settings
from django.contrib.auth.hashers import make_password
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from algorithms.blood_compatibility import BLOOD_TYPES
from algorithms.haversine import find_nearby_donors, is_valid_coordinate
from bloodlink.exceptions import DuplicatePhone, InvalidCredentials, NotFound
from bloodrequests.models import BloodRequest
from donors.models import DONATED, LINK_STATUS_CHOICES, PENDING, Donor, DonorRequestLink
from donors.serializers import DonorRegistrationSerializer, DonorUpdateSerializer

LINK_STATUSES = [choice for choice, _ in LINK_STATUS_CHOICES]

# Logger setup
logger = logging.getLogger(__name__)


def validate_blood_type(blood_type):
    if blood_type not in BLOOD_TYPES:
        raise ValidationError({'blood_type': [f'"{blood_type}" is not a valid blood type.']})
    return blood_type


def validate_link_status(status):
    if status not in LINK_STATUSES:
        raise ValidationError({'status': [f'"{status}" is not a valid status.']})
    return status


def get_donor(donor_id, for_update=False):
    """Fetch a donor or raise NotFound. `for_update` locks the row (call inside a transaction)."""
    queryset = Donor.objects.select_for_update() if for_update else Donor.objects.all()
    try:
        return queryset.get(pk=donor_id)
    except (Donor.DoesNotExist, ValueError, TypeError):
        raise NotFound('Donor not found')


def get_donors(donor_ids, for_update=False):
    """
    Fetch several donors by id, keyed by id. Raises NotFound if any id does not
    name a donor. `for_update` locks the rows in primary key order (call inside
    a transaction).
    """
    try:
        ids = sorted({int(donor_id) for donor_id in donor_ids})
    except (TypeError, ValueError):
        raise NotFound('Donor not found')

    queryset = Donor.objects.select_for_update() if for_update else Donor.objects.all()
    donors = {donor.id: donor for donor in queryset.filter(pk__in=ids).order_by('pk')}
    if len(donors) != len(ids):
        raise NotFound('Donor not found')
    return donors


def create_donor(data):
    """
    Register a new donor.

    Every field violation is reported together as a ValidationError. A phone
    number that is already registered raises DuplicatePhone, also when two
    registrations race past the existence check and hit the unique index.
    """
    serializer = DonorRegistrationSerializer(data=data)
    serializer.is_valid(raise_exception=True)

    phone = serializer.validated_data['phone']
    if Donor.objects.filter(phone=phone).exists():
        raise DuplicatePhone()

    try:
        with transaction.atomic():
            donor = serializer.save()
    except IntegrityError:
        raise DuplicatePhone()

    logger.info(f"Donor registered: {donor.name} ({donor.blood_type}) #{donor.id}")
    return donor


def authenticate_donor(phone, password):
    """Return the donor for a phone/password pair, or raise InvalidCredentials."""
    donor = Donor.objects.filter(phone=phone).first()

    if donor is None:
        # Run the hasher once so unknown phones take as long as wrong passwords
        make_password(password)
        raise InvalidCredentials()

    if not donor.check_password(password):
        raise InvalidCredentials()

    return donor


def list_donors(blood_type=None):
    queryset = Donor.objects.all().order_by('-created_at')
    if blood_type and blood_type != 'all':
        queryset = queryset.filter(blood_type=validate_blood_type(blood_type))
    return list(queryset)


def find_by_blood_type(blood_type, available_only=True):
    queryset = Donor.objects.filter(blood_type=validate_blood_type(blood_type))
    if available_only:
        queryset = queryset.filter(is_available=True)
    return list(queryset.order_by('-created_at'))


def find_nearby(lat, lng, radius_km=None):
    """
    Available donors with coordinates within `radius_km` of (lat, lng),
    nearest first. Each donor gets a `distance` attribute in km.
    """
    if radius_km is None:
        radius_km = settings.BLOODLINK['NEARBY_DEFAULT_RADIUS_KM']

    if not is_valid_coordinate(lat, lng):
        raise ValidationError({'coordinates': [f'({lat}, {lng}) is not a valid latitude/longitude pair.']})
    if not math.isfinite(radius_km) or radius_km < 0:
        raise ValidationError({'distance': ['Distance must be a non-negative number of km.']})

    donors = Donor.objects.filter(is_available=True, latitude__isnull=False, longitude__isnull=False)
    nearby = find_nearby_donors(lat, lng, donors, radius_km)

    for donor, distance in nearby:
        donor.distance = round(distance, 2)

    logger.info(f"{len(nearby)} donors found within {radius_km}km of ({lat}, {lng})")
    return [donor for donor, _ in nearby]


def link_request(donor_id, request_id, status=PENDING):
    """
    Add the donor-side link to a blood request.

    Idempotent by request: an existing link is returned untouched.

    Returns:
        (link, created)
    """
    validate_link_status(status)
    link, created = DonorRequestLink.objects.get_or_create(
        donor_id=donor_id,
        blood_request_id=request_id,
        defaults={'status': status},
    )
    if created:
        logger.info(f"Donor #{donor_id} linked to request #{request_id} ({status})")
    return link, created


def get_request_link(donor_id, request_id):
    try:
        return DonorRequestLink.objects.get(donor_id=donor_id, blood_request_id=request_id)
    except DonorRequestLink.DoesNotExist:
        raise NotFound('Request not found in donor records')


def set_request_status(donor_id, request_id, status):
    """
    Update the donor-side link status. Moving to `donated` also records the
    donation on the donor (count, last donation, availability).
    """
    validate_link_status(status)
    link = get_request_link(donor_id, request_id)

    link.status = status
    link.updated_at = timezone.now()
    link.save(update_fields=['status', 'updated_at'])

    if status == DONATED:
        record_donation(donor_id)

    return link


def record_donation(donor_id):
    """Increment the donation count, mark the donor recently donated and unavailable."""
    Donor.objects.filter(pk=donor_id).update(
        donation_count=F('donation_count') + 1,
        last_donation='less_than_3_months',
        is_available=False,
        updated_at=timezone.now(),
    )
    logger.info(f"Donation recorded for donor #{donor_id}")


def update_donor(donor_id, data):
    donor = get_donor(donor_id)
    serializer = DonorUpdateSerializer(donor, data=data, partial=True)
    serializer.is_valid(raise_exception=True)

    phone = serializer.validated_data.get('phone')
    if phone and Donor.objects.filter(phone=phone).exclude(pk=donor.pk).exists():
        raise DuplicatePhone()

    try:
        with transaction.atomic():
            donor = serializer.save()
    except IntegrityError:
        raise DuplicatePhone()

    logger.info(f"Donor #{donor.id} updated")
    return donor


def delete_donor(donor_id):
    """Delete a donor and both halves of their links, then re-derive the affected requests' status."""
    with transaction.atomic():
        donor = get_donor(donor_id)
        request_ids = set(donor.request_entries.values_list('blood_request_id', flat=True))
        request_ids.update(donor.blood_requests.values_list('blood_request_id', flat=True))
        donor.delete()

        for blood_request in BloodRequest.objects.filter(pk__in=request_ids):
            blood_request.save(update_fields=['overall_status'])

    logger.info(f"Donor #{donor_id} deleted, {len(request_ids)} request(s) re-evaluated")


def donor_requests(donor_id):
    """The donor's links, oldest first, with their blood requests loaded."""
    donor = get_donor(donor_id)
    return list(donor.blood_requests.select_related('blood_request'))
