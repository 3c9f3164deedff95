import logging

from algorithms.blood_compatibility import compatible_donor_types
from donors.models import Donor

# Logger
logger = logging.getLogger(__name__)


def find_matches(blood_request):
    """
    Find available donors whose blood type can donate to the request.

    Criteria:
    - Donor is available
    - Donor blood type is in the compatible set for the requested type

    Args:
        blood_request: BloodRequest (anything with a `blood_type` and `id`)

    Returns:
        list of Donor, possibly empty
    """
    donor_types = compatible_donor_types(blood_request.blood_type)
    donors = list(
        Donor.objects.filter(blood_type__in=donor_types, is_available=True).order_by('created_at')
    )

    logger.info(f"{len(donors)} compatible donors matched for blood request {blood_request.id}")
    return donors


def find_exact_matches(blood_request):
    """
    Find available donors with exactly the requested blood type.

    Narrower than find_matches; used by "send to matching donors".
    """
    donors = list(
        Donor.objects.filter(blood_type=blood_request.blood_type, is_available=True).order_by('created_at')
    )

    logger.info(f"{len(donors)} exact-type donors matched for blood request {blood_request.id}")
    return donors
