"""
Dispatch / status-sync workflow.

A donor <-> request link lives in two places: the donor-side
`DonorRequestLink` and the request-side `DonorRequestEntry`. Every operation
here reads the request and the donor, validates, then writes both halves.

With `BLOODLINK['ATOMIC_LINK_WRITES']` on (the default) both halves are
written in one transaction while the request and donor rows are locked. With
it off the halves are written one after the other; if the second write fails
the caller gets `LinkOutOfSync` naming the side that was saved.
"""
import logging
from contextlib import nullcontext
from functools import partial

from django.conf import settings
from django.db import transaction
from rest_framework.exceptions import ValidationError

from algorithms.blood_compatibility import is_compatible
from algorithms.matching import find_exact_matches, find_matches
from bloodlink.exceptions import AlreadyLinked, IncompatibleBloodType, InvalidStatusTransition, LinkOutOfSync
from bloodrequests.models import DonorRequestEntry
from bloodrequests.utils import get_blood_request, get_donor_entry, link_donor, set_donor_status
from donors.models import ACCEPTED, DONATED, PENDING, REJECTED, DonorRequestLink
from donors.tasks import notify_donor_of_request, notify_requester_of_matches, queue_notification
from donors.utils import (
    get_donor,
    get_donors,
    get_request_link,
    link_request,
    record_donation,
    set_request_status,
    validate_link_status,
)

ALLOWED_TRANSITIONS = {
    PENDING: {ACCEPTED, REJECTED},
    ACCEPTED: {DONATED},
    REJECTED: set(),
    DONATED: set(),
}

MATCH_MODES = ('exact', 'compatible')

logger = logging.getLogger(__name__)


def check_transition(current, new):
    """Raise InvalidStatusTransition unless `current -> new` is a legal link move."""
    validate_link_status(new)
    if new not in ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidStatusTransition(f'Cannot change status from {current} to {new}')


def atomic_link_writes():
    return settings.BLOODLINK.get('ATOMIC_LINK_WRITES', True)


def link_write_boundary():
    return transaction.atomic() if atomic_link_writes() else nullcontext()


def _fetch_pair(request_id, donor_id):
    """Load the request and donor, locking both rows when link writes are atomic."""
    for_update = atomic_link_writes()
    blood_request = get_blood_request(request_id, for_update=for_update)
    donor = get_donor(donor_id, for_update=for_update)
    return blood_request, donor


def _paired_write(donor_side, request_side, request_id, donor_id):
    """
    Write the donor-side half, then the request-side half.

    Inside an atomic boundary a failure rolls both back. Outside one, the
    donor side is already saved when the request side fails, so the failure
    is reported as LinkOutOfSync.
    """
    donor_result = donor_side()

    if atomic_link_writes():
        return donor_result, request_side()

    try:
        request_result = request_side()
    except Exception as exc:
        logger.error(
            f"Link out of sync: donor side of request #{request_id} / donor #{donor_id} "
            f"was saved but the request side failed: {exc}"
        )
        raise LinkOutOfSync(
            f'Donor records were updated but request #{request_id} records were not.'
        ) from exc

    return donor_result, request_result


def _link_exists(blood_request, donor):
    has_link = DonorRequestLink.objects.filter(donor=donor, blood_request=blood_request).exists()
    has_entry = DonorRequestEntry.objects.filter(blood_request=blood_request, donor=donor).exists()
    return has_link, has_entry


def dispatch_to_donors(request_id, donor_ids):
    """
    Link a blood request to each donor that is not yet linked.

    Every donor is looked up before anything is written, so an unknown donor
    id fails the whole call. A pair with only one half present gets the
    missing half written.

    Returns:
        dict with `request`, `sent_to` (donors written to) and `skipped`
        (ids of donors already linked on both sides)
    """
    with link_write_boundary():
        for_update = atomic_link_writes()
        blood_request = get_blood_request(request_id, for_update=for_update)
        # Donor rows are locked in primary key order whatever order the ids came in
        by_id = get_donors(donor_ids, for_update=for_update)
        donors = [by_id[donor_id] for donor_id in dict.fromkeys(int(donor_id) for donor_id in donor_ids)]

        sent_to = []
        skipped = []
        for donor in donors:
            has_link, has_entry = _link_exists(blood_request, donor)
            if has_link and has_entry:
                skipped.append(donor.id)
                continue

            if has_link or has_entry:
                logger.warning(f"Repairing half-written link between request #{blood_request.id} and donor #{donor.id}")

            _paired_write(
                partial(link_request, donor.id, blood_request.id),
                partial(link_donor, blood_request.id, donor.id),
                blood_request.id,
                donor.id,
            )
            sent_to.append(donor)

            if not has_link:
                transaction.on_commit(partial(queue_notification, notify_donor_of_request, donor.id, blood_request.id))

    blood_request.refresh_from_db()
    logger.info(
        f"Request #{blood_request.id} sent to {len(sent_to)} donor(s), "
        f"{len(skipped)} already linked"
    )
    return {'request': blood_request, 'sent_to': sent_to, 'skipped': skipped}


def send_to_matching_donors(request_id, mode='exact'):
    """
    Find donors for a request and dispatch it to the ones not yet linked.

    `mode` is 'exact' (same blood type only) or 'compatible' (any donor type
    that can give to the requested type). No matches is a normal result.
    """
    if mode not in MATCH_MODES:
        raise ValidationError({'mode': [f'"{mode}" is not a valid mode. Use one of: {", ".join(MATCH_MODES)}.']})

    blood_request = get_blood_request(request_id)
    if mode == 'exact':
        matches = find_exact_matches(blood_request)
    else:
        matches = find_matches(blood_request)

    result = dispatch_to_donors(blood_request.id, [donor.id for donor in matches])
    result['matched'] = len(matches)

    if result['sent_to']:
        transaction.on_commit(
            partial(queue_notification, notify_requester_of_matches, blood_request.id, len(result['sent_to']))
        )
    return result


def send_to_donor(request_id, donor_id):
    """Targeted dispatch to a single donor whose blood type must be compatible."""
    with link_write_boundary():
        blood_request, donor = _fetch_pair(request_id, donor_id)

        if not is_compatible(donor.blood_type, blood_request.blood_type):
            raise IncompatibleBloodType(
                f'Donor blood type {donor.blood_type} is not compatible with requested {blood_request.blood_type}'
            )

        if all(_link_exists(blood_request, donor)):
            raise AlreadyLinked()

        result = dispatch_to_donors(blood_request.id, [donor.id])

    return {'request': result['request'], 'donor': donor}


def update_status(request_id, donor_id, new_status):
    """
    Move an existing link to `new_status` on both sides.

    Both halves must exist (NotFound otherwise) and the move must be legal
    from the donor-side status (InvalidStatusTransition otherwise).
    """
    validate_link_status(new_status)

    with link_write_boundary():
        blood_request, donor = _fetch_pair(request_id, donor_id)
        link = get_request_link(donor.id, blood_request.id)
        entry = get_donor_entry(blood_request.id, donor.id)

        if link.status != entry.status:
            logger.warning(
                f"Link halves disagree for request #{blood_request.id} / donor #{donor.id}: "
                f"donor side {link.status}, request side {entry.status}"
            )

        check_transition(link.status, new_status)

        _paired_write(
            partial(set_request_status, donor.id, blood_request.id, new_status),
            partial(set_donor_status, blood_request.id, donor.id, new_status),
            blood_request.id,
            donor.id,
        )

    blood_request.refresh_from_db()
    donor.refresh_from_db()
    logger.info(f"Request #{blood_request.id} / donor #{donor.id}: {link.status} -> {new_status}")
    return {'request': blood_request, 'donor': donor, 'status': new_status}


def confirm_donation(request_id, donor_id):
    return update_status(request_id, donor_id, DONATED)


def fulfill_request(request_id, donor_id):
    """
    Record a donation outside the normal accept flow.

    A missing half is created directly as donated, an existing pending or
    accepted half moves to donated. The donor's donation is recorded once.
    """
    with link_write_boundary():
        blood_request, donor = _fetch_pair(request_id, donor_id)
        link = DonorRequestLink.objects.filter(donor=donor, blood_request=blood_request).first()
        entry = DonorRequestEntry.objects.filter(blood_request=blood_request, donor=donor).first()

        for half in (link, entry):
            if half is not None and half.status in (REJECTED, DONATED):
                raise InvalidStatusTransition(f'Cannot mark a {half.status} link as donated')

        def donor_side():
            if link is None:
                link_request(donor.id, blood_request.id, status=DONATED)
                record_donation(donor.id)
            else:
                set_request_status(donor.id, blood_request.id, DONATED)

        def request_side():
            if entry is None:
                link_donor(blood_request.id, donor.id, status=DONATED)
            else:
                set_donor_status(blood_request.id, donor.id, DONATED)

        _paired_write(donor_side, request_side, blood_request.id, donor.id)

    blood_request.refresh_from_db()
    donor.refresh_from_db()
    logger.info(f"Request #{blood_request.id} fulfilled by donor #{donor.id}")
    return {'request': blood_request, 'donor': donor}


def unlink(request_id, donor_id):
    """Remove both halves of a donor <-> request link and re-derive the request's status."""
    with link_write_boundary():
        blood_request, donor = _fetch_pair(request_id, donor_id)
        DonorRequestLink.objects.filter(donor=donor, blood_request=blood_request).delete()
        DonorRequestEntry.objects.filter(blood_request=blood_request, donor=donor).delete()
        blood_request.save(update_fields=['overall_status'])

    logger.info(f"Donor #{donor.id} unlinked from request #{blood_request.id}")
