# donors/views.py
import logging
import math

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from bloodrequests.dispatch import update_status
from donors.models import ACCEPTED, DONATED, REJECTED
from donors.serializers import DonorRequestLinkSerializer, DonorSerializer
from donors.utils import (
    authenticate_donor,
    create_donor,
    delete_donor,
    donor_requests,
    find_by_blood_type,
    find_nearby,
    get_donor,
    list_donors,
    update_donor,
)

# URL actions a donor can take on a request they were sent
STATUS_ACTIONS = {
    'accept': ACCEPTED,
    'accepted': ACCEPTED,
    'reject': REJECTED,
    'rejected': REJECTED,
    'donate': DONATED,
    'donated': DONATED,
}

logger = logging.getLogger(__name__)


def _parse_float(value, field, low=None, high=None):
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError({field: [f'"{value}" is not a valid number.']})

    if not math.isfinite(number):
        raise ValidationError({field: [f'"{value}" is not a valid number.']})
    if (low is not None and number < low) or (high is not None and number > high):
        raise ValidationError({field: [f'"{value}" is out of range.']})
    return number


# ============================================
# REGISTRATION / LISTING
# ============================================
@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def donor_list(request):
    if request.method == 'POST':
        donor = create_donor(request.data)
        return Response({
            'success': True,
            'message': 'Donor registered successfully',
            'data': DonorSerializer(donor).data,
        }, status=status.HTTP_201_CREATED)

    donors = list_donors(blood_type=request.query_params.get('blood_type'))
    return Response({
        'success': True,
        'count': len(donors),
        'data': DonorSerializer(donors, many=True).data,
    })


@api_view(['POST'])
@permission_classes([AllowAny])
def donor_login(request):
    donor = authenticate_donor(request.data.get('phone'), request.data.get('password'))
    logger.info(f"Donor #{donor.id} logged in")
    return Response({
        'success': True,
        'message': 'Login successful',
        'data': DonorSerializer(donor).data,
    })


# ============================================
# PROFILE
# ============================================
@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([AllowAny])
def donor_detail(request, donor_id):
    if request.method == 'PUT':
        donor = update_donor(donor_id, request.data)
        return Response({
            'success': True,
            'message': 'Donor updated successfully',
            'data': DonorSerializer(donor).data,
        })

    if request.method == 'DELETE':
        delete_donor(donor_id)
        return Response({'success': True, 'message': 'Donor deleted successfully'})

    return Response({'success': True, 'data': DonorSerializer(get_donor(donor_id)).data})


# ============================================
# REQUESTS SENT TO A DONOR
# ============================================
@api_view(['GET'])
@permission_classes([AllowAny])
def donor_request_list(request, donor_id):
    links = donor_requests(donor_id)
    return Response({
        'success': True,
        'count': len(links),
        'data': DonorRequestLinkSerializer(links, many=True).data,
    })


@api_view(['PUT'])
@permission_classes([AllowAny])
def donor_request_status(request, donor_id, request_id, action):
    """Accept, reject or confirm donation for a request the donor was sent"""
    new_status = STATUS_ACTIONS.get(action)
    if new_status is None:
        raise ValidationError({'status': [f'"{action}" is not a valid status. Use accept, reject or donate.']})

    result = update_status(request_id, donor_id, new_status)
    return Response({
        'success': True,
        'message': f'Request {new_status}',
        'data': {
            'request_id': result['request'].id,
            'donor': DonorSerializer(result['donor']).data,
            'status': new_status,
            'overall_status': result['request'].overall_status,
        },
    })


# ============================================
# SEARCH
# ============================================
@api_view(['GET'])
@permission_classes([AllowAny])
def donors_by_blood_type(request, blood_type):
    donors = find_by_blood_type(blood_type)
    return Response({
        'success': True,
        'count': len(donors),
        'data': DonorSerializer(donors, many=True).data,
    })


@api_view(['GET'])
@permission_classes([AllowAny])
def nearby_donors(request, lat, lng, distance):
    lat = _parse_float(lat, 'lat', -90, 90)
    lng = _parse_float(lng, 'lng', -180, 180)
    distance = _parse_float(distance, 'distance', low=0)

    donors = find_nearby(lat, lng, distance)
    data = []
    for donor in donors:
        item = DonorSerializer(donor).data
        item['distance_km'] = donor.distance
        data.append(item)

    return Response({'success': True, 'count': len(data), 'data': data})
