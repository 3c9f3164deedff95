# bloodrequests/views.py
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from algorithms.matching import find_exact_matches, find_matches
from bloodrequests.dispatch import (
    MATCH_MODES,
    confirm_donation,
    fulfill_request,
    send_to_donor,
    send_to_matching_donors,
)
from bloodrequests.serializers import BloodRequestSerializer, DonorRequestEntrySerializer
from bloodrequests.utils import (
    create_blood_request,
    find_blood_requests,
    get_blood_request,
    request_status_report,
)
from donors.serializers import DonorSerializer


def _required_donor_id(request):
    donor_id = request.data.get('donor_id')
    if donor_id in (None, ''):
        raise ValidationError({'donor_id': ['Donor ID is required']})
    return donor_id


# ============================================
# CREATE / LIST
# ============================================
@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def blood_request_list(request):
    if request.method == 'POST':
        blood_request = create_blood_request(request.data)
        return Response({
            'success': True,
            'message': 'Blood request created successfully',
            'data': BloodRequestSerializer(blood_request).data,
        }, status=status.HTTP_201_CREATED)

    blood_requests = find_blood_requests(
        blood_type=request.query_params.get('blood_type'),
        status=request.query_params.get('status'),
        phone=request.query_params.get('phone'),
    )
    return Response({
        'success': True,
        'count': len(blood_requests),
        'data': BloodRequestSerializer(blood_requests, many=True).data,
    })


@api_view(['GET'])
@permission_classes([AllowAny])
def request_status(request):
    """Requester's "check my request" view, looked up by phone number"""
    report = request_status_report(
        request.query_params.get('phone'),
        blood_type=request.query_params.get('blood_type'),
    )
    data = [
        {
            'request': BloodRequestSerializer(item['request']).data,
            'donors': DonorRequestEntrySerializer(item['donors'], many=True).data,
            'accepted_donors': DonorRequestEntrySerializer(item['accepted_donors'], many=True).data,
            'counts': item['counts'],
        }
        for item in report
    ]
    return Response({'success': True, 'count': len(data), 'data': data})


@api_view(['GET'])
@permission_classes([AllowAny])
def blood_request_detail(request, request_id):
    blood_request = get_blood_request(request_id)
    return Response({'success': True, 'data': BloodRequestSerializer(blood_request).data})


# ============================================
# MATCHING
# ============================================
@api_view(['GET'])
@permission_classes([AllowAny])
def blood_request_matches(request, request_id):
    mode = request.query_params.get('mode', 'compatible')
    if mode not in MATCH_MODES:
        raise ValidationError({'mode': [f'"{mode}" is not a valid mode.']})

    blood_request = get_blood_request(request_id)
    donors = find_exact_matches(blood_request) if mode == 'exact' else find_matches(blood_request)
    return Response({
        'success': True,
        'count': len(donors),
        'data': DonorSerializer(donors, many=True).data,
    })


# ============================================
# DISPATCH
# ============================================
@api_view(['POST'])
@permission_classes([AllowAny])
def send_to_donors(request, request_id):
    result = send_to_matching_donors(request_id, mode=request.data.get('mode') or 'exact')
    sent_to = result['sent_to']

    if result['matched'] == 0:
        message = 'No matching donors found'
    elif not sent_to:
        message = 'Request has already been sent to all matching donors'
    else:
        message = f'Request sent to {len(sent_to)} donors'

    return Response({
        'success': True,
        'message': message,
        'count': len(sent_to),
        'data': {
            'request': BloodRequestSerializer(result['request']).data,
            'sent_to': DonorSerializer(sent_to, many=True).data,
            'skipped': result['skipped'],
        },
    })


@api_view(['POST'])
@permission_classes([AllowAny])
def send_to_single_donor(request, request_id, donor_id):
    result = send_to_donor(request_id, donor_id)
    return Response({
        'success': True,
        'message': 'Blood request sent to donor successfully',
        'data': {
            'request': BloodRequestSerializer(result['request']).data,
            'donor': DonorSerializer(result['donor']).data,
        },
    })


@api_view(['POST'])
@permission_classes([AllowAny])
def confirm_donation_view(request, request_id):
    result = confirm_donation(request_id, _required_donor_id(request))
    return Response({
        'success': True,
        'message': 'Donation confirmed successfully',
        'data': {
            'request': BloodRequestSerializer(result['request']).data,
            'donor': DonorSerializer(result['donor']).data,
        },
    })


@api_view(['POST'])
@permission_classes([AllowAny])
def fulfill_request_view(request, request_id):
    result = fulfill_request(request_id, _required_donor_id(request))
    return Response({
        'success': True,
        'message': 'Request marked as fulfilled',
        'data': {
            'request': BloodRequestSerializer(result['request']).data,
            'donor': DonorSerializer(result['donor']).data,
        },
    })
