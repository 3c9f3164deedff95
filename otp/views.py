from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from otp.utils import resend_otp, send_otp, verify_otp


@api_view(['POST'])
@permission_classes([AllowAny])
def send(request):
    send_otp(request.data.get('phone'), request.data.get('donor_data'))
    return Response({
        'success': True,
        'message': 'Verification code sent successfully to your mobile number',
    })


@api_view(['POST'])
@permission_classes([AllowAny])
def verify(request):
    donor_data = verify_otp(request.data.get('phone'), request.data.get('otp'))
    return Response({
        'success': True,
        'message': 'OTP verified successfully',
        'data': donor_data,
    })


@api_view(['POST'])
@permission_classes([AllowAny])
def resend(request):
    resend_otp(request.data.get('phone'))
    return Response({
        'success': True,
        'message': 'Verification code resent successfully',
    })
