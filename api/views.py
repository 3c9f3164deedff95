# api/views.py
"""Staff-only reporting endpoints. Authenticated with simplejwt tokens from the admin login."""
from django.db.models import Count
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response

from bloodrequests.models import BloodRequest, DonorRequestEntry
from bloodrequests.serializers import BloodRequestSerializer
from donors.models import ACCEPTED, DONATED, Donor
from donors.serializers import DonorSerializer
from donors.utils import delete_donor


class AdminDonorViewSet(mixins.ListModelMixin,
                        mixins.RetrieveModelMixin,
                        mixins.DestroyModelMixin,
                        viewsets.GenericViewSet):
    """API endpoint for viewing and removing donors"""
    queryset = Donor.objects.all().order_by('-created_at')
    serializer_class = DonorSerializer
    permission_classes = [IsAuthenticated, IsAdminUser]

    def get_queryset(self):
        queryset = super().get_queryset()
        blood_type = self.request.query_params.get('blood_type')
        if blood_type and blood_type != 'all':
            queryset = queryset.filter(blood_type=blood_type)
        return queryset

    def list(self, request, *args, **kwargs):
        data = self.get_serializer(self.get_queryset(), many=True).data
        return Response({'success': True, 'count': len(data), 'data': data})

    def retrieve(self, request, *args, **kwargs):
        return Response({'success': True, 'data': self.get_serializer(self.get_object()).data})

    def destroy(self, request, *args, **kwargs):
        delete_donor(self.get_object().pk)
        return Response({'success': True, 'message': 'Donor deleted successfully'}, status=status.HTTP_200_OK)


class AdminBloodRequestViewSet(viewsets.ReadOnlyModelViewSet):
    """API endpoint for viewing blood requests"""
    queryset = BloodRequest.objects.all().prefetch_related('donor_requests__donor').order_by('-created_at')
    serializer_class = BloodRequestSerializer
    permission_classes = [IsAuthenticated, IsAdminUser]

    def get_queryset(self):
        queryset = super().get_queryset()
        status_filter = self.request.query_params.get('status')
        if status_filter and status_filter != 'all':
            queryset = queryset.filter(overall_status=status_filter)
        return queryset

    def list(self, request, *args, **kwargs):
        data = self.get_serializer(self.get_queryset(), many=True).data
        return Response({'success': True, 'count': len(data), 'data': data})

    def retrieve(self, request, *args, **kwargs):
        return Response({'success': True, 'data': self.get_serializer(self.get_object()).data})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def dashboard_stats(request):
    """Get dashboard statistics"""
    blood_type_distribution = {
        row['blood_type']: row['count']
        for row in Donor.objects.values('blood_type').annotate(count=Count('id')).order_by('blood_type')
    }
    requests_by_status = {
        row['overall_status']: row['count']
        for row in BloodRequest.objects.values('overall_status').annotate(count=Count('id')).order_by('overall_status')
    }

    return Response({
        'success': True,
        'data': {
            'total_donors': Donor.objects.count(),
            'available_donors': Donor.objects.filter(is_available=True).count(),
            'blood_type_distribution': blood_type_distribution,
            'total_requests': BloodRequest.objects.count(),
            'pending_requests': requests_by_status.get('pending', 0),
            'fulfilled_requests': requests_by_status.get('fulfilled', 0),
            'expired_requests': requests_by_status.get('expired', 0),
            'accepted_links': DonorRequestEntry.objects.filter(status=ACCEPTED).count(),
            'completed_donations': DonorRequestEntry.objects.filter(status=DONATED).count(),
        },
    })
