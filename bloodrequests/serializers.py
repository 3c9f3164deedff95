# bloodrequests/serializers.py
from rest_framework import serializers

from donors.models import PHONE_REGEX
from .models import BloodRequest, DonorRequestEntry


class DonorRequestEntrySerializer(serializers.ModelSerializer):
    donor_id = serializers.IntegerField(read_only=True)
    donor_name = serializers.CharField(source='donor.name', read_only=True)
    donor_blood_type = serializers.CharField(source='donor.blood_type', read_only=True)
    donor_phone = serializers.CharField(source='donor.phone', read_only=True)
    donor_city = serializers.CharField(source='donor.city', read_only=True)
    donor_state = serializers.CharField(source='donor.state', read_only=True)

    class Meta:
        model = DonorRequestEntry
        fields = [
            'id', 'donor_id', 'donor_name', 'donor_blood_type', 'donor_phone',
            'donor_city', 'donor_state', 'status', 'created_at', 'updated_at',
        ]


class BloodRequestSerializer(serializers.ModelSerializer):
    phone = serializers.RegexField(
        PHONE_REGEX,
        error_messages={'invalid': 'Phone number must be exactly 10 digits'},
    )
    donors = DonorRequestEntrySerializer(source='donor_requests', many=True, read_only=True)

    class Meta:
        model = BloodRequest
        fields = [
            'id', 'name', 'blood_type', 'gender', 'phone',
            'hospital_name', 'hospital_location', 'country', 'state', 'city',
            'urgency', 'reason', 'overall_status', 'donors',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['overall_status', 'created_at', 'updated_at']
