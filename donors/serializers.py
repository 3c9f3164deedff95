# donors/serializers.py
import math

from rest_framework import serializers

from .models import PHONE_REGEX, Donor, DonorRequestLink

DONOR_INPUT_FIELDS = [
    'name', 'age', 'gender', 'blood_type', 'phone',
    'country', 'state', 'city', 'latitude', 'longitude',
    'smoking', 'drinking', 'last_donation', 'password',
]


class DonorSerializer(serializers.ModelSerializer):
    """Public representation of a donor. Never exposes the password hash."""

    class Meta:
        model = Donor
        fields = [
            'id', 'name', 'age', 'gender', 'blood_type', 'phone',
            'country', 'state', 'city', 'latitude', 'longitude',
            'smoking', 'drinking', 'last_donation',
            'donation_count', 'is_available', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class DonorRegistrationSerializer(serializers.ModelSerializer):
    # Declared explicitly so the model's unique index does not add a
    # UniqueValidator; duplicates are reported as DuplicatePhone instead.
    phone = serializers.RegexField(
        PHONE_REGEX,
        error_messages={'invalid': 'Phone number must be exactly 10 digits'},
    )
    latitude = serializers.FloatField(min_value=-90, max_value=90, required=False, allow_null=True)
    longitude = serializers.FloatField(min_value=-180, max_value=180, required=False, allow_null=True)
    password = serializers.CharField(write_only=True, min_length=6, max_length=128)

    class Meta:
        model = Donor
        fields = DONOR_INPUT_FIELDS

    def validate_latitude(self, value):
        if value is not None and not math.isfinite(value):
            raise serializers.ValidationError('Latitude must be a finite number.')
        return value

    def validate_longitude(self, value):
        if value is not None and not math.isfinite(value):
            raise serializers.ValidationError('Longitude must be a finite number.')
        return value

    def create(self, validated_data):
        password = validated_data.pop('password')
        donor = Donor(**validated_data)
        donor.set_password(password)
        donor.save()
        return donor


class DonorUpdateSerializer(DonorRegistrationSerializer):
    """Partial profile update. Donation tracking and links are not writable here."""
    password = serializers.CharField(write_only=True, min_length=6, max_length=128, required=False)

    class Meta:
        model = Donor
        fields = DONOR_INPUT_FIELDS + ['is_available']

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance


class DonorRequestLinkSerializer(serializers.ModelSerializer):
    request_id = serializers.IntegerField(source='blood_request_id', read_only=True)
    requester_name = serializers.CharField(source='blood_request.name', read_only=True)
    blood_type = serializers.CharField(source='blood_request.blood_type', read_only=True)
    hospital_name = serializers.CharField(source='blood_request.hospital_name', read_only=True)
    hospital_location = serializers.CharField(source='blood_request.hospital_location', read_only=True)
    city = serializers.CharField(source='blood_request.city', read_only=True)
    urgency = serializers.CharField(source='blood_request.urgency', read_only=True)
    reason = serializers.CharField(source='blood_request.reason', read_only=True)

    class Meta:
        model = DonorRequestLink
        fields = [
            'id', 'request_id', 'requester_name', 'blood_type', 'hospital_name',
            'hospital_location', 'city', 'urgency', 'reason',
            'status', 'created_at', 'updated_at',
        ]
