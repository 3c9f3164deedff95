from django.contrib.auth.hashers import check_password, make_password
from django.core.validators import MaxValueValidator, MinValueValidator, RegexValidator
from django.db import models
from django.utils import timezone

from algorithms.blood_compatibility import BLOOD_TYPE_CHOICES

PHONE_REGEX = r'^\d{10}$'

phone_validator = RegexValidator(PHONE_REGEX, 'Phone number must be exactly 10 digits')

# ---------------------------
# Link statuses (shared by both halves of a donor <-> request link)
# ---------------------------
PENDING = 'pending'
ACCEPTED = 'accepted'
REJECTED = 'rejected'
DONATED = 'donated'

LINK_STATUS_CHOICES = [
    (PENDING, 'Pending'),
    (ACCEPTED, 'Accepted'),
    (REJECTED, 'Rejected'),
    (DONATED, 'Donated'),
]


# ---------------------------
# Donor
# ---------------------------
class Donor(models.Model):
    GENDER_CHOICES = [
        ('male', 'Male'),
        ('female', 'Female'),
        ('other', 'Other'),
    ]

    YES_NO_CHOICES = [
        ('yes', 'Yes'),
        ('no', 'No'),
    ]

    LAST_DONATION_CHOICES = [
        ('never', 'Never'),
        ('less_than_3_months', 'Less than 3 months ago'),
        ('more_than_3_months', 'More than 3 months ago'),
    ]

    name = models.CharField(max_length=200)
    age = models.PositiveIntegerField(
        validators=[MinValueValidator(18), MaxValueValidator(65)]
    )
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES)
    blood_type = models.CharField(max_length=3, choices=BLOOD_TYPE_CHOICES, db_index=True)
    phone = models.CharField(max_length=10, unique=True, validators=[phone_validator])

    country = models.CharField(max_length=100)
    state = models.CharField(max_length=100)
    city = models.CharField(max_length=100)

    # Geolocation (optional)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)

    smoking = models.CharField(max_length=3, choices=YES_NO_CHOICES)
    drinking = models.CharField(max_length=3, choices=YES_NO_CHOICES)
    last_donation = models.CharField(max_length=20, choices=LAST_DONATION_CHOICES, default='never')

    password = models.CharField(max_length=128)

    # Donation tracking
    donation_count = models.PositiveIntegerField(default=0)
    is_available = models.BooleanField(default=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    def set_password(self, raw_password):
        self.password = make_password(raw_password)

    def check_password(self, raw_password) -> bool:
        return check_password(raw_password, self.password)

    def __str__(self):
        return f"{self.name} ({self.blood_type})"

    class Meta:
        ordering = ['-created_at']


class DonorRequestLink(models.Model):
    """Donor-side half of a donor <-> blood request link"""
    donor = models.ForeignKey(
        Donor,
        on_delete=models.CASCADE,
        related_name='blood_requests'
    )
    # String reference, bloodrequests depends on donors
    blood_request = models.ForeignKey(
        'bloodrequests.BloodRequest',
        on_delete=models.CASCADE,
        related_name='donor_links'
    )

    status = models.CharField(max_length=10, choices=LINK_STATUS_CHOICES, default=PENDING)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return f"{self.donor.name} → Request #{self.blood_request_id} ({self.status})"

    class Meta:
        ordering = ['created_at', 'id']
        constraints = [
            models.UniqueConstraint(fields=['donor', 'blood_request'], name='unique_donor_request_link'),
        ]
