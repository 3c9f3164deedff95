# bloodrequests/models.py
from django.db import models
from django.utils import timezone

from algorithms.blood_compatibility import BLOOD_TYPE_CHOICES
from donors.models import ACCEPTED, DONATED, LINK_STATUS_CHOICES, PENDING, REJECTED, phone_validator

FULFILLED = 'fulfilled'
EXPIRED = 'expired'


def overall_status_for(statuses):
    """
    Derive a request's overall status from its donor entry statuses.

    - fulfilled: any entry accepted or donated
    - expired: at least one entry and every entry rejected
    - pending: otherwise (including no entries)
    """
    statuses = list(statuses)
    if any(s in (ACCEPTED, DONATED) for s in statuses):
        return FULFILLED
    if statuses and all(s == REJECTED for s in statuses):
        return EXPIRED
    return PENDING


class BloodRequest(models.Model):
    URGENCY_CHOICES = [
        ('normal', 'Normal'),
        ('urgent', 'Urgent'),
        ('emergency', 'Emergency'),
    ]

    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (FULFILLED, 'Fulfilled'),
        (EXPIRED, 'Expired'),
    ]

    GENDER_CHOICES = [
        ('male', 'Male'),
        ('female', 'Female'),
        ('other', 'Other'),
    ]

    name = models.CharField(max_length=200, help_text="Requester's name")
    blood_type = models.CharField(max_length=3, choices=BLOOD_TYPE_CHOICES, db_index=True)
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES)
    phone = models.CharField(max_length=10, validators=[phone_validator], db_index=True)

    hospital_name = models.CharField(max_length=200)
    hospital_location = models.CharField(max_length=255)
    country = models.CharField(max_length=100)
    state = models.CharField(max_length=100)
    city = models.CharField(max_length=100)

    urgency = models.CharField(max_length=10, choices=URGENCY_CHOICES, default='normal')
    reason = models.TextField(blank=True)

    # Derived from donor entries on every save, stored for filtering only
    overall_status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=PENDING, db_index=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} - {self.blood_type} ({self.urgency})"

    def compute_overall_status(self):
        if self.pk is None:
            return PENDING
        return overall_status_for(self.donor_requests.values_list('status', flat=True))

    def save(self, *args, **kwargs):
        self.overall_status = self.compute_overall_status()
        update_fields = kwargs.get('update_fields')
        if update_fields is not None:
            kwargs['update_fields'] = set(update_fields) | {'overall_status', 'updated_at'}
        super().save(*args, **kwargs)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Blood Request'
        verbose_name_plural = 'Blood Requests'


class DonorRequestEntry(models.Model):
    """Request-side half of a donor <-> blood request link"""
    blood_request = models.ForeignKey(BloodRequest, on_delete=models.CASCADE, related_name='donor_requests')
    # String reference keeps the import one-directional
    donor = models.ForeignKey('donors.Donor', on_delete=models.CASCADE, related_name='request_entries')

    status = models.CharField(max_length=10, choices=LINK_STATUS_CHOICES, default=PENDING)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return f"Request #{self.blood_request_id} ← {self.donor_id} ({self.status})"

    class Meta:
        ordering = ['created_at', 'id']
        verbose_name_plural = 'Donor Request Entries'
        constraints = [
            models.UniqueConstraint(fields=['blood_request', 'donor'], name='unique_request_donor_entry'),
        ]
