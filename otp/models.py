from datetime import timedelta

from django.conf import settings
from django.db import models
from django.utils import timezone


class PhoneVerification(models.Model):
    """A pending donor registration waiting for its phone number to be verified"""
    phone = models.CharField(max_length=10, db_index=True)
    donor_data = models.JSONField(default=dict, blank=True)
    verification_sid = models.CharField(max_length=64, blank=True)
    verified = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)

    @property
    def is_expired(self) -> bool:
        ttl = timedelta(seconds=settings.BLOODLINK['OTP_TTL_SECONDS'])
        return timezone.now() - self.created_at > ttl

    def __str__(self):
        return f"Verification for {self.phone} ({'verified' if self.verified else 'pending'})"

    class Meta:
        ordering = ['-created_at']
