"""
Business Outlet Models

A business outlet (dairy collection centre, milk society) is run by one user
and looks after a set of delegated farmers whose records it can review.
"""

from django.db import models
from django.utils import timezone

from accounts.models import User


class BusinessOutlet(models.Model):
    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='business_outlets')
    business_name = models.CharField(max_length=200)
    business_address = models.TextField(blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    deleted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'business_outlets'

    def __str__(self):
        return self.business_name


class OutletFarmer(models.Model):
    """Delegation of a farmer to an outlet."""

    outlet = models.ForeignKey(BusinessOutlet, on_delete=models.CASCADE, related_name='assignments')
    farmer = models.ForeignKey(User, on_delete=models.CASCADE, related_name='outlet_assignments')
    created_at = models.DateTimeField(default=timezone.now)
    deleted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'outlet_farmers'
        unique_together = [['outlet', 'farmer']]

    def __str__(self):
        return f"{self.farmer} @ {self.outlet}"
