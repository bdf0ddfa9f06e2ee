from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone
from phonenumber_field.modelfields import PhoneNumberField
import uuid


class User(AbstractUser):
    """
    Custom User model extending Django's AbstractUser.
    Farmers own the fact log; outlet owners read rollups of their farmers.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class UserRole(models.TextChoices):
        FARMER = 'FARMER', 'Farmer'
        OUTLET_OWNER = 'OUTLET_OWNER', 'Business Outlet Owner'

    role = models.CharField(
        max_length=50,
        choices=UserRole.choices,
        default=UserRole.FARMER,
        db_index=True,
        help_text="User's primary role in the system"
    )

    phone = PhoneNumberField(
        region='IN',
        unique=True,
        null=True,
        blank=True,
        db_index=True,
        help_text="Phone number (India format: +91XXXXXXXXXX)"
    )

    language = models.CharField(
        max_length=10,
        default='en',
        help_text="Preferred language code for report labels"
    )

    # Registration date; lower bound of the "all time" report window
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        indexes = [
            models.Index(fields=['role', 'is_active']),
        ]

    def __str__(self):
        return f"{self.get_full_name()} ({self.get_role_display()})"

    def get_full_name(self):
        """Return the user's full name or username if name is not set."""
        full_name = super().get_full_name()
        return full_name if full_name else self.username

    @property
    def registered_on(self):
        """Registration date in the current time zone."""
        return timezone.localtime(self.created_at).date()
