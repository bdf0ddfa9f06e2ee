"""
Fixed Investment Models

Long-lived farm investments (sheds, machinery, land development) with their
type names translated per language.
"""

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from accounts.models import User


class InvestmentType(models.Model):
    name = models.CharField(max_length=150, unique=True)

    class Meta:
        db_table = 'investment_types'
        ordering = ['name']

    def __str__(self):
        return self.name


class InvestmentTypeTranslation(models.Model):
    investment_type = models.ForeignKey(
        InvestmentType,
        on_delete=models.CASCADE,
        related_name='translations'
    )
    language_code = models.CharField(max_length=10, db_index=True)
    name = models.CharField(max_length=150)

    class Meta:
        db_table = 'investment_type_translations'
        unique_together = [['investment_type', 'language_code']]

    def __str__(self):
        return f"{self.name} ({self.language_code})"


class FixedInvestment(models.Model):
    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='fixed_investments')
    investment_type = models.ForeignKey(InvestmentType, on_delete=models.PROTECT)
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Amount invested"
    )
    installed_on = models.DateField(
        default=timezone.localdate,
        help_text="Date the investment was made"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'fixed_investments'
        ordering = ['installed_on']
        indexes = [
            models.Index(fields=['owner', 'deleted_at']),
        ]

    def __str__(self):
        return f"{self.investment_type} - {self.amount}"
