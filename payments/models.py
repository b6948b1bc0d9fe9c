from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from common.enums import PaymentStatus
from core.models import BaseModel


class PaymentTransaction(BaseModel):
    """A mobile-money collection attempt and the contribution it produced."""
    member = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name='payment_transactions',
        on_delete=models.CASCADE,
    )
    merchant_reference = models.CharField(max_length=64, unique=True)
    amount = models.DecimalField(
        max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))]
    )
    phone_number = models.CharField(max_length=15)
    status = models.CharField(max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
    provider_transaction_id = models.CharField(max_length=100, blank=True)
    provider_response = models.JSONField(default=dict, blank=True)
    contribution = models.OneToOneField(
        'savings.Contribution',
        null=True,
        blank=True,
        related_name='payment',
        on_delete=models.SET_NULL,
    )
    contribution_date = models.DateField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['member', 'status'], name='payment_member_status_idx'),
        ]

    def __str__(self):
        return f"{self.merchant_reference} ({self.status})"
