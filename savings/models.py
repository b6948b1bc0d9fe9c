from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q

from common.enums import (
    AdjustmentType,
    ContributionStatus,
    CycleStatus,
    MemberRole,
    MemberStatus,
    WithdrawalStatus,
)
from core.models import BaseModel
from savings.managers import (
    ContributionQuerySet,
    MemberProfileQuerySet,
    SavingsCycleQuerySet,
    WithdrawalRequestQuerySet,
)

User = settings.AUTH_USER_MODEL


class MemberProfile(BaseModel):
    """
    Balance record for a group member.
    Contribution totals are derived from the ledger; only the manual
    adjustment and the visibility flag are stored here.
    """
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='member_profile')
    full_name = models.CharField(max_length=200, blank=True)
    phone_number = models.CharField(max_length=20, blank=True)

    daily_contribution_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal('0.00')
    )
    missed_contributions = models.PositiveIntegerField(default=0)
    balance_adjustment = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal('0.00'),
        help_text="Signed manual correction (rewards positive, penalties negative)"
    )
    balance_visible = models.BooleanField(default=False)

    member_status = models.CharField(max_length=20, choices=MemberStatus.choices, default=MemberStatus.ACTIVE)
    member_role = models.CharField(max_length=20, choices=MemberRole.choices, default=MemberRole.MEMBER)

    objects = MemberProfileQuerySet.as_manager()

    class Meta:
        ordering = ['full_name', 'id']

    def __str__(self):
        return self.full_name or str(self.user)

    @property
    def total_contributed(self):
        annotated = getattr(self, 'total_contributions', None)
        if annotated is not None:
            return annotated
        return Contribution.objects.sum_amount(member=self.user, completed_only=True)

    @property
    def display_balance(self):
        return self.total_contributed + self.balance_adjustment


class Contribution(BaseModel):
    member = models.ForeignKey(User, on_delete=models.CASCADE, related_name='contributions')
    amount = models.DecimalField(
        max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))]
    )
    contribution_date = models.DateField()
    status = models.CharField(max_length=20, choices=ContributionStatus.choices, default=ContributionStatus.COMPLETED)
    notes = models.TextField(blank=True)
    recorded_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name='recorded_contributions'
    )

    objects = ContributionQuerySet.as_manager()

    class Meta:
        ordering = ['-contribution_date', '-created_at']
        indexes = [
            models.Index(fields=['contribution_date', 'status'], name='contrib_date_status_idx'),
            models.Index(fields=['member', 'contribution_date'], name='contrib_member_date_idx'),
        ]
        constraints = [
            models.CheckConstraint(condition=Q(amount__gt=0), name='contribution_amount_positive'),
        ]

    def __str__(self):
        return f"{self.member} - {self.amount} on {self.contribution_date}"


class SavingsCycle(BaseModel):
    """
    A bounded savings period. At most one cycle is active at a time; it
    moves to ended exactly once, carrying the ledger total for its range.
    """
    name = models.CharField(max_length=200)
    start_date = models.DateField()
    end_date = models.DateField()
    status = models.CharField(max_length=20, choices=CycleStatus.choices, default=CycleStatus.ACTIVE)
    total_savings = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    notes = models.TextField(blank=True)

    created_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_cycles'
    )
    ended_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name='ended_cycles'
    )
    ended_at = models.DateTimeField(null=True, blank=True)
    settled_automatically = models.BooleanField(default=False)

    objects = SavingsCycleQuerySet.as_manager()

    class Meta:
        ordering = ['-start_date', '-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['status'],
                condition=Q(status='active'),
                name='unique_active_savings_cycle',
            ),
            models.CheckConstraint(
                condition=Q(end_date__gt=models.F('start_date')),
                name='savings_cycle_end_after_start',
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.status})"

    @property
    def is_active(self):
        return self.status == CycleStatus.ACTIVE

    @property
    def duration_days(self):
        return (self.end_date - self.start_date).days


class BalanceAdjustment(BaseModel):
    member = models.ForeignKey(User, on_delete=models.CASCADE, related_name='balance_adjustments')
    admin = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, related_name='applied_adjustments'
    )
    adjustment_type = models.CharField(max_length=20, choices=AdjustmentType.choices)
    amount = models.DecimalField(max_digits=12, decimal_places=2, help_text="Signed; penalties are negative")
    reason = models.TextField()

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.get_adjustment_type_display()} {self.amount} for {self.member}"


class WithdrawalRequest(BaseModel):
    member = models.ForeignKey(User, on_delete=models.CASCADE, related_name='withdrawal_requests')
    admin = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name='reviewed_withdrawals'
    )
    amount = models.DecimalField(
        max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))]
    )
    status = models.CharField(max_length=20, choices=WithdrawalStatus.choices, default=WithdrawalStatus.PENDING)
    reason = models.TextField(blank=True)
    rejection_reason = models.TextField(blank=True)
    reviewed_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    objects = WithdrawalRequestQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['member', 'status'], name='withdrawal_member_status_idx'),
        ]

    def __str__(self):
        return f"Withdrawal {self.amount} by {self.member} ({self.status})"


class GroupSetting(BaseModel):
    key = models.CharField(max_length=100, unique=True)
    value = models.CharField(max_length=255)
    updated_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name='updated_group_settings'
    )

    class Meta:
        ordering = ['key']

    def __str__(self):
        return f"{self.key}={self.value}"


class MemberNote(BaseModel):
    member = models.ForeignKey(User, on_delete=models.CASCADE, related_name='member_notes')
    admin = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='authored_member_notes')
    note = models.TextField()

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Note on {self.member}"
