from datetime import date
from decimal import Decimal

from django.db import models
from django.db.models import Count, Q, Sum, Value
from django.db.models.functions import Coalesce
from django.utils.dateparse import parse_date


def _as_date(value):
    if value is None or isinstance(value, date):
        return value
    return parse_date(str(value))


class MemberProfileQuerySet(models.QuerySet):
    """Bulk operations over member balance records."""

    def members(self):
        """Member scope: excludes group admins and superusers."""
        return self.exclude(user__role='Admin').exclude(user__is_superuser=True)

    def set_all_balance_visible(self, value):
        return self.update(balance_visible=bool(value))

    def reset_all_adjustments(self):
        return self.update(balance_adjustment=Decimal('0'))

    def reset_for_new_cycle(self):
        """Hide every balance and clear adjustments. Returns rows reset."""
        self.set_all_balance_visible(False)
        return self.reset_all_adjustments()

    def with_totals(self):
        completed = Q(user__contributions__status='completed')
        return self.annotate(
            total_contributions=Coalesce(
                Sum('user__contributions__amount', filter=completed),
                Value(Decimal('0')),
                output_field=models.DecimalField(max_digits=12, decimal_places=2),
            ),
            contribution_count=Count('user__contributions', filter=completed),
        )


class ContributionQuerySet(models.QuerySet):
    """Read-side of the append-only contribution ledger."""

    def completed(self):
        return self.filter(status='completed')

    def in_range(self, start=None, end=None):
        start, end = _as_date(start), _as_date(end)
        qs = self
        if start:
            qs = qs.filter(contribution_date__gte=start)
        if end:
            qs = qs.filter(contribution_date__lte=end)
        return qs

    def for_member(self, member):
        return self.filter(member=member)

    def sum_amount(self, member=None, start=None, end=None, completed_only=False):
        """
        Sum ledger amounts, both range ends inclusive.

        Every row counts whatever its status; ``completed_only`` narrows the
        sum to settled money for balance displays.
        """
        qs = self.in_range(start, end)
        if completed_only:
            qs = qs.completed()
        if member is not None:
            qs = qs.for_member(member)
        return qs.aggregate(total=Sum('amount'))['total'] or Decimal('0')


class SavingsCycleQuerySet(models.QuerySet):

    def active(self):
        return self.filter(status='active')

    def ended(self):
        return self.filter(status='ended')

    def list_all(self):
        return self.order_by('-start_date', '-created_at')

    def expired(self, as_of):
        return self.active().filter(end_date__lt=as_of)

    def conditional_update_status(self, cycle_id, expected_status, new_status, total_savings=None, **extra):
        """Compare-and-swap on status. True only for the caller whose UPDATE matched."""
        values = {'status': new_status, **extra}
        if total_savings is not None:
            values['total_savings'] = total_savings
        return self.filter(pk=cycle_id, status=expected_status).update(**values) == 1


class WithdrawalRequestQuerySet(models.QuerySet):

    def pending(self):
        return self.filter(status='pending')

    def outstanding(self):
        return self.filter(status__in=['pending', 'approved'])

    def transition(self, withdrawal_id, expected_status, new_status, **extra):
        return self.filter(pk=withdrawal_id, status=expected_status).update(status=new_status, **extra) == 1
