from decimal import Decimal

from django.db.models import Sum

from common.enums import MemberStatus
from savings.models import Contribution, MemberProfile, SavingsCycle, WithdrawalRequest
from savings.services.helpers import format_decimal


class AnalyticsService:
    """Group-level aggregates for the admin dashboard."""

    @staticmethod
    def group_summary():
        members = MemberProfile.objects.members()
        ledger_total = Contribution.objects.sum_amount(completed_only=True)
        adjustments = members.aggregate(total=Sum('balance_adjustment'))['total'] or Decimal('0')
        pending = WithdrawalRequest.objects.pending()
        active_cycle = SavingsCycle.objects.active().first()

        return {
            'total_members': members.count(),
            'active_members': members.filter(member_status=MemberStatus.ACTIVE).count(),
            'total_contributions': format_decimal(ledger_total),
            'total_adjustments': format_decimal(adjustments),
            'total_group_savings': format_decimal(ledger_total + adjustments),
            'pending_withdrawals': pending.count(),
            'pending_withdrawal_amount': format_decimal(
                pending.aggregate(total=Sum('amount'))['total'] or Decimal('0')
            ),
            'active_cycle': {
                'id': active_cycle.id,
                'name': active_cycle.name,
                'start_date': active_cycle.start_date,
                'end_date': active_cycle.end_date,
            } if active_cycle else None,
        }

    @staticmethod
    def leaderboard(limit=10):
        ranked = (
            MemberProfile.objects.members()
            .select_related('user')
            .with_totals()
            .order_by('-total_contributions', 'full_name')[:limit]
        )
        return [
            {
                'rank': position,
                'member_id': profile.user_id,
                'full_name': profile.full_name or profile.user.username,
                'total_contributions': format_decimal(profile.total_contributions),
                'contribution_count': profile.contribution_count,
            }
            for position, profile in enumerate(ranked, start=1)
        ]
