import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from common.enums import WithdrawalStatus
from notifications.services import NotificationService
from savings.exceptions import ConflictError, ValidationError
from savings.models import Contribution, MemberProfile, WithdrawalRequest
from savings.services.helpers import coerce_amount, format_decimal

logger = logging.getLogger(__name__)


class WithdrawalService:

    @staticmethod
    def get_available_summary(member):
        contributed = Contribution.objects.sum_amount(member=member, completed_only=True)
        profile = MemberProfile.objects.filter(user=member).first()
        adjustment = profile.balance_adjustment if profile else Decimal('0')
        reserved = (
            WithdrawalRequest.objects.outstanding()
            .filter(member=member)
            .aggregate(total=Sum('amount'))['total'] or Decimal('0')
        )
        balance = contributed + adjustment
        available = max(Decimal('0'), balance - reserved)
        return {
            'member_id': member.id,
            'total_balance': format_decimal(balance),
            'total_reserved': format_decimal(reserved),
            'total_available': format_decimal(available),
        }

    @staticmethod
    @transaction.atomic
    def request(member, amount, reason=''):
        amount = coerce_amount(amount)
        available = Decimal(WithdrawalService.get_available_summary(member)['total_available'])
        if amount > available:
            raise ValidationError(
                f"Requested amount exceeds available balance ({format_decimal(available)})"
            )
        withdrawal = WithdrawalRequest.objects.create(
            member=member,
            amount=amount,
            reason=reason or '',
        )
        logger.info("Withdrawal %s of %s requested by %s", withdrawal.id, amount, member)
        return withdrawal

    @staticmethod
    def _transition(withdrawal, expected, new, **extra):
        if not WithdrawalRequest.objects.transition(withdrawal.pk, expected, new, **extra):
            withdrawal.refresh_from_db()
            raise ConflictError(
                f"Withdrawal is {withdrawal.status}; only {expected} requests can be marked {new}"
            )
        withdrawal.refresh_from_db()
        logger.info("Withdrawal %s moved %s -> %s", withdrawal.pk, expected, new)
        return withdrawal

    @staticmethod
    def approve(withdrawal, admin):
        withdrawal = WithdrawalService._transition(
            withdrawal,
            WithdrawalStatus.PENDING,
            WithdrawalStatus.APPROVED,
            admin=admin,
            reviewed_at=timezone.now(),
        )
        NotificationService.notify(
            withdrawal.member,
            f"Your withdrawal request of {format_decimal(withdrawal.amount)} was approved.",
            actor=admin,
        )
        return withdrawal

    @staticmethod
    def reject(withdrawal, admin, rejection_reason):
        rejection_reason = (rejection_reason or '').strip()
        if not rejection_reason:
            raise ValidationError("A rejection reason is required")
        withdrawal = WithdrawalService._transition(
            withdrawal,
            WithdrawalStatus.PENDING,
            WithdrawalStatus.REJECTED,
            admin=admin,
            rejection_reason=rejection_reason,
            reviewed_at=timezone.now(),
        )
        NotificationService.notify(
            withdrawal.member,
            f"Your withdrawal request of {format_decimal(withdrawal.amount)} was rejected: {rejection_reason}",
            actor=admin,
        )
        return withdrawal

    @staticmethod
    def complete(withdrawal, admin):
        return WithdrawalService._transition(
            withdrawal,
            WithdrawalStatus.APPROVED,
            WithdrawalStatus.COMPLETED,
            completed_at=timezone.now(),
        )
