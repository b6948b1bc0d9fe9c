import logging

from django.db import transaction
from django.db.models import F

from common.enums import AdjustmentType
from savings.exceptions import ValidationError
from savings.models import BalanceAdjustment, MemberProfile
from savings.services.helpers import coerce_amount

logger = logging.getLogger(__name__)


class AdjustmentService:

    @staticmethod
    @transaction.atomic
    def apply(member, admin, adjustment_type, amount, reason):
        """
        Record a penalty or reward and fold it into ``balance_adjustment``.

        ``amount`` is given positive; penalties are stored negative.
        """
        if adjustment_type not in AdjustmentType.values:
            raise ValidationError("adjustment_type must be 'penalty' or 'reward'")
        reason = (reason or '').strip()
        if not reason:
            raise ValidationError("A reason is required")

        amount = coerce_amount(amount)
        signed = -amount if adjustment_type == AdjustmentType.PENALTY else amount

        adjustment = BalanceAdjustment.objects.create(
            member=member,
            admin=admin,
            adjustment_type=adjustment_type,
            amount=signed,
            reason=reason,
        )
        MemberProfile.objects.filter(user=member).update(
            balance_adjustment=F('balance_adjustment') + signed
        )
        logger.info("%s of %s applied to %s by %s", adjustment_type, signed, member, admin)
        return adjustment
