import logging

from django.utils import timezone

from common.enums import ContributionStatus
from savings.exceptions import ValidationError
from savings.models import Contribution, SavingsCycle
from savings.services.helpers import coerce_amount, format_decimal, to_date
from savings.services.settings_service import SettingsService

logger = logging.getLogger(__name__)


class ContributionService:

    @staticmethod
    def accepting_contributions(on_date=None):
        """True while an active cycle covers ``on_date`` (default today)."""
        day = to_date(on_date) or timezone.localdate()
        return SavingsCycle.objects.active().filter(start_date__lte=day, end_date__gte=day).exists()

    @staticmethod
    def record_contribution(member, amount, contribution_date=None, notes='',
                            status=ContributionStatus.COMPLETED, recorded_by=None,
                            enforce_limits=True):
        amount = coerce_amount(amount)
        if enforce_limits:
            limits = SettingsService.get_all()
            if amount < limits['min_contribution']:
                raise ValidationError(
                    f"Minimum contribution is {format_decimal(limits['min_contribution'])}"
                )
            if amount > limits['max_contribution']:
                raise ValidationError(
                    f"Maximum contribution is {format_decimal(limits['max_contribution'])}"
                )

        if contribution_date:
            day = to_date(contribution_date)
            if day is None:
                raise ValidationError("contribution_date must be a valid date (YYYY-MM-DD)")
        else:
            day = timezone.localdate()

        if status not in ContributionStatus.values:
            raise ValidationError(f"Invalid contribution status '{status}'")

        contribution = Contribution.objects.create(
            member=member,
            amount=amount,
            contribution_date=day,
            status=status,
            notes=notes or '',
            recorded_by=recorded_by,
        )
        logger.info("Contribution %s of %s recorded for %s on %s", contribution.id, amount, member, day)
        return contribution
