"""
Cycle Service
Creates savings cycles and settles them, either on admin request or when
expiry is discovered.
"""
import logging

from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from audit import services as audit
from common.enums import CycleStatus
from notifications.services import NotificationService
from savings.exceptions import (
    AlreadyEndedError,
    ConflictError,
    NotFoundError,
    TransientIOError,
    ValidationError,
)
from savings.models import Contribution, MemberProfile, SavingsCycle
from savings.services.helpers import to_date, today

logger = logging.getLogger(__name__)

ACTIVE_CYCLE_EXISTS = "An active cycle already exists. End the current cycle before creating a new one."


class CycleService:
    """
    Service for the savings cycle lifecycle.

    The single-active invariant is checked here and backed by a partial
    unique constraint. Settlement is a compare-and-swap on ``status`` so an
    explicit end and expiry detection can race safely: exactly one caller
    commits the total and reveals balances.
    """

    @staticmethod
    def max_cycle_days():
        return getattr(settings, 'MAX_CYCLE_DAYS', 366)

    @staticmethod
    def get_active_cycle():
        try:
            return SavingsCycle.objects.active().first()
        except DatabaseError as exc:
            logger.exception("Failed to load the active cycle")
            raise TransientIOError() from exc

    @staticmethod
    def list_cycles():
        try:
            return list(SavingsCycle.objects.list_all().select_related('created_by', 'ended_by'))
        except DatabaseError as exc:
            logger.exception("Failed to list cycles")
            raise TransientIOError() from exc

    @staticmethod
    def validate_cycle_input(name, start_date, end_date):
        """Return ``(name, start, end)`` or raise ``ValidationError``."""
        name = (name or '').strip()
        if not name:
            raise ValidationError("Cycle name is required")

        start, end = to_date(start_date), to_date(end_date)
        if start is None or end is None:
            raise ValidationError("Start date and end date must be valid dates (YYYY-MM-DD)")

        days = (end - start).days
        if days < 1:
            raise ValidationError("End date must be after start date")
        max_days = CycleService.max_cycle_days()
        if days > max_days:
            raise ValidationError(f"Cycle cannot exceed one year ({max_days} days)")
        return name, start, end

    @staticmethod
    def create_cycle(name, start_date, end_date, actor, notes='', request=None):
        """
        Start a new active cycle.

        Member balances are hidden and adjustments zeroed in the same
        transaction that inserts the cycle, so a failed insert leaves no
        partial reset behind.
        """
        name, start, end = CycleService.validate_cycle_input(name, start_date, end_date)

        try:
            with transaction.atomic():
                if SavingsCycle.objects.active().exists():
                    raise ConflictError(ACTIVE_CYCLE_EXISTS)

                reset = MemberProfile.objects.members().reset_for_new_cycle()
                cycle = SavingsCycle.objects.create(
                    name=name,
                    start_date=start,
                    end_date=end,
                    status=CycleStatus.ACTIVE,
                    total_savings=0,
                    notes=notes or '',
                    created_by=actor,
                )
                audit.record(
                    actor, 'create_cycle', 'savings_cycle', cycle.id,
                    {'name': name, 'start_date': start, 'end_date': end, 'members_reset': reset},
                    request=request,
                )
        except IntegrityError as exc:
            logger.info("Cycle %r rejected: another active cycle was committed first", name)
            raise ConflictError(ACTIVE_CYCLE_EXISTS) from exc
        except DatabaseError as exc:
            logger.exception("Failed to create cycle %r", name)
            raise TransientIOError() from exc

        logger.info(
            "Cycle %s (%s) created by %s for %s..%s; %s member balances reset",
            cycle.id, cycle.name, actor, start, end, reset,
        )
        return cycle

    @staticmethod
    def settle(cycle, ended_by=None, automatic=False, request=None):
        """
        Close ``cycle`` if it is still active.

        Returns ``(cycle, won)``. ``won`` is False when another caller ended
        the cycle first; in that case nothing is written and the returned
        cycle carries the winner's total.
        """
        trigger = 'expiry' if automatic else f'admin {ended_by}'
        try:
            with transaction.atomic():
                total = Contribution.objects.sum_amount(start=cycle.start_date, end=cycle.end_date)
                won = SavingsCycle.objects.conditional_update_status(
                    cycle.pk,
                    CycleStatus.ACTIVE,
                    CycleStatus.ENDED,
                    total_savings=total,
                    ended_at=timezone.now(),
                    ended_by=ended_by,
                    settled_automatically=automatic,
                )
                if won:
                    revealed = MemberProfile.objects.members().set_all_balance_visible(True)
                    audit.record(
                        ended_by,
                        'auto_end_cycle' if automatic else 'end_cycle',
                        'savings_cycle',
                        cycle.pk,
                        {'total_savings': total, 'balances_revealed': revealed},
                        request=request,
                    )
                    NotificationService.notify_members(
                        f'Cycle "{cycle.name}" has ended. Balances are now visible.',
                        actor=ended_by,
                    )
            cycle.refresh_from_db()
        except DatabaseError as exc:
            logger.exception("Settlement of cycle %s failed", cycle.pk)
            raise TransientIOError() from exc

        if won:
            logger.info(
                "Cycle %s (%s) settled by %s: total_savings=%s, %s balances revealed",
                cycle.pk, cycle.name, trigger, cycle.total_savings, revealed,
            )
        else:
            logger.info("Cycle %s already settled; %s lost the race", cycle.pk, trigger)
        return cycle, won

    @staticmethod
    def end_cycle(cycle_id, actor, request=None):
        try:
            cycle = SavingsCycle.objects.get(pk=cycle_id)
        except (SavingsCycle.DoesNotExist, ValueError, TypeError):
            raise NotFoundError("Cycle not found")
        except DatabaseError as exc:
            logger.exception("Failed to load cycle %s", cycle_id)
            raise TransientIOError() from exc

        if cycle.status == CycleStatus.ENDED:
            raise AlreadyEndedError(cycle)

        cycle, won = CycleService.settle(cycle, ended_by=actor, automatic=False, request=request)
        if not won:
            raise AlreadyEndedError(cycle)
        return cycle

    @staticmethod
    def detect_and_settle_expired_cycles(now=None):
        """
        Settle every active cycle whose end date is before today.

        A cycle ending today is still running. Returns only the cycles this
        call settled; cycles settled concurrently by someone else are skipped.
        """
        as_of = today(now)
        try:
            expired = list(SavingsCycle.objects.expired(as_of))
        except DatabaseError as exc:
            logger.exception("Expiry detection query failed")
            raise TransientIOError() from exc

        settled = []
        for cycle in expired:
            cycle, won = CycleService.settle(cycle, automatic=True)
            if won:
                settled.append(cycle)
        return settled

    @staticmethod
    def compute_progress(cycle, as_of=None):
        as_of = today(as_of)
        total_days = (cycle.end_date - cycle.start_date).days
        elapsed = (as_of - cycle.start_date).days
        if total_days <= 0:
            percent = 100.0
        else:
            percent = min(100.0, max(0.0, elapsed * 100 / total_days))
        return {
            'percent_complete': round(percent, 2),
            'days_remaining': max(0, (cycle.end_date - as_of).days),
        }
