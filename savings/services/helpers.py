from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from django.utils import timezone
from django.utils.dateparse import parse_date

from savings.exceptions import ValidationError


def to_date(value):
    """Coerce a date, datetime or ISO ``YYYY-MM-DD`` string to a ``date``.

    Returns ``None`` for empty or unparseable input.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            return timezone.localtime(value).date()
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return parse_date(value.strip())
        except ValueError:
            return None
    return None


def today(now=None):
    """Calendar date used for expiry and progress; defaults to the local date."""
    if now is None:
        return timezone.localdate()
    day = to_date(now)
    if day is None:
        raise ValidationError("Dates must be valid dates (YYYY-MM-DD)")
    return day


def coerce_amount(value, field_name='amount'):
    if value is None or value == '':
        raise ValidationError(f"{field_name} is required")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"{field_name} must be greater than 0")
    return amount.quantize(Decimal('0.01'))


def format_decimal(value):
    return str(Decimal(value or 0).quantize(Decimal('0.01')))
