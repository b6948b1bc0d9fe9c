from decimal import Decimal, InvalidOperation

from django.db import transaction

from savings.exceptions import ValidationError
from savings.models import GroupSetting


def _as_bool(value):
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


def _as_decimal(value):
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"'{value}' is not a valid amount")


def _as_time(value):
    value = str(value).strip()
    parts = value.split(':')
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValidationError("reminder_time must be HH:MM")
    hours, minutes = int(parts[0]), int(parts[1])
    if hours > 23 or minutes > 59:
        raise ValidationError("reminder_time must be HH:MM")
    return f"{hours:02d}:{minutes:02d}"


class SettingsService:
    """Typed access to the group's key/value policy settings."""

    DEFAULTS = {
        'min_contribution': Decimal('100'),
        'max_contribution': Decimal('10000'),
        'reminder_time': '08:00',
        'pause_notifications': False,
        'auto_penalty_amount': Decimal('0'),
    }

    PARSERS = {
        'min_contribution': _as_decimal,
        'max_contribution': _as_decimal,
        'reminder_time': _as_time,
        'pause_notifications': _as_bool,
        'auto_penalty_amount': _as_decimal,
    }

    @staticmethod
    def get(key):
        if key not in SettingsService.DEFAULTS:
            raise ValidationError(f"Unknown setting '{key}'")
        row = GroupSetting.objects.filter(key=key).first()
        if row is None:
            return SettingsService.DEFAULTS[key]
        return SettingsService.PARSERS[key](row.value)

    @staticmethod
    def get_all():
        values = dict(SettingsService.DEFAULTS)
        for row in GroupSetting.objects.filter(key__in=SettingsService.DEFAULTS.keys()):
            values[row.key] = SettingsService.PARSERS[row.key](row.value)
        return values

    @staticmethod
    @transaction.atomic
    def update(values, admin):
        unknown = set(values) - set(SettingsService.DEFAULTS)
        if unknown:
            raise ValidationError(f"Unknown setting(s): {', '.join(sorted(unknown))}")

        parsed = {key: SettingsService.PARSERS[key](value) for key, value in values.items()}
        merged = {**SettingsService.get_all(), **parsed}
        if merged['min_contribution'] < 0 or merged['auto_penalty_amount'] < 0:
            raise ValidationError("Amounts cannot be negative")
        if merged['max_contribution'] < merged['min_contribution']:
            raise ValidationError("max_contribution must be greater than or equal to min_contribution")

        for key, value in parsed.items():
            stored = str(value).lower() if isinstance(value, bool) else str(value)
            GroupSetting.objects.update_or_create(
                key=key,
                defaults={'value': stored, 'updated_by': admin},
            )
        return merged
