from django.core.management.base import BaseCommand, CommandError

from savings.exceptions import SavingsError
from savings.services.cycle_service import CycleService
from savings.services.helpers import to_date


class Command(BaseCommand):
    help = 'End every active savings cycle whose end date has passed and reveal member balances.'

    def add_arguments(self, parser):
        parser.add_argument('--date', help='Treat this date (YYYY-MM-DD) as today')

    def handle(self, *args, **options):
        as_of = None
        if options.get('date'):
            as_of = to_date(options['date'])
            if as_of is None:
                raise CommandError(f"Invalid --date '{options['date']}', expected YYYY-MM-DD")

        try:
            settled = CycleService.detect_and_settle_expired_cycles(as_of)
        except SavingsError as exc:
            raise CommandError(exc.message) from exc

        if not settled:
            self.stdout.write('No expired cycles.')
            return

        for cycle in settled:
            self.stdout.write(
                f'Ended "{cycle.name}" ({cycle.start_date} to {cycle.end_date}): total_savings={cycle.total_savings}'
            )
        self.stdout.write(self.style.SUCCESS(f'Settled {len(settled)} cycle(s).'))
