from datetime import date
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.test import TestCase

from users.models import User
from savings.models import Contribution, MemberProfile, SavingsCycle


class ContributionLedgerTests(TestCase):
    """Tests for the contribution ledger queries"""

    def setUp(self):
        self.member = User.objects.create_user(username='member', password='pass123')
        self.other = User.objects.create_user(username='other', password='pass123')
        for amount, day in [('100', date(2026, 2, 28)), ('200', date(2026, 3, 1)),
                            ('300', date(2026, 3, 31)), ('400', date(2026, 4, 1))]:
            Contribution.objects.create(member=self.member, amount=Decimal(amount), contribution_date=day)
        Contribution.objects.create(member=self.other, amount=Decimal('50'), contribution_date=date(2026, 3, 15))

    def test_sum_is_inclusive_on_both_ends(self):
        total = Contribution.objects.sum_amount(start=date(2026, 3, 1), end=date(2026, 3, 31))
        self.assertEqual(total, Decimal('550'))

    def test_sum_accepts_iso_strings(self):
        total = Contribution.objects.sum_amount(start='2026-03-01', end='2026-03-31')
        self.assertEqual(total, Decimal('550'))

    def test_sum_filters_by_member(self):
        total = Contribution.objects.sum_amount(member=self.member, start='2026-03-01', end='2026-03-31')
        self.assertEqual(total, Decimal('500'))

    def test_sum_counts_rows_of_any_status(self):
        Contribution.objects.create(member=self.other, amount=Decimal('70'),
                                    contribution_date=date(2026, 3, 20), status='pending')
        Contribution.objects.create(member=self.other, amount=Decimal('30'),
                                    contribution_date=date(2026, 3, 21), status='failed')
        total = Contribution.objects.sum_amount(start='2026-03-01', end='2026-03-31')
        self.assertEqual(total, Decimal('650'))

    def test_completed_only_sum_skips_unsettled_rows(self):
        Contribution.objects.create(member=self.other, amount=Decimal('70'),
                                    contribution_date=date(2026, 3, 20), status='pending')
        total = Contribution.objects.sum_amount(start='2026-03-01', end='2026-03-31', completed_only=True)
        self.assertEqual(total, Decimal('550'))

    def test_sum_of_nothing_is_zero(self):
        self.assertEqual(Contribution.objects.sum_amount(start='2030-01-01', end='2030-01-31'), Decimal('0'))

    def test_amount_must_be_positive(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Contribution.objects.create(member=self.member, amount=Decimal('0'), contribution_date=date(2026, 3, 2))


class MemberProfileStoreTests(TestCase):
    """Tests for bulk balance operations"""

    def setUp(self):
        self.admin = User.objects.create_admin(username='boss', password='pass123')
        self.members = [User.objects.create_user(username=f'm{i}', password='pass123') for i in range(3)]

    def test_profile_created_for_every_user(self):
        self.assertEqual(MemberProfile.objects.count(), 4)
        self.assertEqual(MemberProfile.objects.members().count(), 3)

    def test_set_all_balance_visible(self):
        changed = MemberProfile.objects.members().set_all_balance_visible(True)
        self.assertEqual(changed, 3)
        self.assertFalse(MemberProfile.objects.get(user=self.admin).balance_visible)

    def test_reset_for_new_cycle(self):
        MemberProfile.objects.update(balance_visible=True, balance_adjustment=Decimal('15'))
        reset = MemberProfile.objects.members().reset_for_new_cycle()
        self.assertEqual(reset, 3)
        for profile in MemberProfile.objects.members():
            self.assertFalse(profile.balance_visible)
            self.assertEqual(profile.balance_adjustment, Decimal('0'))
        admin_profile = MemberProfile.objects.get(user=self.admin)
        self.assertTrue(admin_profile.balance_visible)
        self.assertEqual(admin_profile.balance_adjustment, Decimal('15'))

    def test_reset_all_adjustments_keeps_visibility(self):
        MemberProfile.objects.update(balance_visible=True, balance_adjustment=Decimal('15'))
        MemberProfile.objects.members().reset_all_adjustments()
        profile = MemberProfile.objects.get(user=self.members[0])
        self.assertTrue(profile.balance_visible)
        self.assertEqual(profile.balance_adjustment, Decimal('0'))


class SavingsCycleRepositoryTests(TestCase):
    """Tests for the cycle repository"""

    def setUp(self):
        self.cycle = SavingsCycle.objects.create(
            name='March', start_date=date(2026, 3, 1), end_date=date(2026, 3, 31)
        )

    def test_conditional_update_succeeds_once(self):
        first = SavingsCycle.objects.conditional_update_status(
            self.cycle.id, 'active', 'ended', total_savings=Decimal('10')
        )
        second = SavingsCycle.objects.conditional_update_status(
            self.cycle.id, 'active', 'ended', total_savings=Decimal('99')
        )
        self.assertTrue(first)
        self.assertFalse(second)
        self.cycle.refresh_from_db()
        self.assertEqual(self.cycle.total_savings, Decimal('10'))

    def test_only_one_active_cycle_in_database(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                SavingsCycle.objects.create(
                    name='Overlap', start_date=date(2026, 4, 1), end_date=date(2026, 4, 30)
                )

    def test_end_must_follow_start(self):
        SavingsCycle.objects.filter(pk=self.cycle.pk).update(status='ended')
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                SavingsCycle.objects.create(
                    name='Backwards', start_date=date(2026, 5, 2), end_date=date(2026, 5, 1)
                )

    def test_expired_and_list_all(self):
        older = SavingsCycle.objects.create(
            name='Old', start_date=date(2025, 1, 1), end_date=date(2025, 1, 31), status='ended'
        )
        self.assertEqual(list(SavingsCycle.objects.expired(date(2026, 3, 31))), [])
        self.assertEqual(list(SavingsCycle.objects.expired(date(2026, 4, 1))), [self.cycle])
        self.assertEqual(list(SavingsCycle.objects.list_all()), [self.cycle, older])
