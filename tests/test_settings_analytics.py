from decimal import Decimal

import pytest
from django.urls import reverse

from savings.exceptions import ValidationError
from savings.models import MemberProfile
from savings.services.analytics_service import AnalyticsService
from savings.services.contribution_service import ContributionService
from savings.services.settings_service import SettingsService
from tests.factories import AdminFactory, ContributionFactory, SavingsCycleFactory, UserFactory, WithdrawalRequestFactory


class TestSettings:

    def test_defaults(self):
        values = SettingsService.get_all()
        assert values['min_contribution'] == Decimal('100')
        assert values['max_contribution'] == Decimal('10000')
        assert values['reminder_time'] == '08:00'
        assert values['pause_notifications'] is False
        assert values['auto_penalty_amount'] == Decimal('0')

    def test_update_round_trip(self):
        admin = AdminFactory()
        SettingsService.update({'min_contribution': '50', 'pause_notifications': True, 'reminder_time': '7:30'}, admin)
        assert SettingsService.get('min_contribution') == Decimal('50')
        assert SettingsService.get('pause_notifications') is True
        assert SettingsService.get('reminder_time') == '07:30'

    @pytest.mark.parametrize("values", [
        {'unknown': '1'},
        {'min_contribution': 'lots'},
        {'reminder_time': '25:00'},
        {'min_contribution': '500', 'max_contribution': '100'},
    ])
    def test_invalid_updates(self, values):
        with pytest.raises(ValidationError):
            SettingsService.update(values, AdminFactory())

    def test_contribution_limits_apply_to_manual_entries(self):
        member = UserFactory()
        with pytest.raises(ValidationError):
            ContributionService.record_contribution(member, '50')
        with pytest.raises(ValidationError):
            ContributionService.record_contribution(member, '10001')
        assert ContributionService.record_contribution(member, '50', enforce_limits=False).amount == Decimal('50')

    def test_endpoint_permissions(self, member_client, admin_client):
        assert member_client.get(reverse('group-settings')).status_code == 200
        assert member_client.put(reverse('group-settings'), {'min_contribution': '10'}, format='json').status_code == 403
        response = admin_client.put(reverse('group-settings'), {'min_contribution': '10'}, format='json')
        assert response.status_code == 200
        assert response.data['min_contribution'] == Decimal('10')


class TestContributions:

    def test_accepting_only_inside_active_cycle(self):
        SavingsCycleFactory(start_date='2026-03-01', end_date='2026-03-31')
        assert ContributionService.accepting_contributions('2026-03-01') is True
        assert ContributionService.accepting_contributions('2026-03-31') is True
        assert ContributionService.accepting_contributions('2026-04-01') is False

    def test_admin_records_contribution(self, admin_client, member):
        response = admin_client.post(reverse('contribution-list'), {
            'member': member.id, 'amount': '150.00', 'contribution_date': '2026-03-05',
        }, format='json')
        assert response.status_code == 201
        assert response.data['recorded_by'] is not None

    def test_member_sees_only_own(self, member_client, member):
        ContributionFactory(member=member)
        ContributionFactory()
        response = member_client.get(reverse('contribution-list'))
        assert response.data['count'] == 1


class TestAnalytics:

    def test_group_summary(self):
        a, b = UserFactory(), UserFactory()
        AdminFactory()
        ContributionFactory(member=a, amount=Decimal('100'))
        ContributionFactory(member=b, amount=Decimal('250'))
        MemberProfile.objects.filter(user=a).update(balance_adjustment=Decimal('-20'))
        WithdrawalRequestFactory(member=b, amount=Decimal('40'))
        SavingsCycleFactory(name='Current')

        summary = AnalyticsService.group_summary()

        assert summary['total_members'] == 2
        assert summary['total_contributions'] == '350.00'
        assert summary['total_group_savings'] == '330.00'
        assert summary['pending_withdrawals'] == 1
        assert summary['pending_withdrawal_amount'] == '40.00'
        assert summary['active_cycle']['name'] == 'Current'

    def test_leaderboard_ranks_by_total(self):
        low, high = UserFactory(), UserFactory()
        ContributionFactory(member=low, amount=Decimal('10'))
        ContributionFactory(member=high, amount=Decimal('90'))
        ContributionFactory(member=high, amount=Decimal('5'), status='failed')

        board = AnalyticsService.leaderboard(limit=5)

        assert [row['member_id'] for row in board] == [high.id, low.id]
        assert board[0]['rank'] == 1
        assert board[0]['total_contributions'] == '90.00'
        assert board[0]['contribution_count'] == 1

    def test_endpoints_are_admin_only(self, member_client, admin_client):
        assert member_client.get(reverse('analytics-summary')).status_code == 403
        assert admin_client.get(reverse('analytics-summary')).status_code == 200
        assert admin_client.get(reverse('analytics-leaderboard'), {'limit': 3}).status_code == 200
