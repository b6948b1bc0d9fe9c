from datetime import timedelta
from decimal import Decimal

import pytest
from django.urls import reverse
from django.utils import timezone

from common.enums import CycleStatus
from savings.models import MemberProfile, SavingsCycle
from tests.factories import ContributionFactory, SavingsCycleFactory


def _dates(offset_start, offset_end):
    today = timezone.localdate()
    return (today + timedelta(days=offset_start)).isoformat(), (today + timedelta(days=offset_end)).isoformat()


@pytest.mark.django_db
class TestCycleEndpoints:

    def test_admin_creates_cycle(self, admin_client, member):
        start, end = _dates(0, 30)
        response = admin_client.post(
            reverse('savings-cycle-list'),
            {"name": "Harvest Round", "start_date": start, "end_date": end},
            format='json',
        )
        assert response.status_code == 201
        assert response.data["message"] == '"Harvest Round" is now active.'
        assert response.data["cycle"]["status"] == "active"
        assert response.data["cycle"]["progress"]["days_remaining"] == 30
        assert len(response.data["cycles"]) == 1

    def test_member_cannot_create_or_end(self, member_client):
        start, end = _dates(0, 30)
        response = member_client.post(
            reverse('savings-cycle-list'),
            {"name": "Mine", "start_date": start, "end_date": end},
            format='json',
        )
        assert response.status_code == 403

        cycle = SavingsCycleFactory()
        response = member_client.post(reverse('savings-cycle-end', args=[cycle.id]))
        assert response.status_code == 403

    def test_validation_error_returns_message_and_cycles(self, admin_client):
        existing = SavingsCycleFactory(status=CycleStatus.ENDED)
        start, _ = _dates(0, 0)
        response = admin_client.post(
            reverse('savings-cycle-list'),
            {"name": "Bad", "start_date": start, "end_date": start},
            format='json',
        )
        assert response.status_code == 400
        assert response.data["errors"] == ["End date must be after start date"]
        assert [c["id"] for c in response.data["cycles"]] == [existing.id]

    def test_conflict_when_active_exists(self, admin_client):
        start, end = _dates(-5, 20)
        SavingsCycleFactory(start_date=start, end_date=end)
        start, end = _dates(0, 30)
        response = admin_client.post(
            reverse('savings-cycle-list'),
            {"name": "Second", "start_date": start, "end_date": end},
            format='json',
        )
        assert response.status_code == 409
        assert "An active cycle already exists" in response.data["errors"][0]
        assert SavingsCycle.objects.count() == 1

    def test_end_cycle_reports_total(self, admin_client):
        start, end = _dates(-10, 10)
        cycle = SavingsCycleFactory(start_date=start, end_date=end)
        ContributionFactory(amount=Decimal('250'), contribution_date=timezone.localdate())

        response = admin_client.post(reverse('savings-cycle-end', args=[cycle.id]))

        assert response.status_code == 200
        assert response.data["already_ended"] is False
        assert response.data["cycle"]["status"] == "ended"
        assert Decimal(response.data["cycle"]["total_savings"]) == Decimal('250')
        assert "250" in response.data["message"]

    def test_end_twice_is_informational(self, admin_client):
        start, end = _dates(-10, 10)
        cycle = SavingsCycleFactory(start_date=start, end_date=end, name="Round 7")
        admin_client.post(reverse('savings-cycle-end', args=[cycle.id]))

        response = admin_client.post(reverse('savings-cycle-end', args=[cycle.id]))

        assert response.status_code == 200
        assert response.data["already_ended"] is True
        assert response.data["message"] == '"Round 7" has already ended.'

    def test_end_unknown_cycle(self, admin_client):
        response = admin_client.post(reverse('savings-cycle-end', args=[424242]))
        assert response.status_code == 404
        assert response.data["errors"] == ["Cycle not found"]

    def test_list_settles_expired_cycles(self, member_client, member):
        start, end = _dates(-31, -1)
        cycle = SavingsCycleFactory(start_date=start, end_date=end, name="September")
        ContributionFactory(member=member, amount=Decimal('90'), contribution_date=end)

        response = member_client.get(reverse('savings-cycle-list'))

        assert response.status_code == 200
        assert [c["id"] for c in response.data["settled"]] == [cycle.id]
        assert '"September"' in response.data["message"]
        assert response.data["cycles"][0]["status"] == "ended"
        assert MemberProfile.objects.get(user=member).balance_visible is True

        again = member_client.get(reverse('savings-cycle-list'))
        assert again.data["settled"] == []
        assert again.data["message"] is None

    def test_list_keeps_cycle_ending_today(self, member_client):
        start, end = _dates(-30, 0)
        SavingsCycleFactory(start_date=start, end_date=end)
        response = member_client.get(reverse('savings-cycle-list'))
        assert response.data["settled"] == []
        assert response.data["cycles"][0]["status"] == "active"

    def test_list_is_ordered_by_start_date_descending(self, member_client):
        older = SavingsCycleFactory(start_date='2025-01-01', end_date='2025-02-01', status=CycleStatus.ENDED)
        newer = SavingsCycleFactory(start_date='2025-06-01', end_date='2025-07-01', status=CycleStatus.ENDED)
        response = member_client.get(reverse('savings-cycle-list'))
        assert [c["id"] for c in response.data["cycles"]] == [newer.id, older.id]

    def test_active_endpoint(self, member_client):
        response = member_client.get(reverse('savings-cycle-active'))
        assert response.data == {"cycle": None}

        start, end = _dates(-5, 5)
        cycle = SavingsCycleFactory(start_date=start, end_date=end)
        response = member_client.get(reverse('savings-cycle-active'))
        assert response.data["cycle"]["id"] == cycle.id
        assert response.data["cycle"]["progress"] == {"percent_complete": 50, "days_remaining": 5}

    def test_retrieve(self, member_client):
        cycle = SavingsCycleFactory(status=CycleStatus.ENDED, total_savings=Decimal('1200'))
        response = member_client.get(reverse('savings-cycle-detail', args=[cycle.id]))
        assert response.status_code == 200
        assert response.data["progress"] is None
        assert Decimal(response.data["total_savings"]) == Decimal('1200')

    def test_anonymous_is_rejected(self, api_client):
        response = api_client.get(reverse('savings-cycle-list'))
        assert response.status_code == 401


@pytest.mark.django_db
def test_member_profile_masks_balance_until_reveal(member_client, member, admin_client):
    start, end = _dates(-3, 3)
    cycle = SavingsCycleFactory(start_date=start, end_date=end)
    ContributionFactory(member=member, amount=Decimal('60'), contribution_date=timezone.localdate())

    hidden = member_client.get(reverse('member-profile-me'))
    assert hidden.status_code == 200
    assert hidden.data["display_balance"] is None

    admin_client.post(reverse('savings-cycle-end', args=[cycle.id]))

    shown = member_client.get(reverse('member-profile-me'))
    assert Decimal(shown.data["display_balance"]) == Decimal('60')
    assert Decimal(shown.data["total_contributed"]) == Decimal('60')
