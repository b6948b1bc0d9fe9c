from decimal import Decimal

from django.urls import reverse
from django.test import RequestFactory

from audit import services as audit
from audit.models import AuditLog
from tests.factories import AdminFactory


class TestRecord:

    def test_serialises_changes_and_ip(self):
        admin = AdminFactory()
        request = RequestFactory().post('/', HTTP_X_FORWARDED_FOR='41.90.1.2, 10.0.0.1')
        entry = audit.record(admin, 'end_cycle', 'savings_cycle', 7, {'total': Decimal('12.50')}, request=request)
        assert entry.entity_id == '7'
        assert entry.changes == {'total': '12.50'}
        assert entry.ip_address == '41.90.1.2'

    def test_system_actions_have_no_admin(self):
        entry = audit.record(None, 'auto_end_cycle', 'savings_cycle', 1)
        assert entry.admin is None
        assert entry.changes == {}


class TestAuditEndpoint:

    def test_admin_filters_by_action(self, admin_client, admin_user):
        audit.record(admin_user, 'create_cycle', 'savings_cycle', 1)
        audit.record(admin_user, 'end_cycle', 'savings_cycle', 1)
        audit.record(admin_user, 'apply_penalty', 'member_profile', 3)

        response = admin_client.get(reverse('audit-log-list'), {'action': 'cycle'})

        assert response.status_code == 200
        assert {row['action'] for row in response.data['results']} == {'create_cycle', 'end_cycle'}

    def test_filter_by_entity_type(self, admin_client, admin_user):
        audit.record(admin_user, 'create_cycle', 'savings_cycle', 1)
        audit.record(admin_user, 'apply_penalty', 'member_profile', 3)
        response = admin_client.get(reverse('audit-log-list'), {'entity_type': 'member_profile'})
        assert response.data['count'] == 1

    def test_members_are_forbidden(self, member_client):
        assert member_client.get(reverse('audit-log-list')).status_code == 403

    def test_read_only(self, admin_client):
        response = admin_client.post(reverse('audit-log-list'), {'action': 'x'}, format='json')
        assert response.status_code == 405
        assert AuditLog.objects.count() == 0
