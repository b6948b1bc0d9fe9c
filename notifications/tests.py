import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from savings.exceptions import ValidationError
from tests.factories import AdminFactory, UserFactory
from .models import Announcement, Notification
from .services import NotificationService


@pytest.mark.django_db
def test_list_notifications_only_for_user():
    user = UserFactory()
    other = UserFactory()
    Notification.objects.create(recipient=user, actor=other, message='test')
    Notification.objects.create(recipient=other, actor=user, message='other')

    client = APIClient()
    client.force_authenticate(user)
    url = reverse('notification-list')
    resp = client.get(url)
    assert resp.status_code == 200
    assert resp.data['count'] == 1
    assert resp.data['results'][0]['message'] == 'test'


@pytest.mark.django_db
def test_filter_notifications_by_is_read():
    user = UserFactory()
    Notification.objects.create(recipient=user, message='old', is_read=True)
    Notification.objects.create(recipient=user, message='new', is_read=False)

    client = APIClient()
    client.force_authenticate(user)
    resp = client.get(reverse('notification-list'), {'is_read': False})
    assert resp.status_code == 200
    assert [n['message'] for n in resp.data['results']] == ['new']


@pytest.mark.django_db
def test_mark_read():
    user = UserFactory()
    notification = Notification.objects.create(recipient=user, message='hello')

    client = APIClient()
    client.force_authenticate(user)
    resp = client.post(reverse('notification-mark-read', args=[notification.id]))
    assert resp.status_code == 200
    notification.refresh_from_db()
    assert notification.is_read is True


@pytest.mark.django_db
def test_announcement_fans_out_to_members_only():
    admin = AdminFactory()
    other_admin = AdminFactory()
    members = UserFactory.create_batch(3)

    announcement = NotificationService.send_announcement(admin, 'Meeting on Saturday', title='Meeting')

    assert announcement.recipient_count == 3
    recipients = set(Notification.objects.filter(announcement=announcement).values_list('recipient_id', flat=True))
    assert recipients == {m.id for m in members}
    assert other_admin.id not in recipients
    assert Notification.objects.filter(message_type='announcement').count() == 3


@pytest.mark.django_db
def test_announcement_needs_members_and_content():
    admin = AdminFactory()
    with pytest.raises(ValidationError):
        NotificationService.send_announcement(admin, 'Anyone there?')
    UserFactory()
    with pytest.raises(ValidationError):
        NotificationService.send_announcement(admin, '   ')
    assert not Announcement.objects.exists()


@pytest.mark.django_db
def test_announcement_endpoint_is_admin_only():
    admin = AdminFactory()
    member = UserFactory()

    client = APIClient()
    client.force_authenticate(member)
    assert client.post(reverse('announcement-list'), {'content': 'Hi'}, format='json').status_code == 403

    client.force_authenticate(admin)
    resp = client.post(reverse('announcement-list'), {'content': 'Hi all', 'title': 'Hello'}, format='json')
    assert resp.status_code == 201
    assert resp.data['recipient_count'] == 1
    assert Notification.objects.get(recipient=member).message == 'Hi all'
