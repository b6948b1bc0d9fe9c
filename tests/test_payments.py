from datetime import timedelta
from decimal import Decimal
from unittest import mock

import pytest
import requests
from django.urls import reverse
from django.utils import timezone

from common.enums import PaymentStatus
from payments.exceptions import PaymentError, PaymentGatewayError
from payments.models import PaymentTransaction
from payments.services.payment_service import PaymentService
from payments.services.pesapal_client import PesapalClient
from savings.models import Contribution
from tests.factories import PaymentTransactionFactory, SavingsCycleFactory, UserFactory


def _gateway_response(status_code=200, body=None):
    response = mock.Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.json.return_value = body if body is not None else {'status': '200'}
    response.text = str(body)
    return response


@pytest.fixture
def running_cycle():
    today = timezone.localdate()
    return SavingsCycleFactory(start_date=today - timedelta(days=5), end_date=today + timedelta(days=25))


class TestPhoneAndReference:

    @pytest.mark.parametrize("raw,expected", [
        ("0712345678", "254712345678"),
        ("0112345678", "254112345678"),
        ("712345678", "254712345678"),
        ("+254 712 345 678", "254712345678"),
        ("254712345678", "254712345678"),
        ("0812345678", ""),
        ("07123", ""),
        ("", ""),
    ])
    def test_format_phone(self, raw, expected):
        assert PaymentService.format_phone(raw) == expected

    def test_merchant_reference_shape(self):
        user = UserFactory()
        reference = PaymentService.generate_merchant_reference(user)
        prefix, user_part, timestamp, suffix = reference.split('-')
        assert prefix == 'CHM'
        assert user_part == str(user.pk).zfill(8)
        assert timestamp.isdigit()
        assert len(suffix) == 6
        assert reference == reference.upper()

    @pytest.mark.parametrize("raw,expected", [
        ("COMPLETED", PaymentStatus.CONFIRMED),
        ("success", PaymentStatus.CONFIRMED),
        ("Failed", PaymentStatus.FAILED),
        ("error", PaymentStatus.FAILED),
        ("cancelled", PaymentStatus.CANCELLED),
        ("INVALID", PaymentStatus.PENDING),
        (None, PaymentStatus.PENDING),
    ])
    def test_status_mapping(self, raw, expected):
        assert PaymentService.map_status(raw) == expected


class TestPesapalClient:

    def test_posts_form_to_initiate_endpoint(self):
        session = mock.Mock()
        session.post.return_value = _gateway_response(body={'status': '200', 'order_tracking_id': 'T1'})
        client = PesapalClient(session=session)

        result = client.initiate_payment(
            amount=Decimal('150.00'), reference='REF1', phone_number='254712345678',
            first_name='Amina', email='amina@example.com', description='Contribution',
        )

        assert result['order_tracking_id'] == 'T1'
        url = session.post.call_args.args[0]
        data = session.post.call_args.kwargs['data']
        assert url == 'https://pesapal.test/api/merchants/InitiatePayment'
        assert data['amount'] == '150.00'
        assert data['currency'] == 'KES'
        assert data['pesapal_notification_url'] == 'https://chama.test/api/payments/callback/'
        assert session.post.call_args.kwargs['timeout'] == 15

    def test_provider_status_other_than_200_fails(self):
        session = mock.Mock()
        session.post.return_value = _gateway_response(body={'status': '500', 'error': 'Bad merchant'})
        with pytest.raises(PaymentGatewayError) as exc:
            PesapalClient(session=session).initiate_payment(
                amount=1, reference='R', phone_number='254712345678',
                first_name='A', email='a@example.com', description='d',
            )
        assert exc.value.message == 'Pesapal error: Bad merchant'

    def test_http_error_fails(self):
        session = mock.Mock()
        session.post.return_value = _gateway_response(status_code=503, body='down')
        with pytest.raises(PaymentGatewayError):
            PesapalClient(session=session).initiate_payment(
                amount=1, reference='R', phone_number='254712345678',
                first_name='A', email='a@example.com', description='d',
            )

    def test_network_error_fails(self):
        session = mock.Mock()
        session.post.side_effect = requests.ConnectionError('no route')
        with pytest.raises(PaymentGatewayError):
            PesapalClient(session=session).initiate_payment(
                amount=1, reference='R', phone_number='254712345678',
                first_name='A', email='a@example.com', description='d',
            )


class TestInitiate:

    def test_requires_active_cycle(self):
        member = UserFactory()
        with pytest.raises(PaymentError) as exc:
            PaymentService.initiate(member, '100', '0712345678', client=mock.Mock())
        assert 'No active savings cycle' in exc.value.message
        assert not PaymentTransaction.objects.exists()

    def test_rejects_bad_phone(self, running_cycle):
        with pytest.raises(PaymentError) as exc:
            PaymentService.initiate(UserFactory(), '100', '12345', client=mock.Mock())
        assert exc.value.message == 'Invalid phone number format'

    def test_stores_pending_transaction(self, running_cycle):
        member = UserFactory()
        client = mock.Mock()
        client.initiate_payment.return_value = {'status': '200'}

        payment = PaymentService.initiate(member, '250', '0712345678', client=client)

        assert payment.status == PaymentStatus.PENDING
        assert payment.phone_number == '254712345678'
        assert payment.amount == Decimal('250.00')
        assert client.initiate_payment.call_args.kwargs['reference'] == payment.merchant_reference

    def test_gateway_failure_marks_transaction_failed(self, running_cycle):
        client = mock.Mock()
        client.initiate_payment.side_effect = PaymentGatewayError('Pesapal error: Unknown error')
        with pytest.raises(PaymentGatewayError):
            PaymentService.initiate(UserFactory(), '250', '0712345678', client=client)
        assert PaymentTransaction.objects.get().status == PaymentStatus.FAILED

    def test_endpoint(self, running_cycle, member_client):
        with mock.patch.object(PesapalClient, 'initiate_payment', return_value={'status': '200'}):
            response = member_client.post(
                reverse('payment-initiate'),
                {'amount': '300.00', 'phone_number': '0712345678'},
                format='json',
            )
        assert response.status_code == 201
        assert response.data['success'] is True
        assert response.data['reference'].startswith('CHM-')

    def test_admin_cannot_initiate(self, running_cycle, admin_client):
        response = admin_client.post(
            reverse('payment-initiate'),
            {'amount': '300.00', 'phone_number': '0712345678'},
            format='json',
        )
        assert response.status_code == 403


class TestCallback:

    def test_confirmation_creates_one_contribution(self, api_client):
        payment = PaymentTransactionFactory(amount=Decimal('200'))
        payload = {
            'OrderMerchantReference': payment.merchant_reference,
            'OrderTrackingId': 'TRK-1',
            'OrderStatus': 'COMPLETED',
        }

        first = api_client.post(reverse('payment-callback'), payload, format='json')
        second = api_client.post(reverse('payment-callback'), payload, format='json')

        assert first.status_code == second.status_code == 200
        assert first.data['status'] == 'confirmed'
        contributions = Contribution.objects.filter(member=payment.member)
        assert contributions.count() == 1
        contribution = contributions.get()
        assert contribution.amount == Decimal('200')
        assert contribution.contribution_date == timezone.localdate()
        assert contribution.status == 'completed'
        assert payment.merchant_reference in contribution.notes

        payment.refresh_from_db()
        assert payment.contribution == contribution
        assert payment.provider_transaction_id == 'TRK-1'
        assert payment.contribution_date == timezone.localdate()

    def test_failure_creates_no_contribution(self, api_client):
        payment = PaymentTransactionFactory()
        response = api_client.post(reverse('payment-callback'), {
            'OrderMerchantReference': payment.merchant_reference,
            'OrderStatus': 'FAILED',
        }, format='json')
        assert response.data['status'] == 'failed'
        assert not Contribution.objects.exists()

    def test_confirmed_payment_is_not_downgraded(self):
        payment = PaymentTransactionFactory()
        PaymentService.process_callback({'OrderMerchantReference': payment.merchant_reference, 'OrderStatus': 'success'})
        result = PaymentService.process_callback({'OrderMerchantReference': payment.merchant_reference, 'OrderStatus': 'failed'})
        assert result.status == PaymentStatus.CONFIRMED
        assert Contribution.objects.count() == 1

    def test_unknown_reference(self, api_client):
        response = api_client.post(reverse('payment-callback'), {
            'OrderMerchantReference': 'CHM-NOPE',
            'OrderStatus': 'COMPLETED',
        }, format='json')
        assert response.status_code == 404
        assert response.data['errors'] == ['Payment record not found']

    def test_missing_reference(self, api_client):
        response = api_client.post(reverse('payment-callback'), {'OrderStatus': 'COMPLETED'}, format='json')
        assert response.status_code == 400

    def test_history_lists_own_payments(self, member_client, member):
        PaymentTransactionFactory(member=member)
        PaymentTransactionFactory()
        response = member_client.get(reverse('payment-list'))
        assert response.status_code == 200
        assert response.data['count'] == 1
