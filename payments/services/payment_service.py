import logging
import re
import time

from django.db import transaction
from django.utils import timezone
from django.utils.crypto import get_random_string

from common.enums import PaymentStatus
from payments.exceptions import PaymentError, PaymentGatewayError, PaymentNotFoundError
from payments.models import PaymentTransaction
from payments.services.pesapal_client import PesapalClient
from savings.services.contribution_service import ContributionService
from savings.services.helpers import coerce_amount

logger = logging.getLogger(__name__)

STATUS_MAP = {
    'completed': PaymentStatus.CONFIRMED,
    'success': PaymentStatus.CONFIRMED,
    'failed': PaymentStatus.FAILED,
    'error': PaymentStatus.FAILED,
    'cancelled': PaymentStatus.CANCELLED,
}


class PaymentService:

    @staticmethod
    def format_phone(phone):
        """Normalise a Kenyan mobile number to ``254XXXXXXXXX``; '' when unrecognised."""
        cleaned = re.sub(r'\D', '', phone or '')
        if cleaned.startswith('254'):
            formatted = cleaned
        elif cleaned.startswith(('07', '01')):
            formatted = '254' + cleaned[1:]
        elif cleaned.startswith(('7', '1')):
            formatted = '254' + cleaned
        else:
            return ''
        return formatted if len(formatted) == 12 else ''

    @staticmethod
    def generate_merchant_reference(user):
        timestamp = int(time.time() * 1000)
        suffix = get_random_string(6, allowed_chars='abcdefghijklmnopqrstuvwxyz0123456789')
        return f"CHM-{str(user.pk).zfill(8)[:8]}-{timestamp}-{suffix}".upper()

    @staticmethod
    def map_status(raw_status):
        return STATUS_MAP.get((raw_status or '').strip().lower(), PaymentStatus.PENDING)

    @staticmethod
    def initiate(member, amount, phone_number, client=None):
        amount = coerce_amount(amount)
        if not ContributionService.accepting_contributions():
            raise PaymentError("No active savings cycle is accepting contributions")

        phone = PaymentService.format_phone(phone_number)
        if not phone:
            raise PaymentError("Invalid phone number format")

        payment = PaymentTransaction.objects.create(
            member=member,
            merchant_reference=PaymentService.generate_merchant_reference(member),
            amount=amount,
            phone_number=phone,
        )

        client = client or PesapalClient()
        try:
            result = client.initiate_payment(
                amount=amount,
                reference=payment.merchant_reference,
                phone_number=phone,
                first_name=member.get_display_name(),
                email=member.email or f"user-{member.pk}@chama.local",
                description=f"Contribution from {member.get_display_name()}",
            )
        except PaymentGatewayError as exc:
            PaymentTransaction.objects.filter(pk=payment.pk).update(
                status=PaymentStatus.FAILED,
                provider_response={'error': exc.message},
            )
            raise

        payment.provider_response = result
        payment.save(update_fields=['provider_response', 'updated_at'])
        return payment

    @staticmethod
    def process_callback(payload):
        """
        Apply a provider notification to its transaction.

        A confirmation writes exactly one contribution: the status update is
        conditional on the transaction not already being confirmed, so a
        repeated callback finds nothing to update.
        """
        reference = payload.get('OrderMerchantReference') or payload.get('merchant_reference')
        if not reference:
            raise PaymentError("Missing merchant reference in callback")

        tracking_id = payload.get('OrderTrackingId') or ''
        new_status = PaymentService.map_status(payload.get('OrderStatus'))
        logger.info("Pesapal callback for %s: %r -> %s", reference, payload.get('OrderStatus'), new_status)

        with transaction.atomic():
            payment = PaymentTransaction.objects.filter(merchant_reference=reference).first()
            if payment is None:
                logger.error("Payment record not found: %s", reference)
                raise PaymentNotFoundError()

            not_confirmed = PaymentTransaction.objects.filter(pk=payment.pk).exclude(status=PaymentStatus.CONFIRMED)
            updates = {'status': new_status}
            if tracking_id:
                updates['provider_transaction_id'] = tracking_id

            if new_status == PaymentStatus.CONFIRMED:
                today = timezone.localdate()
                if not_confirmed.update(contribution_date=today, **updates):
                    contribution = ContributionService.record_contribution(
                        member=payment.member,
                        amount=payment.amount,
                        contribution_date=today,
                        notes=f"M-Pesa payment via Pesapal - Ref: {reference}",
                        enforce_limits=False,
                    )
                    PaymentTransaction.objects.filter(pk=payment.pk).update(contribution=contribution)
                    logger.info("Contribution %s created for payment %s", contribution.id, reference)
                else:
                    logger.info("Payment %s already confirmed; callback ignored", reference)
            else:
                not_confirmed.update(**updates)

        payment.refresh_from_db()
        return payment
