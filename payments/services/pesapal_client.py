"""Thin HTTP client for the Pesapal merchant API."""
import logging

import requests
from django.conf import settings

from payments.exceptions import PaymentGatewayError

logger = logging.getLogger(__name__)


class PesapalClient:

    def __init__(self, base_url=None, consumer_key=None, consumer_secret=None,
                 callback_url=None, timeout=None, session=None):
        self.base_url = (base_url or settings.PESAPAL_BASE_URL).rstrip('/')
        self.consumer_key = consumer_key or settings.PESAPAL_CONSUMER_KEY
        self.consumer_secret = consumer_secret or settings.PESAPAL_CONSUMER_SECRET
        self.callback_url = callback_url or settings.PESAPAL_CALLBACK_URL
        self.timeout = timeout or settings.PESAPAL_TIMEOUT
        self.session = session or requests.Session()

    def initiate_payment(self, *, amount, reference, phone_number, first_name, email,
                         description, currency=None):
        """
        Ask Pesapal to push a payment prompt to ``phone_number``.

        Returns the decoded provider response. Transport failures, non-2xx
        responses and a provider ``status`` other than ``"200"`` raise
        ``PaymentGatewayError``.
        """
        if not self.consumer_key or not self.consumer_secret:
            raise PaymentGatewayError("Pesapal credentials not configured")

        url = f"{self.base_url}/merchants/InitiatePayment"
        data = {
            'consumer_key': self.consumer_key,
            'consumer_secret': self.consumer_secret,
            'amount': str(amount),
            'currency': currency or settings.PESAPAL_CURRENCY,
            'description': description,
            'reference': reference,
            'first_name': first_name,
            'phone_number': phone_number,
            'email': email,
            'pesapal_notification_url': self.callback_url,
            'transaction_type': 'PAYMENT',
        }

        logger.info("Initiating Pesapal payment %s for %s (%s)", reference, amount, phone_number)
        try:
            response = self.session.post(url, data=data, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.exception("Pesapal request for %s failed", reference)
            raise PaymentGatewayError("Payment gateway is unreachable, please try again") from exc

        if not response.ok:
            logger.error("Pesapal API error %s: %s", response.status_code, response.text[:500])
            raise PaymentGatewayError(f"Pesapal API error: {response.status_code}")

        try:
            result = response.json()
        except ValueError as exc:
            raise PaymentGatewayError("Invalid response from payment gateway") from exc

        if str(result.get('status')) != '200':
            raise PaymentGatewayError(f"Pesapal error: {result.get('error') or 'Unknown error'}")
        return result
