from rest_framework import status


class PaymentError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Payment could not be processed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class PaymentNotFoundError(PaymentError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Payment record not found'


class PaymentGatewayError(PaymentError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = 'Payment gateway error'
