import logging

from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from common.pagination import DefaultPagination
from core.permissions import IsMember
from payments.models import PaymentTransaction
from payments.serializers import PaymentInitiateSerializer, PaymentTransactionSerializer
from payments.services.payment_service import PaymentService

logger = logging.getLogger(__name__)


class PaymentListView(generics.ListAPIView):
    serializer_class = PaymentTransactionSerializer
    permission_classes = [permissions.IsAuthenticated]
    pagination_class = DefaultPagination

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return PaymentTransaction.objects.none()
        return PaymentTransaction.objects.filter(member=self.request.user)


class PaymentInitiateView(generics.GenericAPIView):
    serializer_class = PaymentInitiateSerializer
    permission_classes = [permissions.IsAuthenticated, IsMember]

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = PaymentService.initiate(
            member=request.user,
            amount=serializer.validated_data['amount'],
            phone_number=serializer.validated_data['phone_number'],
        )
        return Response({
            'success': True,
            'reference': payment.merchant_reference,
            'payment': PaymentTransactionSerializer(payment).data,
        }, status=status.HTTP_201_CREATED)


class PaymentCallbackView(APIView):
    """Provider-facing notification endpoint."""
    permission_classes = [permissions.AllowAny]
    authentication_classes = []
    throttle_classes = []

    def post(self, request):
        payload = request.data or request.query_params
        payment = PaymentService.process_callback(payload)
        return Response({
            'success': True,
            'message': 'Callback processed successfully',
            'reference': payment.merchant_reference,
            'status': payment.status,
        })

    def get(self, request):
        return self.post(request)
