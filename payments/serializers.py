from rest_framework import serializers

from payments.models import PaymentTransaction


class PaymentTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentTransaction
        fields = [
            'id', 'uuid', 'member', 'merchant_reference', 'amount', 'phone_number',
            'status', 'provider_transaction_id', 'contribution', 'contribution_date',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class PaymentInitiateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    phone_number = serializers.CharField(max_length=20)
