from django.contrib import admin

from payments.models import PaymentTransaction


@admin.register(PaymentTransaction)
class PaymentTransactionAdmin(admin.ModelAdmin):
    list_display = ['merchant_reference', 'member', 'amount', 'phone_number', 'status', 'created_at']
    list_filter = ['status']
    search_fields = ['merchant_reference', 'provider_transaction_id', 'member__username', 'phone_number']
    readonly_fields = ['uuid', 'provider_response', 'contribution', 'created_at', 'updated_at']
