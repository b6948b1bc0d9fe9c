from django.urls import path

from payments.views import PaymentCallbackView, PaymentInitiateView, PaymentListView

urlpatterns = [
    path('', PaymentListView.as_view(), name='payment-list'),
    path('initiate/', PaymentInitiateView.as_view(), name='payment-initiate'),
    path('callback/', PaymentCallbackView.as_view(), name='payment-callback'),
]
