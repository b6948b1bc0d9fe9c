from django.urls import path, include
from rest_framework.routers import DefaultRouter

from savings.views import (
    AnalyticsViewSet,
    BalanceAdjustmentViewSet,
    ContributionViewSet,
    GroupSettingsView,
    MemberNoteViewSet,
    MemberProfileViewSet,
    SavingsCycleViewSet,
    WithdrawalRequestViewSet,
)

router = DefaultRouter()
router.register(r'cycles', SavingsCycleViewSet, basename='savings-cycle')
router.register(r'contributions', ContributionViewSet, basename='contribution')
router.register(r'members', MemberProfileViewSet, basename='member-profile')
router.register(r'adjustments', BalanceAdjustmentViewSet, basename='balance-adjustment')
router.register(r'withdrawals', WithdrawalRequestViewSet, basename='withdrawal')
router.register(r'notes', MemberNoteViewSet, basename='member-note')
router.register(r'analytics', AnalyticsViewSet, basename='analytics')

urlpatterns = [
    path('settings/', GroupSettingsView.as_view(), name='group-settings'),
    path('', include(router.urls)),
]
