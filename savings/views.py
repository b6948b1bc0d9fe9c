import logging

from django.conf import settings
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from audit import services as audit
from common.enums import ContributionStatus
from common.pagination import DefaultPagination
from core.permissions import IsAdmin, IsOwnerOrAdmin, is_admin
from savings.exceptions import AlreadyEndedError, SavingsError
from savings.models import (
    BalanceAdjustment,
    Contribution,
    MemberNote,
    MemberProfile,
    SavingsCycle,
    WithdrawalRequest,
)
from savings.serializers import (
    AdjustmentInputSerializer,
    BalanceAdjustmentSerializer,
    ContributionSerializer,
    MemberNoteSerializer,
    MemberProfileSerializer,
    MyProfileSerializer,
    SavingsCycleSerializer,
    WithdrawalRequestSerializer,
)
from savings.services.adjustment_service import AdjustmentService
from savings.services.analytics_service import AnalyticsService
from savings.services.contribution_service import ContributionService
from savings.services.cycle_service import CycleService
from savings.services.settings_service import SettingsService
from savings.services.withdrawal_service import WithdrawalService

logger = logging.getLogger(__name__)


class SavingsCycleViewSet(viewsets.GenericViewSet):
    """
    Savings cycles.

    Every command answers with the refreshed cycle list next to its message
    or errors, so the admin screen can redraw from a single response.
    """
    serializer_class = SavingsCycleSerializer
    queryset = SavingsCycle.objects.select_related('created_by', 'ended_by')
    pagination_class = None

    def get_permissions(self):
        if self.action in ('create', 'end'):
            return [IsAdmin()]
        return [permissions.IsAuthenticated()]

    def _cycles(self):
        return self.get_serializer(CycleService.list_cycles(), many=True).data

    def _error_response(self, exc):
        try:
            cycles = self._cycles()
        except SavingsError:
            cycles = []
        return Response({'errors': [exc.message], 'cycles': cycles}, status=exc.status_code)

    def list(self, request):
        """Settle any expired cycle, then return all cycles."""
        try:
            settled = CycleService.detect_and_settle_expired_cycles()
            cycles = self._cycles()
        except SavingsError as e:
            return self._error_response(e)

        message = None
        if settled:
            names = ', '.join(f'"{cycle.name}"' for cycle in settled)
            message = f"{names} reached its end date and was ended automatically. Balances are now visible."
        return Response({
            'message': message,
            'settled': self.get_serializer(settled, many=True).data,
            'cycles': cycles,
        })

    def create(self, request):
        data = request.data
        try:
            cycle = CycleService.create_cycle(
                name=data.get('name'),
                start_date=data.get('start_date'),
                end_date=data.get('end_date'),
                actor=request.user,
                notes=data.get('notes', ''),
                request=request,
            )
        except SavingsError as e:
            return self._error_response(e)

        return Response({
            'message': f'"{cycle.name}" is now active.',
            'cycle': self.get_serializer(cycle).data,
            'cycles': self._cycles(),
        }, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        cycle = self.get_object()
        return Response(self.get_serializer(cycle).data)

    @action(detail=True, methods=['post'])
    def end(self, request, pk=None):
        """End a cycle now and reveal balances"""
        try:
            cycle = CycleService.end_cycle(pk, request.user, request=request)
        except AlreadyEndedError as e:
            return Response({
                'message': e.message,
                'already_ended': True,
                'cycle': self.get_serializer(e.cycle).data,
                'cycles': self._cycles(),
            })
        except SavingsError as e:
            return self._error_response(e)

        return Response({
            'message': (
                f'"{cycle.name}" ended. Total savings: {settings.CURRENCY} {cycle.total_savings}. '
                'Balances are now visible.'
            ),
            'already_ended': False,
            'cycle': self.get_serializer(cycle).data,
            'cycles': self._cycles(),
        })

    @action(detail=False, methods=['get'])
    def active(self, request):
        CycleService.detect_and_settle_expired_cycles()
        cycle = CycleService.get_active_cycle()
        return Response({'cycle': self.get_serializer(cycle).data if cycle else None})


class ContributionViewSet(mixins.CreateModelMixin,
                          mixins.ListModelMixin,
                          mixins.RetrieveModelMixin,
                          viewsets.GenericViewSet):
    serializer_class = ContributionSerializer
    pagination_class = DefaultPagination
    filter_backends = [DjangoFilterBackend]
    filterset_fields = {
        'member': ['exact'],
        'status': ['exact'],
        'contribution_date': ['gte', 'lte'],
    }

    def get_permissions(self):
        if self.action == 'create':
            return [IsAdmin()]
        return [permissions.IsAuthenticated()]

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Contribution.objects.none()

        queryset = Contribution.objects.select_related('member', 'member__member_profile')
        if not is_admin(self.request.user):
            queryset = queryset.filter(member=self.request.user)
        return queryset

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        contribution = ContributionService.record_contribution(
            member=data['member'],
            amount=data['amount'],
            contribution_date=data.get('contribution_date'),
            notes=data.get('notes', ''),
            status=data.get('status', ContributionStatus.COMPLETED),
            recorded_by=request.user,
        )
        audit.record(
            request.user, 'record_contribution', 'contribution', contribution.id,
            {'member': contribution.member_id, 'amount': contribution.amount}, request=request,
        )
        return Response(self.get_serializer(contribution).data, status=status.HTTP_201_CREATED)


class MemberProfileViewSet(mixins.ListModelMixin,
                           mixins.RetrieveModelMixin,
                           mixins.UpdateModelMixin,
                           viewsets.GenericViewSet):
    serializer_class = MemberProfileSerializer
    permission_classes = [IsAdmin]
    pagination_class = DefaultPagination
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['member_status', 'member_role', 'balance_visible']

    def get_queryset(self):
        return (
            MemberProfile.objects.members()
            .select_related('user')
            .with_totals()
        )

    def get_permissions(self):
        if self.action == 'me':
            return [permissions.IsAuthenticated()]
        return super().get_permissions()

    def perform_update(self, serializer):
        profile = serializer.save()
        audit.record(
            self.request.user, 'update_member', 'member_profile', profile.id,
            dict(serializer.validated_data), request=self.request,
        )

    @action(detail=False, methods=['get'])
    def me(self, request):
        profile = (
            MemberProfile.objects.with_totals()
            .select_related('user')
            .filter(user=request.user)
            .first()
        )
        if profile is None:
            return Response({'errors': ['No member profile']}, status=status.HTTP_404_NOT_FOUND)
        return Response(MyProfileSerializer(profile).data)

    @action(detail=True, methods=['post'])
    def adjustments(self, request, pk=None):
        """Apply a penalty or reward to this member"""
        profile = self.get_object()
        payload = AdjustmentInputSerializer(data=request.data)
        payload.is_valid(raise_exception=True)

        adjustment = AdjustmentService.apply(
            member=profile.user,
            admin=request.user,
            adjustment_type=payload.validated_data['adjustment_type'],
            amount=payload.validated_data['amount'],
            reason=payload.validated_data['reason'],
        )
        audit.record(
            request.user, f'apply_{adjustment.adjustment_type}', 'member_profile', profile.id,
            {'amount': adjustment.amount, 'reason': adjustment.reason}, request=request,
        )
        return Response(BalanceAdjustmentSerializer(adjustment).data, status=status.HTTP_201_CREATED)


class BalanceAdjustmentViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = BalanceAdjustmentSerializer
    permission_classes = [IsAdmin]
    pagination_class = DefaultPagination
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['member', 'adjustment_type']
    queryset = BalanceAdjustment.objects.select_related('member', 'admin')


class WithdrawalRequestViewSet(mixins.CreateModelMixin,
                               mixins.ListModelMixin,
                               mixins.RetrieveModelMixin,
                               viewsets.GenericViewSet):
    serializer_class = WithdrawalRequestSerializer
    pagination_class = DefaultPagination
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['status', 'member']

    def get_permissions(self):
        if self.action in ('approve', 'reject', 'complete'):
            return [IsAdmin()]
        return [permissions.IsAuthenticated(), IsOwnerOrAdmin()]

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return WithdrawalRequest.objects.none()

        queryset = WithdrawalRequest.objects.select_related('member', 'admin')
        if not is_admin(self.request.user):
            queryset = queryset.filter(member=self.request.user)
        return queryset

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        withdrawal = WithdrawalService.request(
            member=request.user,
            amount=serializer.validated_data['amount'],
            reason=serializer.validated_data.get('reason', ''),
        )
        return Response(self.get_serializer(withdrawal).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'])
    def available(self, request):
        return Response(WithdrawalService.get_available_summary(request.user))

    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        withdrawal = WithdrawalService.approve(self.get_object(), request.user)
        audit.record(request.user, 'approve_withdrawal', 'withdrawal_request', withdrawal.id,
                     {'amount': withdrawal.amount}, request=request)
        return Response(self.get_serializer(withdrawal).data)

    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        withdrawal = WithdrawalService.reject(
            self.get_object(), request.user, request.data.get('rejection_reason', '')
        )
        audit.record(request.user, 'reject_withdrawal', 'withdrawal_request', withdrawal.id,
                     {'rejection_reason': withdrawal.rejection_reason}, request=request)
        return Response(self.get_serializer(withdrawal).data)

    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        withdrawal = WithdrawalService.complete(self.get_object(), request.user)
        audit.record(request.user, 'complete_withdrawal', 'withdrawal_request', withdrawal.id,
                     {'amount': withdrawal.amount}, request=request)
        return Response(self.get_serializer(withdrawal).data)


class MemberNoteViewSet(viewsets.ModelViewSet):
    serializer_class = MemberNoteSerializer
    permission_classes = [IsAdmin]
    pagination_class = DefaultPagination
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['member']
    queryset = MemberNote.objects.select_related('member', 'admin')

    def perform_create(self, serializer):
        note = serializer.save(admin=self.request.user)
        audit.record(self.request.user, 'add_member_note', 'member_note', note.id,
                     {'member': note.member_id}, request=self.request)


class GroupSettingsView(APIView):
    def get_permissions(self):
        if self.request.method in permissions.SAFE_METHODS:
            return [permissions.IsAuthenticated()]
        return [IsAdmin()]

    def get(self, request):
        return Response(SettingsService.get_all())

    def put(self, request):
        values = SettingsService.update(dict(request.data), request.user)
        audit.record(request.user, 'update_settings', 'group_settings', None, dict(request.data), request=request)
        return Response(values)

    patch = put


class AnalyticsViewSet(viewsets.ViewSet):
    permission_classes = [IsAdmin]

    @action(detail=False, methods=['get'])
    def summary(self, request):
        return Response(AnalyticsService.group_summary())

    @action(detail=False, methods=['get'])
    def leaderboard(self, request):
        try:
            limit = max(1, min(100, int(request.query_params.get('limit', 10))))
        except ValueError:
            limit = 10
        return Response(AnalyticsService.leaderboard(limit))
