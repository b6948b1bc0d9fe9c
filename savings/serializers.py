from rest_framework import serializers

from savings.models import (
    BalanceAdjustment,
    Contribution,
    MemberNote,
    MemberProfile,
    SavingsCycle,
    WithdrawalRequest,
)
from savings.services.cycle_service import CycleService


class SavingsCycleSerializer(serializers.ModelSerializer):
    """Serializer for Savings Cycle"""
    created_by_name = serializers.CharField(source='created_by.username', read_only=True, default=None)
    ended_by_name = serializers.CharField(source='ended_by.username', read_only=True, default=None)
    duration_days = serializers.IntegerField(read_only=True)
    progress = serializers.SerializerMethodField()

    class Meta:
        model = SavingsCycle
        fields = [
            'id', 'uuid', 'name', 'start_date', 'end_date', 'status',
            'total_savings', 'notes', 'duration_days', 'progress',
            'created_by', 'created_by_name', 'ended_by', 'ended_by_name',
            'ended_at', 'settled_automatically',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_progress(self, obj):
        if not obj.is_active:
            return None
        return CycleService.compute_progress(obj, self.context.get('as_of'))


class ContributionSerializer(serializers.ModelSerializer):
    member_name = serializers.CharField(source='member.get_display_name', read_only=True)

    class Meta:
        model = Contribution
        fields = [
            'id', 'uuid', 'member', 'member_name', 'amount', 'contribution_date',
            'status', 'notes', 'recorded_by', 'created_at'
        ]
        read_only_fields = ['uuid', 'member_name', 'recorded_by', 'created_at']


class MemberProfileSerializer(serializers.ModelSerializer):
    """Admin view of a member, balances always shown."""
    username = serializers.CharField(source='user.username', read_only=True)
    email = serializers.CharField(source='user.email', read_only=True, default=None)
    total_contributed = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    display_balance = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = MemberProfile
        fields = [
            'id', 'user', 'username', 'email', 'full_name', 'phone_number',
            'daily_contribution_amount', 'missed_contributions',
            'member_status', 'member_role',
            'balance_adjustment', 'balance_visible',
            'total_contributed', 'display_balance',
            'created_at', 'updated_at'
        ]
        read_only_fields = [
            'user', 'username', 'email', 'balance_adjustment', 'balance_visible',
            'total_contributed', 'display_balance', 'created_at', 'updated_at'
        ]


class MyProfileSerializer(MemberProfileSerializer):
    """Member's own view; balances are masked while hidden."""

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if not instance.balance_visible:
            data['total_contributed'] = None
            data['display_balance'] = None
            data['balance_adjustment'] = None
        return data


class BalanceAdjustmentSerializer(serializers.ModelSerializer):
    admin_name = serializers.CharField(source='admin.username', read_only=True, default=None)

    class Meta:
        model = BalanceAdjustment
        fields = ['id', 'member', 'admin', 'admin_name', 'adjustment_type', 'amount', 'reason', 'created_at']
        read_only_fields = fields


class AdjustmentInputSerializer(serializers.Serializer):
    adjustment_type = serializers.CharField()
    amount = serializers.CharField()
    reason = serializers.CharField(allow_blank=True, required=False, default='')


class WithdrawalRequestSerializer(serializers.ModelSerializer):
    member_name = serializers.CharField(source='member.get_display_name', read_only=True)

    class Meta:
        model = WithdrawalRequest
        fields = [
            'id', 'uuid', 'member', 'member_name', 'admin', 'amount', 'status',
            'reason', 'rejection_reason', 'reviewed_at', 'completed_at', 'created_at'
        ]
        read_only_fields = [
            'uuid', 'member', 'member_name', 'admin', 'status', 'rejection_reason',
            'reviewed_at', 'completed_at', 'created_at'
        ]



class MemberNoteSerializer(serializers.ModelSerializer):
    admin_name = serializers.CharField(source='admin.username', read_only=True, default=None)

    class Meta:
        model = MemberNote
        fields = ['id', 'member', 'admin', 'admin_name', 'note', 'created_at', 'updated_at']
        read_only_fields = ['admin', 'admin_name', 'created_at', 'updated_at']
