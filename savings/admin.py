from django.contrib import admin
from .models import (
    BalanceAdjustment,
    Contribution,
    GroupSetting,
    MemberNote,
    MemberProfile,
    SavingsCycle,
    WithdrawalRequest,
)


@admin.register(SavingsCycle)
class SavingsCycleAdmin(admin.ModelAdmin):
    list_display = ['name', 'start_date', 'end_date', 'status', 'total_savings', 'settled_automatically', 'created_by']
    list_filter = ['status', 'settled_automatically']
    search_fields = ['name']
    readonly_fields = ['uuid', 'status', 'total_savings', 'ended_at', 'ended_by', 'settled_automatically',
                       'created_at', 'updated_at']

    fieldsets = (
        ('Cycle', {
            'fields': ('name', 'start_date', 'end_date', 'notes')
        }),
        ('Settlement', {
            'fields': ('status', 'total_savings', 'ended_at', 'ended_by', 'settled_automatically')
        }),
        ('Metadata', {
            'fields': ('uuid', 'created_by', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(MemberProfile)
class MemberProfileAdmin(admin.ModelAdmin):
    list_display = ['full_name', 'user', 'phone_number', 'member_status', 'member_role',
                    'balance_adjustment', 'balance_visible']
    list_filter = ['member_status', 'member_role', 'balance_visible']
    search_fields = ['full_name', 'phone_number', 'user__username']
    readonly_fields = ['uuid', 'balance_adjustment', 'balance_visible', 'created_at', 'updated_at']


@admin.register(Contribution)
class ContributionAdmin(admin.ModelAdmin):
    list_display = ['member', 'amount', 'contribution_date', 'status', 'recorded_by']
    list_filter = ['status', 'contribution_date']
    search_fields = ['member__username', 'notes']
    date_hierarchy = 'contribution_date'


@admin.register(BalanceAdjustment)
class BalanceAdjustmentAdmin(admin.ModelAdmin):
    list_display = ['member', 'adjustment_type', 'amount', 'admin', 'created_at']
    list_filter = ['adjustment_type']
    search_fields = ['member__username', 'reason']


@admin.register(WithdrawalRequest)
class WithdrawalRequestAdmin(admin.ModelAdmin):
    list_display = ['member', 'amount', 'status', 'admin', 'created_at', 'reviewed_at']
    list_filter = ['status']
    search_fields = ['member__username', 'reason']


@admin.register(GroupSetting)
class GroupSettingAdmin(admin.ModelAdmin):
    list_display = ['key', 'value', 'updated_by', 'updated_at']


@admin.register(MemberNote)
class MemberNoteAdmin(admin.ModelAdmin):
    list_display = ['member', 'admin', 'created_at']
    search_fields = ['member__username', 'note']
