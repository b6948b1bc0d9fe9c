from rest_framework import serializers

from audit.models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    admin_username = serializers.CharField(source='admin.username', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = [
            'id', 'admin', 'admin_username', 'action', 'entity_type',
            'entity_id', 'changes', 'ip_address', 'created_at',
        ]
        read_only_fields = fields
