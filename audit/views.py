from rest_framework import viewsets
from django_filters.rest_framework import DjangoFilterBackend

from common.pagination import DefaultPagination
from core.permissions import IsAdmin
from audit.filters import AuditLogFilter
from audit.models import AuditLog
from audit.serializers import AuditLogSerializer


class AuditLogViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = AuditLogSerializer
    permission_classes = [IsAdmin]
    pagination_class = DefaultPagination
    filter_backends = [DjangoFilterBackend]
    filterset_class = AuditLogFilter
    queryset = AuditLog.objects.select_related('admin')
