from rest_framework import viewsets, permissions, decorators, response, status, mixins
from django_filters.rest_framework import DjangoFilterBackend
from common.pagination import DefaultPagination
from core.permissions import IsAdmin
from audit import services as audit

from .models import Announcement, Notification
from .serializers import AnnouncementSerializer, NotificationSerializer
from .services import NotificationService


class NotificationViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = NotificationSerializer
    permission_classes = [permissions.IsAuthenticated]
    pagination_class = DefaultPagination
    filter_backends = [DjangoFilterBackend]
    filterset_fields = {
        'is_read': ['exact'],
        'message_type': ['exact'],
        'created_at': ['gte', 'lte'],
    }

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Notification.objects.none()

        return (
            Notification.objects.filter(recipient=self.request.user)
            .select_related('actor')
        )

    @decorators.action(detail=True, methods=['post'], url_path='mark-read')
    def mark_read(self, request, pk=None):
        notification = self.get_object()
        notification.is_read = True
        notification.save(update_fields=['is_read'])
        return response.Response({'status': 'marked read'})

    @decorators.action(detail=False, methods=['post'], url_path='mark-all-read')
    def mark_all_read(self, request):
        updated = self.get_queryset().filter(is_read=False).update(is_read=True)
        return response.Response({'updated': updated})


class AnnouncementViewSet(mixins.CreateModelMixin,
                          mixins.ListModelMixin,
                          mixins.RetrieveModelMixin,
                          viewsets.GenericViewSet):
    serializer_class = AnnouncementSerializer
    permission_classes = [IsAdmin]
    pagination_class = DefaultPagination
    queryset = Announcement.objects.select_related('admin')

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        announcement = NotificationService.send_announcement(
            request.user,
            serializer.validated_data['content'],
            title=serializer.validated_data.get('title', ''),
        )
        audit.record(
            request.user, 'send_announcement', 'announcement', announcement.id,
            {'recipients': announcement.recipient_count}, request=request,
        )
        return response.Response(
            self.get_serializer(announcement).data, status=status.HTTP_201_CREATED
        )
