from rest_framework.routers import SimpleRouter
from notifications.views import AnnouncementViewSet, NotificationViewSet

router = SimpleRouter()
router.register('announcements', AnnouncementViewSet, basename='announcement')
router.register('', NotificationViewSet, basename='notification')

urlpatterns = router.urls
