from rest_framework import serializers
from users.models import User
from .models import Announcement, Notification


class ActorSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username']


class NotificationSerializer(serializers.ModelSerializer):
    actor = ActorSerializer(read_only=True)

    class Meta:
        model = Notification
        fields = ['id', 'actor', 'message', 'message_type', 'announcement', 'is_read', 'created_at']
        read_only_fields = ['id', 'created_at']


class AnnouncementSerializer(serializers.ModelSerializer):
    admin = ActorSerializer(read_only=True)

    class Meta:
        model = Announcement
        fields = ['id', 'admin', 'title', 'content', 'sent_to_all', 'recipient_count', 'created_at']
        read_only_fields = ['id', 'admin', 'sent_to_all', 'recipient_count', 'created_at']
