from rest_framework import serializers

from academic_requests.models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ('id', 'type', 'title', 'message', 'request', 'is_read', 'created_at')
        read_only_fields = fields
