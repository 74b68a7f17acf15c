from rest_framework import serializers

from academic_requests.models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    action_label = serializers.CharField(source='get_action_display', read_only=True)

    class Meta:
        model = AuditLog
        fields = ('id', 'action', 'action_label', 'user_id', 'old_value', 'new_value', 'created_at')
        read_only_fields = fields
