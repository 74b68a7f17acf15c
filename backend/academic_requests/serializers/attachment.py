from rest_framework import serializers

from academic_requests.models import Attachment


class AttachmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Attachment
        fields = ('id', 'file_name', 'file_size', 'file_type', 'uploaded_by', 'created_at')
        read_only_fields = fields
