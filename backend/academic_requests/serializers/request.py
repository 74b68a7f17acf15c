from rest_framework import serializers

from academic_requests.models import Request
from academic_requests.serializers.attachment import AttachmentSerializer


class RequestCreateSerializer(serializers.Serializer):
    request_type = serializers.ChoiceField(choices=Request.RequestType.choices)
    title = serializers.CharField(max_length=Request.TITLE_MAX_LENGTH)
    description = serializers.CharField()
    grade_type = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    subcategory = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=Request.SUBCATEGORY_MAX_LENGTH)
    routed_to = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=64)
    priority = serializers.ChoiceField(choices=Request.Priority.choices, required=False)
    subject = serializers.CharField(required=False, allow_blank=True, max_length=200)

    def to_internal_value(self, data):
        # Accept the identity-service spelling used by the web client.
        if hasattr(data, 'get') and 'gradeType' in data and 'grade_type' not in data:
            data = dict(data.items())
            data['grade_type'] = data.pop('gradeType')
        return super().to_internal_value(data)


class RequestListSerializer(serializers.ModelSerializer):
    status_label = serializers.CharField(source='get_status_display', read_only=True)
    validation_status_label = serializers.CharField(source='get_validation_status_display', read_only=True)
    final_status_label = serializers.SerializerMethodField()
    request_type_label = serializers.CharField(source='get_request_type_display', read_only=True)

    class Meta:
        model = Request
        fields = (
            'id', 'request_type', 'request_type_label', 'grade_type', 'title', 'priority',
            'status', 'status_label', 'validation_status', 'validation_status_label',
            'final_status', 'final_status_label', 'created_by', 'routed_to',
            'department_code', 'submitted_at', 'created_at', 'updated_at',
        )
        read_only_fields = fields

    def get_final_status_label(self, obj):
        return obj.get_final_status_display() if obj.final_status else None


class RequestDetailSerializer(RequestListSerializer):
    attachments = AttachmentSerializer(many=True, read_only=True)

    class Meta(RequestListSerializer.Meta):
        fields = RequestListSerializer.Meta.fields + (
            'description', 'subcategory', 'subject', 'program_code', 'routed_to_role', 'routed_at',
            'rejection_reason', 'processing_comment', 'final_comment',
            'validated_at', 'validated_by', 'resolved_at', 'resolved_by', 'attachments',
        )
        read_only_fields = fields


class ValidateSerializer(serializers.Serializer):
    routed_to = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=64)
    routed_to_role = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=20)


class RejectValidationSerializer(serializers.Serializer):
    # Blank reasons reach the service, which refuses them before any write.
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True, trim_whitespace=False)


class ResubmitSerializer(serializers.Serializer):
    title = serializers.CharField(required=False, max_length=Request.TITLE_MAX_LENGTH)
    description = serializers.CharField(required=False)


class RouteSerializer(serializers.Serializer):
    routed_to = serializers.CharField(max_length=64)
    routed_to_role = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=20)


class ProcessSerializer(serializers.Serializer):
    comment = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class DecisionSerializer(serializers.Serializer):
    decision = serializers.CharField()
    comment = serializers.CharField(required=False, allow_blank=True, allow_null=True)
