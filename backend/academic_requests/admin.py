from django.contrib import admin

from . import models


class AttachmentInline(admin.TabularInline):
    model = models.Attachment
    extra = 0
    fields = ('file_name', 'file_path', 'file_size', 'file_type', 'uploaded_by', 'created_at')
    readonly_fields = fields


class RequestAdmin(admin.ModelAdmin):
    list_display = ('id', 'title', 'request_type', 'grade_type', 'status', 'validation_status', 'final_status', 'created_by', 'routed_to', 'submitted_at')
    list_filter = ('request_type', 'status', 'validation_status', 'final_status', 'department_code')
    search_fields = ('title', 'created_by', 'routed_to')
    inlines = (AttachmentInline,)
    date_hierarchy = 'created_at'
    # Lifecycle fields change only through the services.
    readonly_fields = (
        'status', 'validation_status', 'final_status', 'routed_to', 'routed_to_role', 'routed_at',
        'validated_at', 'validated_by', 'resolved_at', 'resolved_by', 'submitted_at', 'created_at', 'updated_at',
    )


class NotificationAdmin(admin.ModelAdmin):
    list_display = ('user_id', 'type', 'title', 'request', 'is_read', 'created_at')
    list_filter = ('type', 'is_read')
    search_fields = ('user_id', 'title')


class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('request', 'action', 'user_id', 'created_at')
    list_filter = ('action',)
    search_fields = ('user_id',)

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


admin.site.register(models.Request, RequestAdmin)
admin.site.register(models.Notification, NotificationAdmin)
admin.site.register(models.AuditLog, AuditLogAdmin)
