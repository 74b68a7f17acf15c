from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from accounts.models import AppRole


class Request(models.Model):
    class RequestType(models.TextChoices):
        GRADE_INQUIRY = 'grade_inquiry', 'Demande de note'
        ABSENCE_JUSTIFICATION = 'absence_justification', "Justification d'absence"
        CERTIFICATE_REQUEST = 'certificate_request', 'Demande de certificat'
        GRADE_CORRECTION = 'grade_correction', 'Correction de note'
        SCHEDULE_CHANGE = 'schedule_change', "Changement d'horaire"
        OTHER = 'other', 'Autre'

    class GradeType(models.TextChoices):
        CC = 'CC', 'Contrôle continu'
        SN = 'SN', 'Session normale'

    class Subcategory(models.TextChoices):
        MISSING = 'missing', 'Absence de note'
        ERROR = 'error', 'Erreur de note'

    class Priority(models.TextChoices):
        LOW = 'low', 'Basse'
        NORMAL = 'normal', 'Normale'
        HIGH = 'high', 'Haute'
        URGENT = 'urgent', 'Urgente'

    class Status(models.TextChoices):
        SUBMITTED = 'submitted', 'Soumise'
        VALIDATED = 'validated', 'Validée'
        ASSIGNED = 'assigned', 'Assignée'
        PROCESSING = 'processing', 'En traitement'
        COMPLETED = 'completed', 'Terminée'
        REJECTED = 'rejected', 'Rejetée'

    class ValidationStatus(models.TextChoices):
        PENDING = 'pending', 'En attente'
        VALIDATED = 'validated', 'Validée'
        REJECTED = 'rejected', 'Rejetée'

    class FinalStatus(models.TextChoices):
        APPROVED = 'approved', 'Approuvée'
        REJECTED = 'rejected', 'Rejetée'

    TITLE_MAX_LENGTH = 200
    SUBCATEGORY_MAX_LENGTH = 32

    # Identity-service user ids are opaque strings; no FK to a local user table.
    created_by = models.CharField(max_length=64, db_index=True)

    request_type = models.CharField(max_length=32, choices=RequestType.choices)
    grade_type = models.CharField(max_length=2, choices=GradeType.choices, null=True, blank=True)
    subcategory = models.CharField(max_length=SUBCATEGORY_MAX_LENGTH, blank=True)
    title = models.CharField(max_length=TITLE_MAX_LENGTH)
    description = models.TextField()
    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.NORMAL)
    subject = models.CharField(max_length=200, blank=True)

    department_code = models.CharField(max_length=32, blank=True, db_index=True)
    program_code = models.CharField(max_length=32, blank=True)

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.SUBMITTED, db_index=True)
    validation_status = models.CharField(max_length=20, choices=ValidationStatus.choices, default=ValidationStatus.PENDING, db_index=True)
    final_status = models.CharField(max_length=20, choices=FinalStatus.choices, null=True, blank=True)

    routed_to = models.CharField(max_length=64, null=True, blank=True, db_index=True)
    routed_to_role = models.CharField(max_length=20, choices=AppRole.choices, null=True, blank=True)
    routed_at = models.DateTimeField(null=True, blank=True)

    rejection_reason = models.TextField(null=True, blank=True)
    processing_comment = models.TextField(null=True, blank=True)
    final_comment = models.TextField(null=True, blank=True)

    submitted_at = models.DateTimeField(default=timezone.now)
    validated_at = models.DateTimeField(null=True, blank=True)
    validated_by = models.CharField(max_length=64, null=True, blank=True)
    resolved_at = models.DateTimeField(null=True, blank=True)
    resolved_by = models.CharField(max_length=64, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    TERMINAL_STATUSES = (Status.COMPLETED, Status.REJECTED)
    # States in which the routed handler may still act.
    HANDLER_STATUSES = (Status.SUBMITTED, Status.ASSIGNED, Status.PROCESSING)

    class Meta:
        ordering = ('-created_at',)
        indexes = [models.Index(fields=['routed_to', 'validation_status'], name='request_routed_validation_idx')]

    def __str__(self):
        return f"#{self.pk} {self.title} ({self.status})"

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES

    @property
    def is_auto_routed(self) -> bool:
        """CC/SN grade inquiries: handler chosen and notified at submission."""
        return (
            self.request_type == self.RequestType.GRADE_INQUIRY
            and self.grade_type in (self.GradeType.CC, self.GradeType.SN)
        )

    def check_invariants(self):
        errors = {}
        if self.final_status and self.validation_status != self.ValidationStatus.VALIDATED:
            errors['final_status'] = 'A final decision requires a validated request.'

        resolved = self.resolved_at is not None and bool(self.resolved_by)
        unresolved = self.resolved_at is None and not self.resolved_by
        if self.status == self.Status.COMPLETED and not resolved:
            errors['resolved_at'] = 'Completed requests must record resolved_at and resolved_by.'
        elif self.status != self.Status.COMPLETED and not unresolved:
            errors['resolved_at'] = 'Only completed requests may record a resolution.'

        if errors:
            raise ValidationError(errors)


class Attachment(models.Model):
    request = models.ForeignKey(Request, on_delete=models.CASCADE, related_name='attachments')
    file_name = models.CharField(max_length=255)
    file_path = models.CharField(max_length=512)
    file_size = models.PositiveBigIntegerField(null=True, blank=True)
    file_type = models.CharField(max_length=100, blank=True)
    uploaded_by = models.CharField(max_length=64)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ('-created_at',)

    def __str__(self):
        return f"{self.file_name} for request #{self.request_id}"


class Notification(models.Model):
    class Type(models.TextChoices):
        REQUEST_CREATED = 'request_created', 'Requête soumise'
        REQUEST_VALIDATED = 'request_validated', 'Requête validée'
        REQUEST_ASSIGNED = 'request_assigned', 'Requête assignée'
        REQUEST_PROCESSING = 'request_processing', 'Requête en traitement'
        REQUEST_APPROVED = 'request_approved', 'Requête approuvée'
        REQUEST_REJECTED = 'request_rejected', 'Requête rejetée'
        REQUEST_RESUBMITTED = 'request_resubmitted', 'Requête resoumise'

    user_id = models.CharField(max_length=64, db_index=True)
    request = models.ForeignKey(Request, null=True, blank=True, on_delete=models.SET_NULL, related_name='notifications')
    type = models.CharField(max_length=40, choices=Type.choices)
    title = models.CharField(max_length=200)
    message = models.TextField()
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ('-created_at',)

    def __str__(self):
        return f"{self.type} -> {self.user_id}"


class AuditLogQuerySet(models.QuerySet):
    def update(self, **kwargs):
        raise ValidationError('Audit log entries are write-once.')

    def delete(self):
        raise ValidationError('Audit log entries cannot be deleted.')


class AuditLog(models.Model):
    class Action(models.TextChoices):
        CREATE = 'create', 'Création'
        APPROVE = 'approve', 'Validation'
        REJECT = 'reject', 'Rejet'
        COMPLETE = 'complete', 'Clôture'
        RESUBMIT = 'resubmit', 'Nouvelle soumission'
        ASSIGN = 'assign', 'Routage'
        PROCESS = 'process', 'Prise en charge'

    request = models.ForeignKey(Request, on_delete=models.PROTECT, related_name='audit_logs')
    user_id = models.CharField(max_length=64, null=True, blank=True)
    action = models.CharField(max_length=20, choices=Action.choices)
    old_value = models.JSONField(null=True, blank=True)
    new_value = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = AuditLogQuerySet.as_manager()

    class Meta:
        ordering = ('created_at', 'id')

    def __str__(self):
        return f"{self.action} on request #{self.request_id} by {self.user_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError('Audit log entries are write-once.')
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError('Audit log entries cannot be deleted.')
