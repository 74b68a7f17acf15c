from django.core.exceptions import PermissionDenied, ValidationError
from django.test import TestCase
from django.utils import timezone

from academic_requests.models import AuditLog, Notification, Request
from academic_requests.services import lifecycle
from academic_requests.tests.helpers import RequestFixtures


class CreateRequestTests(RequestFixtures, TestCase):
    def test_grade_inquiry_starts_submitted_and_pending(self):
        requete = self.create_grade_inquiry()
        requete.refresh_from_db()

        self.assertEqual(requete.status, Request.Status.SUBMITTED)
        self.assertEqual(requete.validation_status, Request.ValidationStatus.PENDING)
        self.assertIsNone(requete.final_status)
        self.assertEqual(requete.routed_to, 'teacher-42')
        self.assertEqual(requete.routed_to_role, 'teacher')
        self.assertEqual(requete.created_by, 'student-1')
        self.assertEqual(requete.department_code, 'GI')
        self.assertIsNone(requete.resolved_at)

    def test_auto_routed_inquiry_notifies_creator_and_handler(self):
        requete = self.create_grade_inquiry()

        types = dict(Notification.objects.filter(request=requete).values_list('user_id', 'type'))
        self.assertEqual(types, {
            'student-1': Notification.Type.REQUEST_CREATED,
            'teacher-42': Notification.Type.REQUEST_ASSIGNED,
        })
        self.assertTrue(AuditLog.objects.filter(request=requete, action=AuditLog.Action.CREATE).exists())

    def test_cc_subcategory_suffixes_title(self):
        missing = self.create_grade_inquiry(title='Algorithmique', subcategory='missing')
        error = self.create_grade_inquiry(title='Analyse', subcategory='error')
        other = self.create_grade_inquiry(title='Physique', subcategory='rattrapage')

        self.assertEqual(missing.title, 'Algorithmique (Absence de note)')
        self.assertEqual(error.title, 'Analyse (Erreur de note)')
        self.assertEqual(other.title, 'Physique (rattrapage)')

    def test_sn_inquiry_ignores_subcategory(self):
        requete = self.create_grade_inquiry(grade_type='sn', routed_to='head-1', subcategory='missing')
        self.assertEqual(requete.grade_type, 'SN')
        self.assertEqual(requete.routed_to_role, 'department_head')
        self.assertEqual(requete.subcategory, '')
        self.assertNotIn('(', requete.title)

    def test_grade_inquiry_requires_grade_type_and_handler(self):
        with self.assertRaises(ValidationError):
            self.create_grade_inquiry(grade_type=None)
        with self.assertRaises(ValidationError):
            self.create_grade_inquiry(routed_to='')
        with self.assertRaises(ValidationError):
            # SN inquiries go to a department head, not a teacher
            self.create_grade_inquiry(grade_type='SN', routed_to='teacher-42')
        self.assertEqual(Request.objects.count(), 0)

    def test_blank_title_or_description_rejected(self):
        with self.assertRaises(ValidationError):
            self.create_certificate_request(title='   ')
        with self.assertRaises(ValidationError):
            self.create_certificate_request(description='')
        with self.assertRaises(ValidationError):
            self.create_certificate_request(request_type='unknown')
        self.assertEqual(Request.objects.count(), 0)

    def test_overlong_subcategory_rejected(self):
        with self.assertRaises(ValidationError):
            self.create_grade_inquiry(subcategory='x' * (Request.SUBCATEGORY_MAX_LENGTH + 1))
        self.assertEqual(Request.objects.count(), 0)

    def test_non_grade_requests_are_not_routed(self):
        requete = self.create_certificate_request(routed_to='teacher-42', grade_type='CC')
        self.assertIsNone(requete.routed_to)
        self.assertIsNone(requete.grade_type)
        self.assertEqual(
            list(Notification.objects.filter(request=requete).values_list('type', flat=True)),
            [Notification.Type.REQUEST_CREATED],
        )

    def test_teacher_cannot_submit(self):
        with self.assertRaises(PermissionDenied):
            self.create_certificate_request(user=self.teacher)


class ValidationGateTests(RequestFixtures, TestCase):
    def test_validation_keeps_status_submitted_and_routing(self):
        requete = self.create_grade_inquiry()
        lifecycle.validate_request(requete, self.head)
        requete.refresh_from_db()

        self.assertEqual(requete.validation_status, Request.ValidationStatus.VALIDATED)
        self.assertEqual(requete.status, Request.Status.SUBMITTED)
        self.assertEqual(requete.validated_by, 'head-1')
        self.assertIsNotNone(requete.validated_at)
        self.assertEqual(requete.routed_to, 'teacher-42')

    def test_auto_routed_validation_sends_no_notification(self):
        requete = self.create_grade_inquiry()
        before = Notification.objects.count()
        lifecycle.validate_request(requete, self.head)
        self.assertEqual(Notification.objects.count(), before)
        self.assertTrue(AuditLog.objects.filter(request=requete, action=AuditLog.Action.APPROVE).exists())

    def test_validation_notifies_creator_for_other_requests(self):
        requete = self.create_certificate_request()
        lifecycle.validate_request(requete, self.head)
        self.assertTrue(Notification.objects.filter(
            user_id='student-1', request=requete, type=Notification.Type.REQUEST_VALIDATED,
        ).exists())

    def test_validation_cannot_change_existing_handler(self):
        requete = self.create_grade_inquiry()
        with self.assertRaises(ValidationError):
            lifecycle.validate_request(requete, self.head, routed_to='head-1')
        requete.refresh_from_db()
        self.assertEqual(requete.routed_to, 'teacher-42')
        self.assertEqual(requete.validation_status, Request.ValidationStatus.PENDING)

    def test_validator_can_route_unrouted_request(self):
        requete = self.create_certificate_request()
        lifecycle.validate_request(requete, self.head, routed_to='head-1')
        requete.refresh_from_db()

        self.assertEqual(requete.status, Request.Status.ASSIGNED)
        self.assertEqual(requete.routed_to, 'head-1')
        self.assertEqual(requete.routed_to_role, 'department_head')
        self.assertIsNotNone(requete.routed_at)

    def test_student_cannot_validate(self):
        requete = self.create_certificate_request()
        with self.assertRaises(PermissionDenied):
            lifecycle.validate_request(requete, self.student)

    def test_validate_twice_rejected(self):
        requete = self.create_certificate_request()
        lifecycle.validate_request(requete, self.head)
        with self.assertRaises(ValidationError):
            lifecycle.validate_request(requete, self.head)

    def test_admin_rejection_notifies_creator_with_reason(self):
        requete = self.create_grade_inquiry()
        lifecycle.reject_validation(requete, self.admin, 'document illisible')
        requete.refresh_from_db()

        self.assertEqual(requete.validation_status, Request.ValidationStatus.REJECTED)
        self.assertEqual(requete.status, Request.Status.REJECTED)
        self.assertEqual(requete.rejection_reason, 'document illisible')
        notification = Notification.objects.get(user_id='student-1', type=Notification.Type.REQUEST_REJECTED)
        self.assertIn('document illisible', notification.message)

    def test_blank_reason_rejected_before_any_write(self):
        requete = self.create_grade_inquiry()
        audit_count = AuditLog.objects.count()
        notification_count = Notification.objects.count()

        for reason in ('', '   ', None):
            with self.assertRaises(ValidationError):
                lifecycle.reject_validation(requete, self.admin, reason)

        requete.refresh_from_db()
        self.assertEqual(requete.status, Request.Status.SUBMITTED)
        self.assertEqual(requete.validation_status, Request.ValidationStatus.PENDING)
        self.assertIsNone(requete.rejection_reason)
        self.assertEqual(AuditLog.objects.count(), audit_count)
        self.assertEqual(Notification.objects.count(), notification_count)


class ResubmitTests(RequestFixtures, TestCase):
    def setUp(self):
        super().setUp()
        self.requete = self.create_grade_inquiry()
        lifecycle.validate_request(self.requete, self.head)
        # reset to pending through a rejection cycle
        self.rejected = self.create_certificate_request()
        lifecycle.reject_validation(self.rejected, self.head, 'pièce manquante')

    def test_resubmit_resets_state_and_clears_reason(self):
        lifecycle.resubmit_request(self.rejected, self.student, description='Pièce jointe ajoutée.')
        self.rejected.refresh_from_db()

        self.assertEqual(self.rejected.status, Request.Status.SUBMITTED)
        self.assertEqual(self.rejected.validation_status, Request.ValidationStatus.PENDING)
        self.assertIsNone(self.rejected.rejection_reason)
        self.assertIsNone(self.rejected.validated_by)
        self.assertEqual(self.rejected.description, 'Pièce jointe ajoutée.')
        self.assertTrue(AuditLog.objects.filter(request=self.rejected, action=AuditLog.Action.RESUBMIT).exists())
        self.assertTrue(Notification.objects.filter(
            request=self.rejected, type=Notification.Type.REQUEST_RESUBMITTED,
        ).exists())

    def test_resubmitted_request_can_be_validated_again(self):
        lifecycle.resubmit_request(self.rejected, self.student)
        lifecycle.validate_request(self.rejected, self.head)
        self.rejected.refresh_from_db()
        self.assertEqual(self.rejected.validation_status, Request.ValidationStatus.VALIDATED)

    def test_new_title_keeps_cc_subcategory_suffix(self):
        requete = self.create_grade_inquiry(title='Algorithmique', subcategory='missing')
        lifecycle.reject_validation(requete, self.head, 'préciser le module')

        lifecycle.resubmit_request(requete, self.student, title='Algo v2')
        requete.refresh_from_db()
        self.assertEqual(requete.title, 'Algo v2 (Absence de note)')
        self.assertEqual(requete.subcategory, 'missing')

        lifecycle.reject_validation(requete, self.head, 'toujours flou')
        lifecycle.resubmit_request(requete, self.student, title='Algo v3 (Absence de note)')
        requete.refresh_from_db()
        self.assertEqual(requete.title, 'Algo v3 (Absence de note)')

    def test_only_creator_may_resubmit(self):
        with self.assertRaises(PermissionDenied):
            lifecycle.resubmit_request(self.rejected, self.other_student)

    def test_cannot_resubmit_unrejected_request(self):
        with self.assertRaises(ValidationError):
            lifecycle.resubmit_request(self.requete, self.student)


class HandlerDecisionTests(RequestFixtures, TestCase):
    def setUp(self):
        super().setUp()
        self.requete = self.create_grade_inquiry()
        lifecycle.validate_request(self.requete, self.head)

    def test_handler_approval_completes_request(self):
        lifecycle.approve_request(self.requete, self.teacher, 'conforme')
        self.requete.refresh_from_db()

        self.assertEqual(self.requete.final_status, Request.FinalStatus.APPROVED)
        self.assertEqual(self.requete.status, Request.Status.COMPLETED)
        self.assertEqual(self.requete.resolved_by, 'teacher-42')
        self.assertLess(abs((timezone.now() - self.requete.resolved_at).total_seconds()), 5)
        self.assertEqual(self.requete.final_comment, 'conforme')
        self.assertTrue(Notification.objects.filter(
            user_id='student-1', type=Notification.Type.REQUEST_APPROVED,
        ).exists())
        self.assertTrue(AuditLog.objects.filter(request=self.requete, action=AuditLog.Action.COMPLETE).exists())

    def test_approval_comment_is_optional(self):
        lifecycle.approve_request(self.requete, self.teacher)
        self.requete.refresh_from_db()
        self.assertEqual(self.requete.status, Request.Status.COMPLETED)
        self.assertIsNone(self.requete.final_comment)

    def test_handler_rejection_is_terminal(self):
        lifecycle.reject_request(self.requete, self.teacher, 'note correcte')
        self.requete.refresh_from_db()

        self.assertEqual(self.requete.final_status, Request.FinalStatus.REJECTED)
        self.assertEqual(self.requete.status, Request.Status.REJECTED)
        self.assertIsNone(self.requete.resolved_at)
        self.assertIsNone(self.requete.resolved_by)
        with self.assertRaises(ValidationError):
            lifecycle.resubmit_request(self.requete, self.student)
        with self.assertRaises(ValidationError):
            lifecycle.approve_request(self.requete, self.teacher)

    def test_handler_rejection_requires_comment(self):
        with self.assertRaises(ValidationError):
            lifecycle.reject_request(self.requete, self.teacher, '  ')
        self.requete.refresh_from_db()
        self.assertIsNone(self.requete.final_status)

    def test_only_routed_handler_may_decide(self):
        with self.assertRaises(PermissionDenied):
            lifecycle.approve_request(self.requete, self.head)
        with self.assertRaises(PermissionDenied):
            lifecycle.approve_request(self.requete, self.student)

    def test_wildcard_admin_may_decide(self):
        lifecycle.approve_request(self.requete, self.admin, 'ok')
        self.requete.refresh_from_db()
        self.assertEqual(self.requete.resolved_by, 'admin-1')

    def test_decision_requires_validation(self):
        pending = self.create_grade_inquiry()
        with self.assertRaises(ValidationError):
            lifecycle.approve_request(pending, self.teacher)

    def test_processing_then_approval(self):
        lifecycle.start_processing(self.requete, self.teacher, 'vérification en cours')
        self.requete.refresh_from_db()
        self.assertEqual(self.requete.status, Request.Status.PROCESSING)
        self.assertEqual(self.requete.processing_comment, 'vérification en cours')

        with self.assertRaises(ValidationError):
            lifecycle.start_processing(self.requete, self.teacher)

        lifecycle.approve_request(self.requete, self.teacher)
        self.requete.refresh_from_db()
        self.assertEqual(self.requete.status, Request.Status.COMPLETED)

    def test_decide_dispatches_case_insensitively(self):
        lifecycle.decide_request(self.requete, self.teacher, 'APPROVE', 'conforme')
        self.requete.refresh_from_db()
        self.assertEqual(self.requete.final_status, Request.FinalStatus.APPROVED)

    def test_decide_unknown_decision(self):
        with self.assertRaises(ValueError):
            lifecycle.decide_request(self.requete, self.teacher, 'maybe')


class InvariantTests(TestCase):
    def test_final_status_requires_validation(self):
        requete = Request(final_status=Request.FinalStatus.APPROVED, validation_status=Request.ValidationStatus.PENDING)
        with self.assertRaises(ValidationError):
            requete.check_invariants()

    def test_resolution_only_when_completed(self):
        requete = Request(status=Request.Status.PROCESSING, resolved_at=timezone.now(), resolved_by='teacher-42')
        with self.assertRaises(ValidationError):
            requete.check_invariants()

        requete = Request(
            status=Request.Status.COMPLETED,
            validation_status=Request.ValidationStatus.VALIDATED,
            final_status=Request.FinalStatus.APPROVED,
        )
        with self.assertRaises(ValidationError):
            requete.check_invariants()

        requete.resolved_at = timezone.now()
        requete.resolved_by = 'teacher-42'
        requete.check_invariants()
