from accounts.models import UserProfile
from accounts.permissions import get_role_permissions
from accounts.session import SessionUser
from academic_requests.services import lifecycle


def make_user(user_id, role, department_code='GI', program_code='GI3', extra=()):
    return SessionUser(
        id=user_id,
        role=role,
        permissions=get_role_permissions(role, extra),
        email=f'{user_id}@univ.test',
        first_name=user_id.split('-')[0].title(),
        last_name='Test',
        department_code=department_code,
        program_code=program_code,
    )


def make_profile(user_id, role, department_code='GI', program_code='', is_active=True):
    return UserProfile.objects.create(
        user_id=user_id,
        email=f'{user_id}@univ.test',
        first_name=user_id.split('-')[0].title(),
        last_name='Test',
        role=role,
        department_code=department_code,
        program_code=program_code,
        is_active=is_active,
    )


class RequestFixtures:
    """Mixin: a GI department with a student, a teacher, its head, a director and an admin."""

    def setUp(self):
        super().setUp()
        make_profile('teacher-42', 'teacher', program_code='GI3')
        make_profile('head-1', 'department_head')
        self.student = make_user('student-1', 'student')
        self.other_student = make_user('student-2', 'student')
        self.teacher = make_user('teacher-42', 'teacher')
        self.head = make_user('head-1', 'department_head', program_code=None)
        self.director = make_user('director-1', 'director', department_code='DIR', program_code=None)
        self.admin = make_user('admin-1', 'admin', department_code=None, program_code=None)

    def create_grade_inquiry(self, user=None, **overrides):
        payload = {
            'request_type': 'grade_inquiry',
            'title': 'Note manquante en algorithmique',
            'description': 'La note du contrôle continu n\'apparaît pas.',
            'grade_type': 'CC',
            'routed_to': 'teacher-42',
        }
        payload.update(overrides)
        return lifecycle.create_request(user or self.student, **payload)

    def create_certificate_request(self, user=None, **overrides):
        payload = {
            'request_type': 'certificate_request',
            'title': 'Certificat de scolarité',
            'description': 'Pour une demande de bourse.',
        }
        payload.update(overrides)
        return lifecycle.create_request(user or self.student, **payload)
