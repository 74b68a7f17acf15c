from django.db import models


class AppRole(models.TextChoices):
    STUDENT = 'student', 'Étudiant'
    TEACHER = 'teacher', 'Enseignant'
    DEPARTMENT_HEAD = 'department_head', 'Responsable pédagogique'
    DIRECTOR = 'director', 'Directeur'
    ADMIN = 'admin', 'Administrateur'


class UserProfile(models.Model):
    """
    Local directory entry for a user of the external identity service.
    Rows are upserted on every successful authentication; the identity
    service stays the source of truth for every field it supplies.
    """
    user_id = models.CharField(max_length=64, unique=True, db_index=True)
    email = models.EmailField(blank=True)
    first_name = models.CharField(max_length=150, blank=True)
    last_name = models.CharField(max_length=150, blank=True)
    matricule = models.CharField(max_length=64, blank=True)
    # Local only; the identity service does not carry it.
    phone = models.CharField(max_length=32, blank=True)
    role = models.CharField(max_length=20, choices=AppRole.choices, default=AppRole.STUDENT, db_index=True)
    department_code = models.CharField(max_length=32, blank=True, db_index=True)
    # Blank for teachers serving every program of their department.
    program_code = models.CharField(max_length=32, blank=True)
    is_active = models.BooleanField(default=True)
    synced_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ('last_name', 'first_name')

    def __str__(self):
        return f"{self.full_name or self.user_id} ({self.role})"

    @property
    def full_name(self) -> str:
        return ' '.join(filter(None, [self.first_name, self.last_name]))


class Department(models.Model):
    """Academic department. `code` matches the identity service's department code."""
    code = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=150)
    description = models.TextField(blank=True)
    # user_id of the head in the directory; identity-service ids are opaque strings.
    head_id = models.CharField(max_length=64, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ('code',)

    def __str__(self):
        return f"{self.code} - {self.name}"
