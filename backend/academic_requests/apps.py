from django.apps import AppConfig


class AcademicRequestsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'academic_requests'
    verbose_name = 'Requêtes académiques'
