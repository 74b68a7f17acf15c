import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Request',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_by', models.CharField(db_index=True, max_length=64)),
                ('request_type', models.CharField(choices=[('grade_inquiry', 'Demande de note'), ('absence_justification', "Justification d'absence"), ('certificate_request', 'Demande de certificat'), ('grade_correction', 'Correction de note'), ('schedule_change', "Changement d'horaire"), ('other', 'Autre')], max_length=32)),
                ('grade_type', models.CharField(blank=True, choices=[('CC', 'Contrôle continu'), ('SN', 'Session normale')], max_length=2, null=True)),
                ('subcategory', models.CharField(blank=True, max_length=32)),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField()),
                ('priority', models.CharField(choices=[('low', 'Basse'), ('normal', 'Normale'), ('high', 'Haute'), ('urgent', 'Urgente')], default='normal', max_length=10)),
                ('subject', models.CharField(blank=True, max_length=200)),
                ('department_code', models.CharField(blank=True, db_index=True, max_length=32)),
                ('program_code', models.CharField(blank=True, max_length=32)),
                ('status', models.CharField(choices=[('submitted', 'Soumise'), ('validated', 'Validée'), ('assigned', 'Assignée'), ('processing', 'En traitement'), ('completed', 'Terminée'), ('rejected', 'Rejetée')], db_index=True, default='submitted', max_length=20)),
                ('validation_status', models.CharField(choices=[('pending', 'En attente'), ('validated', 'Validée'), ('rejected', 'Rejetée')], db_index=True, default='pending', max_length=20)),
                ('final_status', models.CharField(blank=True, choices=[('approved', 'Approuvée'), ('rejected', 'Rejetée')], max_length=20, null=True)),
                ('routed_to', models.CharField(blank=True, db_index=True, max_length=64, null=True)),
                ('routed_to_role', models.CharField(blank=True, choices=[('student', 'Étudiant'), ('teacher', 'Enseignant'), ('department_head', 'Responsable pédagogique'), ('director', 'Directeur'), ('admin', 'Administrateur')], max_length=20, null=True)),
                ('routed_at', models.DateTimeField(blank=True, null=True)),
                ('rejection_reason', models.TextField(blank=True, null=True)),
                ('processing_comment', models.TextField(blank=True, null=True)),
                ('final_comment', models.TextField(blank=True, null=True)),
                ('submitted_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('validated_at', models.DateTimeField(blank=True, null=True)),
                ('validated_by', models.CharField(blank=True, max_length=64, null=True)),
                ('resolved_at', models.DateTimeField(blank=True, null=True)),
                ('resolved_by', models.CharField(blank=True, max_length=64, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ('-created_at',),
                'indexes': [models.Index(fields=['routed_to', 'validation_status'], name='request_routed_validation_idx')],
            },
        ),
        migrations.CreateModel(
            name='Attachment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('file_name', models.CharField(max_length=255)),
                ('file_path', models.CharField(max_length=512)),
                ('file_size', models.PositiveBigIntegerField(blank=True, null=True)),
                ('file_type', models.CharField(blank=True, max_length=100)),
                ('uploaded_by', models.CharField(max_length=64)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('request', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='attachments', to='academic_requests.request')),
            ],
            options={
                'ordering': ('-created_at',),
            },
        ),
        migrations.CreateModel(
            name='Notification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('user_id', models.CharField(db_index=True, max_length=64)),
                ('type', models.CharField(choices=[('request_created', 'Requête soumise'), ('request_validated', 'Requête validée'), ('request_assigned', 'Requête assignée'), ('request_processing', 'Requête en traitement'), ('request_approved', 'Requête approuvée'), ('request_rejected', 'Requête rejetée'), ('request_resubmitted', 'Requête resoumise')], max_length=40)),
                ('title', models.CharField(max_length=200)),
                ('message', models.TextField()),
                ('is_read', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('request', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='notifications', to='academic_requests.request')),
            ],
            options={
                'ordering': ('-created_at',),
            },
        ),
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('user_id', models.CharField(blank=True, max_length=64, null=True)),
                ('action', models.CharField(choices=[('create', 'Création'), ('approve', 'Validation'), ('reject', 'Rejet'), ('complete', 'Clôture'), ('resubmit', 'Nouvelle soumission'), ('assign', 'Routage'), ('process', 'Prise en charge')], max_length=20)),
                ('old_value', models.JSONField(blank=True, null=True)),
                ('new_value', models.JSONField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('request', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='audit_logs', to='academic_requests.request')),
            ],
            options={
                'ordering': ('created_at', 'id'),
            },
        ),
    ]
