# Generated migration for clinical records (patient, consultation, anamnesis, exam, prescription, note)

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import uuid


def _record_fields(model_name):
    """Columns shared by every clinical record."""
    return [
        ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
        ('is_deleted', models.BooleanField(default=False)),
        ('deleted_at', models.DateTimeField(blank=True, null=True)),
        ('created_at', models.DateTimeField(auto_now_add=True)),
        ('updated_at', models.DateTimeField(auto_now=True)),
        ('doctor', models.ForeignKey(
            help_text='Owning doctor (tenant boundary)',
            on_delete=django.db.models.deletion.CASCADE,
            related_name=f'clinical_{model_name}_set',
            to=settings.AUTH_USER_MODEL
        )),
        ('deleted_by_user', models.ForeignKey(
            blank=True,
            null=True,
            on_delete=django.db.models.deletion.SET_NULL,
            related_name=f'deleted_{model_name}_set',
            to=settings.AUTH_USER_MODEL
        )),
    ]


BLOOD_TYPES = [
    ('A+', 'A+'), ('A-', 'A-'), ('B+', 'B+'), ('B-', 'B-'),
    ('AB+', 'AB+'), ('AB-', 'AB-'), ('O+', 'O+'), ('O-', 'O-'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Patient',
            fields=_record_fields('patient') + [
                ('patient_name', models.CharField(max_length=255)),
                ('nome', models.CharField(blank=True, max_length=255, null=True)),
                ('data_nascimento', models.DateField(blank=True, null=True)),
                ('patient_age', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('patient_gender', models.CharField(
                    blank=True,
                    choices=[('M', 'Masculino'), ('F', 'Feminino'), ('O', 'Outro')],
                    max_length=1,
                    null=True
                )),
                ('patient_cpf', models.CharField(blank=True, max_length=14, null=True)),
                ('patient_rg', models.CharField(blank=True, max_length=20, null=True)),
                ('patient_phone', models.CharField(blank=True, max_length=20, null=True)),
                ('celular', models.CharField(blank=True, max_length=20, null=True)),
                ('fixo', models.CharField(blank=True, max_length=20, null=True)),
                ('patient_email', models.EmailField(blank=True, max_length=255, null=True)),
                ('email', models.EmailField(blank=True, max_length=255, null=True)),
                ('patient_address', models.CharField(blank=True, max_length=500, null=True)),
                ('endereco', models.CharField(blank=True, max_length=500, null=True)),
                ('cidade', models.CharField(blank=True, max_length=100, null=True)),
                ('estado', models.CharField(blank=True, max_length=2, null=True)),
                ('cep', models.CharField(blank=True, max_length=10, null=True)),
                ('blood_type', models.CharField(blank=True, choices=BLOOD_TYPES, max_length=3, null=True)),
                ('tipo_sanguineo', models.CharField(blank=True, choices=BLOOD_TYPES, max_length=3, null=True)),
                ('height_cm', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('weight_kg', models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ('is_smoker', models.BooleanField(default=False)),
                ('is_alcohol_consumer', models.BooleanField(default=False)),
                ('allergies', models.JSONField(blank=True, null=True)),
                ('congenital_diseases', models.JSONField(blank=True, null=True)),
                ('chronic_diseases', models.JSONField(blank=True, null=True)),
                ('medications', models.JSONField(blank=True, null=True)),
                ('surgical_history', models.JSONField(blank=True, null=True)),
                ('family_history', models.JSONField(blank=True, null=True)),
                ('vital_signs', models.JSONField(blank=True, null=True)),
                ('emergency_contact', models.JSONField(blank=True, null=True)),
                ('health_insurance', models.JSONField(blank=True, null=True)),
                ('notes', models.TextField(blank=True, null=True)),
                ('favorite', models.BooleanField(default=False)),
                ('last_consultation_date', models.DateTimeField(
                    blank=True,
                    help_text='Denormalized; set when a consultation is created',
                    null=True
                )),
            ],
            options={
                'verbose_name': 'Patient',
                'verbose_name_plural': 'Patients',
                'db_table': 'patient',
                'indexes': [
                    models.Index(fields=['doctor', 'is_deleted'], name='idx_patient_doctor'),
                    models.Index(fields=['patient_name'], name='idx_patient_name'),
                    models.Index(fields=['nome'], name='idx_patient_nome'),
                    models.Index(fields=['data_nascimento'], name='idx_patient_birth'),
                    models.Index(fields=['favorite'], name='idx_patient_favorite'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Consultation',
            fields=_record_fields('consultation') + [
                ('consultation_date', models.DateTimeField()),
                ('consultation_time', models.TimeField(blank=True, null=True)),
                ('consultation_duration', models.PositiveSmallIntegerField(default=30)),
                ('consultation_type', models.CharField(
                    choices=[
                        ('presencial', 'Presencial'),
                        ('online', 'Online'),
                        ('domicilio', 'Domicílio'),
                        ('emergencia', 'Emergência')
                    ],
                    default='presencial',
                    max_length=20
                )),
                ('room_link', models.URLField(blank=True, max_length=500, null=True)),
                ('status', models.CharField(
                    choices=[
                        ('scheduled', 'Agendada'),
                        ('in_progress', 'Em andamento'),
                        ('completed', 'Concluída'),
                        ('cancelled', 'Cancelada'),
                        ('no_show', 'Não compareceu')
                    ],
                    default='scheduled',
                    max_length=20
                )),
                ('reason_for_visit', models.TextField()),
                ('clinical_notes', models.TextField(blank=True, null=True)),
                ('diagnosis', models.TextField(blank=True, null=True)),
                ('procedures_performed', models.JSONField(blank=True, null=True)),
                ('referrals', models.JSONField(blank=True, null=True)),
                ('exams_requested', models.JSONField(blank=True, null=True)),
                ('follow_up', models.JSONField(blank=True, null=True)),
                ('additional_notes', models.TextField(blank=True, null=True)),
                ('patient', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='consultations',
                    to='clinical.patient'
                )),
            ],
            options={
                'verbose_name': 'Consultation',
                'verbose_name_plural': 'Consultations',
                'db_table': 'consultation',
                'indexes': [
                    models.Index(fields=['doctor', 'is_deleted'], name='idx_consultation_doctor'),
                    models.Index(fields=['consultation_date'], name='idx_consultation_date'),
                    models.Index(fields=['status'], name='idx_consultation_status'),
                    models.Index(fields=['consultation_type'], name='idx_consultation_type'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Anamnesis',
            fields=_record_fields('anamnesis') + [
                ('anamnese_date', models.DateTimeField()),
                ('chief_complaint', models.TextField()),
                ('illness_history', models.TextField()),
                ('medical_history', models.JSONField(blank=True, null=True)),
                ('surgical_history', models.JSONField(blank=True, null=True)),
                ('family_history', models.TextField(blank=True, null=True)),
                ('social_history', models.JSONField(blank=True, null=True)),
                ('current_medications', models.JSONField(blank=True, null=True)),
                ('allergies', models.JSONField(blank=True, null=True)),
                ('systems_review', models.JSONField(blank=True, null=True)),
                ('physical_exam', models.JSONField(blank=True, null=True)),
                ('diagnosis', models.TextField(blank=True, null=True)),
                ('treatment_plan', models.TextField(blank=True, null=True)),
                ('additional_notes', models.TextField(blank=True, null=True)),
                ('patient', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='anamneses',
                    to='clinical.patient'
                )),
            ],
            options={
                'verbose_name': 'Anamnesis',
                'verbose_name_plural': 'Anamneses',
                'db_table': 'anamnesis',
                'indexes': [
                    models.Index(fields=['doctor', 'is_deleted'], name='idx_anamnesis_doctor'),
                    models.Index(fields=['anamnese_date'], name='idx_anamnesis_date'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Exam',
            fields=_record_fields('exam') + [
                ('exam_name', models.CharField(max_length=255)),
                ('exam_type', models.CharField(
                    choices=[
                        ('laboratorial', 'Laboratorial'),
                        ('imagem', 'Imagem'),
                        ('funcional', 'Funcional'),
                        ('endoscopico', 'Endoscópico'),
                        ('biopsia', 'Biópsia'),
                        ('outros', 'Outros')
                    ],
                    max_length=20
                )),
                ('exam_category', models.CharField(blank=True, max_length=100, null=True)),
                ('exam_date', models.DateTimeField()),
                ('status', models.CharField(
                    choices=[
                        ('pending', 'Pendente'),
                        ('scheduled', 'Agendado'),
                        ('in_progress', 'Em andamento'),
                        ('completed', 'Concluído'),
                        ('cancelled', 'Cancelado')
                    ],
                    default='pending',
                    max_length=20
                )),
                ('request_details', models.JSONField(blank=True, null=True)),
                ('results', models.JSONField(blank=True, null=True)),
                ('additional_notes', models.TextField(blank=True, null=True)),
                ('consultation', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='exams',
                    to='clinical.consultation'
                )),
                ('patient', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='exams',
                    to='clinical.patient'
                )),
            ],
            options={
                'verbose_name': 'Exam',
                'verbose_name_plural': 'Exams',
                'db_table': 'exam',
                'indexes': [
                    models.Index(fields=['doctor', 'is_deleted'], name='idx_exam_doctor'),
                    models.Index(fields=['exam_date'], name='idx_exam_date'),
                    models.Index(fields=['status'], name='idx_exam_status'),
                    models.Index(fields=['exam_type'], name='idx_exam_type'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Prescription',
            fields=_record_fields('prescription') + [
                ('titulo', models.CharField(max_length=255)),
                ('tipo', models.CharField(
                    choices=[
                        ('medicamento', 'Medicamento'),
                        ('exame', 'Exame'),
                        ('procedimento', 'Procedimento'),
                        ('repouso', 'Repouso'),
                        ('dieta', 'Dieta'),
                        ('outros', 'Outros')
                    ],
                    max_length=20
                )),
                ('data_emissao', models.DateTimeField()),
                ('expiration_date', models.DateTimeField(blank=True, null=True)),
                ('medicamentos', models.JSONField(blank=True, null=True)),
                ('medications', models.JSONField(blank=True, null=True)),
                ('general_instructions', models.TextField(blank=True, null=True)),
                ('status', models.CharField(
                    choices=[
                        ('active', 'Ativa'),
                        ('Ativa', 'Ativa (legado)'),
                        ('expired', 'Expirada'),
                        ('cancelled', 'Cancelada'),
                        ('completed', 'Concluída')
                    ],
                    default='active',
                    max_length=20
                )),
                ('pdf_url', models.CharField(blank=True, max_length=500, null=True)),
                ('additional_notes', models.TextField(blank=True, null=True)),
                ('consultation', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='prescriptions',
                    to='clinical.consultation'
                )),
                ('patient', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='prescriptions',
                    to='clinical.patient'
                )),
            ],
            options={
                'verbose_name': 'Prescription',
                'verbose_name_plural': 'Prescriptions',
                'db_table': 'prescription',
                'indexes': [
                    models.Index(fields=['doctor', 'is_deleted'], name='idx_prescription_doctor'),
                    models.Index(fields=['data_emissao'], name='idx_prescription_issued'),
                    models.Index(fields=['status'], name='idx_prescription_status'),
                    models.Index(fields=['tipo'], name='idx_prescription_tipo'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Note',
            fields=_record_fields('note') + [
                ('note_title', models.CharField(max_length=255)),
                ('note_text', models.TextField()),
                ('consultation_date', models.DateTimeField(blank=True, null=True)),
                ('note_type', models.CharField(
                    choices=[
                        ('consultation', 'Consulta'),
                        ('observation', 'Observação'),
                        ('reminder', 'Lembrete'),
                        ('treatment', 'Tratamento'),
                        ('follow_up', 'Acompanhamento'),
                        ('general', 'Geral')
                    ],
                    max_length=20
                )),
                ('is_important', models.BooleanField(default=False)),
                ('attachments', models.JSONField(blank=True, null=True)),
                ('view_count', models.PositiveIntegerField(default=0)),
                ('last_modified', models.DateTimeField(blank=True, null=True)),
                ('modified_by', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='modified_notes',
                    to=settings.AUTH_USER_MODEL
                )),
                ('patient', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='notes_set',
                    to='clinical.patient'
                )),
            ],
            options={
                'verbose_name': 'Note',
                'verbose_name_plural': 'Notes',
                'db_table': 'note',
                'indexes': [
                    models.Index(fields=['doctor', 'is_deleted'], name='idx_note_doctor'),
                    models.Index(fields=['note_type'], name='idx_note_type'),
                    models.Index(fields=['is_important'], name='idx_note_important'),
                    models.Index(fields=['consultation_date'], name='idx_note_consultation_date'),
                ],
            },
        ),
    ]
