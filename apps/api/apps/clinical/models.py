"""
Clinical models: patient, consultation, anamnesis, exam, prescription, note.

Every row belongs to exactly one doctor (``doctor`` FK to auth_user) and is
removed only by soft delete. Wire-level field names and enum values are kept
as the practice's existing clients send them, Portuguese names included.
"""
import uuid
from datetime import timedelta

from django.conf import settings
from django.db import models
from django.utils import timezone


# ============================================================================
# Enums
# ============================================================================

class GenderChoices(models.TextChoices):
    MALE = 'M', 'Masculino'
    FEMALE = 'F', 'Feminino'
    OTHER = 'O', 'Outro'


class BloodTypeChoices(models.TextChoices):
    A_POS = 'A+', 'A+'
    A_NEG = 'A-', 'A-'
    B_POS = 'B+', 'B+'
    B_NEG = 'B-', 'B-'
    AB_POS = 'AB+', 'AB+'
    AB_NEG = 'AB-', 'AB-'
    O_POS = 'O+', 'O+'
    O_NEG = 'O-', 'O-'


class ConsultationTypeChoices(models.TextChoices):
    """
    How the consultation takes place.

    - ONLINE requires a room_link
    """
    PRESENCIAL = 'presencial', 'Presencial'
    ONLINE = 'online', 'Online'
    DOMICILIO = 'domicilio', 'Domicílio'
    EMERGENCIA = 'emergencia', 'Emergência'


class ConsultationStatusChoices(models.TextChoices):
    SCHEDULED = 'scheduled', 'Agendada'
    IN_PROGRESS = 'in_progress', 'Em andamento'
    COMPLETED = 'completed', 'Concluída'
    CANCELLED = 'cancelled', 'Cancelada'
    NO_SHOW = 'no_show', 'Não compareceu'


class ExamTypeChoices(models.TextChoices):
    LABORATORIAL = 'laboratorial', 'Laboratorial'
    IMAGEM = 'imagem', 'Imagem'
    FUNCIONAL = 'funcional', 'Funcional'
    ENDOSCOPICO = 'endoscopico', 'Endoscópico'
    BIOPSIA = 'biopsia', 'Biópsia'
    OUTROS = 'outros', 'Outros'


class ExamStatusChoices(models.TextChoices):
    PENDING = 'pending', 'Pendente'
    SCHEDULED = 'scheduled', 'Agendado'
    IN_PROGRESS = 'in_progress', 'Em andamento'
    COMPLETED = 'completed', 'Concluído'
    CANCELLED = 'cancelled', 'Cancelado'


class PrescriptionTypeChoices(models.TextChoices):
    MEDICAMENTO = 'medicamento', 'Medicamento'
    EXAME = 'exame', 'Exame'
    PROCEDIMENTO = 'procedimento', 'Procedimento'
    REPOUSO = 'repouso', 'Repouso'
    DIETA = 'dieta', 'Dieta'
    OUTROS = 'outros', 'Outros'


class PrescriptionStatusChoices(models.TextChoices):
    """
    Prescription lifecycle.

    ATIVA is a legacy spelling of ACTIVE written by older clients; both
    count as active everywhere.
    """
    ACTIVE = 'active', 'Ativa'
    ATIVA = 'Ativa', 'Ativa (legado)'
    EXPIRED = 'expired', 'Expirada'
    CANCELLED = 'cancelled', 'Cancelada'
    COMPLETED = 'completed', 'Concluída'


ACTIVE_PRESCRIPTION_STATUSES = (
    PrescriptionStatusChoices.ACTIVE,
    PrescriptionStatusChoices.ATIVA,
)


class NoteTypeChoices(models.TextChoices):
    CONSULTATION = 'consultation', 'Consulta'
    OBSERVATION = 'observation', 'Observação'
    REMINDER = 'reminder', 'Lembrete'
    TREATMENT = 'treatment', 'Tratamento'
    FOLLOW_UP = 'follow_up', 'Acompanhamento'
    GENERAL = 'general', 'Geral'


# ============================================================================
# Querysets
# ============================================================================

class ClinicalQuerySet(models.QuerySet):
    """Tenant and soft-delete scoping shared by all clinical records."""

    def alive(self):
        return self.filter(is_deleted=False)

    def owned_by(self, doctor):
        """Live rows of a single doctor. The base of every clinical query."""
        return self.filter(doctor=doctor, is_deleted=False)

    def created_this_month(self):
        now = timezone.localtime()
        return self.filter(created_at__year=now.year, created_at__month=now.month)


class ConsultationQuerySet(ClinicalQuerySet):

    def today(self):
        return self.filter(consultation_date__date=timezone.localdate())

    def upcoming(self):
        return self.filter(consultation_date__gte=timezone.now())

    def in_last_days(self, days):
        return self.filter(consultation_date__gte=timezone.now() - timedelta(days=days))


class PrescriptionQuerySet(ClinicalQuerySet):

    def active(self):
        return self.filter(status__in=ACTIVE_PRESCRIPTION_STATUSES)

    def expired(self):
        return self.filter(expiration_date__lt=timezone.now())


class NoteQuerySet(ClinicalQuerySet):

    def important(self):
        return self.filter(is_important=True)


# ============================================================================
# Base record
# ============================================================================

class ClinicalRecord(models.Model):
    """
    Abstract base: UUID id, owning doctor, timestamps, soft delete.

    The default manager does not hide deleted rows; callers scope with
    ``owned_by(doctor)``.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='clinical_%(class)s_set',
        help_text='Owning doctor (tenant boundary)'
    )

    # Soft delete
    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(blank=True, null=True)
    deleted_by_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='deleted_%(class)s_set'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ClinicalQuerySet.as_manager()

    class Meta:
        abstract = True

    def mark_deleted(self, actor):
        self.is_deleted = True
        self.deleted_at = timezone.now()
        self.deleted_by_user = actor
        self.save(update_fields=['is_deleted', 'deleted_at', 'deleted_by_user', 'updated_at'])


# ============================================================================
# Patient
# ============================================================================

class Patient(ClinicalRecord):
    """
    Patient record.

    Several concepts carry two columns, a canonical one and a legacy or
    Portuguese alias: patient_name/nome, patient_phone/celular,
    patient_email/email, patient_address/endereco, blood_type/tipo_sanguineo.
    Both are stored; writes collapse the alias onto the canonical column.
    """
    # Identity
    patient_name = models.CharField(max_length=255)
    nome = models.CharField(max_length=255, blank=True, null=True)
    data_nascimento = models.DateField(blank=True, null=True)
    patient_age = models.PositiveSmallIntegerField(blank=True, null=True)
    patient_gender = models.CharField(
        max_length=1,
        choices=GenderChoices.choices,
        blank=True,
        null=True
    )
    patient_cpf = models.CharField(max_length=14, blank=True, null=True)
    patient_rg = models.CharField(max_length=20, blank=True, null=True)

    # Contact
    patient_phone = models.CharField(max_length=20, blank=True, null=True)
    celular = models.CharField(max_length=20, blank=True, null=True)
    fixo = models.CharField(max_length=20, blank=True, null=True)
    patient_email = models.EmailField(max_length=255, blank=True, null=True)
    email = models.EmailField(max_length=255, blank=True, null=True)

    # Address
    patient_address = models.CharField(max_length=500, blank=True, null=True)
    endereco = models.CharField(max_length=500, blank=True, null=True)
    cidade = models.CharField(max_length=100, blank=True, null=True)
    estado = models.CharField(max_length=2, blank=True, null=True)
    cep = models.CharField(max_length=10, blank=True, null=True)

    # Clinical profile
    blood_type = models.CharField(
        max_length=3,
        choices=BloodTypeChoices.choices,
        blank=True,
        null=True
    )
    tipo_sanguineo = models.CharField(
        max_length=3,
        choices=BloodTypeChoices.choices,
        blank=True,
        null=True
    )
    height_cm = models.PositiveSmallIntegerField(blank=True, null=True)
    weight_kg = models.DecimalField(max_digits=5, decimal_places=2, blank=True, null=True)
    is_smoker = models.BooleanField(default=False)
    is_alcohol_consumer = models.BooleanField(default=False)

    # Free-form histories
    allergies = models.JSONField(blank=True, null=True)
    congenital_diseases = models.JSONField(blank=True, null=True)
    chronic_diseases = models.JSONField(blank=True, null=True)
    medications = models.JSONField(blank=True, null=True)
    surgical_history = models.JSONField(blank=True, null=True)
    family_history = models.JSONField(blank=True, null=True)
    vital_signs = models.JSONField(blank=True, null=True)
    emergency_contact = models.JSONField(blank=True, null=True)
    health_insurance = models.JSONField(blank=True, null=True)

    notes = models.TextField(blank=True, null=True)
    favorite = models.BooleanField(default=False)
    last_consultation_date = models.DateTimeField(
        blank=True,
        null=True,
        help_text='Denormalized; set when a consultation is created'
    )

    class Meta:
        db_table = 'patient'
        verbose_name = 'Patient'
        verbose_name_plural = 'Patients'
        indexes = [
            models.Index(fields=['doctor', 'is_deleted'], name='idx_patient_doctor'),
            models.Index(fields=['patient_name'], name='idx_patient_name'),
            models.Index(fields=['nome'], name='idx_patient_nome'),
            models.Index(fields=['data_nascimento'], name='idx_patient_birth'),
            models.Index(fields=['favorite'], name='idx_patient_favorite'),
        ]

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        return self.nome or self.patient_name or ''

    @property
    def phone(self):
        return self.celular or self.patient_phone or ''

    @property
    def age(self):
        if self.data_nascimento:
            today = timezone.localdate()
            born = self.data_nascimento
            return today.year - born.year - ((today.month, today.day) < (born.month, born.day))
        return self.patient_age or 0

    @property
    def bmi(self):
        """Body mass index rounded to 2 places, or None without height and weight."""
        if not self.height_cm or not self.weight_kg:
            return None
        height_m = self.height_cm / 100
        return round(float(self.weight_kg) / (height_m ** 2), 2)


# ============================================================================
# Consultation
# ============================================================================

class Consultation(ClinicalRecord):
    """
    Scheduled or performed consultation.

    consultation_date holds the combined date and time; consultation_time
    keeps the time-of-day as submitted.
    """
    patient = models.ForeignKey(
        Patient,
        on_delete=models.CASCADE,
        related_name='consultations'
    )
    consultation_date = models.DateTimeField()
    consultation_time = models.TimeField(blank=True, null=True)
    consultation_duration = models.PositiveSmallIntegerField(default=30)
    consultation_type = models.CharField(
        max_length=20,
        choices=ConsultationTypeChoices.choices,
        default=ConsultationTypeChoices.PRESENCIAL
    )
    room_link = models.URLField(max_length=500, blank=True, null=True)
    status = models.CharField(
        max_length=20,
        choices=ConsultationStatusChoices.choices,
        default=ConsultationStatusChoices.SCHEDULED
    )
    reason_for_visit = models.TextField()
    clinical_notes = models.TextField(blank=True, null=True)
    diagnosis = models.TextField(blank=True, null=True)
    procedures_performed = models.JSONField(blank=True, null=True)
    referrals = models.JSONField(blank=True, null=True)
    exams_requested = models.JSONField(blank=True, null=True)
    follow_up = models.JSONField(blank=True, null=True)
    additional_notes = models.TextField(blank=True, null=True)

    objects = ConsultationQuerySet.as_manager()

    class Meta:
        db_table = 'consultation'
        verbose_name = 'Consultation'
        verbose_name_plural = 'Consultations'
        indexes = [
            models.Index(fields=['doctor', 'is_deleted'], name='idx_consultation_doctor'),
            models.Index(fields=['consultation_date'], name='idx_consultation_date'),
            models.Index(fields=['status'], name='idx_consultation_status'),
            models.Index(fields=['consultation_type'], name='idx_consultation_type'),
        ]

    def __str__(self):
        return f"Consulta {self.consultation_date:%Y-%m-%d %H:%M} - {self.patient}"


# ============================================================================
# Anamnesis
# ============================================================================

class Anamnesis(ClinicalRecord):
    """Intake history taken for a patient."""
    patient = models.ForeignKey(
        Patient,
        on_delete=models.CASCADE,
        related_name='anamneses'
    )
    anamnese_date = models.DateTimeField()
    chief_complaint = models.TextField()
    illness_history = models.TextField()
    medical_history = models.JSONField(blank=True, null=True)
    surgical_history = models.JSONField(blank=True, null=True)
    family_history = models.TextField(blank=True, null=True)
    social_history = models.JSONField(blank=True, null=True)
    current_medications = models.JSONField(blank=True, null=True)
    allergies = models.JSONField(blank=True, null=True)
    systems_review = models.JSONField(blank=True, null=True)
    physical_exam = models.JSONField(blank=True, null=True)
    diagnosis = models.TextField(blank=True, null=True)
    treatment_plan = models.TextField(blank=True, null=True)
    additional_notes = models.TextField(blank=True, null=True)

    class Meta:
        db_table = 'anamnesis'
        verbose_name = 'Anamnesis'
        verbose_name_plural = 'Anamneses'
        indexes = [
            models.Index(fields=['doctor', 'is_deleted'], name='idx_anamnesis_doctor'),
            models.Index(fields=['anamnese_date'], name='idx_anamnesis_date'),
        ]

    def __str__(self):
        return f"Anamnese {self.anamnese_date:%Y-%m-%d} - {self.patient}"


# ============================================================================
# Exam
# ============================================================================

class Exam(ClinicalRecord):
    patient = models.ForeignKey(
        Patient,
        on_delete=models.CASCADE,
        related_name='exams'
    )
    consultation = models.ForeignKey(
        Consultation,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='exams'
    )
    exam_name = models.CharField(max_length=255)
    exam_type = models.CharField(max_length=20, choices=ExamTypeChoices.choices)
    exam_category = models.CharField(max_length=100, blank=True, null=True)
    exam_date = models.DateTimeField()
    status = models.CharField(
        max_length=20,
        choices=ExamStatusChoices.choices,
        default=ExamStatusChoices.PENDING
    )
    request_details = models.JSONField(blank=True, null=True)
    results = models.JSONField(blank=True, null=True)
    additional_notes = models.TextField(blank=True, null=True)

    class Meta:
        db_table = 'exam'
        verbose_name = 'Exam'
        verbose_name_plural = 'Exams'
        indexes = [
            models.Index(fields=['doctor', 'is_deleted'], name='idx_exam_doctor'),
            models.Index(fields=['exam_date'], name='idx_exam_date'),
            models.Index(fields=['status'], name='idx_exam_status'),
            models.Index(fields=['exam_type'], name='idx_exam_type'),
        ]

    def __str__(self):
        return f"{self.exam_name} - {self.patient}"


# ============================================================================
# Prescription
# ============================================================================

class Prescription(ClinicalRecord):
    """
    Prescription issued to a patient.

    medications and medicamentos are the same list under two names.
    pdf_url is filled by the PDF generation endpoint.
    """
    patient = models.ForeignKey(
        Patient,
        on_delete=models.CASCADE,
        related_name='prescriptions'
    )
    consultation = models.ForeignKey(
        Consultation,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='prescriptions'
    )
    titulo = models.CharField(max_length=255)
    tipo = models.CharField(max_length=20, choices=PrescriptionTypeChoices.choices)
    data_emissao = models.DateTimeField()
    expiration_date = models.DateTimeField(blank=True, null=True)
    medicamentos = models.JSONField(blank=True, null=True)
    medications = models.JSONField(blank=True, null=True)
    general_instructions = models.TextField(blank=True, null=True)
    status = models.CharField(
        max_length=20,
        choices=PrescriptionStatusChoices.choices,
        default=PrescriptionStatusChoices.ACTIVE
    )
    pdf_url = models.CharField(max_length=500, blank=True, null=True)
    additional_notes = models.TextField(blank=True, null=True)

    objects = PrescriptionQuerySet.as_manager()

    class Meta:
        db_table = 'prescription'
        verbose_name = 'Prescription'
        verbose_name_plural = 'Prescriptions'
        indexes = [
            models.Index(fields=['doctor', 'is_deleted'], name='idx_prescription_doctor'),
            models.Index(fields=['data_emissao'], name='idx_prescription_issued'),
            models.Index(fields=['status'], name='idx_prescription_status'),
            models.Index(fields=['tipo'], name='idx_prescription_tipo'),
        ]

    def __str__(self):
        return f"{self.titulo} - {self.patient}"


# ============================================================================
# Note
# ============================================================================

class Note(ClinicalRecord):
    """
    Free-form clinical note.

    last_modified and modified_by are stamped by the write pipeline on every
    change; view_count is incremented on each detail read.
    """
    patient = models.ForeignKey(
        Patient,
        on_delete=models.CASCADE,
        related_name='notes_set'
    )
    note_title = models.CharField(max_length=255)
    note_text = models.TextField()
    consultation_date = models.DateTimeField(blank=True, null=True)
    note_type = models.CharField(max_length=20, choices=NoteTypeChoices.choices)
    is_important = models.BooleanField(default=False)
    attachments = models.JSONField(blank=True, null=True)
    view_count = models.PositiveIntegerField(default=0)
    last_modified = models.DateTimeField(blank=True, null=True)
    modified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='modified_notes'
    )

    objects = NoteQuerySet.as_manager()

    class Meta:
        db_table = 'note'
        verbose_name = 'Note'
        verbose_name_plural = 'Notes'
        indexes = [
            models.Index(fields=['doctor', 'is_deleted'], name='idx_note_doctor'),
            models.Index(fields=['note_type'], name='idx_note_type'),
            models.Index(fields=['is_important'], name='idx_note_important'),
            models.Index(fields=['consultation_date'], name='idx_note_consultation_date'),
        ]

    def __str__(self):
        return self.note_title
