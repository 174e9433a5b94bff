"""
Clinical serializers: field contracts for the six clinical records.

One serializer per record serves both create (all declared required fields
must be present) and update (``partial=True``; only submitted fields are
validated). Cross-field rules that depend on stored state are evaluated
against the merged instance on update.
"""
from datetime import datetime
from urllib.parse import urlsplit

from django.db import models
from django.utils import timezone
from rest_framework import serializers
from rest_framework.settings import ISO_8601

from apps.clinical.models import (
    Anamnesis,
    Consultation,
    ConsultationStatusChoices,
    ConsultationTypeChoices,
    Exam,
    ExamStatusChoices,
    ExamTypeChoices,
    Note,
    Patient,
    Prescription,
)

DATE_INPUT_FORMATS = [ISO_8601, '%Y-%m-%d', '%d/%m/%Y']


def validate_room_link(value):
    """Any http(s) URL with a host; bare hostnames such as https://sala are accepted."""
    if not value:
        return
    try:
        parts = urlsplit(value)
    except ValueError:
        parts = None
    if parts is None or parts.scheme not in ('http', 'https') or not parts.hostname or ' ' in value:
        raise serializers.ValidationError('Informe um link de sala válido.')


class ClinicalDateTimeField(serializers.DateTimeField):
    """Accepts a full timestamp or a bare calendar date (midnight, local time)."""

    def __init__(self, **kwargs):
        kwargs.setdefault('input_formats', DATE_INPUT_FORMATS)
        super().__init__(**kwargs)


class FreeFormJSONField(serializers.JSONField):
    """JSON list or object with no enforced inner schema."""

    default_error_messages = {
        'not_a_collection': 'Deve ser uma lista ou um objeto.',
    }

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        if value is not None and not isinstance(value, (list, dict)):
            self.fail('not_a_collection')
        return value


class PatientSummarySerializer(serializers.ModelSerializer):
    """Patient reference embedded in the other records."""

    class Meta:
        model = Patient
        fields = ['id', 'patient_name', 'nome']
        read_only_fields = fields


class ClinicalRecordSerializer(serializers.ModelSerializer):
    """
    Base for clinical record serializers.

    ``create_required_fields`` lists fields that are nullable in storage but
    mandatory when the record is created.
    """
    serializer_field_mapping = dict(serializers.ModelSerializer.serializer_field_mapping)
    serializer_field_mapping[models.DateTimeField] = ClinicalDateTimeField
    serializer_field_mapping[models.JSONField] = FreeFormJSONField

    create_required_fields = ()

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if self.is_create:
            for name in self.create_required_fields:
                field = self.fields[name]
                field.required = True
                field.allow_null = False
                if hasattr(field, 'allow_blank'):
                    field.allow_blank = False

    @property
    def is_create(self):
        return self.instance is None

    @property
    def doctor(self):
        return self.context.get('doctor')

    def merged(self, attrs, field):
        """Value of ``field`` after this write: submitted, else stored."""
        if field in attrs:
            return attrs[field]
        return getattr(self.instance, field, None)


class OwnedByPatientSerializer(ClinicalRecordSerializer):
    """Records that hang off a patient. Ownership of the id is checked by the write pipeline."""
    patient_id = serializers.UUIDField()
    patient = PatientSummarySerializer(read_only=True)


def _is_before_today(value):
    return timezone.localdate(value) < timezone.localdate()


def _is_after_today(value):
    return timezone.localdate(value) > timezone.localdate()


# ============================================================================
# Patient
# ============================================================================

class PatientSerializer(ClinicalRecordSerializer):
    """
    Patient record.

    Used for:
    - POST/PATCH /api/patients/
    - List and detail payloads
    """
    full_name = serializers.ReadOnlyField()
    phone = serializers.ReadOnlyField()
    age = serializers.ReadOnlyField()

    class Meta:
        model = Patient
        fields = [
            'id',
            'patient_name',
            'nome',
            'full_name',
            'data_nascimento',
            'patient_age',
            'age',
            'patient_gender',
            'patient_cpf',
            'patient_rg',
            'patient_phone',
            'celular',
            'fixo',
            'phone',
            'patient_email',
            'email',
            'patient_address',
            'endereco',
            'cidade',
            'estado',
            'cep',
            'blood_type',
            'tipo_sanguineo',
            'height_cm',
            'weight_kg',
            'is_smoker',
            'is_alcohol_consumer',
            'allergies',
            'congenital_diseases',
            'chronic_diseases',
            'medications',
            'surgical_history',
            'family_history',
            'vital_signs',
            'emergency_contact',
            'health_insurance',
            'notes',
            'favorite',
            'last_consultation_date',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'last_consultation_date', 'created_at', 'updated_at']
        extra_kwargs = {
            'patient_age': {'min_value': 0, 'max_value': 150},
            'height_cm': {'min_value': 50, 'max_value': 250},
            'weight_kg': {'min_value': 1, 'max_value': 500, 'coerce_to_string': False},
            'notes': {'max_length': 1000},
        }

    def validate_data_nascimento(self, value):
        """Birth date must be before today"""
        if value and value >= timezone.localdate():
            raise serializers.ValidationError('A data de nascimento deve ser anterior a hoje.')
        return value

    def validate_patient_cpf(self, value):
        """CPF is unique among the doctor's live patients"""
        if value:
            qs = Patient.objects.owned_by(self.doctor).filter(patient_cpf=value)
            if self.instance:
                qs = qs.exclude(pk=self.instance.pk)
            if qs.exists():
                raise serializers.ValidationError('Já existe um paciente com este CPF.')
        return value


# ============================================================================
# Consultation
# ============================================================================

class ConsultationSerializer(OwnedByPatientSerializer):
    """
    Consultation record.

    consultation_date and consultation_time are combined into a single
    timestamp when both are submitted.
    """
    consultation_time = serializers.TimeField(
        input_formats=['%H:%M'],
        format='%H:%M',
        required=False,
        allow_null=True,
    )
    room_link = serializers.CharField(
        max_length=500,
        required=False,
        allow_null=True,
        allow_blank=True,
        validators=[validate_room_link],
    )

    create_required_fields = ('consultation_date', 'consultation_time', 'consultation_type')

    class Meta:
        model = Consultation
        fields = [
            'id',
            'patient_id',
            'patient',
            'consultation_date',
            'consultation_time',
            'consultation_duration',
            'consultation_type',
            'room_link',
            'status',
            'reason_for_visit',
            'clinical_notes',
            'diagnosis',
            'procedures_performed',
            'referrals',
            'exams_requested',
            'follow_up',
            'additional_notes',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            'consultation_duration': {'min_value': 15, 'max_value': 480},
            'reason_for_visit': {'max_length': 500},
            'clinical_notes': {'max_length': 2000},
            'diagnosis': {'max_length': 1000},
            'additional_notes': {'max_length': 1000},
        }

    def validate_consultation_date(self, value):
        """New consultations cannot be booked in the past; edits may move them there"""
        if self.is_create and _is_before_today(value):
            raise serializers.ValidationError('A data da consulta deve ser hoje ou uma data futura.')
        return value

    def validate(self, attrs):
        consultation_type = self.merged(attrs, 'consultation_type')
        room_link = self.merged(attrs, 'room_link')
        if consultation_type == ConsultationTypeChoices.ONLINE and not room_link:
            raise serializers.ValidationError({
                'room_link': ['O link da sala é obrigatório para consultas online.']
            })

        if 'consultation_date' in attrs and attrs.get('consultation_time'):
            day = timezone.localtime(attrs['consultation_date']).date()
            combined = datetime.combine(day, attrs['consultation_time'])
            attrs['consultation_date'] = timezone.make_aware(combined)

        return attrs


class ConsultationStatusSerializer(serializers.Serializer):
    """PATCH /api/consultations/{id}/status/"""
    status = serializers.ChoiceField(choices=ConsultationStatusChoices.choices)
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, allow_null=True)


# ============================================================================
# Anamnesis
# ============================================================================

class AnamnesisSerializer(OwnedByPatientSerializer):

    class Meta:
        model = Anamnesis
        fields = [
            'id',
            'patient_id',
            'patient',
            'anamnese_date',
            'chief_complaint',
            'illness_history',
            'medical_history',
            'surgical_history',
            'family_history',
            'social_history',
            'current_medications',
            'allergies',
            'systems_review',
            'physical_exam',
            'diagnosis',
            'treatment_plan',
            'additional_notes',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            'chief_complaint': {'max_length': 1000},
            'illness_history': {'max_length': 3000},
            'family_history': {'max_length': 2000},
            'diagnosis': {'max_length': 1000},
            'treatment_plan': {'max_length': 2000},
            'additional_notes': {'max_length': 1000},
        }

    def validate_anamnese_date(self, value):
        if _is_after_today(value):
            raise serializers.ValidationError('A data da anamnese não pode ser futura.')
        return value


# ============================================================================
# Exam
# ============================================================================

class ExamSerializer(OwnedByPatientSerializer):
    consultation_id = serializers.UUIDField(required=False, allow_null=True)

    class Meta:
        model = Exam
        fields = [
            'id',
            'patient_id',
            'patient',
            'consultation_id',
            'exam_name',
            'exam_type',
            'exam_category',
            'exam_date',
            'status',
            'request_details',
            'results',
            'additional_notes',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            'additional_notes': {'max_length': 1000},
        }

    def validate_exam_date(self, value):
        if self.is_create and _is_before_today(value):
            raise serializers.ValidationError('A data do exame deve ser hoje ou uma data futura.')
        return value


class ExamStatusSerializer(serializers.Serializer):
    """PATCH /api/exams/{id}/status/"""
    status = serializers.ChoiceField(choices=ExamStatusChoices.choices)
    results = FreeFormJSONField(required=False, allow_null=True)
    additional_notes = serializers.CharField(max_length=1000, required=False, allow_blank=True, allow_null=True)


# ============================================================================
# Prescription
# ============================================================================

class PrescriptionSerializer(OwnedByPatientSerializer):
    consultation_id = serializers.UUIDField(required=False, allow_null=True)

    class Meta:
        model = Prescription
        fields = [
            'id',
            'patient_id',
            'patient',
            'consultation_id',
            'titulo',
            'tipo',
            'data_emissao',
            'expiration_date',
            'medicamentos',
            'medications',
            'general_instructions',
            'status',
            'pdf_url',
            'additional_notes',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'pdf_url', 'created_at', 'updated_at']
        extra_kwargs = {
            'general_instructions': {'max_length': 2000},
            'additional_notes': {'max_length': 1000},
        }

    def validate_data_emissao(self, value):
        if _is_after_today(value):
            raise serializers.ValidationError('A data de emissão não pode ser futura.')
        return value

    def validate(self, attrs):
        issued = self.merged(attrs, 'data_emissao')
        expires = self.merged(attrs, 'expiration_date')
        if issued and expires and expires <= issued:
            raise serializers.ValidationError({
                'expiration_date': ['A data de validade deve ser posterior à data de emissão.']
            })
        return attrs


# ============================================================================
# Note
# ============================================================================

class NoteSerializer(OwnedByPatientSerializer):
    """
    Clinical note.

    view_count, last_modified and modified_by are maintained server-side.
    """

    class Meta:
        model = Note
        fields = [
            'id',
            'patient_id',
            'patient',
            'note_title',
            'note_text',
            'consultation_date',
            'note_type',
            'is_important',
            'attachments',
            'view_count',
            'last_modified',
            'modified_by',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'view_count', 'last_modified', 'modified_by', 'created_at', 'updated_at']
        extra_kwargs = {
            'note_text': {'max_length': 5000},
        }


# ============================================================================
# Reports
# ============================================================================

class PeriodReportSerializer(serializers.Serializer):
    """Query parameters shared by the period reports."""
    date_from = serializers.DateField()
    date_to = serializers.DateField()
    patient_id = serializers.UUIDField(required=False, allow_null=True)

    def validate(self, attrs):
        if attrs['date_to'] < attrs['date_from']:
            raise serializers.ValidationError({
                'date_to': ['A data final deve ser igual ou posterior à data inicial.']
            })
        return attrs


class ExamPeriodReportSerializer(PeriodReportSerializer):
    exam_type = serializers.ChoiceField(choices=ExamTypeChoices.choices, required=False)
    status = serializers.ChoiceField(choices=ExamStatusChoices.choices, required=False)
