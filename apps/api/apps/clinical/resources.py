"""
Per-record declarations binding the six clinical records to the generic
listing, write and search machinery.
"""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from django.db import models

from apps.clinical import serializers as clinical_serializers
from apps.clinical.models import Anamnesis, Consultation, Exam, Note, Patient, Prescription
from apps.clinical.querying import ExactFilter, FlagFilter, UUIDFilter, date_range, resolve_ordering

PATIENT_NAME_FIELDS = ('patient__patient_name', 'patient__nome')


@dataclass(frozen=True)
class RecordResource:
    key: str
    model: type
    singular: str
    serializer_class: type
    messages: Dict[str, str]
    filters: Tuple = ()
    search_fields: Tuple[str, ...] = ()
    global_search_fields: Tuple[str, ...] = ()
    default_sort: str = 'created_at'
    default_direction: str = 'desc'
    filter_params: Tuple[str, ...] = ()

    @property
    def has_patient(self) -> bool:
        return self.model is not Patient

    @property
    def all_search_fields(self) -> Tuple[str, ...]:
        if self.has_patient:
            return self.search_fields + PATIENT_NAME_FIELDS
        return self.search_fields

    @property
    def sortable_fields(self) -> frozenset:
        """Concrete scalar columns; relations and JSON are not sortable."""
        return frozenset(
            f.name for f in self.model._meta.concrete_fields
            if not f.is_relation and not isinstance(f, models.JSONField)
        )

    def base_queryset(self, doctor):
        queryset = self.model.objects.owned_by(doctor)
        if self.has_patient:
            queryset = queryset.select_related('patient')
        return queryset

    def echo_filters(self, params) -> Dict[str, Optional[str]]:
        """Applied listing parameters echoed back to the client."""
        echoed = {name: params.get(name) for name in ('search', *self.filter_params)}
        echoed['sort_by'], echoed['sort_direction'] = resolve_ordering(self, params)
        return echoed


def _messages(created, updated, deleted, not_found, load_error):
    return {
        'created': created,
        'updated': updated,
        'deleted': deleted,
        'not_found': not_found,
        'load_error': load_error,
    }


PATIENTS = RecordResource(
    key='patients',
    model=Patient,
    singular='patient',
    serializer_class=clinical_serializers.PatientSerializer,
    messages=_messages(
        'Paciente criado com sucesso!',
        'Paciente atualizado com sucesso!',
        'Paciente removido com sucesso!',
        'Paciente não encontrado',
        'Erro ao carregar pacientes. Tente novamente.',
    ),
    filters=(
        FlagFilter('favorites', lambda qs: qs.filter(favorite=True)),
        ExactFilter('blood_type', 'blood_type'),
    ),
    search_fields=('patient_name', 'nome', 'patient_email', 'patient_phone', 'celular'),
    global_search_fields=('patient_name', 'nome', 'patient_email'),
    default_sort='created_at',
    filter_params=('favorites', 'blood_type'),
)

CONSULTATIONS = RecordResource(
    key='consultations',
    model=Consultation,
    singular='consultation',
    serializer_class=clinical_serializers.ConsultationSerializer,
    messages=_messages(
        'Consulta agendada com sucesso!',
        'Consulta atualizada com sucesso!',
        'Consulta removida com sucesso!',
        'Consulta não encontrada',
        'Erro ao carregar consultas. Tente novamente.',
    ),
    filters=(
        ExactFilter('status', 'status'),
        ExactFilter('consultation_type', 'consultation_type'),
        UUIDFilter('patient_id', 'patient_id'),
        *date_range('consultation_date'),
    ),
    search_fields=('reason_for_visit', 'diagnosis'),
    global_search_fields=('reason_for_visit', 'diagnosis'),
    default_sort='consultation_date',
    filter_params=('status', 'consultation_type', 'patient_id', 'date_from', 'date_to'),
)

ANAMNESES = RecordResource(
    key='anamneses',
    model=Anamnesis,
    singular='anamnesis',
    serializer_class=clinical_serializers.AnamnesisSerializer,
    messages=_messages(
        'Anamnese criada com sucesso!',
        'Anamnese atualizada com sucesso!',
        'Anamnese removida com sucesso!',
        'Anamnese não encontrada',
        'Erro ao carregar anamneses. Tente novamente.',
    ),
    filters=(
        UUIDFilter('patient_id', 'patient_id'),
        *date_range('anamnese_date'),
    ),
    search_fields=('chief_complaint', 'diagnosis', 'illness_history'),
    default_sort='anamnese_date',
    filter_params=('patient_id', 'date_from', 'date_to'),
)

EXAMS = RecordResource(
    key='exams',
    model=Exam,
    singular='exam',
    serializer_class=clinical_serializers.ExamSerializer,
    messages=_messages(
        'Exame criado com sucesso!',
        'Exame atualizado com sucesso!',
        'Exame removido com sucesso!',
        'Exame não encontrado',
        'Erro ao carregar exames. Tente novamente.',
    ),
    filters=(
        ExactFilter('status', 'status'),
        ExactFilter('exam_type', 'exam_type'),
        ExactFilter('exam_category', 'exam_category'),
        UUIDFilter('patient_id', 'patient_id'),
        *date_range('exam_date'),
    ),
    search_fields=('exam_name', 'exam_type'),
    global_search_fields=('exam_name',),
    default_sort='exam_date',
    filter_params=('status', 'exam_type', 'exam_category', 'patient_id', 'date_from', 'date_to'),
)

PRESCRIPTIONS = RecordResource(
    key='prescriptions',
    model=Prescription,
    singular='prescription',
    serializer_class=clinical_serializers.PrescriptionSerializer,
    messages=_messages(
        'Prescrição criada com sucesso!',
        'Prescrição atualizada com sucesso!',
        'Prescrição removida com sucesso!',
        'Prescrição não encontrada',
        'Erro ao carregar prescrições. Tente novamente.',
    ),
    filters=(
        ExactFilter('status', 'status'),
        ExactFilter('tipo', 'tipo'),
        UUIDFilter('patient_id', 'patient_id'),
        *date_range('data_emissao'),
        FlagFilter('expired', lambda qs: qs.expired(), literal_true=True),
        FlagFilter('active', lambda qs: qs.active(), literal_true=True),
    ),
    search_fields=('titulo', 'general_instructions'),
    global_search_fields=('titulo', 'general_instructions'),
    default_sort='data_emissao',
    filter_params=('status', 'tipo', 'patient_id', 'date_from', 'date_to', 'expired', 'active'),
)

NOTES = RecordResource(
    key='notes',
    model=Note,
    singular='note',
    serializer_class=clinical_serializers.NoteSerializer,
    messages=_messages(
        'Anotação criada com sucesso!',
        'Anotação atualizada com sucesso!',
        'Anotação removida com sucesso!',
        'Anotação não encontrada',
        'Erro ao carregar anotações. Tente novamente.',
    ),
    filters=(
        ExactFilter('note_type', 'note_type'),
        FlagFilter('is_important', lambda qs: qs.important(), literal_true=True),
        UUIDFilter('patient_id', 'patient_id'),
        *date_range('consultation_date'),
    ),
    search_fields=('note_title', 'note_text'),
    global_search_fields=('note_title', 'note_text'),
    default_sort='last_modified',
    filter_params=('note_type', 'is_important', 'patient_id', 'date_from', 'date_to'),
)

RESOURCES = {
    resource.key: resource
    for resource in (PATIENTS, CONSULTATIONS, ANAMNESES, EXAMS, PRESCRIPTIONS, NOTES)
}
