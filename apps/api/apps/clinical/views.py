"""
Clinical record endpoints.

One viewset per record type, all built on ClinicalRecordViewSet:

- GET    /api/<records>/                 listing with filters, stats and meta
- POST   /api/<records>/
- GET    /api/<records>/{id}/
- PUT    /api/<records>/{id}/            partial, like PATCH
- PATCH  /api/<records>/{id}/
- DELETE /api/<records>/{id}/            soft delete
- GET    /api/<records>/search/quick/?q=

Every route is scoped to the authenticated doctor; records of other doctors
are reported as not found.
"""
import logging

from django.conf import settings
from django.db import DatabaseError
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.clinical.models import ExamStatusChoices
from apps.clinical.querying import ListParams, list_records
from apps.clinical.resources import (
    ANAMNESES,
    CONSULTATIONS,
    EXAMS,
    NOTES,
    PATIENTS,
    PRESCRIPTIONS,
)
from apps.clinical import services, stats
from apps.clinical.search import quick_search
from apps.clinical.serializers import (
    ConsultationStatusSerializer,
    ExamPeriodReportSerializer,
    ExamStatusSerializer,
    PatientSerializer,
    PeriodReportSerializer,
)
from apps.core.observability.correlation import bind_user_id

logger = logging.getLogger(__name__)


def _int_param(request, name, default, minimum=1, maximum=None):
    try:
        value = int(request.query_params.get(name, default))
    except (TypeError, ValueError):
        value = default
    value = max(value, minimum)
    return min(value, maximum) if maximum else value


class ClinicalRecordViewSet(viewsets.GenericViewSet):
    """
    CRUD, listing and quick search for one clinical record type.

    Subclasses set ``resource`` to an entry of ``apps.clinical.resources``.
    """
    resource = None

    @property
    def doctor(self):
        return self.request.user

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        bind_user_id(request.user.pk)

    def get_serializer_class(self):
        return self.resource.serializer_class

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['doctor'] = self.request.user
        return context

    def get_queryset(self):
        return self.resource.base_queryset(self.doctor)

    def get_object(self):
        return services.get_owned(self.resource, self.kwargs['pk'], self.doctor)

    def _records(self, queryset):
        return self.get_serializer(queryset, many=True).data

    def _record(self, instance):
        return self.get_serializer(instance).data

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def list(self, request):
        """
        Filtered, sorted, paginated listing plus stats.

        A database failure yields ``success: false`` with empty data and
        zeroed stats instead of an error status.
        """
        params = ListParams.from_query(request.query_params)
        filters = self.resource.echo_filters(params)

        try:
            page = list_records(self.resource, self.doctor, params)
            data = self._records(page.items)
            record_stats = stats.compute_stats(self.resource.key, self.doctor)
        except DatabaseError:
            logger.error(
                f'Failed to list {self.resource.key}',
                exc_info=True,
                extra={'event': 'clinical_list_failed', 'resource': self.resource.key}
            )
            return Response({
                'success': False,
                'data': [],
                'meta': {'total': 0, 'page': params.page, 'per_page': params.per_page, 'last_page': 1},
                'stats': stats.empty_stats(self.resource.key),
                'filters': filters,
                'error': self.resource.messages['load_error'],
            })

        return Response({
            'success': True,
            'data': data,
            'meta': page.meta,
            'stats': record_stats,
            'filters': filters,
        })

    def create(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        instance = services.create_record(self.resource, self.doctor, serializer.validated_data)
        return Response(
            {
                'success': True,
                'message': self.resource.messages['created'],
                self.resource.singular: self._record(instance),
            },
            status=status.HTTP_201_CREATED
        )

    def retrieve(self, request, pk=None):
        instance = self.get_object()
        return Response({'success': True, self.resource.singular: self._record(instance)})

    def update(self, request, pk=None, **kwargs):
        """PUT and PATCH both apply only the submitted fields."""
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        instance = services.update_record(self.resource, self.doctor, instance, serializer.validated_data)
        return Response({
            'success': True,
            'message': self.resource.messages['updated'],
            self.resource.singular: self._record(instance),
        })

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        instance = self.get_object()
        services.soft_delete_record(self.resource, self.doctor, instance)
        return Response({'success': True, 'message': self.resource.messages['deleted']})

    @action(detail=False, methods=['get'], url_path='search/quick')
    def quick(self, request):
        """GET /api/<records>/search/quick/?q= (bare list, empty on database failure)"""
        try:
            results = quick_search(self.resource, self.doctor, request.query_params.get('q', ''))
        except DatabaseError:
            logger.error(
                f'Quick search failed for {self.resource.key}',
                exc_info=True,
                extra={'event': 'clinical_quick_search_failed', 'resource': self.resource.key}
            )
            results = []
        return Response(results)

    def _listing(self, queryset, *ordering):
        return {'success': True, self.resource.key: self._records(queryset.order_by(*ordering))}


# ============================================================================
# Patients
# ============================================================================

class PatientViewSet(ClinicalRecordViewSet):
    resource = PATIENTS

    def retrieve(self, request, pk=None):
        patient = self.get_object()
        return Response({
            'success': True,
            'patient': self._record(patient),
            'patient_stats': stats.patient_record_stats(patient),
        })

    @action(detail=True, methods=['patch'])
    def favorite(self, request, pk=None):
        """PATCH /api/patients/{id}/favorite/"""
        patient = services.toggle_patient_favorite(self.doctor, self.get_object())
        return Response({
            'success': True,
            'message': 'Adicionado aos favoritos!' if patient.favorite else 'Removido dos favoritos!',
            'favorite': patient.favorite,
        })

    def _patient_records(self, resource):
        patient = self.get_object()
        records = (
            resource.base_queryset(self.doctor)
            .filter(patient=patient)
            .order_by(f'-{resource.default_sort}', '-id')
        )
        context = self.get_serializer_context()
        return Response({
            'success': True,
            resource.key: resource.serializer_class(records, many=True, context=context).data,
            'patient': PatientSerializer(patient, context=context).data,
        })

    @action(detail=True, methods=['get'], url_path='consultations')
    def consultations(self, request, pk=None):
        return self._patient_records(CONSULTATIONS)

    @action(detail=True, methods=['get'], url_path='anamneses')
    def anamneses(self, request, pk=None):
        return self._patient_records(ANAMNESES)

    @action(detail=True, methods=['get'], url_path='exams')
    def exams(self, request, pk=None):
        return self._patient_records(EXAMS)

    @action(detail=True, methods=['get'], url_path='prescriptions')
    def prescriptions(self, request, pk=None):
        return self._patient_records(PRESCRIPTIONS)

    @action(detail=True, methods=['get'], url_path='notes')
    def notes(self, request, pk=None):
        return self._patient_records(NOTES)


# ============================================================================
# Consultations
# ============================================================================

class ConsultationViewSet(ClinicalRecordViewSet):
    resource = CONSULTATIONS

    @action(detail=True, methods=['patch'], url_path='status')
    def change_status(self, request, pk=None):
        """
        PATCH /api/consultations/{id}/status/

        Body: ``{"status": "...", "reason": "..."}``; the reason, when given,
        replaces additional_notes.
        """
        consultation = self.get_object()
        serializer = ConsultationStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        consultation = services.update_consultation_status(
            self.doctor,
            consultation,
            serializer.validated_data['status'],
            reason=serializer.validated_data.get('reason'),
        )
        return Response({
            'success': True,
            'message': 'Status da consulta atualizado com sucesso!',
            'consultation': self._record(consultation),
        })

    @action(detail=False, methods=['get'], url_path='filter/today')
    def today(self, request):
        return Response(self._listing(self.get_queryset().today(), 'consultation_time', 'consultation_date'))

    @action(detail=False, methods=['get'], url_path='filter/upcoming')
    def upcoming(self, request):
        limit = _int_param(request, 'limit', 10, maximum=settings.CLINICAL_MAX_PAGE_SIZE)
        queryset = self.get_queryset().upcoming().order_by('consultation_date', 'consultation_time')[:limit]
        return Response({'success': True, 'consultations': self._records(queryset)})

    @action(detail=False, methods=['get'], url_path='reports/stats')
    def report_stats(self, request):
        """GET /api/consultations/reports/stats/?period=<days> (default 30)"""
        period = _int_param(request, 'period', 30, minimum=0)
        return Response({'success': True, 'stats': stats.consultation_period_stats(self.doctor, period)})


# ============================================================================
# Anamneses
# ============================================================================

def _period_queryset(resource, doctor, date_field, validated):
    """Doctor's records whose ``date_field`` falls on a day of the period."""
    queryset = resource.base_queryset(doctor).filter(**{
        f'{date_field}__date__gte': validated['date_from'],
        f'{date_field}__date__lte': validated['date_to'],
    })
    if validated.get('patient_id'):
        patient = services.get_owned(PATIENTS, validated['patient_id'], doctor)
        queryset = queryset.filter(patient=patient)
    return queryset


def _period(validated):
    return {'from': validated['date_from'], 'to': validated['date_to']}


class AnamnesisViewSet(ClinicalRecordViewSet):
    resource = ANAMNESES

    @action(detail=False, methods=['get'], url_path=r'template/(?P<patient_id>[^/.]+)')
    def template(self, request, patient_id=None):
        """Blank anamnesis carrying over the histories of the latest one."""
        patient = services.get_owned(PATIENTS, patient_id, self.doctor)
        template, has_previous = services.anamnesis_template(self.doctor, patient)
        return Response({
            'success': True,
            'template': template,
            'patient': PatientSerializer(patient, context=self.get_serializer_context()).data,
            'has_previous': has_previous,
        })

    @action(detail=False, methods=['get'], url_path='reports/period')
    def report(self, request):
        params = PeriodReportSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        validated = params.validated_data

        anamneses = _period_queryset(self.resource, self.doctor, 'anamnese_date', validated)
        anamneses = anamneses.order_by('-anamnese_date', '-id')
        return Response({
            'success': True,
            'anamneses': self._records(anamneses),
            'stats': stats.anamnesis_period_report(anamneses, validated['date_from'], validated['date_to']),
            'period': _period(validated),
        })


# ============================================================================
# Exams
# ============================================================================

class ExamViewSet(ClinicalRecordViewSet):
    resource = EXAMS

    @action(detail=True, methods=['patch'], url_path='status')
    def change_status(self, request, pk=None):
        """PATCH /api/exams/{id}/status/ with status and optional results / additional_notes"""
        exam = self.get_object()
        serializer = ExamStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        changes = dict(serializer.validated_data)
        new_status = changes.pop('status')
        exam = services.update_exam_status(self.doctor, exam, new_status, **changes)
        return Response({
            'success': True,
            'message': 'Status do exame atualizado com sucesso!',
            'exam': self._record(exam),
        })

    @action(detail=False, methods=['get'], url_path='filter/pending')
    def pending(self, request):
        return Response(self._listing(self.get_queryset().filter(status=ExamStatusChoices.PENDING), 'exam_date', 'id'))

    @action(detail=False, methods=['get'], url_path='reports/period')
    def report(self, request):
        params = ExamPeriodReportSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        validated = params.validated_data

        exams = _period_queryset(self.resource, self.doctor, 'exam_date', validated)
        for name in ('exam_type', 'status'):
            if validated.get(name):
                exams = exams.filter(**{name: validated[name]})
        exams = exams.order_by('-exam_date', '-id')

        return Response({
            'success': True,
            'exams': self._records(exams),
            'stats': stats.exam_period_report(exams),
            'period': _period(validated),
        })


# ============================================================================
# Prescriptions
# ============================================================================

class PrescriptionViewSet(ClinicalRecordViewSet):
    resource = PRESCRIPTIONS

    @action(detail=False, methods=['get'], url_path='filter/active')
    def active(self, request):
        return Response(self._listing(self.get_queryset().active(), '-data_emissao', '-id'))

    @action(detail=False, methods=['get'], url_path='filter/expired')
    def expired(self, request):
        return Response(self._listing(self.get_queryset().expired(), '-expiration_date', '-id'))

    @action(detail=True, methods=['post'], url_path='pdf')
    def pdf(self, request, pk=None):
        """POST /api/prescriptions/{id}/pdf/"""
        prescription = services.generate_prescription_pdf(self.doctor, self.get_object())
        return Response({
            'success': True,
            'message': 'PDF gerado com sucesso!',
            'pdf_url': prescription.pdf_url,
        })


# ============================================================================
# Notes
# ============================================================================

class NoteViewSet(ClinicalRecordViewSet):
    resource = NOTES

    def retrieve(self, request, pk=None):
        """Reading a note counts as a view."""
        note = services.record_note_view(self.get_object())
        return Response({'success': True, 'note': self._record(note)})

    @action(detail=True, methods=['patch'])
    def important(self, request, pk=None):
        """PATCH /api/notes/{id}/important/"""
        note = services.toggle_note_important(self.doctor, self.get_object())
        return Response({
            'success': True,
            'message': 'Marcada como importante!' if note.is_important else 'Desmarcada como importante!',
            'is_important': note.is_important,
        })

    @action(detail=False, methods=['get'], url_path='filter/important')
    def important_list(self, request):
        return Response(self._listing(self.get_queryset().important(), '-last_modified', '-id'))
