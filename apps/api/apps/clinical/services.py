"""
Clinical write pipeline.

Every write runs in a single ``transaction.atomic()`` block: relation
ownership checks, alias collapse, server-side stamping and the write itself.
Either all of it is stored or none of it is. Once the block has exited, one
audit line is logged for the write; a failure while logging it is reported
as a warning and never undoes the write.

Callers pass the authenticated doctor explicitly. Nothing here reads the
request.
"""
import logging
import uuid

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from rest_framework.exceptions import APIException

from apps.clinical.aliases import collapse_aliases
from apps.clinical.models import Anamnesis, Consultation, Note, Patient
from apps.clinical.resources import CONSULTATIONS, PATIENTS
from apps.core.exceptions import InternalError, NotFoundError
from apps.core.observability import log_record_write

logger = logging.getLogger(__name__)


# ============================================================================
# Ownership guard
# ============================================================================

def get_owned(resource, pk, doctor):
    """
    Live record ``pk`` of ``doctor``.

    Raises NotFoundError with the record's generic message when the id is
    malformed, absent, soft-deleted or owned by another doctor.
    """
    try:
        record_id = uuid.UUID(str(pk))
    except ValueError:
        raise NotFoundError(resource.messages['not_found'])

    instance = resource.base_queryset(doctor).filter(pk=record_id).first()
    if instance is None:
        raise NotFoundError(resource.messages['not_found'])
    return instance


def _check_relations(doctor, values):
    """Referenced patient and consultation must belong to ``doctor``."""
    if values.get('patient_id') is not None:
        get_owned(PATIENTS, values['patient_id'], doctor)
    if values.get('consultation_id') is not None:
        get_owned(CONSULTATIONS, values['consultation_id'], doctor)


# ============================================================================
# Pipeline
# ============================================================================

def _emit_audit(instance, action, actor, **extra):
    try:
        log_record_write(instance, action, actor, **extra)
    except Exception:
        logger.warning(
            'Audit event could not be logged',
            exc_info=True,
            extra={
                'event': 'audit_log_failed',
                'entity_type': instance.__class__.__name__,
                'entity_id': str(instance.pk),
            }
        )


def _perform_write(work, action, actor, **audit_extra):
    """
    Run ``work`` atomically and audit the record it returns.

    API errors raised by ``work`` (not found, validation) pass through after
    rollback; anything else is logged and surfaces as InternalError.
    """
    try:
        with transaction.atomic():
            instance = work()
    except APIException:
        raise
    except Exception as exc:
        logger.error(
            f'Clinical write failed: {action}',
            exc_info=True,
            extra={'event': 'clinical_write_failed', 'action': action}
        )
        raise InternalError() from exc

    _emit_audit(instance, action, actor, **audit_extra)
    return instance


def _stamp_note(values, doctor):
    values['modified_by'] = doctor
    values['last_modified'] = timezone.now()


def create_record(resource, doctor, validated_data):
    """Create a record owned by ``doctor`` from serializer-validated data."""
    model = resource.model

    def work():
        values = collapse_aliases(model, validated_data)
        _check_relations(doctor, values)
        if model is Note:
            _stamp_note(values, doctor)
            values['view_count'] = 0

        instance = model.objects.create(doctor=doctor, **values)

        if model is Consultation:
            Patient.objects.filter(pk=instance.patient_id).update(
                last_consultation_date=instance.consultation_date
            )
        return instance

    return _perform_write(work, 'created', doctor)


def update_record(resource, doctor, instance, validated_data):
    """Apply a partial update to an owned record."""
    model = resource.model

    def work():
        values = collapse_aliases(model, validated_data, instance=instance)
        _check_relations(doctor, values)
        if model is Note:
            _stamp_note(values, doctor)

        for name, value in values.items():
            setattr(instance, name, value)
        instance.save()
        return instance

    return _perform_write(work, 'updated', doctor, fields=sorted(validated_data))


def soft_delete_record(resource, doctor, instance):
    def work():
        instance.mark_deleted(doctor)
        return instance

    return _perform_write(work, 'deleted', doctor)


# ============================================================================
# Specialised writes
# ============================================================================

def toggle_patient_favorite(doctor, patient):
    def work():
        patient.favorite = not patient.favorite
        patient.save(update_fields=['favorite', 'updated_at'])
        return patient

    return _perform_write(work, 'favorite_toggled', doctor, favorite=not patient.favorite)


def update_consultation_status(doctor, consultation, status, reason=None):
    """Set the status; a non-empty ``reason`` replaces additional_notes."""
    previous = consultation.status

    def work():
        consultation.status = status
        update_fields = ['status', 'updated_at']
        if reason:
            consultation.additional_notes = reason
            update_fields.append('additional_notes')
        consultation.save(update_fields=update_fields)
        return consultation

    return _perform_write(work, 'status_changed', doctor, from_status=previous, to_status=status)


def update_exam_status(doctor, exam, status, **changes):
    """Set the status, plus ``results`` / ``additional_notes`` when submitted."""
    previous = exam.status

    def work():
        exam.status = status
        update_fields = ['status', 'updated_at']
        for name in ('results', 'additional_notes'):
            if name in changes:
                setattr(exam, name, changes[name])
                update_fields.append(name)
        exam.save(update_fields=update_fields)
        return exam

    return _perform_write(work, 'status_changed', doctor, from_status=previous, to_status=status)


def toggle_note_important(doctor, note):
    def work():
        note.is_important = not note.is_important
        note.modified_by = doctor
        note.last_modified = timezone.now()
        note.save(update_fields=['is_important', 'modified_by', 'last_modified', 'updated_at'])
        return note

    return _perform_write(work, 'importance_toggled', doctor)


def record_note_view(note):
    """Increment the view counter atomically and refresh the instance."""
    Note.objects.filter(pk=note.pk).update(view_count=F('view_count') + 1)
    note.refresh_from_db(fields=['view_count'])
    return note


def prescription_pdf_url(prescription):
    base_url = settings.PRESCRIPTION_PDF_BASE_URL.rstrip('/')
    return f'{base_url}/storage/prescriptions/{prescription.id}.pdf'


def generate_prescription_pdf(doctor, prescription):
    """
    Assign the prescription's PDF URL.

    The URL is deterministic; rendering the document is left to the storage
    side.
    """
    def work():
        prescription.pdf_url = prescription_pdf_url(prescription)
        prescription.save(update_fields=['pdf_url', 'updated_at'])
        return prescription

    return _perform_write(work, 'pdf_generated', doctor)


# ============================================================================
# Reads
# ============================================================================

def anamnesis_template(doctor, patient):
    """
    Blank anamnesis pre-filled with the histories of the patient's latest one.

    Returns ``(template, has_previous)``.
    """
    last = (
        Anamnesis.objects.owned_by(doctor)
        .filter(patient=patient)
        .order_by('-anamnese_date')
        .first()
    )

    def carried(name, empty):
        value = getattr(last, name, None) if last else None
        return value if value is not None else empty

    template = {
        'patient_id': str(patient.id),
        'anamnese_date': timezone.localdate().isoformat(),
        'chief_complaint': '',
        'illness_history': '',
        'medical_history': carried('medical_history', []),
        'surgical_history': carried('surgical_history', []),
        'family_history': carried('family_history', ''),
        'social_history': carried('social_history', []),
        'current_medications': carried('current_medications', []),
        'allergies': carried('allergies', []),
        'systems_review': [],
        'physical_exam': [],
        'diagnosis': '',
        'treatment_plan': '',
        'additional_notes': '',
    }
    return template, last is not None
