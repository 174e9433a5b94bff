"""
Quick search per record type and the global search fan-out.

Both return lightweight projections, never full records. Terms shorter than
``CLINICAL_SEARCH_MIN_LENGTH`` return empty results without touching the
database.
"""
from django.conf import settings

from apps.clinical.querying import apply_search
from apps.clinical.resources import CONSULTATIONS, EXAMS, NOTES, PATIENTS, PRESCRIPTIONS


def is_searchable(term):
    return len(term or '') >= settings.CLINICAL_SEARCH_MIN_LENGTH


def _patient_ref(record):
    patient = record.patient
    return {'id': str(patient.id), 'name': patient.full_name}


def _patient_summary(record):
    patient = record.patient
    return {'id': str(patient.id), 'patient_name': patient.patient_name, 'nome': patient.nome}


def _excerpt(text, length=100):
    text = text or ''
    return text[:length] + '...' if len(text) > length else text


# ============================================================================
# Quick search projections
# ============================================================================

def _quick_patient(patient):
    return {
        'id': str(patient.id),
        'name': patient.full_name,
        'email': patient.patient_email,
        'phone': patient.phone,
        'favorite': patient.favorite,
    }


def _quick_consultation(consultation):
    return {
        'id': str(consultation.id),
        'patient': _patient_ref(consultation),
        'consultation_date': consultation.consultation_date,
        'consultation_type': consultation.consultation_type,
        'status': consultation.status,
        'reason_for_visit': consultation.reason_for_visit,
    }


def _quick_anamnesis(anamnesis):
    return {
        'id': str(anamnesis.id),
        'patient': _patient_ref(anamnesis),
        'anamnese_date': anamnesis.anamnese_date,
        'chief_complaint': anamnesis.chief_complaint,
        'diagnosis': anamnesis.diagnosis,
    }


def _quick_exam(exam):
    return {
        'id': str(exam.id),
        'exam_name': exam.exam_name,
        'exam_type': exam.exam_type,
        'status': exam.status,
        'exam_date': exam.exam_date,
        'patient': _patient_ref(exam),
    }


def _quick_prescription(prescription):
    return {
        'id': str(prescription.id),
        'titulo': prescription.titulo,
        'tipo': prescription.tipo,
        'status': prescription.status,
        'data_emissao': prescription.data_emissao,
        'patient': _patient_ref(prescription),
    }


def _quick_note(note):
    return {
        'id': str(note.id),
        'title': note.note_title,
        'excerpt': _excerpt(note.note_text),
        'patient': note.patient.full_name,
        'is_important': note.is_important,
        'last_modified': note.last_modified,
    }


QUICK_PROJECTIONS = {
    'patients': _quick_patient,
    'consultations': _quick_consultation,
    'anamneses': _quick_anamnesis,
    'exams': _quick_exam,
    'prescriptions': _quick_prescription,
    'notes': _quick_note,
}


def quick_search(resource, doctor, term):
    """Up to ``CLINICAL_QUICK_SEARCH_LIMIT`` matches of ``term`` for one record type."""
    term = term or ''
    if not is_searchable(term):
        return []

    queryset = apply_search(resource.base_queryset(doctor), term, resource.all_search_fields)
    queryset = queryset.order_by(f'-{resource.default_sort}', '-id')
    project = QUICK_PROJECTIONS[resource.key]
    return [project(record) for record in queryset[:settings.CLINICAL_QUICK_SEARCH_LIMIT]]


# ============================================================================
# Global search
# ============================================================================

def _global_patient(patient):
    return {
        'id': str(patient.id),
        'patient_name': patient.patient_name,
        'nome': patient.nome,
        'patient_email': patient.patient_email,
    }


def _global_consultation(consultation):
    return {
        'id': str(consultation.id),
        'patient_id': str(consultation.patient_id),
        'reason_for_visit': consultation.reason_for_visit,
        'consultation_date': consultation.consultation_date,
        'patient': _patient_summary(consultation),
    }


def _global_note(note):
    return {
        'id': str(note.id),
        'patient_id': str(note.patient_id),
        'note_title': note.note_title,
        'created_at': note.created_at,
        'patient': _patient_summary(note),
    }


def _global_exam(exam):
    return {
        'id': str(exam.id),
        'patient_id': str(exam.patient_id),
        'exam_name': exam.exam_name,
        'exam_date': exam.exam_date,
        'status': exam.status,
        'patient': _patient_summary(exam),
    }


def _global_prescription(prescription):
    return {
        'id': str(prescription.id),
        'patient_id': str(prescription.patient_id),
        'titulo': prescription.titulo,
        'data_emissao': prescription.data_emissao,
        'patient': _patient_summary(prescription),
    }


# Anamneses are not part of the global search.
GLOBAL_SEARCH = (
    (PATIENTS, _global_patient),
    (CONSULTATIONS, _global_consultation),
    (NOTES, _global_note),
    (EXAMS, _global_exam),
    (PRESCRIPTIONS, _global_prescription),
)


def empty_global_results():
    return {resource.key: [] for resource, _ in GLOBAL_SEARCH}


def search_all(doctor, term):
    """
    Run the term against patients, consultations, notes, exams and
    prescriptions independently. Each bucket holds at most
    ``CLINICAL_GLOBAL_SEARCH_LIMIT`` items.
    """
    term = term or ''
    if not is_searchable(term):
        return empty_global_results()

    limit = settings.CLINICAL_GLOBAL_SEARCH_LIMIT
    results = {}
    for resource, project in GLOBAL_SEARCH:
        queryset = apply_search(resource.base_queryset(doctor), term, resource.global_search_fields)
        queryset = queryset.order_by('-created_at', '-id')[:limit]
        results[resource.key] = [project(record) for record in queryset]
    return results
