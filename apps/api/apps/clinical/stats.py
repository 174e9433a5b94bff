"""
Statistics aggregator for clinical records.

All figures are computed fresh from the doctor's live rows on each call.
Ratios with an empty denominator are reported as 0.
"""
from collections import Counter
from datetime import timedelta

from django.conf import settings
from django.db.models import Avg, Count, Sum
from django.utils import timezone

from apps.clinical.models import (
    Anamnesis,
    Consultation,
    ConsultationStatusChoices,
    Exam,
    ExamStatusChoices,
    Note,
    Patient,
    Prescription,
    PrescriptionStatusChoices,
)


def safe_rate(numerator, denominator, places=2):
    """Percentage ``numerator / denominator * 100`` rounded, 0 when denominator is 0."""
    if not denominator:
        return 0
    return round(numerator / denominator * 100, places)


def count_by(queryset, field_name):
    """``{value: count}`` for a column, skipping nulls and blanks."""
    rows = (
        queryset.exclude(**{f'{field_name}__isnull': True})
        .exclude(**{field_name: ''})
        .values(field_name)
        .annotate(count=Count('id'))
        .order_by(field_name)
    )
    return {row[field_name]: row['count'] for row in rows}


def _this_month(queryset, field_name):
    now = timezone.localtime()
    return queryset.filter(**{f'{field_name}__year': now.year, f'{field_name}__month': now.month})


def _this_week(queryset, field_name):
    today = timezone.localdate()
    start = today - timedelta(days=today.weekday())
    end = start + timedelta(days=6)
    return queryset.filter(**{f'{field_name}__date__range': (start, end)})


# ============================================================================
# Listing stats
# ============================================================================

EMPTY_STATS = {
    'patients': {
        'total': 0,
        'favorites': 0,
        'recent_consultations': 0,
        'blood_types': {},
    },
    'consultations': {
        'total': 0,
        'today': 0,
        'upcoming': 0,
        'completed': 0,
        'scheduled': 0,
        'cancelled': 0,
        'avg_duration': 0,
    },
    'anamneses': {
        'total': 0,
        'this_month': 0,
        'this_week': 0,
        'with_allergies': 0,
    },
    'exams': {
        'total': 0,
        'pending': 0,
        'completed': 0,
        'in_progress': 0,
        'this_month': 0,
        'by_category': {},
    },
    'prescriptions': {
        'total': 0,
        'active': 0,
        'expired': 0,
        'this_month': 0,
        'by_type': {},
        'completion_rate': 0,
    },
    'notes': {
        'total': 0,
        'important': 0,
        'this_month': 0,
        'by_type': {},
        'total_views': 0,
    },
}


def empty_stats(resource_key):
    """Zeroed stats for a record type (fresh copy)."""
    return {
        key: (dict(value) if isinstance(value, dict) else value)
        for key, value in EMPTY_STATS[resource_key].items()
    }


def patient_stats(doctor):
    patients = Patient.objects.owned_by(doctor)
    recent_days = settings.CLINICAL_RECENT_WINDOW_DAYS
    return {
        'total': patients.count(),
        'favorites': patients.filter(favorite=True).count(),
        'recent_consultations': Consultation.objects.owned_by(doctor).in_last_days(recent_days).count(),
        'blood_types': count_by(patients, 'blood_type'),
    }


def consultation_stats(doctor):
    consultations = Consultation.objects.owned_by(doctor)
    avg_duration = consultations.aggregate(avg=Avg('consultation_duration'))['avg']
    return {
        'total': consultations.count(),
        'today': consultations.today().count(),
        'upcoming': consultations.upcoming().count(),
        'completed': consultations.filter(status=ConsultationStatusChoices.COMPLETED).count(),
        'scheduled': consultations.filter(status=ConsultationStatusChoices.SCHEDULED).count(),
        'cancelled': consultations.filter(status=ConsultationStatusChoices.CANCELLED).count(),
        'avg_duration': round(avg_duration, 2) if avg_duration else 0,
    }


def anamnesis_stats(doctor):
    anamneses = Anamnesis.objects.owned_by(doctor)
    return {
        'total': anamneses.count(),
        'this_month': _this_month(anamneses, 'anamnese_date').count(),
        'this_week': _this_week(anamneses, 'anamnese_date').count(),
        'with_allergies': sum(1 for allergies in anamneses.values_list('allergies', flat=True) if allergies),
    }


def exam_stats(doctor):
    exams = Exam.objects.owned_by(doctor)
    return {
        'total': exams.count(),
        'pending': exams.filter(status=ExamStatusChoices.PENDING).count(),
        'completed': exams.filter(status=ExamStatusChoices.COMPLETED).count(),
        'in_progress': exams.filter(status=ExamStatusChoices.IN_PROGRESS).count(),
        'this_month': _this_month(exams, 'exam_date').count(),
        'by_category': count_by(exams, 'exam_category'),
    }


def prescription_stats(doctor):
    prescriptions = Prescription.objects.owned_by(doctor)
    total = prescriptions.count()
    completed = prescriptions.filter(status=PrescriptionStatusChoices.COMPLETED).count()
    return {
        'total': total,
        'active': prescriptions.active().count(),
        'expired': prescriptions.expired().count(),
        'this_month': _this_month(prescriptions, 'data_emissao').count(),
        'by_type': count_by(prescriptions, 'tipo'),
        'completion_rate': safe_rate(completed, total),
    }


def note_stats(doctor):
    notes = Note.objects.owned_by(doctor)
    return {
        'total': notes.count(),
        'important': notes.important().count(),
        'this_month': notes.created_this_month().count(),
        'by_type': count_by(notes, 'note_type'),
        'total_views': notes.aggregate(total=Sum('view_count'))['total'] or 0,
    }


# ============================================================================
# Per-patient and reports
# ============================================================================

def patient_record_stats(patient):
    """Summary shown on the patient detail view."""
    consultations = Consultation.objects.owned_by(patient.doctor).filter(patient=patient)
    last = consultations.order_by('-consultation_date').values_list('consultation_date', flat=True).first()
    return {
        'total_consultations': consultations.count(),
        'last_consultation': last,
        'total_exams': Exam.objects.owned_by(patient.doctor).filter(patient=patient).count(),
        'total_prescriptions': Prescription.objects.owned_by(patient.doctor).filter(patient=patient).count(),
        'bmi': patient.bmi,
    }


def consultation_period_stats(doctor, period_days):
    """Consultations since ``period_days`` ago: totals, by type and by day."""
    consultations = Consultation.objects.owned_by(doctor).in_last_days(period_days)
    by_day = Counter(
        timezone.localtime(value).date().isoformat()
        for value in consultations.values_list('consultation_date', flat=True)
    )
    return {
        'period_stats': {
            'total': consultations.count(),
            'completed': consultations.filter(status=ConsultationStatusChoices.COMPLETED).count(),
            'cancelled': consultations.filter(status=ConsultationStatusChoices.CANCELLED).count(),
            'no_show': consultations.filter(status=ConsultationStatusChoices.NO_SHOW).count(),
        },
        'by_type': count_by(consultations, 'consultation_type'),
        'by_day': [{'date': day, 'count': by_day[day]} for day in sorted(by_day)],
    }


def anamnesis_period_report(anamneses, date_from, date_to):
    """
    Figures for anamneses already restricted to the period.

    ``avg_per_day`` spreads the count over the inclusive number of days.
    """
    rows = list(anamneses.values_list('patient_id', 'diagnosis'))
    total = len(rows)
    days = (date_to - date_from).days + 1
    diagnoses = Counter(diagnosis for _, diagnosis in rows if diagnosis)
    return {
        'total_anamneses': total,
        'unique_patients': len({patient_id for patient_id, _ in rows}),
        'avg_per_day': round(total / days, 2),
        'most_common_diagnoses': dict(diagnoses.most_common(5)),
    }


def exam_period_report(exams):
    """Figures for exams already restricted to the period and filters."""
    total = exams.count()
    completed = exams.filter(status=ExamStatusChoices.COMPLETED).count()
    return {
        'total_exams': total,
        'unique_patients': exams.values('patient_id').distinct().count(),
        'by_status': count_by(exams, 'status'),
        'by_type': count_by(exams, 'exam_type'),
        'by_category': count_by(exams, 'exam_category'),
        'completion_rate': safe_rate(completed, total),
    }


# ============================================================================
# Dashboard
# ============================================================================

def dashboard_stats(doctor):
    patients = Patient.objects.owned_by(doctor)
    consultations = Consultation.objects.owned_by(doctor)
    exams = Exam.objects.owned_by(doctor)
    prescriptions = Prescription.objects.owned_by(doctor)
    notes = Note.objects.owned_by(doctor)

    return {
        'patients': {
            'total': patients.count(),
            'favorites': patients.filter(favorite=True).count(),
            'new_this_month': patients.created_this_month().count(),
        },
        'consultations': {
            'total': consultations.count(),
            'today': consultations.today().count(),
            'upcoming': consultations.upcoming().count(),
            'this_month': _this_month(consultations, 'consultation_date').count(),
        },
        'exams': {
            'total': exams.count(),
            'pending': exams.filter(status=ExamStatusChoices.PENDING).count(),
            'completed': exams.filter(status=ExamStatusChoices.COMPLETED).count(),
        },
        'prescriptions': {
            'total': prescriptions.count(),
            'active': prescriptions.active().count(),
            'expired': prescriptions.expired().count(),
        },
        'notes': {
            'total': notes.count(),
            'important': notes.important().count(),
        },
    }


def _patient_label(patient):
    return patient.patient_name or patient.nome or ''


def recent_activity(doctor, limit):
    """
    Latest consultations, exams and prescriptions merged by creation time.
    """
    consultations = (
        Consultation.objects.owned_by(doctor).select_related('patient').order_by('-created_at')[:limit]
    )
    exams = Exam.objects.owned_by(doctor).select_related('patient').order_by('-created_at')[:limit]
    prescriptions = (
        Prescription.objects.owned_by(doctor).select_related('patient').order_by('-created_at')[:limit]
    )

    activities = [
        {
            'type': 'consultation',
            'title': 'Consulta agendada',
            'description': f'Paciente: {_patient_label(item.patient)}',
            'date': item.consultation_date,
            'created_at': item.created_at,
        }
        for item in consultations
    ]
    activities += [
        {
            'type': 'exam',
            'title': 'Exame solicitado',
            'description': f'{item.exam_name} - {_patient_label(item.patient)}',
            'date': item.exam_date,
            'created_at': item.created_at,
        }
        for item in exams
    ]
    activities += [
        {
            'type': 'prescription',
            'title': 'Prescrição criada',
            'description': f'{item.titulo} - {_patient_label(item.patient)}',
            'date': item.data_emissao,
            'created_at': item.created_at,
        }
        for item in prescriptions
    ]

    activities.sort(key=lambda activity: activity['created_at'], reverse=True)
    return activities[:limit]


STATS_BY_RESOURCE = {
    'patients': patient_stats,
    'consultations': consultation_stats,
    'anamneses': anamnesis_stats,
    'exams': exam_stats,
    'prescriptions': prescription_stats,
    'notes': note_stats,
}


def compute_stats(resource_key, doctor):
    """Listing stats for one record type."""
    return STATS_BY_RESOURCE[resource_key](doctor)
