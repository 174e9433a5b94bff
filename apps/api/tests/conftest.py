"""
Global test fixtures for pytest.

Provides reusable fixtures for API testing:
- Two doctors (tenants) with authenticated API clients
- Clinical records owned by the first doctor
"""
from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from apps.authz.models import User
from apps.clinical.models import (
    Anamnesis,
    Consultation,
    Exam,
    Note,
    Patient,
    Prescription,
)


# ============================================================================
# API Clients
# ============================================================================

@pytest.fixture
def api_client():
    """Unauthenticated DRF API client."""
    return APIClient()


@pytest.fixture
def doctor(db):
    return User.objects.create_user(
        email='doctor@test.com',
        password='testpass123',
        name='Dra. Ana Souza',
        crm='123456-SP',
        specialty='Clínica Geral',
    )


@pytest.fixture
def other_doctor(db):
    return User.objects.create_user(
        email='other.doctor@test.com',
        password='testpass123',
        name='Dr. Bruno Lima',
    )


@pytest.fixture
def doctor_client(doctor):
    """Authenticated API client for ``doctor``."""
    client = APIClient()
    client.force_authenticate(user=doctor)
    return client


@pytest.fixture
def other_doctor_client(other_doctor):
    """Authenticated API client for ``other_doctor``."""
    client = APIClient()
    client.force_authenticate(user=other_doctor)
    return client


# ============================================================================
# Model instances
# ============================================================================

@pytest.fixture
def patient(doctor):
    return Patient.objects.create(
        doctor=doctor,
        patient_name='Maria Silva',
        nome='Maria Silva',
        patient_email='maria@test.com',
        patient_phone='11999990000',
        blood_type='O+',
        height_cm=165,
        weight_kg=60,
    )


@pytest.fixture
def other_patient(other_doctor):
    """Patient of another doctor."""
    return Patient.objects.create(
        doctor=other_doctor,
        patient_name='Carlos Pereira',
        patient_email='carlos@test.com',
    )


@pytest.fixture
def consultation(doctor, patient):
    return Consultation.objects.create(
        doctor=doctor,
        patient=patient,
        consultation_date=timezone.now() + timedelta(days=2),
        consultation_type='presencial',
        reason_for_visit='Dor de cabeça recorrente',
    )


@pytest.fixture
def anamnesis(doctor, patient):
    return Anamnesis.objects.create(
        doctor=doctor,
        patient=patient,
        anamnese_date=timezone.now() - timedelta(days=1),
        chief_complaint='Cefaleia',
        illness_history='Dor há duas semanas',
        diagnosis='Enxaqueca',
        allergies=['dipirona'],
    )


@pytest.fixture
def exam(doctor, patient):
    return Exam.objects.create(
        doctor=doctor,
        patient=patient,
        exam_name='Hemograma completo',
        exam_type='laboratorial',
        exam_category='sangue',
        exam_date=timezone.now() + timedelta(days=3),
    )


@pytest.fixture
def prescription(doctor, patient):
    return Prescription.objects.create(
        doctor=doctor,
        patient=patient,
        titulo='Analgésico',
        tipo='medicamento',
        data_emissao=timezone.now() - timedelta(days=1),
        expiration_date=timezone.now() + timedelta(days=30),
        medications=[{'name': 'Paracetamol', 'dose': '750mg'}],
    )


@pytest.fixture
def note(doctor, patient):
    return Note.objects.create(
        doctor=doctor,
        patient=patient,
        note_title='Retorno',
        note_text='Paciente relata melhora.',
        note_type='follow_up',
        last_modified=timezone.now(),
        modified_by=doctor,
    )


@pytest.fixture
def local_day():
    """ISO date ``days`` from today in the active timezone."""
    def _local_day(days=0):
        return (timezone.localdate() + timedelta(days=days)).isoformat()
    return _local_day
