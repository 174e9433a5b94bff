"""
Tests for Prescription API endpoints.
"""
from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework import status

from apps.clinical.models import Prescription


@pytest.fixture
def expired_prescription(doctor, patient):
    return Prescription.objects.create(
        doctor=doctor,
        patient=patient,
        titulo='Antibiótico',
        tipo='medicamento',
        data_emissao=timezone.now() - timedelta(days=40),
        expiration_date=timezone.now() - timedelta(days=10),
        status='expired',
    )


@pytest.mark.django_db
class TestPrescriptionWrites:

    endpoint = '/api/prescriptions/'

    def test_create_with_medicamentos_alias(self, doctor_client, patient, local_day):
        payload = {
            'patient_id': str(patient.id),
            'titulo': 'Anti-inflamatório',
            'tipo': 'medicamento',
            'data_emissao': local_day(0),
            'expiration_date': local_day(15),
            'medicamentos': [{'name': 'Ibuprofeno', 'dose': '400mg'}],
        }

        response = doctor_client.post(self.endpoint, payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['message'] == 'Prescrição criada com sucesso!'
        body = response.data['prescription']
        assert body['medications'] == [{'name': 'Ibuprofeno', 'dose': '400mg'}]
        assert body['medicamentos'] == body['medications']
        assert body['status'] == 'active'

    def test_expiration_must_follow_issue(self, doctor_client, patient, local_day):
        payload = {
            'patient_id': str(patient.id),
            'titulo': 'Repouso',
            'tipo': 'repouso',
            'data_emissao': local_day(0),
            'expiration_date': local_day(0),
        }

        response = doctor_client.post(self.endpoint, payload, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert 'expiration_date' in response.data['errors']

    def test_future_issue_date_returns_422(self, doctor_client, patient, local_day):
        payload = {
            'patient_id': str(patient.id),
            'titulo': 'Dieta',
            'tipo': 'dieta',
            'data_emissao': local_day(1),
        }

        response = doctor_client.post(self.endpoint, payload, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert 'data_emissao' in response.data['errors']

    def test_update_checks_expiration_against_stored_issue_date(self, doctor_client, prescription, local_day):
        response = doctor_client.patch(
            f'/api/prescriptions/{prescription.id}/',
            {'expiration_date': local_day(-10)},
            format='json'
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert 'expiration_date' in response.data['errors']

    def test_generate_pdf(self, doctor_client, prescription, settings):
        settings.PRESCRIPTION_PDF_BASE_URL = 'https://files.example.com/'

        response = doctor_client.post(f'/api/prescriptions/{prescription.id}/pdf/')

        assert response.status_code == status.HTTP_200_OK
        expected = f'https://files.example.com/storage/prescriptions/{prescription.id}.pdf'
        assert response.data == {'success': True, 'message': 'PDF gerado com sucesso!', 'pdf_url': expected}
        prescription.refresh_from_db()
        assert prescription.pdf_url == expected


@pytest.mark.django_db
class TestPrescriptionFilters:

    def test_expired(self, doctor_client, prescription, expired_prescription):
        response = doctor_client.get('/api/prescriptions/filter/expired/')

        assert [p['id'] for p in response.data['prescriptions']] == [str(expired_prescription.id)]

    def test_active_includes_legacy_status(self, doctor_client, doctor, patient, prescription, expired_prescription):
        legacy = Prescription.objects.create(
            doctor=doctor,
            patient=patient,
            titulo='Vitamina D',
            tipo='medicamento',
            data_emissao=timezone.now() - timedelta(days=5),
            status='Ativa',
        )

        response = doctor_client.get('/api/prescriptions/filter/active/')

        assert [p['id'] for p in response.data['prescriptions']] == [str(prescription.id), str(legacy.id)]

    def test_expired_flag_requires_literal_true(self, doctor_client, prescription, expired_prescription):
        flagged = doctor_client.get('/api/prescriptions/', {'expired': 'true'})
        ignored = doctor_client.get('/api/prescriptions/', {'expired': '1'})

        assert flagged.data['meta']['total'] == 1
        assert ignored.data['meta']['total'] == 2

    def test_list_stats(self, doctor_client, doctor, patient, prescription, expired_prescription):
        Prescription.objects.create(
            doctor=doctor,
            patient=patient,
            titulo='Fisioterapia',
            tipo='procedimento',
            data_emissao=timezone.now() - timedelta(days=2),
            status='completed',
        )

        response = doctor_client.get('/api/prescriptions/')

        stats = response.data['stats']
        assert stats['total'] == 3
        assert stats['active'] == 1
        assert stats['expired'] == 1
        assert stats['by_type'] == {'medicamento': 2, 'procedimento': 1}
        assert stats['completion_rate'] == 33.33
