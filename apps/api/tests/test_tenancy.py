"""
Tenant isolation: a doctor never sees or touches another doctor's records.

Foreign and nonexistent ids are indistinguishable (same 404 and message).
"""
import uuid

import pytest
from rest_framework import status

from apps.clinical.models import Consultation, Exam, Note, Patient


@pytest.mark.django_db
class TestRecordIsolation:

    @pytest.mark.parametrize('route,fixture_name,message', [
        ('patients', 'patient', 'Paciente não encontrado'),
        ('consultations', 'consultation', 'Consulta não encontrada'),
        ('anamneses', 'anamnesis', 'Anamnese não encontrada'),
        ('exams', 'exam', 'Exame não encontrado'),
        ('prescriptions', 'prescription', 'Prescrição não encontrada'),
        ('notes', 'note', 'Anotação não encontrada'),
    ])
    def test_foreign_record_is_not_found(self, other_doctor_client, request, route, fixture_name, message):
        record = request.getfixturevalue(fixture_name)
        endpoint = f'/api/{route}/{record.id}/'

        foreign = other_doctor_client.get(endpoint)
        missing = other_doctor_client.get(f'/api/{route}/{uuid.uuid4()}/')

        assert foreign.status_code == status.HTTP_404_NOT_FOUND
        assert foreign.data == {'success': False, 'message': message}
        assert missing.data == foreign.data

    def test_foreign_record_cannot_be_updated_or_deleted(self, other_doctor_client, patient):
        endpoint = f'/api/patients/{patient.id}/'

        updated = other_doctor_client.patch(endpoint, {'patient_name': 'Invasor'}, format='json')
        deleted = other_doctor_client.delete(endpoint)

        assert updated.status_code == status.HTTP_404_NOT_FOUND
        assert deleted.status_code == status.HTTP_404_NOT_FOUND
        patient.refresh_from_db()
        assert patient.patient_name == 'Maria Silva'
        assert patient.is_deleted is False

    def test_listing_only_shows_own_records(self, other_doctor_client, patient, other_patient):
        response = other_doctor_client.get('/api/patients/')

        assert [p['id'] for p in response.data['data']] == [str(other_patient.id)]
        assert response.data['stats']['total'] == 1

    def test_favorite_on_foreign_patient(self, other_doctor_client, patient):
        response = other_doctor_client.patch(f'/api/patients/{patient.id}/favorite/')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        patient.refresh_from_db()
        assert patient.favorite is False

    def test_foreign_patient_records_route(self, other_doctor_client, patient, consultation):
        response = other_doctor_client.get(f'/api/patients/{patient.id}/consultations/')

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestRelationOwnership:
    """patient_id / consultation_id in a payload must belong to the doctor."""

    def test_create_consultation_for_foreign_patient(self, doctor_client, other_patient, local_day):
        payload = {
            'patient_id': str(other_patient.id),
            'consultation_date': local_day(1),
            'consultation_time': '09:00',
            'consultation_type': 'presencial',
            'reason_for_visit': 'Teste',
        }

        response = doctor_client.post('/api/consultations/', payload, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['message'] == 'Paciente não encontrado'
        assert not Consultation.objects.exists()
        other_patient.refresh_from_db()
        assert other_patient.last_consultation_date is None

    def test_create_note_for_unknown_patient(self, doctor_client):
        payload = {
            'patient_id': str(uuid.uuid4()),
            'note_title': 'X',
            'note_text': 'Y',
            'note_type': 'general',
        }

        response = doctor_client.post('/api/notes/', payload, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert not Note.objects.exists()

    def test_move_record_to_foreign_patient(self, doctor_client, note, other_patient):
        response = doctor_client.patch(
            f'/api/notes/{note.id}/',
            {'patient_id': str(other_patient.id)},
            format='json'
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        note.refresh_from_db()
        assert note.patient_id != other_patient.id

    def test_exam_with_foreign_consultation(self, doctor_client, other_doctor, other_patient, patient, local_day):
        foreign = Consultation.objects.create(
            doctor=other_doctor,
            patient=other_patient,
            consultation_date=other_patient.created_at,
            reason_for_visit='Alheia',
        )
        payload = {
            'patient_id': str(patient.id),
            'consultation_id': str(foreign.id),
            'exam_name': 'ECG',
            'exam_type': 'funcional',
            'exam_date': local_day(1),
        }

        response = doctor_client.post('/api/exams/', payload, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['message'] == 'Consulta não encontrada'
        assert not Exam.objects.exists()

    def test_global_search_is_scoped(self, other_doctor_client, patient):
        response = other_doctor_client.get('/api/search/global/', {'q': 'Maria'})

        assert response.data['patients'] == []


@pytest.mark.django_db
class TestSoftDelete:

    def test_deleted_record_disappears_everywhere(self, doctor_client, patient, consultation):
        doctor_client.delete(f'/api/consultations/{consultation.id}/')

        assert Consultation.objects.filter(pk=consultation.id).exists()
        assert doctor_client.get(f'/api/consultations/{consultation.id}/').status_code == status.HTTP_404_NOT_FOUND
        assert doctor_client.get('/api/consultations/').data['data'] == []
        assert doctor_client.get(f'/api/patients/{patient.id}/consultations/').data['consultations'] == []
        assert doctor_client.get('/api/consultations/search/quick/', {'q': 'cabeça'}).data == []
        assert doctor_client.get('/api/dashboard/stats/').data['consultations']['total'] == 0

    def test_deleted_patient_is_not_a_valid_relation(self, doctor_client, patient, local_day):
        Patient.objects.filter(pk=patient.pk).update(is_deleted=True)

        response = doctor_client.post('/api/exams/', {
            'patient_id': str(patient.id),
            'exam_name': 'ECG',
            'exam_type': 'funcional',
            'exam_date': local_day(1),
        }, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
