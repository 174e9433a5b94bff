"""
Tests for quick search and global search.
"""
from unittest.mock import patch

import pytest
from django.db import DatabaseError
from rest_framework import status

from apps.clinical.models import Patient
from apps.clinical.resources import PATIENTS
from apps.clinical.search import quick_search, search_all


@pytest.mark.django_db
class TestQuickSearch:

    def test_short_term_skips_the_database(self, doctor, patient, django_assert_num_queries):
        with django_assert_num_queries(0):
            assert quick_search(PATIENTS, doctor, 'm') == []

    def test_threshold_counts_surrounding_spaces(self, doctor, patient, django_assert_num_queries):
        with django_assert_num_queries(1):
            assert quick_search(PATIENTS, doctor, ' m ') == []

    def test_database_failure_returns_empty_list(self, doctor_client, patient):
        with patch('apps.clinical.search.apply_search', side_effect=DatabaseError('down')):
            response = doctor_client.get('/api/patients/search/quick/', {'q': 'Ma'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data == []

    def test_two_characters_hit_the_database(self, doctor, patient, django_assert_num_queries):
        with django_assert_num_queries(1):
            results = quick_search(PATIENTS, doctor, 'ma')

        assert [r['id'] for r in results] == [str(patient.id)]

    def test_limited_to_ten(self, doctor):
        for i in range(12):
            Patient.objects.create(doctor=doctor, patient_name=f'Paciente {i}')

        assert len(quick_search(PATIENTS, doctor, 'Paciente')) == 10

    def test_phone_prefers_celular(self, doctor):
        Patient.objects.create(
            doctor=doctor,
            patient_name='Joana',
            patient_phone='1130000000',
            celular='11911110000',
        )

        assert quick_search(PATIENTS, doctor, 'Joana')[0]['phone'] == '11911110000'


@pytest.mark.django_db
class TestGlobalSearch:

    endpoint = '/api/search/global/'

    def test_buckets(self, doctor_client, patient, consultation, note, exam, prescription):
        response = doctor_client.get(self.endpoint, {'q': 'Maria'})

        assert response.status_code == status.HTTP_200_OK
        assert set(response.data) == {'patients', 'consultations', 'notes', 'exams', 'prescriptions'}
        assert response.data['patients'] == [{
            'id': str(patient.id),
            'patient_name': 'Maria Silva',
            'nome': 'Maria Silva',
            'patient_email': 'maria@test.com',
        }]
        # Only patients match on name; the other buckets search their own columns
        assert response.data['consultations'] == []

    def test_matches_record_columns(self, doctor_client, patient, consultation, exam):
        response = doctor_client.get(self.endpoint, {'q': 'hemograma'})

        assert [e['id'] for e in response.data['exams']] == [str(exam.id)]
        assert response.data['exams'][0]['patient'] == {
            'id': str(patient.id),
            'patient_name': 'Maria Silva',
            'nome': 'Maria Silva',
        }

    def test_each_bucket_limited_to_five(self, doctor_client, doctor):
        for i in range(7):
            Patient.objects.create(doctor=doctor, patient_name=f'Silvia {i}')

        response = doctor_client.get(self.endpoint, {'q': 'Silvia'})

        assert len(response.data['patients']) == 5

    def test_anamneses_are_not_searched(self, doctor_client, anamnesis):
        response = doctor_client.get(self.endpoint, {'q': 'Enxaqueca'})

        assert 'anamneses' not in response.data
        assert all(bucket == [] for bucket in response.data.values())

    def test_short_term_returns_empty_buckets(self, doctor, patient, django_assert_num_queries):
        with django_assert_num_queries(0):
            results = search_all(doctor, 'M')

        assert results == {
            'patients': [],
            'consultations': [],
            'notes': [],
            'exams': [],
            'prescriptions': [],
        }

    def test_requires_authentication(self, api_client):
        response = api_client.get(self.endpoint, {'q': 'Maria'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
