"""
Tests for dashboard endpoints.
"""
from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework import status

from apps.clinical.models import Exam


@pytest.mark.django_db
class TestDashboardStats:

    endpoint = '/api/dashboard/stats/'

    def test_empty_dashboard(self, doctor_client):
        response = doctor_client.get(self.endpoint)

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {
            'patients': {'total': 0, 'favorites': 0, 'new_this_month': 0},
            'consultations': {'total': 0, 'today': 0, 'upcoming': 0, 'this_month': 0},
            'exams': {'total': 0, 'pending': 0, 'completed': 0},
            'prescriptions': {'total': 0, 'active': 0, 'expired': 0},
            'notes': {'total': 0, 'important': 0},
        }

    def test_counts(self, doctor_client, patient, consultation, exam, prescription, note):
        response = doctor_client.get(self.endpoint)

        assert response.data['patients']['total'] == 1
        assert response.data['patients']['new_this_month'] == 1
        assert response.data['consultations']['upcoming'] == 1
        assert response.data['exams']['pending'] == 1
        assert response.data['prescriptions']['active'] == 1
        assert response.data['notes'] == {'total': 1, 'important': 0}


@pytest.mark.django_db
class TestRecentActivity:

    endpoint = '/api/dashboard/recent-activity/'

    def test_merges_and_orders_by_creation(self, doctor_client, consultation, prescription):
        response = doctor_client.get(self.endpoint)

        activities = response.data['activities']
        assert [a['type'] for a in activities] == ['prescription', 'consultation']
        assert activities[0]['title'] == 'Prescrição criada'
        assert activities[0]['description'] == 'Analgésico - Maria Silva'
        assert activities[1]['description'] == 'Paciente: Maria Silva'

    def test_limit(self, doctor_client, doctor, patient):
        for i in range(4):
            Exam.objects.create(
                doctor=doctor,
                patient=patient,
                exam_name=f'Exame {i}',
                exam_type='laboratorial',
                exam_date=timezone.now() + timedelta(days=i),
            )

        response = doctor_client.get(self.endpoint, {'limit': 2})

        assert [a['description'] for a in response.data['activities']] == [
            'Exame 3 - Maria Silva',
            'Exame 2 - Maria Silva',
        ]

    def test_invalid_limit_uses_default(self, doctor_client, consultation):
        response = doctor_client.get(self.endpoint, {'limit': 'lots'})

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['activities']) == 1
