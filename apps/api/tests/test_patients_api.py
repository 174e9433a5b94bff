"""
Integration tests for Patient API endpoints.

Tests CRUD operations, alias collapse, soft delete, favorites
and the per-patient record lists.
"""
import pytest
from rest_framework import status
from apps.clinical.models import Patient


@pytest.mark.django_db
class TestPatientCreate:
    """Test POST /api/patients/ - Create patient."""

    endpoint = '/api/patients/'

    def test_create_patient_success(self, doctor_client, doctor):
        payload = {
            'patient_name': 'João Santos',
            'patient_email': 'joao@test.com',
            'patient_gender': 'M',
            'data_nascimento': '1990-04-12',
            'allergies': ['penicilina'],
        }

        response = doctor_client.post(self.endpoint, payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['success'] is True
        assert response.data['message'] == 'Paciente criado com sucesso!'
        created = response.data['patient']
        assert created['patient_name'] == 'João Santos'
        assert created['allergies'] == ['penicilina']
        assert created['favorite'] is False

        patient = Patient.objects.get(pk=created['id'])
        assert patient.doctor == doctor

    def test_nome_backfilled_from_patient_name(self, doctor_client):
        response = doctor_client.post(self.endpoint, {'patient_name': 'Lucia Alves'}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['patient']['nome'] == 'Lucia Alves'
        assert response.data['patient']['full_name'] == 'Lucia Alves'

    def test_celular_collapses_onto_patient_phone(self, doctor_client):
        """Only the alias is sent; both columns are stored."""
        payload = {'patient_name': 'Pedro Rocha', 'celular': '11988887777'}

        response = doctor_client.post(self.endpoint, payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        patient = Patient.objects.get(pk=response.data['patient']['id'])
        assert patient.patient_phone == '11988887777'
        assert patient.celular == '11988887777'

    def test_email_and_blood_type_aliases(self, doctor_client):
        payload = {
            'patient_name': 'Rita Gomes',
            'email': 'rita@test.com',
            'tipo_sanguineo': 'AB-',
        }

        response = doctor_client.post(self.endpoint, payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['patient']['patient_email'] == 'rita@test.com'
        assert response.data['patient']['blood_type'] == 'AB-'

    def test_canonical_value_wins_over_alias(self, doctor_client):
        payload = {
            'patient_name': 'Rita Gomes',
            'patient_phone': '1133334444',
            'celular': '11988887777',
        }

        response = doctor_client.post(self.endpoint, payload, format='json')

        assert response.data['patient']['patient_phone'] == '1133334444'
        assert response.data['patient']['celular'] == '11988887777'

    def test_missing_patient_name_returns_422(self, doctor_client):
        response = doctor_client.post(self.endpoint, {'celular': '11988887777'}, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.data['success'] is False
        assert response.data['message'] == 'Dados inválidos'
        assert 'patient_name' in response.data['errors']
        assert not Patient.objects.exists()

    def test_future_birth_date_returns_422(self, doctor_client, local_day):
        payload = {'patient_name': 'Teste', 'data_nascimento': local_day(1)}

        response = doctor_client.post(self.endpoint, payload, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert 'data_nascimento' in response.data['errors']

    def test_invalid_blood_type_returns_422(self, doctor_client):
        payload = {'patient_name': 'Teste', 'blood_type': 'C+'}

        response = doctor_client.post(self.endpoint, payload, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert 'blood_type' in response.data['errors']

    def test_out_of_range_vitals_collect_all_errors(self, doctor_client):
        payload = {'patient_name': 'Teste', 'height_cm': 20, 'weight_kg': 900, 'patient_age': 200}

        response = doctor_client.post(self.endpoint, payload, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert {'height_cm', 'weight_kg', 'patient_age'} <= set(response.data['errors'])

    def test_json_field_must_be_collection(self, doctor_client):
        payload = {'patient_name': 'Teste', 'allergies': 'penicilina'}

        response = doctor_client.post(self.endpoint, payload, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert 'allergies' in response.data['errors']

    def test_duplicate_cpf_for_same_doctor(self, doctor_client, patient):
        patient.patient_cpf = '123.456.789-00'
        patient.save()

        response = doctor_client.post(
            self.endpoint,
            {'patient_name': 'Outro', 'patient_cpf': '123.456.789-00'},
            format='json'
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert 'patient_cpf' in response.data['errors']

    def test_same_cpf_allowed_for_other_doctor(self, other_doctor_client, patient):
        patient.patient_cpf = '123.456.789-00'
        patient.save()

        response = other_doctor_client.post(
            self.endpoint,
            {'patient_name': 'Outro', 'patient_cpf': '123.456.789-00'},
            format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED


@pytest.mark.django_db
class TestPatientRead:
    """Test GET /api/patients/ and /api/patients/{id}/."""

    def test_list_envelope(self, doctor_client, patient):
        response = doctor_client.get('/api/patients/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['success'] is True
        assert [p['id'] for p in response.data['data']] == [str(patient.id)]
        assert response.data['meta'] == {'total': 1, 'page': 1, 'per_page': 15, 'last_page': 1}
        assert response.data['stats']['total'] == 1
        assert response.data['stats']['blood_types'] == {'O+': 1}
        assert response.data['filters']['sort_by'] == 'created_at'

    def test_favorites_filter(self, doctor_client, doctor, patient):
        Patient.objects.create(doctor=doctor, patient_name='Favorita', favorite=True)

        response = doctor_client.get('/api/patients/', {'favorites': '1'})

        assert [p['patient_name'] for p in response.data['data']] == ['Favorita']
        assert response.data['stats']['favorites'] == 1

    def test_search_matches_phone_alias(self, doctor_client, doctor, patient):
        Patient.objects.create(doctor=doctor, patient_name='Bia', celular='21977776666')

        response = doctor_client.get('/api/patients/', {'search': '977776'})

        assert [p['patient_name'] for p in response.data['data']] == ['Bia']

    def test_retrieve_includes_patient_stats(self, doctor_client, patient, consultation, exam, prescription):
        response = doctor_client.get(f'/api/patients/{patient.id}/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['patient']['id'] == str(patient.id)
        stats = response.data['patient_stats']
        assert stats['total_consultations'] == 1
        assert stats['total_exams'] == 1
        assert stats['total_prescriptions'] == 1
        assert stats['last_consultation'] == consultation.consultation_date
        assert stats['bmi'] == 22.04

    def test_retrieve_bmi_none_without_height(self, doctor_client, doctor):
        patient = Patient.objects.create(doctor=doctor, patient_name='Sem altura', weight_kg=70)

        response = doctor_client.get(f'/api/patients/{patient.id}/')

        assert response.data['patient_stats']['bmi'] is None

    def test_retrieve_malformed_id_returns_404(self, doctor_client):
        response = doctor_client.get('/api/patients/not-a-uuid/')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data == {'success': False, 'message': 'Paciente não encontrado'}


@pytest.mark.django_db
class TestPatientUpdate:
    """Test PATCH/PUT /api/patients/{id}/."""

    def test_patch_updates_only_submitted_fields(self, doctor_client, patient):
        response = doctor_client.patch(
            f'/api/patients/{patient.id}/',
            {'notes': 'Hipertensa'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['message'] == 'Paciente atualizado com sucesso!'
        patient.refresh_from_db()
        assert patient.notes == 'Hipertensa'
        assert patient.patient_name == 'Maria Silva'

    def test_put_is_partial(self, doctor_client, patient):
        response = doctor_client.put(
            f'/api/patients/{patient.id}/',
            {'cidade': 'Campinas'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['patient']['cidade'] == 'Campinas'

    def test_alias_replaces_stored_canonical(self, doctor_client, patient):
        response = doctor_client.patch(
            f'/api/patients/{patient.id}/',
            {'celular': '11911112222'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        patient.refresh_from_db()
        assert patient.celular == '11911112222'
        assert patient.patient_phone == '11911112222'

    def test_explicit_canonical_wins_over_alias_on_update(self, doctor_client, patient):
        doctor_client.patch(
            f'/api/patients/{patient.id}/',
            {'celular': '11911112222', 'patient_phone': '11933334444'},
            format='json'
        )

        patient.refresh_from_db()
        assert patient.patient_phone == '11933334444'
        assert patient.celular == '11911112222'

    def test_alias_fills_empty_canonical_on_update(self, doctor_client, doctor):
        patient = Patient.objects.create(doctor=doctor, patient_name='Sem telefone')

        doctor_client.patch(f'/api/patients/{patient.id}/', {'celular': '11911112222'}, format='json')

        patient.refresh_from_db()
        assert patient.patient_phone == '11911112222'

    def test_invalid_update_leaves_record_unchanged(self, doctor_client, patient):
        response = doctor_client.patch(
            f'/api/patients/{patient.id}/',
            {'cidade': 'Santos', 'height_cm': 10},
            format='json'
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        patient.refresh_from_db()
        assert patient.cidade is None


@pytest.mark.django_db
class TestPatientDelete:
    """Test DELETE /api/patients/{id}/ - soft delete."""

    def test_soft_delete(self, doctor_client, doctor, patient):
        response = doctor_client.delete(f'/api/patients/{patient.id}/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'success': True, 'message': 'Paciente removido com sucesso!'}

        patient.refresh_from_db()
        assert patient.is_deleted is True
        assert patient.deleted_at is not None
        assert patient.deleted_by_user == doctor

    def test_deleted_patient_is_hidden(self, doctor_client, patient):
        doctor_client.delete(f'/api/patients/{patient.id}/')

        assert doctor_client.get(f'/api/patients/{patient.id}/').status_code == status.HTTP_404_NOT_FOUND
        assert doctor_client.get('/api/patients/').data['meta']['total'] == 0
        assert doctor_client.delete(f'/api/patients/{patient.id}/').status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestPatientExtras:
    """Favorites, per-patient lists and quick search."""

    def test_toggle_favorite(self, doctor_client, patient):
        endpoint = f'/api/patients/{patient.id}/favorite/'

        first = doctor_client.patch(endpoint)
        second = doctor_client.patch(endpoint)

        assert first.data == {'success': True, 'message': 'Adicionado aos favoritos!', 'favorite': True}
        assert second.data['message'] == 'Removido dos favoritos!'
        assert second.data['favorite'] is False

    def test_patient_consultations(self, doctor_client, patient, consultation):
        response = doctor_client.get(f'/api/patients/{patient.id}/consultations/')

        assert response.status_code == status.HTTP_200_OK
        assert [c['id'] for c in response.data['consultations']] == [str(consultation.id)]
        assert response.data['patient']['id'] == str(patient.id)

    @pytest.mark.parametrize('records', ['anamneses', 'exams', 'prescriptions', 'notes'])
    def test_patient_record_lists_empty(self, doctor_client, patient, records):
        response = doctor_client.get(f'/api/patients/{patient.id}/{records}/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data[records] == []

    def test_quick_search(self, doctor_client, patient):
        response = doctor_client.get('/api/patients/search/quick/', {'q': 'mar'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data == [{
            'id': str(patient.id),
            'name': 'Maria Silva',
            'email': 'maria@test.com',
            'phone': '11999990000',
            'favorite': False,
        }]

    def test_quick_search_short_term(self, doctor_client, patient):
        response = doctor_client.get('/api/patients/search/quick/', {'q': 'm'})

        assert response.data == []


@pytest.mark.django_db
class TestPatientFavoriteScenario:
    """Create, favorite, then list with and without the favorites filter."""

    def test_favorite_flow(self, doctor_client):
        created = doctor_client.post(
            '/api/patients/',
            {'patient_name': 'Maria Silva', 'data_nascimento': '1985-03-10'},
            format='json'
        )
        assert created.status_code == status.HTTP_201_CREATED
        patient_id = created.data['patient']['id']
        assert created.data['patient']['favorite'] is False

        toggled = doctor_client.patch(f'/api/patients/{patient_id}/favorite/')
        assert toggled.data['favorite'] is True

        with_filter = doctor_client.get('/api/patients/', {'favorites': 'true'})
        without_filter = doctor_client.get('/api/patients/')

        assert [p['id'] for p in with_filter.data['data']] == [patient_id]
        assert [p['id'] for p in without_filter.data['data']] == [patient_id]

    def test_unrecognized_favorites_value_is_not_a_negation(self, doctor_client, doctor, patient):
        Patient.objects.create(doctor=doctor, patient_name='Favorita', favorite=True)

        response = doctor_client.get('/api/patients/', {'favorites': 'false'})

        assert response.data['meta']['total'] == 2
