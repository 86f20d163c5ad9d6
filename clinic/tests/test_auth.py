import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from clinic.models import AuditEvent, DoctorProfile, PatientProfile, User

from .conftest import PASSWORD

pytestmark = pytest.mark.django_db


def login(client, portal, email, password=PASSWORD):
    return client.post(reverse(f'{portal}-login'), {'email': email, 'password': password}, format='json')


def test_patient_register_then_login_returns_tokens(api):
    r = api.post(reverse('patient-register'), {
        'name': 'Siti Aminah', 'email': 'Siti@Example.com', 'password': PASSWORD,
    }, format='json')
    assert r.status_code == 201
    assert r.data['ok'] is True
    assert r.data['data']['user']['role'] == 'patient'
    assert r.data['data']['token']
    user = User.objects.get(email='siti@example.com')
    assert PatientProfile.objects.filter(user=user).exists()

    r = login(APIClient(), 'patient', 'siti@example.com')
    assert r.status_code == 200
    assert r.data['data']['token'] and r.data['data']['jwt_access'] and r.data['data']['jwt_refresh']


def test_duplicate_email_is_rejected(api, patient):
    r = api.post(reverse('patient-register'), {'name': 'Dup', 'email': patient.email, 'password': PASSWORD},
                 format='json')
    assert r.status_code == 422
    assert 'email' in r.data['error']['fields']


def test_weak_password_is_rejected(api):
    r = api.post(reverse('patient-register'), {'name': 'Weak', 'email': 'weak@example.com', 'password': 'password'},
                 format='json')
    assert r.status_code == 422
    assert 'password' in r.data['error']['fields']


def test_doctor_register_creates_profile_with_default_fee(api):
    r = api.post(reverse('doctor-register'), {
        'name': 'Dr. Budi', 'email': 'budi@example.com', 'password': PASSWORD, 'specialization': 'Neurology',
    }, format='json')
    assert r.status_code == 201
    profile = DoctorProfile.objects.get(user__email='budi@example.com')
    assert profile.specialization == 'Neurology'
    assert str(profile.consultation_fee) == '100000.00'


def test_wrong_password_is_unauthorized(api, patient):
    r = login(api, 'patient', patient.email, 'nope-nope-nope')
    assert r.status_code == 401
    assert r.data['error']['code'] == 'unauthorized'
    assert AuditEvent.objects.filter(action='login', detail__result='fail').exists()


def test_wrong_portal_is_forbidden(api, doctor):
    r = login(api, 'patient', doctor.email)
    assert r.status_code == 403
    assert r.data['error']['code'] == 'forbidden'
    assert login(APIClient(), 'doctor', doctor.email).status_code == 200


def test_bearer_token_and_jwt_both_authenticate(api, patient):
    data = login(api, 'patient', patient.email).data['data']

    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f"Bearer {data['token']}")
    r = c.get(reverse('patient-me'))
    assert r.status_code == 200
    assert r.data['data']['email'] == patient.email

    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f"JWT {data['jwt_access']}")
    assert c.get(reverse('patient-me')).status_code == 200


def test_token_refresh(api, patient):
    data = login(api, 'patient', patient.email).data['data']
    r = APIClient().post(reverse('token-refresh'), {'refresh': data['jwt_refresh']}, format='json')
    assert r.status_code == 200
    assert r.data['data']['jwt_access']

    r = APIClient().post(reverse('token-refresh'), {'refresh': 'garbage'}, format='json')
    assert r.status_code == 401


def test_logout_revokes_bearer_token(api, patient):
    token = login(api, 'patient', patient.email).data['data']['token']
    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
    r = c.post(reverse('patient-logout'))
    assert r.status_code == 200
    assert r.data['data']['blacklisted'] == 1
    assert c.get(reverse('patient-me')).status_code == 401


def test_unauthenticated_calls_get_401(api):
    r = api.get(reverse('patient-registrations'))
    assert r.status_code == 401
    assert r.data == {'ok': False, 'error': {'code': 'unauthorized',
                                             'message': 'Authentication credentials were not provided.'}}


@pytest.mark.parametrize('name', ['patient-registrations', 'patient-doctors', 'patient-medical-records'])
def test_patient_endpoints_reject_doctors(name, doctor, client_for):
    r = client_for(doctor).get(reverse(name))
    assert r.status_code == 403
    assert r.data['error']['code'] == 'forbidden'


@pytest.mark.parametrize('name', ['doctor-registrations', 'doctor-records', 'doctor-medicines', 'admin-users'])
def test_role_gated_endpoints_reject_patients(name, patient, client_for):
    assert client_for(patient).get(reverse(name)).status_code == 403


def test_profile_updates(patient, doctor, client_for):
    r = client_for(patient).put(reverse('patient-profile'), {
        'name': 'New <b>Name</b>', 'address': 'Jl. Merdeka 1', 'blood_type': 'O+',
    }, format='json')
    assert r.status_code == 200
    assert r.data['data']['name'] == 'New Name'
    assert r.data['data']['patient_profile']['blood_type'] == 'O+'

    r = client_for(doctor).put(reverse('doctor-profile'), {'consultation_fee': '150000', 'practice_schedule': 'Mon'},
                               format='json')
    assert r.status_code == 200
    assert r.data['data']['doctor_profile']['consultation_fee'] == '150000.00'


def test_doctor_list_is_searchable(doctor, make_user, patient, client_for):
    make_user(User.ROLE_DOCTOR, name='Dr. Rina')
    r = client_for(patient).get(reverse('patient-doctors'), {'q': 'rina'})
    assert r.status_code == 200
    assert [d['name'] for d in r.data['data']] == ['Dr. Rina']
    assert r.data['pagination']['total'] == 1


def listed_doctors(client):
    return {d['name']: d for d in client.get(reverse('patient-doctors')).data['data']}


def test_doctor_list_reflects_new_doctors(api, doctor, make_user, patient, client_for):
    listing = client_for(patient)
    assert set(listed_doctors(listing)) == {doctor.full_name}

    api.post(reverse('doctor-register'), {
        'name': 'Dr. Budi', 'email': 'budi@example.com', 'password': PASSWORD, 'specialization': 'Neurology',
    }, format='json')
    assert set(listed_doctors(listing)) == {doctor.full_name, 'Dr. Budi'}

    admin = make_user(User.ROLE_ADMIN)
    promoted = make_user(User.ROLE_PATIENT, name='Dr. Sari')
    client_for(admin).put(reverse('admin-user-role', args=[promoted.id]), {'role': 'doctor'}, format='json')
    assert 'Dr. Sari' in listed_doctors(listing)


def test_doctor_list_reflects_approved_applications(make_user, patient, client_for):
    admin = make_user(User.ROLE_ADMIN)
    listing = client_for(patient)
    assert listed_doctors(listing) == {}

    applicant = make_user(User.ROLE_PATIENT)
    r = client_for(applicant).post(reverse('doctor-application-submit'), {
        'full_name': 'dr. Andi Wijaya', 'national_id': '3175000000000001', 'license_number': 'STR-12345',
        'specialization': 'Pediatrics',
    }, format='json')
    client_for(admin).put(reverse('admin-doctor-application-approve', args=[r.data['data']['id']]), {},
                           format='json')
    assert set(listed_doctors(listing)) == {'dr. Andi Wijaya'}


def test_doctor_list_reflects_profile_updates(doctor, patient, client_for):
    listing = client_for(patient)
    assert listed_doctors(listing)[doctor.full_name]['specialization'] == 'Cardiology'
    client_for(doctor).put(reverse('doctor-profile'), {'specialization': 'Neurology'}, format='json')
    assert listed_doctors(listing)[doctor.full_name]['specialization'] == 'Neurology'
