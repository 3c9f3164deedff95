import pytest
from django.contrib.auth import get_user_model
from rest_framework_simplejwt.tokens import RefreshToken

from donors.models import Donor

pytestmark = pytest.mark.django_db

User = get_user_model()


class TestAdminAccounts:

    def test_register_creates_staff_account(self, api_client):
        response = api_client.post(
            '/api/admin/register/',
            {'name': 'Asha', 'email': 'Asha@Example.com', 'password': 'strongpass'},
            format='json',
        )

        assert response.status_code == 201
        body = response.json()
        assert body['data']['email'] == 'asha@example.com'
        assert body['tokens']['access']
        assert User.objects.get(email='asha@example.com').is_staff is True

    def test_register_duplicate_email(self, api_client, admin_user):
        response = api_client.post(
            '/api/admin/register/',
            {'name': 'Again', 'email': admin_user.email, 'password': 'strongpass'},
            format='json',
        )

        assert response.status_code == 400
        assert 'email' in response.json()['error']

    def test_register_requires_key_when_configured(self, api_client, settings):
        settings.BLOODLINK = {**settings.BLOODLINK, 'ADMIN_REGISTRATION_KEY': 'letmein'}
        payload = {'name': 'Asha', 'email': 'asha@example.com', 'password': 'strongpass'}

        refused = api_client.post('/api/admin/register/', payload, format='json')
        accepted = api_client.post('/api/admin/register/', {**payload, 'registration_key': 'letmein'}, format='json')

        assert refused.status_code == 403
        assert accepted.status_code == 201

    def test_login_by_email_or_username(self, api_client, admin_user):
        by_email = api_client.post(
            '/api/admin/login/', {'email': 'admin@bloodlink.test', 'password': 'adminpass'}, format='json'
        )
        by_username = api_client.post(
            '/api/admin/login/', {'username': admin_user.username, 'password': 'adminpass'}, format='json'
        )

        assert by_email.status_code == 200
        assert by_username.status_code == 200
        assert by_email.json()['tokens']['refresh']

    def test_login_failures_are_generic(self, api_client, admin_user, django_user_model):
        django_user_model.objects.create_user(username='plain', email='plain@bloodlink.test', password='plainpass')

        wrong = api_client.post('/api/admin/login/', {'email': admin_user.email, 'password': 'nope'}, format='json')
        not_staff = api_client.post('/api/admin/login/', {'email': 'plain@bloodlink.test', 'password': 'plainpass'}, format='json')

        assert wrong.status_code == 401
        assert not_staff.status_code == 401
        assert wrong.json() == not_staff.json()


class TestAdminReporting:

    def test_requires_token(self, api_client):
        assert api_client.get('/api/admin/dashboard/').status_code == 401
        assert api_client.get('/api/admin/donors/').status_code == 401

    def test_non_staff_is_forbidden(self, api_client, django_user_model):
        django_user_model.objects.create_user(username='plain', email='plain@bloodlink.test', password='plainpass')
        token = RefreshToken.for_user(User.objects.get(username='plain')).access_token
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

        assert api_client.get('/api/admin/dashboard/').status_code == 403

    def test_dashboard(self, admin_client, make_donor, make_blood_request):
        donor = make_donor(blood_type='O+')
        make_donor(blood_type='O+')
        make_donor(blood_type='A-')
        blood_request = make_blood_request(blood_type='O+')
        make_blood_request()
        admin_client.post(f'/api/requests/{blood_request.id}/donors/{donor.id}/')
        admin_client.put(f'/api/donors/{donor.id}/requests/{blood_request.id}/accept/')

        data = admin_client.get('/api/admin/dashboard/').json()['data']

        assert data['total_donors'] == 3
        assert data['blood_type_distribution'] == {'A-': 1, 'O+': 2}
        assert data['total_requests'] == 2
        assert data['pending_requests'] == 1
        assert data['fulfilled_requests'] == 1
        assert data['accepted_links'] == 1
        assert data['completed_donations'] == 0

    def test_donor_listing_and_delete(self, admin_client, make_donor, make_blood_request):
        donor = make_donor(blood_type='AB+')
        make_donor(blood_type='B+')
        blood_request = make_blood_request(blood_type='AB+')
        admin_client.post(f'/api/requests/{blood_request.id}/donors/{donor.id}/')

        listing = admin_client.get('/api/admin/donors/', {'blood_type': 'AB+'}).json()
        assert listing['count'] == 1

        response = admin_client.delete(f'/api/admin/donors/{donor.id}/')

        assert response.status_code == 200
        assert not Donor.objects.filter(pk=donor.pk).exists()
        assert admin_client.get(f'/api/requests/{blood_request.id}/').json()['data']['donors'] == []

    def test_delete_missing_donor(self, admin_client):
        response = admin_client.delete('/api/admin/donors/424242/')

        assert response.status_code == 404
        assert response.json()['code'] == 'not_found'

    def test_request_listing_by_status(self, admin_client, make_blood_request, make_donor):
        donor = make_donor(blood_type='O+')
        rejected = make_blood_request(blood_type='O+')
        make_blood_request()
        admin_client.post(f'/api/requests/{rejected.id}/donors/{donor.id}/')
        admin_client.put(f'/api/donors/{donor.id}/requests/{rejected.id}/reject/')

        body = admin_client.get('/api/admin/requests/', {'status': 'expired'}).json()

        assert body['count'] == 1
        assert body['data'][0]['id'] == rejected.id
