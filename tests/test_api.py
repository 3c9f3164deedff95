import pytest

from donors.models import Donor
from factories import blood_request_payload, donor_payload

pytestmark = pytest.mark.django_db


class TestDonorEndpoints:

    def test_register(self, api_client):
        response = api_client.post('/api/donors/', donor_payload(phone='9800011111'), format='json')

        assert response.status_code == 201
        body = response.json()
        assert body['success'] is True
        assert body['data']['phone'] == '9800011111'
        assert 'password' not in body['data']

    def test_register_reports_all_errors(self, api_client):
        response = api_client.post('/api/donors/', donor_payload(phone='987654321', age=66), format='json')

        assert response.status_code == 400
        body = response.json()
        assert body['success'] is False
        assert body['code'] == 'invalid'
        assert {'phone', 'age'} <= set(body['error'])

    def test_register_duplicate_phone(self, api_client, make_donor):
        make_donor(phone='9800022222')

        response = api_client.post('/api/donors/', donor_payload(phone='9800022222'), format='json')

        assert response.status_code == 400
        assert response.json()['code'] == 'duplicate_phone'

    def test_login(self, api_client, make_donor):
        donor = make_donor(phone='9800033333', password='secret123')

        ok = api_client.post('/api/donors/login/', {'phone': '9800033333', 'password': 'secret123'}, format='json')
        bad = api_client.post('/api/donors/login/', {'phone': '9800033333', 'password': 'nope-nope'}, format='json')

        assert ok.status_code == 200
        assert ok.json()['data']['id'] == donor.id
        assert bad.status_code == 401
        assert bad.json() == {'success': False, 'error': 'Invalid credentials', 'code': 'invalid_credentials'}

    def test_list_and_filter(self, api_client, make_donor):
        make_donor(blood_type='A+')
        make_donor(blood_type='B+')

        response = api_client.get('/api/donors/', {'blood_type': 'B+'})

        assert response.json()['count'] == 1
        assert response.json()['data'][0]['blood_type'] == 'B+'

    def test_detail_update_and_missing(self, api_client, make_donor):
        donor = make_donor(city='Pune')

        assert api_client.get(f'/api/donors/{donor.id}/').json()['data']['city'] == 'Pune'

        response = api_client.put(f'/api/donors/{donor.id}/', {'city': 'Nagpur'}, format='json')
        assert response.status_code == 200
        assert response.json()['data']['city'] == 'Nagpur'

        missing = api_client.get('/api/donors/999999/')
        assert missing.status_code == 404
        assert missing.json()['code'] == 'not_found'

    def test_delete(self, api_client, make_donor):
        donor = make_donor()

        response = api_client.delete(f'/api/donors/{donor.id}/')

        assert response.status_code == 200
        assert not Donor.objects.filter(pk=donor.pk).exists()

    def test_by_blood_type(self, api_client, make_donor):
        make_donor(blood_type='O-')

        response = api_client.get('/api/donors/bloodtype/O-/')

        assert response.status_code == 200
        assert response.json()['count'] == 1

    def test_nearby(self, api_client, make_donor):
        make_donor(latitude=18.5210, longitude=73.8570)

        response = api_client.get('/api/donors/nearby/18.5204/73.8567/5/')

        data = response.json()['data']
        assert len(data) == 1
        assert data[0]['distance_km'] < 1

    def test_nearby_rejects_bad_coordinates(self, api_client):
        response = api_client.get('/api/donors/nearby/north/73.8567/5/')

        assert response.status_code == 400
        assert 'lat' in response.json()['error']

    @pytest.mark.parametrize('path, field', [
        ('inf/73.8/10', 'lat'),
        ('nan/73.8/10', 'lat'),
        ('91/73.8/10', 'lat'),
        ('18.5/-180.5/10', 'lng'),
        ('18.5/73.8/-1', 'distance'),
        ('18.5/73.8/nan', 'distance'),
    ])
    def test_nearby_rejects_non_finite_and_out_of_range(self, api_client, make_donor, path, field):
        make_donor(latitude=18.5210, longitude=73.8570)

        response = api_client.get(f'/api/donors/nearby/{path}/')

        assert response.status_code == 400
        assert field in response.json()['error']

    @pytest.mark.parametrize('coordinates, field', [
        ({'latitude': 91, 'longitude': 73.8}, 'latitude'),
        ({'latitude': 18.5, 'longitude': 181}, 'longitude'),
        ({'latitude': 'nan', 'longitude': 73.8}, 'latitude'),
    ])
    def test_register_rejects_bad_coordinates(self, api_client, coordinates, field):
        response = api_client.post('/api/donors/', donor_payload(**coordinates), format='json')

        assert response.status_code == 400
        assert field in response.json()['error']

    def test_accept_then_donate_through_donor_endpoint(self, api_client, make_donor, make_blood_request):
        donor = make_donor(blood_type='O+')
        blood_request = make_blood_request(blood_type='O+')
        api_client.post(f'/api/requests/{blood_request.id}/donors/{donor.id}/')

        listed = api_client.get(f'/api/donors/{donor.id}/requests/').json()
        assert listed['count'] == 1
        assert listed['data'][0]['status'] == 'pending'
        assert listed['data'][0]['hospital_name'] == 'City Hospital'

        accepted = api_client.put(f'/api/donors/{donor.id}/requests/{blood_request.id}/accept/')
        assert accepted.status_code == 200
        assert accepted.json()['data']['overall_status'] == 'fulfilled'

        donated = api_client.put(f'/api/donors/{donor.id}/requests/{blood_request.id}/donate/')
        assert donated.json()['data']['donor']['donation_count'] == 1

        again = api_client.put(f'/api/donors/{donor.id}/requests/{blood_request.id}/donate/')
        assert again.status_code == 400
        assert again.json()['code'] == 'invalid_status_transition'

    def test_unknown_status_action(self, api_client, make_donor, make_blood_request):
        response = api_client.put(f'/api/donors/{make_donor().id}/requests/{make_blood_request().id}/maybe/')

        assert response.status_code == 400
        assert 'status' in response.json()['error']


class TestBloodRequestEndpoints:

    def test_create_and_get(self, api_client):
        created = api_client.post('/api/requests/', blood_request_payload(blood_type='AB-'), format='json')

        assert created.status_code == 201
        request_id = created.json()['data']['id']
        detail = api_client.get(f'/api/requests/{request_id}/').json()['data']
        assert detail['blood_type'] == 'AB-'
        assert detail['overall_status'] == 'pending'
        assert detail['donors'] == []

    def test_create_invalid(self, api_client):
        response = api_client.post('/api/requests/', {'name': 'Nobody'}, format='json')

        assert response.status_code == 400
        assert {'blood_type', 'phone', 'hospital_name'} <= set(response.json()['error'])

    def test_missing_request(self, api_client):
        assert api_client.get('/api/requests/424242/').status_code == 404

    def test_list_filters(self, api_client, make_blood_request):
        make_blood_request(blood_type='A+')
        make_blood_request(blood_type='B+')

        body = api_client.get('/api/requests/', {'blood_type': 'A+', 'status': 'pending'}).json()

        assert body['count'] == 1

    def test_matches(self, api_client, make_donor, make_blood_request):
        make_donor(blood_type='A-')
        make_donor(blood_type='O-')
        make_donor(blood_type='A+')
        blood_request = make_blood_request(blood_type='A-')

        compatible = api_client.get(f'/api/requests/{blood_request.id}/matches/').json()
        exact = api_client.get(f'/api/requests/{blood_request.id}/matches/', {'mode': 'exact'}).json()

        assert compatible['count'] == 2
        assert exact['count'] == 1

    def test_send_to_donors(self, api_client, make_donor, make_blood_request):
        make_donor(blood_type='B-')
        blood_request = make_blood_request(blood_type='B-')

        first = api_client.post(f'/api/requests/{blood_request.id}/send-to-donors/', format='json').json()
        second = api_client.post(f'/api/requests/{blood_request.id}/send-to-donors/', format='json').json()

        assert first['message'] == 'Request sent to 1 donors'
        assert first['count'] == 1
        assert second['count'] == 0
        assert len(second['data']['skipped']) == 1

    def test_send_to_donors_with_no_matches(self, api_client, make_blood_request):
        response = api_client.post(f'/api/requests/{make_blood_request().id}/send-to-donors/', format='json')

        assert response.status_code == 200
        assert response.json()['message'] == 'No matching donors found'

    def test_send_to_incompatible_donor(self, api_client, make_donor, make_blood_request):
        donor = make_donor(blood_type='A+')
        blood_request = make_blood_request(blood_type='O-')

        response = api_client.post(f'/api/requests/{blood_request.id}/donors/{donor.id}/')

        assert response.status_code == 400
        assert response.json()['code'] == 'incompatible_blood_type'

    def test_send_to_donor_twice(self, api_client, make_donor, make_blood_request):
        donor = make_donor(blood_type='O-')
        blood_request = make_blood_request(blood_type='O+')
        api_client.post(f'/api/requests/{blood_request.id}/donors/{donor.id}/')

        response = api_client.post(f'/api/requests/{blood_request.id}/donors/{donor.id}/')

        assert response.status_code == 400
        assert response.json()['code'] == 'already_linked'

    def test_fulfill_without_prior_link(self, api_client, make_donor, make_blood_request):
        donor = make_donor()
        blood_request = make_blood_request()

        response = api_client.post(f'/api/requests/{blood_request.id}/fulfill/', {'donor_id': donor.id}, format='json')

        assert response.status_code == 200
        data = response.json()['data']
        assert data['request']['overall_status'] == 'fulfilled'
        assert data['request']['donors'][0]['status'] == 'donated'
        assert data['donor']['is_available'] is False

    def test_confirm_donation_requires_donor_id(self, api_client, make_blood_request):
        response = api_client.post(f'/api/requests/{make_blood_request().id}/confirm-donation/', {}, format='json')

        assert response.status_code == 400
        assert 'donor_id' in response.json()['error']

    def test_confirm_donation(self, api_client, make_donor, make_blood_request):
        donor = make_donor()
        blood_request = make_blood_request()
        api_client.post(f'/api/requests/{blood_request.id}/donors/{donor.id}/')
        api_client.put(f'/api/donors/{donor.id}/requests/{blood_request.id}/accept/')

        response = api_client.post(
            f'/api/requests/{blood_request.id}/confirm-donation/', {'donor_id': donor.id}, format='json'
        )

        assert response.status_code == 200
        assert response.json()['data']['donor']['donation_count'] == 1

    def test_status_report(self, api_client, make_donor, make_blood_request):
        donor = make_donor(name='Kind Donor')
        blood_request = make_blood_request(phone='9800044444')
        api_client.post(f'/api/requests/{blood_request.id}/donors/{donor.id}/')
        api_client.put(f'/api/donors/{donor.id}/requests/{blood_request.id}/accept/')

        body = api_client.get('/api/requests/status/', {'phone': '9800044444'}).json()

        assert body['count'] == 1
        item = body['data'][0]
        assert item['accepted_donors'][0]['donor_name'] == 'Kind Donor'
        assert item['counts'] == {'pending': 0, 'rejected': 0, 'donated': 0}

    def test_status_report_requires_phone(self, api_client):
        response = api_client.get('/api/requests/status/')

        assert response.status_code == 400
        assert 'phone' in response.json()['error']


class TestOtpEndpoints:

    def test_send_and_verify(self, api_client):
        sent = api_client.post(
            '/api/otp/send/', {'phone': '9800055555', 'donor_data': {'name': 'Ram'}}, format='json'
        )
        wrong = api_client.post('/api/otp/verify/', {'phone': '9800055555', 'otp': '111111'}, format='json')
        verified = api_client.post('/api/otp/verify/', {'phone': '9800055555', 'otp': '123456'}, format='json')

        assert sent.status_code == 200
        assert wrong.status_code == 400
        assert wrong.json()['code'] == 'verification_failed'
        assert verified.json()['data'] == {'name': 'Ram'}

    def test_resend_without_request(self, api_client):
        response = api_client.post('/api/otp/resend/', {'phone': '9800066666'}, format='json')

        assert response.status_code == 404
