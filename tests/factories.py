"""Valid request payloads for donors and blood requests, each with a fresh phone number."""
import itertools

_phones = itertools.count(1)


def next_phone():
    return f'98{next(_phones):08d}'


def donor_payload(**overrides):
    data = {
        'name': 'Ram Sharma',
        'age': 30,
        'gender': 'male',
        'blood_type': 'O+',
        'phone': next_phone(),
        'country': 'India',
        'state': 'Maharashtra',
        'city': 'Pune',
        'smoking': 'no',
        'drinking': 'no',
        'last_donation': 'never',
        'password': 'secret123',
    }
    data.update(overrides)
    return data


def blood_request_payload(**overrides):
    data = {
        'name': 'Sita Patel',
        'blood_type': 'O+',
        'gender': 'female',
        'phone': next_phone(),
        'hospital_name': 'City Hospital',
        'hospital_location': 'MG Road',
        'country': 'India',
        'state': 'Maharashtra',
        'city': 'Pune',
        'urgency': 'urgent',
        'reason': 'Surgery',
    }
    data.update(overrides)
    return data
