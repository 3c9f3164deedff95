from unittest import mock

import pytest
from kombu.exceptions import OperationalError
from rest_framework.test import APIClient

from bloodlink.celery import app as celery_app
from bloodrequests.utils import create_blood_request
from donors.utils import create_donor
from factories import blood_request_payload, donor_payload


@pytest.fixture(autouse=True)
def eager_celery():
    celery_app.conf.CELERY_TASK_ALWAYS_EAGER = True
    celery_app.conf.CELERY_TASK_EAGER_PROPAGATES = True
    yield
    celery_app.conf.CELERY_TASK_ALWAYS_EAGER = False


@pytest.fixture(autouse=True)
def fast_password_hasher(settings):
    settings.PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']


@pytest.fixture
def broker_down():
    """Every task enqueue fails as it does when the Redis broker refuses connections."""
    with mock.patch(
        'celery.app.task.Task.apply_async',
        side_effect=OperationalError('Error 111 connecting to localhost:6379. Connection refused.'),
    ) as apply_async:
        yield apply_async


@pytest.fixture
def non_atomic_links(settings):
    settings.BLOODLINK = {**settings.BLOODLINK, 'ATOMIC_LINK_WRITES': False}


@pytest.fixture
def make_donor(db):
    def _make(**overrides):
        return create_donor(donor_payload(**overrides))
    return _make


@pytest.fixture
def make_blood_request(db):
    def _make(**overrides):
        return create_blood_request(blood_request_payload(**overrides))
    return _make


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_user(django_user_model):
    return django_user_model.objects.create_user(
        username='admin@bloodlink.test',
        email='admin@bloodlink.test',
        password='adminpass',
        first_name='Admin',
        is_staff=True,
    )


@pytest.fixture
def admin_client(api_client, admin_user):
    response = api_client.post(
        '/api/admin/login/',
        {'email': 'admin@bloodlink.test', 'password': 'adminpass'},
        format='json',
    )
    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.json()['tokens']['access']}")
    return api_client
