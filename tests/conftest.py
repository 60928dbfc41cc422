from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from diary_app.models import Customer, User
from diary_app.utils import generate_jwt_tokens


@pytest.fixture
def user(db):
    return User.objects.create(firebase_uid='uid-owner', email='owner@example.com', full_name='Dairy Owner')


@pytest.fixture
def other_user(db):
    return User.objects.create(firebase_uid='uid-other', email='other@example.com')


@pytest.fixture
def admin_user(db):
    return User.objects.create(firebase_uid='uid-admin', email='admin@example.com', role='admin')


@pytest.fixture
def customer(user):
    return Customer.objects.create(
        owner=user, name='Ramesh', default_quantity=Decimal('2.00'),
        price_per_unit=Decimal('60.00'), phone='+91 98765-43210', address='Village Road',
    )


def client_for(user):
    client = APIClient()
    access_token, _ = generate_jwt_tokens(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {access_token}')
    return client


@pytest.fixture
def api_client(user):
    return client_for(user)


@pytest.fixture
def admin_client(admin_user):
    return client_for(admin_user)


@pytest.fixture
def other_client(other_user):
    return client_for(other_user)
