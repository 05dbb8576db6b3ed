import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, ShopRole
from apps.professionals.models import Professional


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def shop_owner(db):
    return User.objects.create_user(
        email='owner@example.com',
        password='TestPass123!',
        display_name='Owner',
        shop_role=ShopRole.OWNER,
    )


@pytest.fixture
def front_desk(db):
    return User.objects.create_user(
        email='desk@example.com',
        password='TestPass123!',
        display_name='Front Desk',
    )


@pytest.fixture
def owner_client(api_client, shop_owner):
    """Return API client authenticated as the shop owner."""
    refresh = RefreshToken.for_user(shop_owner)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def desk_client(front_desk):
    """Return API client authenticated as front desk staff."""
    client = APIClient()
    refresh = RefreshToken.for_user(front_desk)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def professional(db):
    return Professional.objects.create(
        name='Rafael Souza',
        role='Barber',
        default_commission_rate=Decimal('50.00'),
    )
