import pytest
from datetime import datetime
from decimal import Decimal
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, ShopRole
from apps.subscriptions.models import Subscription, SubscriptionStatus


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def manager(db):
    return User.objects.create_user(
        email='manager@example.com',
        password='TestPass123!',
        display_name='Manager',
        shop_role=ShopRole.MANAGER,
    )


@pytest.fixture
def manager_client(api_client, manager):
    """Return API client authenticated as a manager."""
    refresh = RefreshToken.for_user(manager)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def now():
    """Mid-month reference time used by the metrics tests."""
    return datetime(2025, 6, 15, 12, 0, tzinfo=timezone.get_current_timezone())


@pytest.fixture
def club(db, now):
    """
    Two active subscriptions started this month and one that was active
    before the month and canceled this month.
    """
    return {
        'ana': Subscription.objects.create(
            customer_name='Ana',
            plan_name='Monthly cut',
            amount=Decimal('90.00'),
            created_at=datetime(2025, 6, 2, 9, 0, tzinfo=now.tzinfo),
            next_renewal_at=datetime(2025, 7, 2, 9, 0, tzinfo=now.tzinfo),
        ),
        'bia': Subscription.objects.create(
            customer_name='Bia',
            plan_name='Beard club',
            amount=Decimal('50.00'),
            created_at=datetime(2025, 6, 10, 9, 0, tzinfo=now.tzinfo),
            next_renewal_at=datetime(2025, 8, 10, 9, 0, tzinfo=now.tzinfo),
        ),
        'caio': Subscription.objects.create(
            customer_name='Caio',
            plan_name='Monthly cut',
            amount=Decimal('90.00'),
            status=SubscriptionStatus.CANCELED,
            created_at=datetime(2025, 3, 1, 9, 0, tzinfo=now.tzinfo),
            canceled_at=datetime(2025, 6, 5, 9, 0, tzinfo=now.tzinfo),
        ),
    }
