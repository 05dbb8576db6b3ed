import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, ShopRole
from apps.commissions.models import EntryKind, LedgerEntry
from apps.commissions.signals import cash_drawer_refresh_requested
from apps.professionals.models import Professional


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def shop_owner(db):
    """Create and return the shop owner."""
    return User.objects.create_user(
        email='owner@example.com',
        password='TestPass123!',
        display_name='Shop Owner',
        shop_role=ShopRole.OWNER,
    )


@pytest.fixture
def front_desk(db):
    """Create and return a staff user without ledger rights."""
    return User.objects.create_user(
        email='desk@example.com',
        password='TestPass123!',
        display_name='Front Desk',
        shop_role=ShopRole.STAFF,
    )


@pytest.fixture
def owner_client(api_client, shop_owner):
    """Return API client authenticated as the shop owner."""
    refresh = RefreshToken.for_user(shop_owner)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def desk_client(front_desk):
    """Return API client authenticated as a staff user."""
    client = APIClient()
    refresh = RefreshToken.for_user(front_desk)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def professional(db):
    """A barber earning 50% by default."""
    return Professional.objects.create(
        name='Rafael Souza',
        role='Barber',
        default_commission_rate=Decimal('50.00'),
    )


@pytest.fixture
def other_professional(db):
    return Professional.objects.create(
        name='Lucas Lima',
        role='Barber',
        default_commission_rate=Decimal('40.00'),
    )


@pytest.fixture
def make_entry(db):
    """Factory for pending ledger entries."""
    def _make(professional, gross, rate, kind=EntryKind.SERVICE, label='Haircut'):
        return LedgerEntry.objects.create(
            professional=professional,
            kind=kind,
            gross_amount=Decimal(gross),
            commission_rate_snapshot=Decimal(rate),
            occurred_at=professional.created_at,
            label=label,
        )
    return _make


@pytest.fixture
def pending_entries(professional, make_entry):
    """
    Three pending entries with a 47.00 balance:
        100.00 @ 50%  ->  50.00
         80.00 @ 40%  ->  32.00
        -35.00 @ 100% -> -35.00 (employee purchase)
    """
    return [
        make_entry(professional, '100.00', '50.00'),
        make_entry(professional, '80.00', '40.00', label='Beard trim'),
        make_entry(professional, '-35.00', '100.00', kind=EntryKind.EMPLOYEE_PURCHASE, label='Consumption: Pomade'),
    ]


@pytest.fixture
def drawer_events():
    """Collect cash_drawer_refresh_requested notifications."""
    events = []

    def receiver(sender, **kwargs):
        events.append(kwargs)

    cash_drawer_refresh_requested.connect(receiver, weak=False)
    yield events
    cash_drawer_refresh_requested.disconnect(receiver)
