import pytest
from decimal import Decimal
from unittest.mock import patch
from uuid import uuid4

from django.db import DatabaseError
from django.db.models.query import QuerySet
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from apps.commissions.models import EntryStatus, LedgerEntry, Payout


# =============================================================================
# Professional ledger
# =============================================================================

@pytest.mark.django_db
class TestProfessionalLedgerAPI:
    """Tests for /api/commissions/professionals/{id}/..."""

    def test_balance(self, owner_client, professional, pending_entries):
        url = reverse('commissions:professional-ledger-balance', kwargs={'pk': professional.id})
        response = owner_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['pending_balance'] == '47.00'
        assert response.data['pending_count'] == 3
        assert response.data['currency'] == 'BRL'

    def test_balance_requires_auth(self, api_client, professional):
        url = reverse('commissions:professional-ledger-balance', kwargs={'pk': professional.id})
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_balance_unknown_professional(self, owner_client):
        url = reverse('commissions:professional-ledger-balance', kwargs={'pk': uuid4()})
        response = owner_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_staff_can_read(self, desk_client, professional, pending_entries):
        url = reverse('commissions:professional-ledger-pending', kwargs={'pk': professional.id})
        response = desk_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert [e['id'] for e in response.data] == [str(e.id) for e in pending_entries]
        assert response.data[2]['net_amount'] == '-35.00'

    def test_paid_history_paginated(self, owner_client, professional, pending_entries):
        owner_client.post(
            reverse('commissions:payout-list'),
            {'professional': str(professional.id), 'funding_source': 'bank'},
        )
        url = reverse('commissions:professional-ledger-paid', kwargs={'pk': professional.id})
        response = owner_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 3

    def test_period(self, owner_client, professional, pending_entries):
        occurred = timezone.localtime(pending_entries[0].occurred_at)
        url = reverse('commissions:professional-ledger-period', kwargs={'pk': professional.id})
        response = owner_client.get(url, {'year': occurred.year, 'month': occurred.month})

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 3

    def test_period_requires_month(self, owner_client, professional):
        url = reverse('commissions:professional-ledger-period', kwargs={'pk': professional.id})
        response = owner_client.get(url, {'year': 2025})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_recalculate(self, owner_client, professional, pending_entries):
        url = reverse('commissions:professional-ledger-recalculate', kwargs={'pk': professional.id})
        response = owner_client.post(url, {'commission_rate': '60.00'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['updated'] == 3
        assert response.data['pending_balance'] == '87.00'

    def test_recalculate_invalid_rate(self, owner_client, professional, pending_entries):
        url = reverse('commissions:professional-ledger-recalculate', kwargs={'pk': professional.id})
        response = owner_client.post(url, {'commission_rate': '120.00'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data

    def test_staff_cannot_recalculate(self, desk_client, professional, pending_entries):
        url = reverse('commissions:professional-ledger-recalculate', kwargs={'pk': professional.id})
        response = desk_client.post(url, {'commission_rate': '60.00'})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_bonus(self, owner_client, professional):
        url = reverse('commissions:professional-ledger-bonus', kwargs={'pk': professional.id})
        response = owner_client.post(url, {'amount': '50.00', 'label': 'Goal reached'})

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['kind'] == 'BONUS'
        assert response.data['net_amount'] == '50.00'

    def test_employee_purchase(self, owner_client, professional):
        url = reverse('commissions:professional-ledger-employee-purchase', kwargs={'pk': professional.id})
        response = owner_client.post(url, {'amount': '35.00', 'product_name': 'Pomade'})

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['gross_amount'] == '-35.00'
        assert response.data['net_amount'] == '-35.00'


# =============================================================================
# Entries
# =============================================================================

@pytest.mark.django_db
class TestLedgerEntryAPI:
    """Tests for /api/commissions/entries/"""

    def test_record_entry(self, owner_client, professional):
        url = reverse('commissions:entry-list')
        response = owner_client.post(url, {
            'professional': str(professional.id),
            'gross_amount': '80.00',
            'label': 'Haircut',
            'counterparty_label': 'Pedro',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == 'PENDING'
        assert response.data['commission_rate_snapshot'] == '50.00'
        assert response.data['net_amount'] == '40.00'
        assert LedgerEntry.objects.filter(id=response.data['id']).exists()

    def test_record_positive_employee_purchase_rejected(self, owner_client, professional):
        url = reverse('commissions:entry-list')
        response = owner_client.post(url, {
            'professional': str(professional.id),
            'kind': 'EMPLOYEE_PURCHASE',
            'gross_amount': '35.00',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data

    def test_record_unknown_professional(self, owner_client):
        url = reverse('commissions:entry-list')
        response = owner_client.post(url, {
            'professional': str(uuid4()),
            'gross_amount': '10.00',
        }, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_adjust_rate(self, owner_client, pending_entries):
        url = reverse('commissions:entry-adjust-rate', kwargs={'pk': pending_entries[0].id})
        response = owner_client.post(url, {'commission_rate': '30.00'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['previous_rate'] == '50.00'
        assert response.data['new_rate'] == '30.00'

    def test_adjust_rate_paid_entry(self, owner_client, pending_entries):
        entry = pending_entries[0]
        owner_client.post(reverse('commissions:entry-mark-paid', kwargs={'pk': entry.id}))

        url = reverse('commissions:entry-adjust-rate', kwargs={'pk': entry.id})
        response = owner_client.post(url, {'commission_rate': '30.00'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        entry.refresh_from_db()
        assert entry.commission_rate_snapshot == Decimal('50.00')

    def test_adjust_rate_unknown_entry(self, owner_client):
        url = reverse('commissions:entry-adjust-rate', kwargs={'pk': uuid4()})
        response = owner_client.post(url, {'commission_rate': '30.00'})

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_mark_paid_twice_conflicts(self, owner_client, pending_entries):
        url = reverse('commissions:entry-mark-paid', kwargs={'pk': pending_entries[0].id})

        first = owner_client.post(url)
        second = owner_client.post(url)

        assert first.status_code == status.HTTP_200_OK
        assert first.data['paid_individually'] is True
        assert second.status_code == status.HTTP_409_CONFLICT

    def test_staff_cannot_mark_paid(self, desk_client, pending_entries):
        url = reverse('commissions:entry-mark-paid', kwargs={'pk': pending_entries[0].id})
        response = desk_client.post(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Payouts
# =============================================================================

@pytest.mark.django_db
class TestPayoutAPI:
    """Tests for /api/commissions/payouts/"""

    def test_settle(self, owner_client, shop_owner, professional, pending_entries):
        url = reverse('commissions:payout-list')
        response = owner_client.post(url, {
            'professional': str(professional.id),
            'funding_source': 'cash',
        })

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['total'] == '47.00'
        assert response.data['payout']['amount'] == '-47.00'
        assert response.data['payout']['created_by']['email'] == shop_owner.email
        assert len(response.data['entry_ids']) == 3
        assert response.data['skipped_ids'] == []

    def test_settle_nothing_pending(self, owner_client, professional):
        url = reverse('commissions:payout-list')
        response = owner_client.post(url, {
            'professional': str(professional.id),
            'funding_source': 'bank',
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data
        assert not Payout.objects.exists()

    def test_settle_invalid_funding_source(self, owner_client, professional, pending_entries):
        url = reverse('commissions:payout-list')
        response = owner_client.post(url, {
            'professional': str(professional.id),
            'funding_source': 'pix',
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_settle_partial_failure_is_207(self, owner_client, professional, pending_entries):
        original_update = QuerySet.update

        def failing_update(self, **kwargs):
            if kwargs.get('status') == EntryStatus.PAID:
                raise DatabaseError('connection reset')
            return original_update(self, **kwargs)

        url = reverse('commissions:payout-list')
        with patch.object(QuerySet, 'update', new=failing_update):
            response = owner_client.post(url, {
                'professional': str(professional.id),
                'funding_source': 'bank',
            })

        assert response.status_code == status.HTTP_207_MULTI_STATUS
        assert response.data['settled'] == []
        assert len(response.data['unsettled']) == 3
        assert response.data['skipped'] == []
        assert Payout.objects.filter(id=response.data['payout_id']).exists()

    def test_staff_cannot_settle(self, desk_client, professional, pending_entries):
        url = reverse('commissions:payout-list')
        response = desk_client.post(url, {
            'professional': str(professional.id),
            'funding_source': 'bank',
        })

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_list_with_item_count(self, owner_client, professional, pending_entries):
        url = reverse('commissions:payout-list')
        owner_client.post(url, {'professional': str(professional.id), 'funding_source': 'bank'})

        response = owner_client.get(url, {'professional': str(professional.id)})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['item_count'] == 3
        assert response.data['results'][0]['professional_name'] == professional.name

    def test_undo(self, owner_client, professional, pending_entries):
        settle_response = owner_client.post(
            reverse('commissions:payout-list'),
            {'professional': str(professional.id), 'funding_source': 'bank'},
        )
        payout_id = settle_response.data['payout']['id']
        url = reverse('commissions:payout-undo', kwargs={'pk': payout_id})

        response = owner_client.post(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['payout_deleted'] is True
        assert len(response.data['reverted']) == 3
        assert LedgerEntry.objects.filter(status=EntryStatus.PENDING).count() == 3

        # Repeating is harmless
        again = owner_client.post(url)
        assert again.status_code == status.HTTP_200_OK
        assert again.data['reverted'] == []

    def test_undo_partial_failure_is_207(self, owner_client, professional, pending_entries):
        settle_response = owner_client.post(
            reverse('commissions:payout-list'),
            {'professional': str(professional.id), 'funding_source': 'bank'},
        )
        payout_id = settle_response.data['payout']['id']
        original_update = QuerySet.update

        def failing_update(self, **kwargs):
            if kwargs.get('status') == EntryStatus.PENDING:
                raise DatabaseError('lock timeout')
            return original_update(self, **kwargs)

        with patch.object(QuerySet, 'update', new=failing_update):
            response = owner_client.post(reverse('commissions:payout-undo', kwargs={'pk': payout_id}))

        assert response.status_code == status.HTTP_207_MULTI_STATUS
        assert len(response.data['unreverted']) == 3
        assert response.data['reverted'] == []

    def test_undo_malformed_id(self, owner_client):
        response = owner_client.post(reverse('commissions:payout-undo', kwargs={'pk': 'not-a-uuid'}))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_check(self, owner_client, professional, pending_entries):
        settle_response = owner_client.post(
            reverse('commissions:payout-list'),
            {'professional': str(professional.id), 'funding_source': 'bank'},
        )
        url = reverse('commissions:payout-check', kwargs={'pk': settle_response.data['payout']['id']})

        response = owner_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['consistent'] is True
        assert response.data['expected'] == '47.00'

    def test_check_unknown(self, owner_client):
        response = owner_client.get(reverse('commissions:payout-check', kwargs={'pk': uuid4()}))

        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Pot distribution
# =============================================================================

@pytest.mark.django_db
class TestPotDistributeAPI:
    """Tests for POST /api/commissions/pot/distribute/"""

    def test_distribute(self, owner_client, professional):
        url = reverse('commissions:pot-distribute')
        response = owner_client.post(url, {
            'professional': str(professional.id),
            'shop_percent': '60',
            'pro_percent': '40',
            'total_amount': '1000.00',
        })

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['pro_share'] == '400.00'
        assert response.data['shop_share'] == '600.00'
        assert response.data['entry']['kind'] == 'SUBSCRIPTION_PAYOUT'
        assert response.data['entry']['net_amount'] == '400.00'

    def test_split_must_total_100(self, owner_client, professional):
        url = reverse('commissions:pot-distribute')
        response = owner_client.post(url, {
            'professional': str(professional.id),
            'shop_percent': '60',
            'pro_percent': '60',
            'total_amount': '1000.00',
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not LedgerEntry.objects.exists()

    def test_staff_forbidden(self, desk_client, professional):
        url = reverse('commissions:pot-distribute')
        response = desk_client.post(url, {
            'professional': str(professional.id),
            'total_amount': '1000.00',
        })

        assert response.status_code == status.HTTP_403_FORBIDDEN
