"""
Service layer tests for settlement reversal.

Tests cover:
- settle then undo restores the ledger exactly
- Idempotent re-runs after the payout is gone
- Per-entry store failures reported as a partial reversal
"""

import pytest
from decimal import Decimal
from unittest.mock import patch
from uuid import uuid4

from django.db import DatabaseError
from django.db.models.query import QuerySet

from apps.commissions.models import EntryStatus, FundingSource, LedgerEntry, Payout
from apps.commissions.services import (
    mark_paid_individually,
    pending_balance,
    settle,
    undo,
)
from apps.commissions.services.exceptions import PayoutNotFoundError, ReversalPartialFailure


def _snapshot(entries):
    return {
        e.id: (e.status, e.settlement_ref, e.commission_rate_snapshot, e.gross_amount)
        for e in LedgerEntry.objects.filter(id__in=[entry.id for entry in entries])
    }


@pytest.mark.django_db
class TestUndo:

    def test_settle_then_undo_restores_ledger(self, professional, pending_entries):
        before_balance = pending_balance(professional_id=professional.id)
        before = _snapshot(pending_entries)

        summary = settle(professional_id=professional.id, funding_source=FundingSource.BANK)
        result = undo(payout_id=summary.payout.id)

        assert result.payout_deleted is True
        assert set(result.reverted) == set(summary.entry_ids)
        assert result.amount == Decimal('-47.00')
        assert not Payout.objects.exists()
        assert pending_balance(professional_id=professional.id) == before_balance
        assert _snapshot(pending_entries) == before

        for entry in pending_entries:
            entry.refresh_from_db()
            assert entry.status == EntryStatus.PENDING
            assert entry.settlement_ref is None
            assert entry.paid_at is None

    def test_undo_twice_same_as_once(self, professional, pending_entries):
        summary = settle(professional_id=professional.id, funding_source=FundingSource.BANK)

        undo(payout_id=summary.payout.id)
        after_once = _snapshot(pending_entries)
        second = undo(payout_id=summary.payout.id)

        assert second.payout_deleted is False
        assert second.reverted == []
        assert _snapshot(pending_entries) == after_once
        assert pending_balance(professional_id=professional.id) == Decimal('47.00')

    def test_rerun_after_payout_already_deleted(self, professional, pending_entries):
        """An interrupted reversal is finished by running undo again."""
        summary = settle(professional_id=professional.id, funding_source=FundingSource.BANK)
        Payout.objects.filter(id=summary.payout.id).delete()

        result = undo(payout_id=summary.payout.id)

        assert result.payout_deleted is False
        assert len(result.reverted) == 3
        assert LedgerEntry.objects.filter(status=EntryStatus.PAID).count() == 0

    def test_only_touches_its_own_entries(self, professional, other_professional, pending_entries, make_entry):
        first = settle(professional_id=professional.id, funding_source=FundingSource.BANK)
        make_entry(other_professional, '100.00', '40.00')
        second = settle(professional_id=other_professional.id, funding_source=FundingSource.BANK)

        undo(payout_id=first.payout.id)

        assert Payout.objects.filter(id=second.payout.id).exists()
        assert LedgerEntry.objects.get(settlement_ref=second.payout.id).status == EntryStatus.PAID

    def test_reverts_individual_mark_paid(self, pending_entries):
        entry = mark_paid_individually(entry_id=pending_entries[0].id)

        result = undo(payout_id=entry.settlement_ref)

        assert result.reverted == [entry.id]
        entry.refresh_from_db()
        assert entry.status == EntryStatus.PENDING
        assert entry.paid_individually is False

    def test_unknown_payout_is_noop(self, pending_entries):
        result = undo(payout_id=uuid4())

        assert result.payout_deleted is False
        assert result.reverted == []

    def test_malformed_payout_id(self):
        with pytest.raises(PayoutNotFoundError):
            undo(payout_id='not-a-uuid')


@pytest.mark.django_db
class TestUndoPartialFailure:

    def test_failed_entries_reported_rest_reverted(self, professional, pending_entries):
        summary = settle(professional_id=professional.id, funding_source=FundingSource.BANK)
        failing = pending_entries[1].id
        original_update = QuerySet.update

        def flaky_update(self, **kwargs):
            if kwargs.get('status') == EntryStatus.PENDING and self.filter(id=failing).exists():
                raise DatabaseError('lock timeout')
            return original_update(self, **kwargs)

        with patch.object(QuerySet, 'update', new=flaky_update):
            with pytest.raises(ReversalPartialFailure) as exc_info:
                undo(payout_id=summary.payout.id)

        error = exc_info.value
        assert error.payout_id == summary.payout.id
        assert error.unreverted == [failing]
        assert set(error.reverted) == {pending_entries[0].id, pending_entries[2].id}
        assert not Payout.objects.exists()

        stuck = LedgerEntry.objects.get(id=failing)
        assert stuck.status == EntryStatus.PAID
        assert stuck.settlement_ref == summary.payout.id

        # Re-running finishes the job
        result = undo(payout_id=summary.payout.id)
        assert result.reverted == [failing]
        assert pending_balance(professional_id=professional.id) == Decimal('47.00')


@pytest.mark.django_db
class TestUndoCashDrawer:

    def test_cash_reversal_notifies_drawer(self, professional, pending_entries, drawer_events):
        summary = settle(professional_id=professional.id, funding_source=FundingSource.CASH)
        drawer_events.clear()

        undo(payout_id=summary.payout.id)

        assert len(drawer_events) == 1
        assert drawer_events[0]['payout_id'] == summary.payout.id
        assert drawer_events[0]['amount'] == Decimal('47.00')

    def test_bank_reversal_does_not_notify(self, professional, pending_entries, drawer_events):
        summary = settle(professional_id=professional.id, funding_source=FundingSource.BANK)

        undo(payout_id=summary.payout.id)

        assert drawer_events == []
