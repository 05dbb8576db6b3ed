"""
Signals emitted by the commission ledger.

``cash_drawer_refresh_requested`` is a one-way notification for the cash
drawer subsystem: money left (or came back to) the drawer because of a
cash-funded settlement or its reversal. The ledger never reads the drawer's
balance itself.

Receivers get ``professional_id``, ``payout_id`` and ``amount`` keyword
arguments.
"""

from django.dispatch import Signal

cash_drawer_refresh_requested = Signal()
