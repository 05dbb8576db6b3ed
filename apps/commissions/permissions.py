"""
Custom permission classes for the commissions app.

Anyone signed in may look at balances and payout history; only shop owners
and managers may change the ledger.
"""
from rest_framework.permissions import BasePermission, SAFE_METHODS


class IsShopManager(BasePermission):
    """
    Allow writes only to users who can manage the ledger.

    Usage:
        def get_permissions(self):
            if self.action in ['create', 'undo']:
                return [IsAuthenticated(), IsShopManager()]
            return super().get_permissions()
    """

    message = 'Only the shop owner or a manager can change commissions.'

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        user = request.user
        return bool(user and user.is_authenticated and user.can_manage_ledger)
