# ==========================================
# apps/commissions/admin.py
# ==========================================

from django.contrib import admin, messages
from django.utils.html import format_html
from .models import LedgerEntry, Payout, EntryStatus
from . import services


@admin.register(LedgerEntry)
class LedgerEntryAdmin(admin.ModelAdmin):
    """
    Admin interface for ledger entries.

    Status and settlement reference are read-only here; they only change
    through settlement, reversal or the mark-paid action.
    """

    list_display = [
        'professional',
        'kind',
        'label',
        'gross_amount',
        'commission_rate_snapshot',
        'get_net_amount',
        'status_badge',
        'occurred_at',
    ]

    list_filter = [
        'status',
        'kind',
        'paid_individually',
        'occurred_at',
    ]

    search_fields = [
        'professional__name',
        'label',
        'counterparty_label',
        'settlement_ref',
    ]

    readonly_fields = [
        'status',
        'settlement_ref',
        'paid_at',
        'paid_individually',
        'created_at',
        'updated_at',
    ]

    date_hierarchy = 'occurred_at'
    ordering = ['-occurred_at']

    fieldsets = (
        ('Entry', {
            'fields': (
                'professional',
                'kind',
                'gross_amount',
                'commission_rate_snapshot',
            )
        }),
        ('Settlement', {
            'fields': (
                'status',
                'settlement_ref',
                'paid_at',
                'paid_individually',
            )
        }),
        ('Details', {
            'fields': ('occurred_at', 'label', 'counterparty_label', 'metadata'),
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    def get_net_amount(self, obj):
        return obj.net_amount
    get_net_amount.short_description = 'Net'

    def status_badge(self, obj):
        """Display entry status as colored badge."""
        colors = {
            EntryStatus.PENDING: ('#E5C49A', '#2C1810'),
            EntryStatus.PAID: ('#6B8E5E', 'white'),
        }
        bg, fg = colors.get(obj.status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_status_display()
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'

    actions = ['mark_paid_individually']

    @admin.action(description='Mark selected as paid (no payout)')
    def mark_paid_individually(self, request, queryset):
        count = 0
        for entry in queryset.filter(status=EntryStatus.PENDING):
            try:
                services.mark_paid_individually(entry_id=entry.id)
            except services.PreconditionFailedError:
                continue
            count += 1
        self.message_user(request, f'Marked {count} entry(ies) as paid.')

    def has_change_permission(self, request, obj=None):
        # Paid entries are frozen
        if obj is not None and obj.status == EntryStatus.PAID:
            return False
        return super().has_change_permission(request, obj)

    def get_queryset(self, request):
        """Optimize query with select_related."""
        qs = super().get_queryset(request)
        return qs.select_related('professional')


@admin.register(Payout)
class PayoutAdmin(admin.ModelAdmin):
    """
    Admin interface for payouts.

    Payouts are created by settlement only. Deleting one directly would leave
    its entries marked paid, so removal goes through the undo action.
    """

    list_display = [
        'professional',
        'amount',
        'funding_source',
        'description',
        'created_by',
        'created_at',
    ]

    list_filter = [
        'funding_source',
        'created_at',
    ]

    search_fields = [
        'professional__name',
        'description',
        'id',
    ]

    readonly_fields = [
        'professional',
        'amount',
        'funding_source',
        'description',
        'created_by',
        'created_at',
    ]

    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    actions = ['undo_payouts', 'check_payouts']

    @admin.action(description='Undo selected payouts')
    def undo_payouts(self, request, queryset):
        reopened = 0
        for payout_id in list(queryset.values_list('id', flat=True)):
            try:
                result = services.undo(payout_id=payout_id)
            except services.ReversalPartialFailure as e:
                self.message_user(
                    request,
                    f'Payout {payout_id}: {len(e.unreverted)} entries still paid; run undo again.',
                    level=messages.ERROR,
                )
                continue
            reopened += len(result.reverted)
        self.message_user(request, f'Reopened {reopened} entry(ies).')

    @admin.action(description='Check selected payouts against their entries')
    def check_payouts(self, request, queryset):
        for payout in queryset:
            check = services.check_payout(payout_id=payout.id)
            if not check.consistent:
                self.message_user(
                    request,
                    f'Payout {payout.id}: expected {check.expected}, entries add up to {check.actual}',
                    level=messages.WARNING,
                )
        self.message_user(request, f'Checked {queryset.count()} payout(s).')

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def get_queryset(self, request):
        """Optimize query with select_related."""
        qs = super().get_queryset(request)
        return qs.select_related('professional', 'created_by')
