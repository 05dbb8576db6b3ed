"""
Management command to find payouts that don't match their ledger entries.

Usage:
    python manage.py reconcile_payouts
    python manage.py reconcile_payouts --professional <uuid>
    python manage.py reconcile_payouts --repair-orphans

An interrupted settlement leaves a payout whose amount differs from its
entries; an interrupted reversal leaves paid entries whose payout is gone.
--repair-orphans re-runs the reversal for the second kind, which reopens the
entries. Mismatched payouts are only reported.

Exits with status 1 while inconsistencies remain.
"""

from django.core.management.base import BaseCommand, CommandError

from apps.commissions import services


class Command(BaseCommand):
    help = 'Report payouts whose amount does not match their ledger entries'

    def add_arguments(self, parser):
        parser.add_argument(
            '--professional',
            help='Only check payouts of this professional (UUID)',
        )
        parser.add_argument(
            '--repair-orphans',
            action='store_true',
            help='Reopen paid entries whose payout no longer exists',
        )

    def handle(self, *args, **options):
        professional_id = options.get('professional')
        problems = services.find_inconsistent_payouts(professional_id=professional_id)

        if not problems:
            self.stdout.write(self.style.SUCCESS('All payouts are consistent.'))
            return

        remaining = 0
        for check in problems:
            if check.orphaned:
                self.stdout.write(
                    f'  ORPHANED  ref={check.payout_id} professional={check.professional_id} '
                    f'entries={len(check.entry_ids)} total={check.actual}'
                )
                if options['repair_orphans']:
                    try:
                        result = services.undo(payout_id=check.payout_id)
                    except services.ReversalPartialFailure as e:
                        self.stdout.write(self.style.ERROR(
                            f'    still paid: {", ".join(str(i) for i in e.unreverted)}'
                        ))
                        remaining += 1
                        continue
                    self.stdout.write(self.style.SUCCESS(f'    reopened {len(result.reverted)} entries'))
                    continue
            else:
                self.stdout.write(
                    f'  MISMATCH  payout={check.payout_id} professional={check.professional_id} '
                    f'expected={check.expected} actual={check.actual} entries={len(check.entry_ids)}'
                )
            remaining += 1

        if remaining:
            raise CommandError(f'{remaining} inconsistent settlement reference(s) found')

        self.stdout.write(self.style.SUCCESS('Orphaned entries reopened.'))
