"""
Management command to create sample data for trying out the API.

Usage:
    python manage.py create_sample_data

This creates:
- 3 users (owner, manager, front desk)
- 3 professionals with different default rates
- Pending commission entries, a bonus and an employee purchase
- One settled payout
- Subscriptions (active, canceled, delinquent) and appointments
"""

from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import ShopRole, User
from apps.commissions.models import EntryKind, FundingSource, LedgerEntry, Payout
from apps.commissions.services import (
    record_bonus,
    record_employee_purchase,
    record_entry,
    settle,
)
from apps.professionals.models import Professional, ProfessionalStatus
from apps.subscriptions.models import (
    Appointment,
    AppointmentStatus,
    PaymentStatus,
    Subscription,
    SubscriptionStatus,
)


class Command(BaseCommand):
    help = 'Create sample data for testing the API'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing data before creating new sample data',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self.clear_data()

        self.stdout.write('Creating sample data...')

        users = self.create_users()
        professionals = self.create_professionals()
        self.create_ledger(users, professionals)
        subscriptions = self.create_subscriptions()
        self.create_appointments(professionals, subscriptions)

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        self.stdout.write('')
        self.stdout.write('Test accounts:')
        self.stdout.write('  owner@example.com / owner123 (superuser)')
        self.stdout.write('  manager@example.com / password123')
        self.stdout.write('  desk@example.com / password123')

    def clear_data(self):
        """Clear all sample data from the database."""
        Appointment.objects.all().delete()
        Subscription.objects.all().delete()
        LedgerEntry.objects.all().delete()
        Payout.objects.all().delete()
        Professional.objects.all().delete()
        User.objects.filter(is_superuser=False).delete()
        User.objects.filter(email='owner@example.com').delete()

    def create_users(self):
        """Create shop operators."""
        self.stdout.write('  Creating users...')

        owner, _ = User.objects.get_or_create(
            email='owner@example.com',
            defaults={
                'display_name': 'Shop Owner',
                'shop_role': ShopRole.OWNER,
                'is_staff': True,
                'is_superuser': True,
            }
        )
        owner.set_password('owner123')
        owner.save()

        accounts = {'owner': owner}
        for key, email, name, role in [
            ('manager', 'manager@example.com', 'Marta Manager', ShopRole.MANAGER),
            ('desk', 'desk@example.com', 'Davi Front Desk', ShopRole.STAFF),
        ]:
            user, _ = User.objects.get_or_create(
                email=email,
                defaults={'display_name': name, 'shop_role': role}
            )
            user.set_password('password123')
            user.save()
            accounts[key] = user

        return accounts

    def create_professionals(self):
        self.stdout.write('  Creating professionals...')

        data = [
            ('Rafael Souza', 'Barber', Decimal('50.00'), ProfessionalStatus.ACTIVE),
            ('Bruno Lima', 'Barber', Decimal('45.00'), ProfessionalStatus.ACTIVE),
            ('Carla Nunes', 'Colorist', Decimal('40.00'), ProfessionalStatus.VACATION),
        ]

        professionals = {}
        for name, role, rate, status in data:
            professional, _ = Professional.objects.get_or_create(
                name=name,
                defaults={
                    'role': role,
                    'default_commission_rate': rate,
                    'status': status,
                }
            )
            professionals[name] = professional

        return professionals

    def create_ledger(self, users, professionals):
        """Record a few weeks of commissions and settle one professional."""
        self.stdout.write('  Creating ledger entries...')

        now = timezone.now()
        services = [
            ('Haircut', Decimal('60.00'), EntryKind.SERVICE),
            ('Beard trim', Decimal('40.00'), EntryKind.SERVICE),
            ('Hair + beard', Decimal('90.00'), EntryKind.SERVICE),
            ('Pomade', Decimal('45.00'), EntryKind.PRODUCT_SALE),
        ]

        for offset, professional in enumerate(professionals.values()):
            for day, (label, amount, kind) in enumerate(services):
                record_entry(
                    professional_id=professional.id,
                    gross_amount=amount,
                    kind=kind,
                    label=label,
                    counterparty_label='Walk-in',
                    occurred_at=now - timedelta(days=day * 3 + offset),
                )

        rafael = professionals['Rafael Souza']
        bruno = professionals['Bruno Lima']

        record_bonus(professional_id=rafael.id, amount=Decimal('100.00'), label='Best month')
        record_employee_purchase(
            professional_id=rafael.id,
            amount=Decimal('35.00'),
            product_name='Beard oil',
        )

        summary = settle(
            professional_id=bruno.id,
            funding_source=FundingSource.BANK,
            created_by=users['manager'],
        )
        self.stdout.write(f'    Settled {summary.total} for {bruno.name}')

    def create_subscriptions(self):
        self.stdout.write('  Creating subscriptions...')

        now = timezone.now()
        data = [
            ('Ana', 'Monthly cut', Decimal('90.00'), SubscriptionStatus.ACTIVE, PaymentStatus.PAID, 12),
            ('Bia', 'Beard club', Decimal('50.00'), SubscriptionStatus.ACTIVE, PaymentStatus.PAID, 40),
            ('Caio', 'Monthly cut', Decimal('90.00'), SubscriptionStatus.ACTIVE, PaymentStatus.FAILED, 3),
            ('Duda', 'Monthly cut', Decimal('90.00'), SubscriptionStatus.CANCELED, PaymentStatus.PAID, None),
        ]

        subscriptions = {}
        for name, plan, amount, status, payment, renews_in in data:
            subscription, _ = Subscription.objects.get_or_create(
                customer_name=name,
                defaults={
                    'customer_id': f'cus_{name.lower()}',
                    'plan_name': plan,
                    'amount': amount,
                    'status': status,
                    'last_payment_status': payment,
                    'created_at': now - timedelta(days=90),
                    'next_renewal_at': now + timedelta(days=renews_in) if renews_in else None,
                    'canceled_at': now if status == SubscriptionStatus.CANCELED else None,
                }
            )
            subscriptions[name] = subscription

        return subscriptions

    def create_appointments(self, professionals, subscriptions):
        self.stdout.write('  Creating appointments...')

        now = timezone.now()
        rafael = professionals['Rafael Souza']
        visits = [
            (subscriptions['Ana'], 2),
            (subscriptions['Ana'], 16),
            (subscriptions['Bia'], 5),
            (None, 1),
            (None, 8),
        ]

        for subscription, days_ago in visits:
            Appointment.objects.create(
                status=AppointmentStatus.COMPLETED,
                subscription=subscription,
                professional=rafael,
                start_time=now - timedelta(days=days_ago),
            )
