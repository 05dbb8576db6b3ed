# Generated manually for the barbershop ledger commissions app

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('professionals', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='LedgerEntry',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('kind', models.CharField(choices=[('SERVICE', 'Service'), ('PRODUCT_SALE', 'Product sale'), ('BONUS', 'Bonus'), ('EMPLOYEE_PURCHASE', 'Employee purchase'), ('SUBSCRIPTION_PAYOUT', 'Subscription pot payout'), ('OTHER', 'Other')], default='SERVICE', max_length=30)),
                ('gross_amount', models.DecimalField(decimal_places=2, max_digits=10)),
                ('commission_rate_snapshot', models.DecimalField(decimal_places=2, max_digits=5, validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))])),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('PAID', 'Paid')], default='PENDING', max_length=10)),
                ('settlement_ref', models.UUIDField(blank=True, db_index=True, null=True)),
                ('paid_at', models.DateTimeField(blank=True, null=True)),
                ('paid_individually', models.BooleanField(default=False)),
                ('occurred_at', models.DateTimeField()),
                ('label', models.CharField(blank=True, max_length=200)),
                ('counterparty_label', models.CharField(blank=True, max_length=200)),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('professional', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='ledger_entries', to='professionals.professional')),
            ],
            options={
                'db_table': 'ledger_entries',
                'ordering': ['occurred_at', 'created_at'],
                'indexes': [
                    models.Index(fields=['professional', 'status'], name='ledger_entr_profess_4d2b1e_idx'),
                    models.Index(fields=['status', 'occurred_at'], name='ledger_entr_status_9c7e0a_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(status='PENDING', settlement_ref__isnull=True) | models.Q(status='PAID', settlement_ref__isnull=False), name='ledger_entry_status_matches_settlement_ref'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Payout',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('funding_source', models.CharField(choices=[('cash', 'Cash drawer'), ('bank', 'Bank')], max_length=10)),
                ('description', models.CharField(blank=True, max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='payouts_created', to=settings.AUTH_USER_MODEL)),
                ('professional', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='payouts', to='professionals.professional')),
            ],
            options={
                'db_table': 'payouts',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['professional', 'created_at'], name='payouts_profess_2f6a3d_idx'),
                ],
            },
        ),
    ]
