# Generated manually for the barbershop ledger professionals app

import uuid
from decimal import Decimal
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Professional',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=150)),
                ('role', models.CharField(blank=True, max_length=100)),
                ('specialties', models.JSONField(blank=True, default=list)),
                ('default_commission_rate', models.DecimalField(decimal_places=2, default=Decimal('50.00'), max_digits=5, validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))])),
                ('status', models.CharField(choices=[('ACTIVE', 'Active'), ('VACATION', 'Vacation')], default='ACTIVE', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'professionals',
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['status'], name='professiona_status_8a1f3c_idx'),
                ],
            },
        ),
    ]
