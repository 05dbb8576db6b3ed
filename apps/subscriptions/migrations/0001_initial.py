# Generated manually for the barbershop ledger subscriptions app

import uuid
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('professionals', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Subscription',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('customer_id', models.CharField(blank=True, max_length=64)),
                ('customer_name', models.CharField(blank=True, max_length=150)),
                ('plan_id', models.CharField(blank=True, max_length=64)),
                ('plan_name', models.CharField(blank=True, max_length=150)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10)),
                ('status', models.CharField(choices=[('active', 'Active'), ('past_due', 'Past due'), ('canceled', 'Canceled')], default='active', max_length=20)),
                ('last_payment_status', models.CharField(blank=True, choices=[('', 'None'), ('paid', 'Paid'), ('failed', 'Failed'), ('past_due', 'Past due')], default='', max_length=20)),
                ('next_renewal_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('canceled_at', models.DateTimeField(blank=True, null=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'subscriptions',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status'], name='subscriptio_status_5e2c91_idx'),
                    models.Index(fields=['last_payment_status'], name='subscriptio_last_pa_7b4d02_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Appointment',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('status', models.CharField(choices=[('SCHEDULED', 'Scheduled'), ('CONFIRMED', 'Confirmed'), ('COMPLETED', 'Completed'), ('CANCELED', 'Canceled'), ('BLOCKED', 'Blocked')], default='SCHEDULED', max_length=20)),
                ('start_time', models.DateTimeField(default=django.utils.timezone.now)),
                ('professional', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='appointments', to='professionals.professional')),
                ('subscription', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='appointments', to='subscriptions.subscription')),
            ],
            options={
                'db_table': 'appointments',
                'ordering': ['-start_time'],
                'indexes': [
                    models.Index(fields=['status', 'start_time'], name='appointment_status_3a9f47_idx'),
                ],
            },
        ),
    ]
