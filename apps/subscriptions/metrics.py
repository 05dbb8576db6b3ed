"""
Subscription Metrics Module
===========================

Read-only SaaS metrics for the subscription club: recurring revenue,
churn, the 30-day cash forecast, delinquency and how subscribers use the
shop compared to walk-in customers.

Classes:
    SubscriptionMetrics: Static methods, one per metric, plus ``metrics``
        which returns all of them together.

Example:
    Dashboard numbers::

        from apps.subscriptions.metrics import SubscriptionMetrics

        data = SubscriptionMetrics.metrics()
        print(f"MRR: {data['mrr']} / churn: {data['churn_rate']}%")

Note:
    Every method accepts an optional ``now`` so results are reproducible in
    tests. Nothing here is cached; each call reads the current rows.
"""

from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db.models import DecimalField, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from .models import Appointment, AppointmentStatus, PaymentStatus, Subscription, SubscriptionStatus


DELINQUENT_STATUSES = (PaymentStatus.FAILED, PaymentStatus.PAST_DUE)


def _month_start(now):
    local = timezone.localtime(now)
    return local.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def _sum_amount(queryset):
    return queryset.aggregate(
        total=Coalesce(
            Sum('amount'),
            Decimal('0.00'),
            output_field=DecimalField(max_digits=12, decimal_places=2),
        )
    )['total']


class SubscriptionMetrics:
    """
    Aggregates over Subscription and Appointment rows.

    Methods:
        mrr: Monthly recurring revenue of active subscriptions.
        active_count: Number of active subscriptions.
        cash_forecast_30d: Renewals expected over the forecast window.
        churn_rate: Share of the month's opening subscribers that canceled.
        usage_comparison: Completed visits with and without a subscription.
        avg_visits_per_subscriber: Subscriber visits per active subscription.
        delinquency_list: Subscriptions whose last payment failed.
        metrics: All of the above in one dictionary.
    """

    @staticmethod
    def active():
        return Subscription.objects.filter(status=SubscriptionStatus.ACTIVE)

    @staticmethod
    def mrr():
        """Sum of ``amount`` over active subscriptions (Decimal)."""
        return _sum_amount(SubscriptionMetrics.active())

    @staticmethod
    def active_count():
        return SubscriptionMetrics.active().count()

    @staticmethod
    def cash_forecast_30d(now=None):
        """
        Revenue expected from renewals in the next forecast window.

        Sums active subscriptions whose ``next_renewal_at`` falls within
        [now, now + CASH_FORECAST_DAYS]. Subscriptions with an overdue
        renewal date are left out; they show up in the delinquency list.
        """
        now = now or timezone.now()
        horizon = now + timedelta(days=settings.CASH_FORECAST_DAYS)
        return _sum_amount(
            SubscriptionMetrics.active().filter(next_renewal_at__range=(now, horizon))
        )

    @staticmethod
    def churn_rate(now=None):
        """
        Percentage of subscribers lost since the start of the month.

        Returns:
            Decimal: canceled-this-month / active-at-month-start * 100,
            rounded to 2 places. 0 when nobody was active at month start.

        Note:
            "Active at month start" means created before the month began and
            not canceled before it, so a subscription canceled this month is
            counted in both numerator and denominator.
        """
        start = _month_start(now or timezone.now())

        canceled = Subscription.objects.filter(
            status=SubscriptionStatus.CANCELED,
            canceled_at__gte=start,
        ).count()

        opening = Subscription.objects.filter(created_at__lt=start).exclude(
            canceled_at__lt=start
        ).count()

        if opening == 0:
            return Decimal('0.00')

        rate = Decimal(canceled) * 100 / Decimal(opening)
        return rate.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)

    @staticmethod
    def _completed_visits(lookback_days=None, now=None):
        queryset = Appointment.objects.filter(status=AppointmentStatus.COMPLETED)
        if lookback_days is not None:
            since = (now or timezone.now()) - timedelta(days=lookback_days)
            queryset = queryset.filter(start_time__gte=since)
        return queryset

    @staticmethod
    def usage_comparison(lookback_days=None, now=None):
        """
        Completed visits split by whether a subscription was used.

        Args:
            lookback_days (int, optional): Only count visits within this many
                days before ``now``. All time when omitted.

        Returns:
            dict: ``subscriber_visits`` and ``regular_visits`` (ints)
        """
        visits = SubscriptionMetrics._completed_visits(lookback_days, now)
        return {
            'subscriber_visits': visits.filter(subscription__isnull=False).count(),
            'regular_visits': visits.filter(subscription__isnull=True).count(),
        }

    @staticmethod
    def avg_visits_per_subscriber(lookback_days=None, now=None):
        active = SubscriptionMetrics.active_count()
        if active == 0:
            return Decimal('0.0')
        visits = (
            SubscriptionMetrics._completed_visits(lookback_days, now)
            .filter(subscription__isnull=False)
            .count()
        )
        return (Decimal(visits) / Decimal(active)).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)

    @staticmethod
    def delinquency_list():
        """
        Subscriptions whose last payment failed or is past due.

        Returns:
            list[dict]: One record per subscription with ``id``,
            ``client_name``, ``plan_name``, ``last_attempt``, ``amount`` and
            ``status``, most recent attempt first.
        """
        queryset = (
            Subscription.objects
            .filter(last_payment_status__in=DELINQUENT_STATUSES)
            .order_by('-updated_at')
        )
        return [
            {
                'id': sub.id,
                'client_name': sub.customer_name or 'Customer',
                'plan_name': sub.plan_name or 'Plan',
                'last_attempt': sub.updated_at,
                'amount': sub.amount,
                'status': sub.last_payment_status,
            }
            for sub in queryset
        ]

    @staticmethod
    def delinquency_count():
        return Subscription.objects.filter(last_payment_status__in=DELINQUENT_STATUSES).count()

    @staticmethod
    def metrics(now=None, lookback_days=None):
        """
        All subscription metrics in one dictionary.

        Args:
            now (datetime, optional): Reference time. Defaults to now.
            lookback_days (int, optional): Window for visit counts.

        Returns:
            dict: mrr, active_count, cash_forecast_30d, churn_rate,
            usage_comparison, avg_visits_per_subscriber, delinquency_count
        """
        now = now or timezone.now()
        return {
            'mrr': SubscriptionMetrics.mrr(),
            'active_count': SubscriptionMetrics.active_count(),
            'cash_forecast_30d': SubscriptionMetrics.cash_forecast_30d(now=now),
            'churn_rate': SubscriptionMetrics.churn_rate(now=now),
            'usage_comparison': SubscriptionMetrics.usage_comparison(lookback_days=lookback_days, now=now),
            'avg_visits_per_subscriber': SubscriptionMetrics.avg_visits_per_subscriber(
                lookback_days=lookback_days, now=now
            ),
            'delinquency_count': SubscriptionMetrics.delinquency_count(),
        }
