from rest_framework import serializers
from django.conf import settings


# =============================================================================
# Input Serializers
# =============================================================================

class MetricsQuerySerializer(serializers.Serializer):
    """
    Validate query parameters for the metrics endpoint.

    Query Parameters:
        lookback_days (int): Only count visits from the last N days
    """

    lookback_days = serializers.IntegerField(min_value=1, max_value=3650, required=False)


# =============================================================================
# Response Serializers
# =============================================================================

class UsageComparisonSerializer(serializers.Serializer):
    subscriber_visits = serializers.IntegerField()
    regular_visits = serializers.IntegerField()


class SubscriptionMetricsSerializer(serializers.Serializer):
    mrr = serializers.DecimalField(max_digits=12, decimal_places=2)
    active_count = serializers.IntegerField()
    cash_forecast_30d = serializers.DecimalField(max_digits=12, decimal_places=2)
    churn_rate = serializers.DecimalField(max_digits=6, decimal_places=2)
    usage_comparison = UsageComparisonSerializer()
    avg_visits_per_subscriber = serializers.DecimalField(max_digits=8, decimal_places=1)
    delinquency_count = serializers.IntegerField()
    currency = serializers.SerializerMethodField()

    def get_currency(self, obj):
        return settings.CURRENCY


class DelinquencyRecordSerializer(serializers.Serializer):
    """A subscription whose last charge failed or is past due."""

    id = serializers.UUIDField()
    client_name = serializers.CharField()
    plan_name = serializers.CharField()
    last_attempt = serializers.DateTimeField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    status = serializers.CharField()


class DelinquencyResponseSerializer(serializers.Serializer):
    count = serializers.IntegerField()
    results = DelinquencyRecordSerializer(many=True)
