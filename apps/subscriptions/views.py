from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from .metrics import SubscriptionMetrics
from .serializers import (
    # Input serializers
    MetricsQuerySerializer,
    # Response serializers
    SubscriptionMetricsSerializer,
    DelinquencyResponseSerializer,
)


@extend_schema(
    parameters=[
        OpenApiParameter('lookback_days', OpenApiTypes.INT, description='Only count visits from the last N days'),
    ],
    responses={200: SubscriptionMetricsSerializer},
    description="Subscription club metrics: MRR, churn, 30-day cash forecast, usage and delinquency.",
    tags=['subscriptions'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def metrics(request):
    """Get subscription metrics - thin HTTP handler."""
    query_serializer = MetricsQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    data = SubscriptionMetrics.metrics(lookback_days=params.get('lookback_days'))

    return Response(SubscriptionMetricsSerializer(data).data)


@extend_schema(
    responses={200: DelinquencyResponseSerializer},
    description="Subscriptions whose last payment failed or is past due.",
    tags=['subscriptions'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def delinquency(request):
    """Get delinquent subscriptions - thin HTTP handler."""
    records = SubscriptionMetrics.delinquency_list()

    return Response(DelinquencyResponseSerializer({
        'count': len(records),
        'results': records,
    }).data)
