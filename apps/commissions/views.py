from django.conf import settings
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.professionals.exceptions import ProfessionalNotFoundError
from apps.professionals.services import get_professional

from . import services
from .models import LedgerEntry
from .permissions import IsShopManager
from .serializers import (
    # Input serializers
    LedgerEntryCreateSerializer,
    RateInputSerializer,
    BonusInputSerializer,
    EmployeePurchaseInputSerializer,
    PeriodQuerySerializer,
    SettleInputSerializer,
    PayoutFilterSerializer,
    PotDistributeInputSerializer,
    # Response serializers
    LedgerEntrySerializer,
    BalanceSerializer,
    RateAdjustmentSerializer,
    PayoutSerializer,
    PayoutSummarySerializer,
    ReversalResultSerializer,
    PotDistributionSerializer,
    PayoutCheckSerializer,
    ErrorSerializer,
    PartialFailureSerializer,
)


def error_response(exc):
    """Translate a domain exception into an HTTP response."""
    if isinstance(exc, services.PartialSettlementError):
        return Response(
            {
                'error': str(exc),
                'payout_id': exc.payout_id,
                'settled': exc.settled,
                'unsettled': exc.unsettled,
                'skipped': exc.skipped,
            },
            status=status.HTTP_207_MULTI_STATUS
        )
    if isinstance(exc, services.ReversalPartialFailure):
        return Response(
            {
                'error': str(exc),
                'payout_id': exc.payout_id,
                'reverted': exc.reverted,
                'unreverted': exc.unreverted,
            },
            status=status.HTTP_207_MULTI_STATUS
        )
    if isinstance(exc, services.NothingToSettleError):
        return Response(
            {'error': str(exc), 'balance': exc.balance},
            status=status.HTTP_400_BAD_REQUEST
        )
    if isinstance(exc, services.PreconditionFailedError):
        return Response(
            {'error': str(exc), 'entry_ids': exc.entry_ids},
            status=status.HTTP_409_CONFLICT
        )
    if isinstance(exc, (services.EntryNotFoundError, services.PayoutNotFoundError, ProfessionalNotFoundError)):
        return Response({'error': str(exc)}, status=status.HTTP_404_NOT_FOUND)
    return Response({'error': str(exc)}, status=status.HTTP_400_BAD_REQUEST)


DOMAIN_ERRORS = (services.CommissionsServiceError, ProfessionalNotFoundError)


class LedgerPagination(PageNumberPagination):
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 200


class ProfessionalLedgerViewSet(viewsets.ViewSet):
    """
    Commission ledger of one professional.

    balance: Pending balance (recomputed on every call)
    pending: Pending entries, oldest first
    paid: Paid entries, most recent first
    period: All entries of one month
    recalculate: Apply one rate to every pending entry
    bonus: Credit a bonus
    employee_purchase: Debit a product taken from the shop
    """

    permission_classes = [IsAuthenticated, IsShopManager]

    @extend_schema(responses={200: BalanceSerializer, 404: ErrorSerializer}, tags=['commissions'])
    @action(detail=True, methods=['get'])
    def balance(self, request, pk=None):
        """
        GET /api/commissions/professionals/{id}/balance/
        """
        try:
            professional = get_professional(professional_id=pk)
        except ProfessionalNotFoundError as e:
            return error_response(e)

        pending = services.list_pending(professional_id=professional.id)
        data = {
            'professional_id': professional.id,
            'pending_balance': services.pending_balance(professional_id=professional.id),
            'pending_count': pending.count(),
            'currency': settings.CURRENCY,
        }
        return Response(BalanceSerializer(data).data)

    @extend_schema(responses={200: LedgerEntrySerializer(many=True), 404: ErrorSerializer}, tags=['commissions'])
    @action(detail=True, methods=['get'])
    def pending(self, request, pk=None):
        """
        GET /api/commissions/professionals/{id}/pending/
        """
        try:
            professional = get_professional(professional_id=pk)
        except ProfessionalNotFoundError as e:
            return error_response(e)

        entries = services.list_pending(professional_id=professional.id)
        return Response(LedgerEntrySerializer(entries, many=True).data)

    @extend_schema(responses={200: LedgerEntrySerializer(many=True), 404: ErrorSerializer}, tags=['commissions'])
    @action(detail=True, methods=['get'])
    def paid(self, request, pk=None):
        """
        GET /api/commissions/professionals/{id}/paid/
        """
        try:
            professional = get_professional(professional_id=pk)
        except ProfessionalNotFoundError as e:
            return error_response(e)

        entries = services.list_paid(professional_id=professional.id)
        paginator = LedgerPagination()
        page = paginator.paginate_queryset(entries, request, view=self)
        return paginator.get_paginated_response(LedgerEntrySerializer(page, many=True).data)

    @extend_schema(
        parameters=[
            OpenApiParameter('year', OpenApiTypes.INT, required=True),
            OpenApiParameter('month', OpenApiTypes.INT, required=True),
        ],
        responses={200: LedgerEntrySerializer(many=True), 404: ErrorSerializer},
        tags=['commissions'],
    )
    @action(detail=True, methods=['get'])
    def period(self, request, pk=None):
        """
        GET /api/commissions/professionals/{id}/period/?year=2025&month=3
        """
        query_serializer = PeriodQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)
        params = query_serializer.validated_data

        try:
            professional = get_professional(professional_id=pk)
            entries = services.list_for_period(
                professional_id=professional.id,
                year=params['year'],
                month=params['month'],
            )
        except DOMAIN_ERRORS as e:
            return error_response(e)

        return Response(LedgerEntrySerializer(entries, many=True).data)

    @extend_schema(
        request=RateInputSerializer,
        responses={200: OpenApiTypes.OBJECT, 400: ErrorSerializer, 404: ErrorSerializer},
        tags=['commissions'],
    )
    @action(detail=True, methods=['post'])
    def recalculate(self, request, pk=None):
        """
        POST /api/commissions/professionals/{id}/recalculate/
        Body: {"commission_rate": "45.00"}
        """
        input_serializer = RateInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        try:
            updated = services.recalculate_rates(
                professional_id=pk,
                new_rate=input_serializer.validated_data['commission_rate'],
            )
            balance = services.pending_balance(professional_id=pk)
        except DOMAIN_ERRORS as e:
            return error_response(e)

        return Response({
            'updated': updated,
            'pending_balance': str(balance),
        })

    @extend_schema(
        request=BonusInputSerializer,
        responses={201: LedgerEntrySerializer, 400: ErrorSerializer, 404: ErrorSerializer},
        tags=['commissions'],
    )
    @action(detail=True, methods=['post'])
    def bonus(self, request, pk=None):
        """
        POST /api/commissions/professionals/{id}/bonus/
        Body: {"amount": "50.00", "label": "Goal reached"}
        """
        input_serializer = BonusInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        try:
            entry = services.record_bonus(professional_id=pk, **input_serializer.validated_data)
        except DOMAIN_ERRORS as e:
            return error_response(e)

        return Response(LedgerEntrySerializer(entry).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        request=EmployeePurchaseInputSerializer,
        responses={201: LedgerEntrySerializer, 400: ErrorSerializer, 404: ErrorSerializer},
        tags=['commissions'],
    )
    @action(detail=True, methods=['post'])
    def employee_purchase(self, request, pk=None):
        """
        POST /api/commissions/professionals/{id}/employee_purchase/
        Body: {"amount": "35.00", "product_name": "Pomade"}
        """
        input_serializer = EmployeePurchaseInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        try:
            entry = services.record_employee_purchase(professional_id=pk, **input_serializer.validated_data)
        except DOMAIN_ERRORS as e:
            return error_response(e)

        return Response(LedgerEntrySerializer(entry).data, status=status.HTTP_201_CREATED)


class LedgerEntryViewSet(mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Individual ledger entries.

    create: Record an entry (service, product sale, bonus, debit...)
    retrieve: Get one entry
    adjust_rate: Change the rate of a pending entry
    mark_paid: Mark one entry paid without a payout
    """

    queryset = LedgerEntry.objects.select_related('professional')
    serializer_class = LedgerEntrySerializer
    permission_classes = [IsAuthenticated, IsShopManager]

    @extend_schema(
        request=LedgerEntryCreateSerializer,
        responses={201: LedgerEntrySerializer, 400: ErrorSerializer, 404: ErrorSerializer},
        tags=['commissions'],
    )
    def create(self, request):
        input_serializer = LedgerEntryCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = input_serializer.validated_data

        try:
            entry = services.record_entry(
                professional_id=data['professional'],
                gross_amount=data['gross_amount'],
                kind=data['kind'],
                commission_rate=data.get('commission_rate'),
                occurred_at=data.get('occurred_at'),
                label=data['label'],
                counterparty_label=data['counterparty_label'],
                metadata=data.get('metadata'),
            )
        except DOMAIN_ERRORS as e:
            return error_response(e)

        return Response(LedgerEntrySerializer(entry).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        request=RateInputSerializer,
        responses={200: RateAdjustmentSerializer, 400: ErrorSerializer, 404: ErrorSerializer},
        tags=['commissions'],
    )
    @action(detail=True, methods=['post'])
    def adjust_rate(self, request, pk=None):
        """
        POST /api/commissions/entries/{id}/adjust_rate/
        Body: {"commission_rate": "40.00"}
        """
        input_serializer = RateInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        try:
            adjustment = services.adjust_rate(
                entry_id=pk,
                new_rate=input_serializer.validated_data['commission_rate'],
            )
        except DOMAIN_ERRORS as e:
            return error_response(e)

        return Response(RateAdjustmentSerializer(adjustment).data)

    @extend_schema(
        request=None,
        responses={200: LedgerEntrySerializer, 404: ErrorSerializer, 409: ErrorSerializer},
        tags=['commissions'],
    )
    @action(detail=True, methods=['post'])
    def mark_paid(self, request, pk=None):
        """
        POST /api/commissions/entries/{id}/mark_paid/
        """
        try:
            entry = services.mark_paid_individually(entry_id=pk)
        except DOMAIN_ERRORS as e:
            return error_response(e)

        return Response(LedgerEntrySerializer(entry).data)


class PayoutViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Settlements.

    list: Payout history with item counts (filter: ?professional=)
    create: Settle a professional's pending commissions
    retrieve: Get one payout
    undo: Reverse a payout
    check: Compare a payout with its member entries
    """

    serializer_class = PayoutSerializer
    permission_classes = [IsAuthenticated, IsShopManager]
    pagination_class = LedgerPagination

    def get_queryset(self):
        filter_serializer = PayoutFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        return services.list_payouts(
            professional_id=filter_serializer.validated_data.get('professional')
        )

    @extend_schema(
        request=SettleInputSerializer,
        responses={
            201: PayoutSummarySerializer,
            207: PartialFailureSerializer,
            400: ErrorSerializer,
            404: ErrorSerializer,
            409: ErrorSerializer,
        },
        tags=['commissions'],
    )
    def create(self, request):
        input_serializer = SettleInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        try:
            summary = services.settle(
                professional_id=input_serializer.validated_data['professional'],
                funding_source=input_serializer.validated_data['funding_source'],
                created_by=request.user,
            )
        except DOMAIN_ERRORS as e:
            return error_response(e)

        return Response(PayoutSummarySerializer(summary).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        request=None,
        responses={200: ReversalResultSerializer, 207: PartialFailureSerializer, 404: ErrorSerializer},
        tags=['commissions'],
    )
    @action(detail=True, methods=['post'])
    def undo(self, request, pk=None):
        """
        POST /api/commissions/payouts/{id}/undo/

        Safe to repeat; a payout that is already gone just reopens any
        entries still referencing it.
        """
        try:
            result = services.undo(payout_id=pk)
        except DOMAIN_ERRORS as e:
            return error_response(e)

        return Response(ReversalResultSerializer(result).data)

    @extend_schema(responses={200: PayoutCheckSerializer, 404: ErrorSerializer}, tags=['commissions'])
    @action(detail=True, methods=['get'])
    def check(self, request, pk=None):
        """
        GET /api/commissions/payouts/{id}/check/
        """
        try:
            result = services.check_payout(payout_id=pk)
        except DOMAIN_ERRORS as e:
            return error_response(e)

        return Response(PayoutCheckSerializer(result).data)


@extend_schema(
    request=PotDistributeInputSerializer,
    responses={201: PotDistributionSerializer, 400: ErrorSerializer, 404: ErrorSerializer},
    description="Record a professional's share of the subscription revenue pot.",
    tags=['commissions'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsShopManager])
def distribute_pot(request):
    """Split the subscription pot - thin HTTP handler."""
    input_serializer = PotDistributeInputSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)
    data = input_serializer.validated_data

    try:
        result = services.distribute(
            professional_id=data['professional'],
            shop_percent=data.get('shop_percent'),
            pro_percent=data.get('pro_percent'),
            total_amount=data.get('total_amount'),
        )
    except DOMAIN_ERRORS as e:
        return error_response(e)

    return Response(PotDistributionSerializer(result).data, status=status.HTTP_201_CREATED)
