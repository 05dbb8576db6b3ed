from rest_framework import mixins, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema
from apps.commissions.permissions import IsShopManager
from .exceptions import ProfessionalNotFoundError, ProfessionalInUseError
from .models import Professional
from .serializers import ProfessionalSerializer
from .services import remove_professional


class ProfessionalViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """
    ViewSet for the professional directory.

    list: Get all professionals
    create: Add a professional
    retrieve: Get a professional
    update: Change name, role, default rate or status
    destroy: Remove a professional (rejected while ledger records reference it)
    """

    queryset = Professional.objects.all()
    serializer_class = ProfessionalSerializer
    permission_classes = [IsAuthenticated, IsShopManager]

    @extend_schema(responses={204: None, 404: None, 409: None})
    def destroy(self, request, pk=None):
        try:
            remove_professional(professional_id=pk)
        except ProfessionalNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ProfessionalInUseError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        return Response(status=status.HTTP_204_NO_CONTENT)
