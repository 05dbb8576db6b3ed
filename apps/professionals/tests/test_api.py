import pytest
from uuid import uuid4
from django.urls import reverse
from rest_framework import status
from apps.commissions.services import record_entry
from apps.professionals.models import Professional


@pytest.mark.django_db
class TestProfessionalList:
    """Tests for GET /api/professionals/"""

    def test_list(self, desk_client, professional):
        response = desk_client.get(reverse('professionals:professional-list'))

        assert response.status_code == status.HTTP_200_OK
        results = response.data
        assert [p['name'] for p in results] == ['Rafael Souza']
        assert results[0]['default_commission_rate'] == '50.00'

    def test_requires_auth(self, api_client):
        response = api_client.get(reverse('professionals:professional-list'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestProfessionalWrite:

    def test_create(self, owner_client):
        response = owner_client.post(
            reverse('professionals:professional-list'),
            {'name': 'Bruno Lima', 'role': 'Barber', 'default_commission_rate': '45.00'},
            format='json',
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert Professional.objects.get(name='Bruno Lima').default_commission_rate == 45

    def test_create_rate_out_of_range(self, owner_client):
        response = owner_client.post(
            reverse('professionals:professional-list'),
            {'name': 'Bruno Lima', 'default_commission_rate': '120.00'},
            format='json',
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_staff_cannot_create(self, desk_client):
        response = desk_client.post(
            reverse('professionals:professional-list'),
            {'name': 'Bruno Lima'},
            format='json',
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_update_rate(self, owner_client, professional):
        response = owner_client.patch(
            reverse('professionals:professional-detail', args=[professional.id]),
            {'default_commission_rate': '55.00'},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        professional.refresh_from_db()
        assert str(professional.default_commission_rate) == '55.00'


@pytest.mark.django_db
class TestProfessionalDelete:
    """Tests for DELETE /api/professionals/{id}/"""

    def test_delete(self, owner_client, professional):
        response = owner_client.delete(reverse('professionals:professional-detail', args=[professional.id]))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Professional.objects.exists()

    def test_delete_with_pending_entries(self, owner_client, professional):
        record_entry(professional_id=professional.id, gross_amount='80.00')

        response = owner_client.delete(reverse('professionals:professional-detail', args=[professional.id]))

        assert response.status_code == status.HTTP_409_CONFLICT
        assert 'pending' in response.data['error']

    def test_delete_unknown(self, owner_client):
        response = owner_client.delete(reverse('professionals:professional-detail', args=[uuid4()]))

        assert response.status_code == status.HTTP_404_NOT_FOUND
