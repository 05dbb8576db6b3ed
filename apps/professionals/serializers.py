from rest_framework import serializers
from .models import Professional


class ProfessionalSerializer(serializers.ModelSerializer):
    """Directory entry of a professional."""

    class Meta:
        model = Professional
        fields = [
            'id',
            'name',
            'role',
            'specialties',
            'default_commission_rate',
            'status',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
