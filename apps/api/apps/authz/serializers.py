"""
Authz serializers for the doctor profile.
"""
from rest_framework import serializers
from apps.authz.models import User


class DoctorProfileSerializer(serializers.ModelSerializer):
    """
    Serializer for the authenticated doctor (GET/PATCH /api/user).

    Email and flags are read-only; the profile fields are editable.
    """

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'name',
            'phone',
            'crm',
            'specialty',
            'clinic_name',
            'clinic_address',
            'timezone',
            'locale',
            'notifications_enabled',
            'is_active',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'email', 'is_active', 'created_at', 'updated_at']
