"""
Authz views for the current doctor.
"""
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.authz.serializers import DoctorProfileSerializer
from apps.core.observability import log_domain_event


class CurrentDoctorView(APIView):
    """
    Profile of the authenticated doctor.

    GET /api/user - Returns the profile.
    PATCH /api/user - Partially updates profile fields.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        serializer = DoctorProfileSerializer(request.user)
        return Response(serializer.data)

    def patch(self, request):
        serializer = DoctorProfileSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()

        log_domain_event(
            'doctor_profile_updated',
            entity_type='User',
            entity_id=str(request.user.id),
            changed_fields=sorted(serializer.validated_data.keys()),
        )
        return Response({
            'success': True,
            'message': 'Perfil atualizado com sucesso!',
            'user': serializer.data,
        })
