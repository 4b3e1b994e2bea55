"""
Administrator endpoints for managing registered hospitals.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from exchange.permissions import IsAdminRole, get_principal
from exchange.services import hospitals as hospital_service


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_hospital_list(request):
    return Response(hospital_service.list_hospitals(get_principal(request)))


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_hospital_delete(request, pk: int):
    hospital_service.delete_hospital(get_principal(request), pk)
    return Response({'ok': True, 'message': 'Hospital and associated data deleted successfully.'},
                    status=status.HTTP_200_OK)
