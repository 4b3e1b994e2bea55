"""
Hospital endpoints: own details and inventory, and inventory search.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from exchange.permissions import IsHospitalRole, get_principal
from exchange.serializers.hospitals import HospitalDetailsUpdateSerializer, HospitalSearchQuerySerializer
from exchange.services import hospitals as hospital_service
from exchange.services.search import search_hospitals


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, IsHospitalRole])
def hospital_details(request):
    principal = get_principal(request)
    if request.method == 'GET':
        hospital = hospital_service.get_own_hospital(principal)
        return Response(hospital_service.serialize_hospital(hospital))
    # PUT
    s = HospitalDetailsUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    contact, details = s.to_update()
    hospital = hospital_service.update_details(principal, contact=contact, details=details)
    return Response({'ok': True, 'message': 'Details updated successfully',
                     'hospital': hospital_service.serialize_hospital(hospital)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def hospital_search(request):
    q = HospitalSearchQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    results = search_hospitals(
        get_principal(request),
        vd['requestType'],
        blood_group=vd.get('bloodGroup'),
        organ_name=vd.get('organName'),
        quantity=vd.get('quantity'),
    )
    return Response([h.to_dict() for h in results])
