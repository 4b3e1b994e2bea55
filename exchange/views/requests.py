"""
Resource request endpoints.

Thin HTTP wrappers around :mod:`exchange.services.lifecycle`.  Every
handler resolves the caller's principal and hands it to the service,
which performs the state, ownership and inventory checks and raises the
exchange error types rendered by the project exception handler.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle

from exchange.permissions import get_principal
from exchange.serializers.requests import (
    RequestActionSerializer,
    RequestCreateSerializer,
    RequestFinalizeSerializer,
    RequestListQuerySerializer,
)
from exchange.services import lifecycle
from exchange.services import requests as store


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def requests_collection(request):
    if request.method == 'GET':
        q = RequestListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        data = lifecycle.list_requests(
            status=q.validated_data.get('status'),
            request_type=q.validated_data.get('requestType'),
        )
        return Response(data)
    # POST
    s = RequestCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    req = lifecycle.create_request(get_principal(request), s.to_draft())
    return Response(
        {'ok': True, 'message': 'Request posted successfully', 'request': store.serialize(req)},
        status=status.HTTP_201_CREATED,
    )


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@throttle_classes([ScopedRateThrottle])
def accept_request(request):
    s = RequestActionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    req = lifecycle.accept(get_principal(request), s.validated_data['requestId'])
    return Response({'ok': True, 'message': 'Request accepted! Your inventory has been updated.',
                     'request': store.serialize(req)})

accept_request.cls.throttle_scope = 'request_write'


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@throttle_classes([ScopedRateThrottle])
def reject_request(request):
    s = RequestActionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    req = lifecycle.reject(get_principal(request), s.validated_data['requestId'])
    return Response({'ok': True, 'message': 'Request has been rejected.', 'request': store.serialize(req)})

reject_request.cls.throttle_scope = 'request_write'


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cancel_request(request):
    s = RequestActionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    lifecycle.cancel(get_principal(request), s.validated_data['requestId'])
    return Response({'ok': True, 'message': 'Request has been cancelled.'})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def finalize_request(request):
    s = RequestFinalizeSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    req = lifecycle.finalize(
        get_principal(request), s.validated_data['requestId'], s.validated_data.get('finalStatus'),
    )
    return Response({'ok': True, 'message': 'Request has been marked as successfully fulfilled.',
                     'request': store.serialize(req)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def request_detail(request, pk: int):
    return Response(store.serialize(store.get(pk)))
