"""
Authentication views.

The exchange trusts whatever principal the identity layer resolves; this
module is that layer for the bundled deployment: username/email +
password login issuing a JWT pair plus a legacy DRF token, token
refresh, logout and a ``me`` endpoint.  Roles come only from the stored
account, never from the login payload.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView

from exchange.permissions import get_principal
from exchange.serializers.auth import LoginSerializer
from exchange.exceptions import InvalidArgument
from exchange.services.audit import log_action
from exchange.services.principal import principal_for_user

from .models import User

logger = logging.getLogger(__name__)


def _principal_payload(principal) -> dict:
    return {
        'id': principal.id,
        'type': principal.role,
        'name': principal.name,
        'hospitalId': principal.hospital_id,
    }


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([ScopedRateThrottle])
def login_view(request):
    """
    Login with username (or the hospital's email) and password.
    """
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    account = s.validated_data['account']
    password = s.validated_data['password']

    username = account
    if '@' in account:
        username = User.objects.filter(email__iexact=account).values_list('username', flat=True).first() or account

    user = authenticate(request, username=username, password=password)
    ip = request.META.get('REMOTE_ADDR')
    if not user:
        log_action(user_id=None, action='login', object_type='user',
                   detail={'result': 'fail', 'account': account, 'ip': ip})
        logger.info('failed login for %s from %s', account, ip)
        return Response({'ok': False, 'error': {'code': 'unauthenticated', 'message': 'Invalid credentials.'}},
                        status=401)

    log_action(user_id=user.id, action='login', object_type='user', object_id=user.id,
               detail={'result': 'ok', 'ip': ip})

    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    principal = principal_for_user(user)

    return Response({
        'ok': True,
        'message': 'Login successful',
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
        'user': _principal_payload(principal),
    }, status=200)

login_view.cls.throttle_scope = 'login'


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    """Return the caller's principal."""
    return Response({'isAuthenticated': True, 'user': _principal_payload(get_principal(request))})


@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from refresh token."""
    view = TokenRefreshView.as_view()
    resp = view(request._request)
    if isinstance(resp, Response):
        data = dict(resp.data)
        if 'access' in data and 'jwt_access' not in data:
            data['jwt_access'] = data.pop('access')
        return Response(data, status=resp.status_code)
    return resp


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def jwt_logout_view(request):
    """Blacklist the given refresh token, or all of the caller's, and drop the legacy token."""
    refresh = request.data.get('refresh')
    count = 0
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
        except TokenError as e:
            raise InvalidArgument(str(e))
        count = 1
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    Token.objects.filter(user=request.user).delete()
    return Response({'ok': True, 'blacklisted': count})
