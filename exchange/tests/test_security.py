import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from exchange.models import AuditEvent, User

pytestmark = pytest.mark.django_db


def login(client, payload):
    r = client.post(reverse('login_view'), payload, format='json')
    assert r.status_code in (200, 400, 401)
    return r


def test_login_returns_jwt_and_legacy_token(make_hospital):
    hospital = make_hospital('Login General')
    client = APIClient()
    r = login(client, {'username': hospital.user.username, 'password': 'P@ssw0rd1'})
    assert r.status_code == 200
    assert r.data['jwt_access'] and r.data['jwt_refresh'] and r.data['token']
    assert r.data['user'] == {
        'id': hospital.user_id, 'type': 'hospital', 'name': 'Login General', 'hospitalId': hospital.pk,
    }


def test_login_by_email(make_hospital):
    hospital = make_hospital()
    r = login(APIClient(), {'email': hospital.email.upper(), 'password': 'P@ssw0rd1'})
    assert r.status_code == 200
    assert r.data['user']['hospitalId'] == hospital.pk


def test_wrong_password_is_unauthenticated_and_audited(make_hospital):
    hospital = make_hospital()
    r = login(APIClient(), {'username': hospital.user.username, 'password': 'nope'})
    assert r.status_code == 401
    assert r.data['error']['code'] == 'unauthenticated'
    event = AuditEvent.objects.get(action='login')
    assert event.detail['result'] == 'fail'


def test_login_without_account_is_invalid_argument():
    r = login(APIClient(), {'password': 'whatever'})
    assert r.status_code == 400
    assert r.data['error']['code'] == 'invalid_argument'


def test_no_role_bypass_in_login(make_hospital):
    hospital = make_hospital()
    r = login(APIClient(), {'username': hospital.user.username, 'password': 'P@ssw0rd1', 'role': 'admin'})
    assert r.status_code == 200
    assert r.data['user']['type'] == 'hospital'
    hospital.user.refresh_from_db()
    assert hospital.user.role == User.ROLE_HOSPITAL


def test_jwt_and_legacy_token_resolve_same_principal(make_hospital):
    hospital = make_hospital('Token Clinic')
    client = APIClient()
    r = login(client, {'username': hospital.user.username, 'password': 'P@ssw0rd1'})

    client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['jwt_access']}")
    me = client.get(reverse('me_view'))
    assert me.status_code == 200
    assert me.data['user']['hospitalId'] == hospital.pk

    legacy = APIClient()
    legacy.credentials(HTTP_AUTHORIZATION=f"Token {r.data['token']}")
    me = legacy.get(reverse('me_view'))
    assert me.status_code == 200
    assert me.data['user']['name'] == 'Token Clinic'


def test_logout_blacklists_refresh_token(make_hospital):
    hospital = make_hospital()
    client = APIClient()
    r = login(client, {'username': hospital.user.username, 'password': 'P@ssw0rd1'})
    refresh = r.data['jwt_refresh']
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['jwt_access']}")
    out = client.post(reverse('jwt_logout_view'), {'refresh': refresh}, format='json')
    assert out.status_code == 200
    assert out.data['blacklisted'] == 1

    again = APIClient().post(reverse('jwt_refresh_view'), {'refresh': refresh}, format='json')
    assert again.status_code == 401


def test_bad_token_is_unauthenticated():
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')
    r = client.get('/api/requests')
    assert r.status_code == 401
    assert r.data['error']['code'] == 'unauthenticated'


def test_healthz():
    r = APIClient().get('/healthz')
    assert r.status_code == 200
    assert r.json() == {'ok': True, 'db': True}
