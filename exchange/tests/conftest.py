import pytest
from django.core.cache import cache

from exchange.models import User
from exchange.services import hospitals as hospital_service
from exchange.services import inventory
from exchange.services.principal import principal_for_user


@pytest.fixture(autouse=True)
def _reset_throttles():
    # throttle history lives in the locmem cache and would leak between tests
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def make_hospital(db):
    seq = iter(range(1, 1000))

    def _make(name=None, *, oxygen=0, blood=None, organs=None):
        n = next(seq)
        hospital = hospital_service.create_hospital(
            username=f'hospital{n}', password='P@ssw0rd1', name=name or f'Hospital {n}',
            email=f'hospital{n}@example.org', address=f'{n} Test Road', phone=f'555-01{n:02d}',
        )
        inventory.replace_inventory(hospital, oxygen_cylinders=oxygen, blood=blood or {}, organs=organs or [])
        hospital.refresh_from_db()
        return hospital

    return _make


@pytest.fixture
def principal_of():
    def _principal(hospital_or_user):
        user = getattr(hospital_or_user, 'user', hospital_or_user)
        return principal_for_user(user)

    return _principal


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(username='platform-admin', password='P@ssw0rd1', role=User.ROLE_ADMIN)
