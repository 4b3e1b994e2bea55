"""
Service-level tests for the request lifecycle.

They call :mod:`exchange.services.lifecycle` directly with explicit
principals, the same way the HTTP views do.
"""
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from django.db import connection

from exchange.exceptions import (
    Forbidden,
    InsufficientInventory,
    InvalidArgument,
    InvalidState,
    NotFound,
    SelfAction,
    Unauthenticated,
)
from exchange.models import AuditEvent, ResourceRequest
from exchange.services import inventory, lifecycle
from exchange.services import requests as store

pytestmark = pytest.mark.django_db


def blood_draft(quantity=3, group='O+'):
    return {'request_type': 'Blood', 'blood_group': group, 'quantity': quantity,
            'description': 'Need blood for emergency surgery'}


@pytest.fixture
def trio(make_hospital):
    a = make_hospital('Hospital A', blood={'O+': 5})
    b = make_hospital(
        'Hospital B', oxygen=20, blood={'O+': 10},
        organs=[
            {'organ_name': 'Kidney', 'blood_group': 'O+', 'age': 40},
            {'organ_name': 'Kidney', 'blood_group': 'O+', 'age': 22},
        ],
    )
    c = make_hospital('Hospital C', blood={'O+': 10})
    return a, b, c


def o_pos(hospital):
    return inventory.get_snapshot(hospital.pk).blood_units('O+')


def test_create_forces_open_status_and_caller_as_requester(trio, principal_of):
    a, b, _ = trio
    draft = blood_draft()
    draft.update(status='Accepted', requesting_hospital_id=b.pk, providing_hospital_id=b.pk)
    req = lifecycle.create_request(principal_of(a), draft)
    assert req.status == ResourceRequest.STATUS_OPEN
    assert req.requesting_hospital_id == a.pk
    assert req.providing_hospital_id is None


def test_create_keeps_only_details_of_its_type(trio, principal_of):
    a, _, _ = trio
    req = lifecycle.create_request(principal_of(a), {
        'request_type': 'Oxygen', 'quantity': 4, 'blood_group': 'A+', 'organ_name': 'Heart',
        'description': 'ICU cylinders',
    })
    assert req.quantity == 4
    assert req.blood_group is None
    assert req.organ_name is None


@pytest.mark.parametrize('draft', [
    {'request_type': 'Blood', 'blood_group': 'O+', 'description': 'x'},
    {'request_type': 'Blood', 'quantity': 2, 'description': 'x'},
    {'request_type': 'Oxygen', 'description': 'x'},
    {'request_type': 'Organ', 'blood_group': 'O+', 'description': 'x'},
    {'request_type': 'Organ', 'organ_name': 'Brain', 'blood_group': 'O+', 'description': 'x'},
    {'request_type': 'Blood', 'blood_group': 'O+', 'quantity': 0, 'description': 'x'},
    {'request_type': 'Blood', 'blood_group': 'O+', 'quantity': 2, 'description': '   '},
    {'request_type': 'Plasma', 'quantity': 2, 'description': 'x'},
])
def test_create_rejects_malformed_drafts(trio, principal_of, draft):
    a, _, _ = trio
    with pytest.raises(InvalidArgument):
        lifecycle.create_request(principal_of(a), draft)
    assert ResourceRequest.objects.count() == 0


def test_create_rejects_description_over_configured_limit(trio, principal_of, settings):
    a, _, _ = trio
    settings.DESCRIPTION_MAX_LENGTH = 10
    with pytest.raises(InvalidArgument):
        lifecycle.create_request(principal_of(a), dict(blood_draft(1), description='x' * 11))
    assert lifecycle.create_request(principal_of(a), dict(blood_draft(1), description='x' * 10))


def test_accept_blood_debits_provider_once(trio, principal_of):
    a, b, c = trio
    req = lifecycle.create_request(principal_of(a), blood_draft(3))

    accepted = lifecycle.accept(principal_of(b), req.pk)

    assert accepted.status == ResourceRequest.STATUS_ACCEPTED
    assert accepted.providing_hospital_id == b.pk
    assert o_pos(b) == 7
    # requester's own stock is not touched
    assert o_pos(a) == 5

    with pytest.raises(InvalidState):
        lifecycle.accept(principal_of(c), req.pk)
    assert o_pos(b) == 7
    assert o_pos(c) == 10


def test_many_accept_attempts_only_one_succeeds(make_hospital, principal_of):
    requester = make_hospital('Requester')
    providers = [make_hospital(f'Provider {i}', oxygen=50) for i in range(5)]
    req = lifecycle.create_request(principal_of(requester), {
        'request_type': 'Oxygen', 'quantity': 8, 'description': 'Ward oxygen',
    })

    outcomes = []
    for provider in providers:
        try:
            lifecycle.accept(principal_of(provider), req.pk)
            outcomes.append('ok')
        except InvalidState:
            outcomes.append('invalid_state')

    assert outcomes.count('ok') == 1
    assert outcomes.count('invalid_state') == len(providers) - 1
    totals = sorted(inventory.get_snapshot(p.pk).oxygen_cylinders for p in providers)
    assert totals == [42, 50, 50, 50, 50]


@pytest.mark.django_db(transaction=True)
def test_concurrent_accepts_debit_exactly_once(make_hospital, principal_of):
    requester = make_hospital('Requester')
    providers = [make_hospital(f'Provider {i}', oxygen=50) for i in range(5)]
    req = lifecycle.create_request(principal_of(requester), {
        'request_type': 'Oxygen', 'quantity': 8, 'description': 'Ward oxygen',
    })
    principals = [principal_of(p) for p in providers]
    barrier = threading.Barrier(len(principals))

    def attempt(principal):
        barrier.wait()
        try:
            lifecycle.accept(principal, req.pk)
            return 'ok'
        except InvalidState:
            return 'invalid_state'
        finally:
            connection.close()

    with ThreadPoolExecutor(max_workers=len(principals)) as pool:
        outcomes = list(pool.map(attempt, principals))

    assert sorted(outcomes) == ['invalid_state'] * 4 + ['ok']
    totals = sorted(inventory.get_snapshot(p.pk).oxygen_cylinders for p in providers)
    assert totals == [42, 50, 50, 50, 50]
    req.refresh_from_db()
    assert req.status == ResourceRequest.STATUS_ACCEPTED
    assert req.providing_hospital_id in {p.pk for p in providers}


def test_accept_that_loses_the_status_race_does_not_debit(trio, principal_of, monkeypatch):
    a, b, c = trio
    req = lifecycle.create_request(principal_of(a), blood_draft(3))
    stale = store.get(req.pk)
    lifecycle.accept(principal_of(b), req.pk)

    # c read the request while it was still open
    monkeypatch.setattr(store, 'get', lambda pk: stale)
    with pytest.raises(InvalidState):
        lifecycle.accept(principal_of(c), req.pk)

    assert o_pos(c) == 10
    assert o_pos(b) == 7
    assert ResourceRequest.objects.get(pk=req.pk).providing_hospital_id == b.pk


def test_accept_with_insufficient_stock_leaves_request_open(trio, principal_of):
    a, _, c = trio
    req = lifecycle.create_request(principal_of(a), blood_draft(11))

    with pytest.raises(InsufficientInventory):
        lifecycle.accept(principal_of(c), req.pk)

    req.refresh_from_db()
    assert req.status == ResourceRequest.STATUS_OPEN
    assert req.providing_hospital_id is None
    assert o_pos(c) == 10


def test_accept_oxygen_and_organ(trio, principal_of):
    a, b, _ = trio
    oxygen = lifecycle.create_request(principal_of(a), {
        'request_type': 'Oxygen', 'quantity': 5, 'description': 'cylinders',
    })
    organ = lifecycle.create_request(principal_of(a), {
        'request_type': 'Organ', 'organ_name': 'Kidney', 'blood_group': 'O+', 'description': 'transplant',
    })

    lifecycle.accept(principal_of(b), oxygen.pk)
    lifecycle.accept(principal_of(b), organ.pk)

    snapshot = inventory.get_snapshot(b.pk)
    assert snapshot.oxygen_cylinders == 15
    assert [(o.organ_name, o.age) for o in snapshot.organs] == [('Kidney', 22)]


def test_accept_organ_without_matching_offer(trio, principal_of):
    a, b, _ = trio
    req = lifecycle.create_request(principal_of(a), {
        'request_type': 'Organ', 'organ_name': 'Heart', 'blood_group': 'O+', 'description': 'transplant',
    })
    with pytest.raises(InsufficientInventory):
        lifecycle.accept(principal_of(b), req.pk)
    assert len(inventory.get_snapshot(b.pk).organs) == 2


def test_hospital_cannot_accept_or_reject_own_request(trio, principal_of):
    a, _, _ = trio
    req = lifecycle.create_request(principal_of(a), blood_draft(1))
    with pytest.raises(SelfAction):
        lifecycle.accept(principal_of(a), req.pk)
    with pytest.raises(SelfAction):
        lifecycle.reject(principal_of(a), req.pk)
    assert o_pos(a) == 5
    assert store.get(req.pk).status == ResourceRequest.STATUS_OPEN


def test_reject_records_provider_without_touching_inventory(trio, principal_of):
    a, b, _ = trio
    req = lifecycle.create_request(principal_of(a), blood_draft(3))
    before = inventory.get_snapshot(b.pk).to_dict()

    rejected = lifecycle.reject(principal_of(b), req.pk)

    assert rejected.status == ResourceRequest.STATUS_REJECTED
    assert rejected.providing_hospital_id == b.pk
    assert inventory.get_snapshot(b.pk).to_dict() == before


def test_rejected_request_is_terminal(trio, principal_of):
    a, b, c = trio
    req = lifecycle.create_request(principal_of(a), blood_draft(1))
    lifecycle.reject(principal_of(b), req.pk)

    with pytest.raises(InvalidState):
        lifecycle.accept(principal_of(c), req.pk)
    with pytest.raises(InvalidState):
        lifecycle.finalize(principal_of(a), req.pk, 'Closed')
    with pytest.raises(InvalidState):
        lifecycle.cancel(principal_of(a), req.pk)
    assert store.get(req.pk).status == ResourceRequest.STATUS_REJECTED


def test_cancel_own_open_request_deletes_it(trio, principal_of):
    a, _, _ = trio
    req = lifecycle.create_request(principal_of(a), blood_draft(1))
    lifecycle.cancel(principal_of(a), req.pk)
    with pytest.raises(NotFound):
        store.get(req.pk)


def test_cancel_by_other_hospital_is_forbidden(trio, principal_of):
    a, b, _ = trio
    req = lifecycle.create_request(principal_of(a), blood_draft(1))
    with pytest.raises(Forbidden):
        lifecycle.cancel(principal_of(b), req.pk)
    assert store.get(req.pk).status == ResourceRequest.STATUS_OPEN


def test_cancel_after_accept_keeps_the_record(trio, principal_of):
    a, b, _ = trio
    req = lifecycle.create_request(principal_of(a), blood_draft(1))
    lifecycle.accept(principal_of(b), req.pk)
    with pytest.raises(InvalidState):
        lifecycle.cancel(principal_of(a), req.pk)
    assert store.get(req.pk).status == ResourceRequest.STATUS_ACCEPTED


def test_finalize_by_non_owner_is_forbidden(trio, principal_of):
    a, b, c = trio
    req = lifecycle.create_request(principal_of(a), blood_draft(1))
    lifecycle.accept(principal_of(b), req.pk)
    with pytest.raises(Forbidden):
        lifecycle.finalize(principal_of(b), req.pk, 'Closed')
    with pytest.raises(Forbidden):
        lifecycle.finalize(principal_of(c), req.pk, 'Closed')


def test_finalize_only_accepts_closed_target(trio, principal_of):
    a, b, _ = trio
    req = lifecycle.create_request(principal_of(a), blood_draft(1))
    lifecycle.accept(principal_of(b), req.pk)
    for target in ('Rejected', 'Open', 'Accepted', None):
        with pytest.raises(InvalidArgument):
            lifecycle.finalize(principal_of(a), req.pk, target)


def test_finalize_requires_accepted(trio, principal_of):
    a, b, _ = trio
    req = lifecycle.create_request(principal_of(a), blood_draft(1))
    with pytest.raises(InvalidState):
        lifecycle.finalize(principal_of(a), req.pk, 'Closed')

    lifecycle.accept(principal_of(b), req.pk)
    closed = lifecycle.finalize(principal_of(a), req.pk, 'Closed')
    assert closed.status == ResourceRequest.STATUS_CLOSED
    assert closed.providing_hospital_id == b.pk
    assert o_pos(b) == 9

    with pytest.raises(InvalidState):
        lifecycle.finalize(principal_of(a), req.pk, 'Closed')


def test_admin_cannot_take_part_in_lifecycle(trio, principal_of, admin_user):
    a, _, _ = trio
    req = lifecycle.create_request(principal_of(a), blood_draft(1))
    admin = principal_of(admin_user)
    with pytest.raises(Forbidden):
        lifecycle.accept(admin, req.pk)
    with pytest.raises(Forbidden):
        lifecycle.create_request(admin, blood_draft(1))


def test_missing_principal_is_unauthenticated(trio, principal_of):
    a, _, _ = trio
    req = lifecycle.create_request(principal_of(a), blood_draft(1))
    with pytest.raises(Unauthenticated):
        lifecycle.accept(None, req.pk)
    with pytest.raises(Unauthenticated):
        lifecycle.cancel(None, req.pk)


def test_unknown_request_is_not_found(trio, principal_of):
    _, b, _ = trio
    for action in (lifecycle.accept, lifecycle.reject, lifecycle.cancel):
        with pytest.raises(NotFound):
            action(principal_of(b), 987654)
    with pytest.raises(NotFound):
        lifecycle.finalize(principal_of(b), 987654, 'Closed')


def test_transitions_only_move_forward():
    order = {'Open': 0, 'Accepted': 1, 'Rejected': 1, 'Closed': 2}
    for current, targets in lifecycle.TRANSITIONS.items():
        for target in targets:
            assert order[target] > order[current]
    assert not lifecycle.can_transition('Accepted', 'Open')
    assert not lifecycle.can_transition('Closed', 'Accepted')
    assert not lifecycle.can_transition('Rejected', 'Accepted')
    assert not lifecycle.can_transition('Open', 'Closed')


def test_transitions_are_audited(trio, principal_of):
    a, b, _ = trio
    req = lifecycle.create_request(principal_of(a), blood_draft(1))
    lifecycle.accept(principal_of(b), req.pk)
    lifecycle.finalize(principal_of(a), req.pk, 'Closed')
    actions = list(
        AuditEvent.objects.filter(object_type='request', object_id=req.pk).order_by('id').values_list('action', flat=True)
    )
    assert actions == ['request_create', 'request_accept', 'request_finalize']


def test_list_requests_newest_first_with_names(trio, principal_of):
    a, b, _ = trio
    first = lifecycle.create_request(principal_of(a), blood_draft(1))
    second = lifecycle.create_request(principal_of(b), blood_draft(2))
    lifecycle.accept(principal_of(b), first.pk)

    data = lifecycle.list_requests()
    assert [r['id'] for r in data] == [second.pk, first.pk]
    assert data[1]['requestingHospital']['hospitalName'] == 'Hospital A'
    assert data[1]['providingHospital']['hospitalName'] == 'Hospital B'
    assert data[0]['providingHospital'] is None

    open_only = lifecycle.list_requests(status='Open')
    assert [r['id'] for r in open_only] == [second.pk]
