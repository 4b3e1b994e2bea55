"""
Lifecycle engine for resource requests.

States::

    Open -> Accepted -> Closed
    Open -> Rejected
    Open -> (deleted)            cancel, requester only

``Rejected``, ``Closed`` and deleted requests are terminal.  Accept is
the only transition with a side effect: the acting hospital's inventory
is debited inside the same transaction as the status change, and the
status change itself is a compare-and-swap on ``Open``, so a request can
be accepted (and stock debited) at most once.
"""
from __future__ import annotations

import logging
from typing import Optional

import bleach
from django.conf import settings
from django.db import transaction

from exchange.exceptions import Forbidden, InvalidArgument, InvalidState, NotFound, SelfAction
from exchange.models import BloodGroup, OrganName, ResourceRequest
from exchange.services import inventory
from exchange.services import requests as store
from exchange.services.audit import log_action
from exchange.services.principal import Principal, require_hospital

logger = logging.getLogger(__name__)

OPEN = ResourceRequest.STATUS_OPEN
ACCEPTED = ResourceRequest.STATUS_ACCEPTED
CLOSED = ResourceRequest.STATUS_CLOSED
REJECTED = ResourceRequest.STATUS_REJECTED

TRANSITIONS = {
    OPEN: {ACCEPTED, REJECTED},
    ACCEPTED: {CLOSED},
    REJECTED: set(),
    CLOSED: set(),
}

# request type -> detail fields it must carry
REQUIRED_DETAILS = {
    ResourceRequest.TYPE_BLOOD: ('blood_group', 'quantity'),
    ResourceRequest.TYPE_OXYGEN: ('quantity',),
    ResourceRequest.TYPE_ORGAN: ('organ_name', 'blood_group'),
}


def can_transition(current: str, new: str) -> bool:
    """Return True if a request may move from ``current`` to ``new``."""
    return new in TRANSITIONS.get(current, set())


def _lost_race(request_id: int):
    """Error for a conditional write that matched no row."""
    if ResourceRequest.objects.filter(pk=request_id).exists():
        return InvalidState()
    return NotFound('Request not found.')


def _audit(principal: Principal, action: str, req: ResourceRequest, **detail) -> None:
    log_action(user_id=principal.id, action=action, object_type='request', object_id=req.pk,
               detail={'hospitalId': principal.hospital_id, 'requestType': req.request_type, **detail})


def normalize_draft(draft: dict) -> dict:
    """Validate a request draft and keep only the details its type uses."""
    request_type = draft.get('request_type')
    if request_type not in REQUIRED_DETAILS:
        raise InvalidArgument('Invalid request type.')
    required = REQUIRED_DETAILS[request_type]
    missing = [f for f in required if draft.get(f) in (None, '')]
    if missing:
        raise InvalidArgument(f"Missing details for {request_type} request: {', '.join(missing)}.")

    clean = {'request_type': request_type}
    for f in ('blood_group', 'quantity', 'organ_name'):
        clean[f] = draft.get(f) if f in required else None
    if clean['blood_group'] is not None and clean['blood_group'] not in BloodGroup.values:
        raise InvalidArgument('Invalid blood group.')
    if clean['organ_name'] is not None and clean['organ_name'] not in OrganName.values:
        raise InvalidArgument('Invalid organ name.')
    if clean['quantity'] is not None:
        quantity = clean['quantity']
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise InvalidArgument('Quantity must be a positive integer.')
        if quantity > settings.REQUEST_MAX_QUANTITY:
            raise InvalidArgument('Quantity is too large.')

    description = bleach.clean((draft.get('description') or '').strip(), strip=True)
    if not description:
        raise InvalidArgument('Description is required.')
    if len(description) > settings.DESCRIPTION_MAX_LENGTH:
        raise InvalidArgument('Description is too long.')
    clean['description'] = description
    return clean


def create_request(principal: Optional[Principal], draft: dict) -> ResourceRequest:
    """Post a new ``Open`` request on behalf of the caller's hospital.

    Any requester, provider or status present in ``draft`` is ignored.
    """
    principal = require_hospital(principal)
    clean = normalize_draft(draft)
    with transaction.atomic():
        req = store.create(principal.hospital_id, clean)
        _audit(principal, 'request_create', req)
    return store.get(req.pk)


def list_requests(*, status: Optional[str] = None, request_type: Optional[str] = None) -> list:
    return [store.serialize(r) for r in store.list_all(status=status, request_type=request_type)]


def _check_open_and_foreign(principal: Principal, req: ResourceRequest, verb: str) -> None:
    if req.status != OPEN:
        raise InvalidState()
    if req.requesting_hospital_id == principal.hospital_id:
        raise SelfAction(f'You cannot {verb} your own request.')


def accept(principal: Optional[Principal], request_id: int) -> ResourceRequest:
    """Accept an open request and debit the acting hospital's inventory."""
    principal = require_hospital(principal)
    req = store.get(request_id)
    _check_open_and_foreign(principal, req, 'accept')
    delta = inventory.delta_for_request(req)

    with transaction.atomic():
        if not store.set_status(req.pk, ACCEPTED, expected=OPEN, providing_hospital_id=principal.hospital_id):
            raise _lost_race(req.pk)
        # InsufficientInventory here rolls the status change back
        inventory.apply_delta(principal.hospital_id, delta)
        _audit(principal, 'request_accept', req, delta=repr(delta))

    logger.info('hospital %s accepted request %s', principal.hospital_id, req.pk)
    return store.get(req.pk)


def reject(principal: Optional[Principal], request_id: int) -> ResourceRequest:
    """Decline an open request.  The rejecting hospital is recorded, stock is untouched."""
    principal = require_hospital(principal)
    req = store.get(request_id)
    _check_open_and_foreign(principal, req, 'reject')

    with transaction.atomic():
        if not store.set_status(req.pk, REJECTED, expected=OPEN, providing_hospital_id=principal.hospital_id):
            raise _lost_race(req.pk)
        _audit(principal, 'request_reject', req)

    logger.info('hospital %s rejected request %s', principal.hospital_id, req.pk)
    return store.get(req.pk)


def cancel(principal: Optional[Principal], request_id: int) -> None:
    """Delete the caller's own request while it is still open."""
    principal = require_hospital(principal)
    req = store.get(request_id)
    if req.requesting_hospital_id != principal.hospital_id:
        raise Forbidden('Not authorized.')
    if req.status != OPEN:
        raise InvalidState('Only open requests can be cancelled.')

    with transaction.atomic():
        if not store.delete(req.pk, expected=OPEN):
            raise _lost_race(req.pk)
        _audit(principal, 'request_cancel', req)

    logger.info('hospital %s cancelled request %s', principal.hospital_id, req.pk)


def finalize(principal: Optional[Principal], request_id: int, target_status: Optional[str]) -> ResourceRequest:
    """Mark an accepted request as delivered (``Closed``).  Requester only."""
    principal = require_hospital(principal)
    req = store.get(request_id)
    if req.requesting_hospital_id != principal.hospital_id:
        raise Forbidden('Not authorized.')
    if target_status != CLOSED:
        raise InvalidArgument('Invalid status. Only successful fulfillment is allowed.')
    if not can_transition(req.status, CLOSED):
        raise InvalidState('Only accepted requests can be closed.')

    with transaction.atomic():
        if not store.set_status(req.pk, CLOSED, expected=ACCEPTED):
            raise _lost_race(req.pk)
        _audit(principal, 'request_finalize', req)

    logger.info('hospital %s closed request %s', principal.hospital_id, req.pk)
    return store.get(req.pk)
