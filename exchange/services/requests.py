"""
Request store: persistence of resource requests.

``create`` always produces an ``Open`` request owned by the caller, no
matter what the draft contains.  ``set_status`` is a compare-and-swap:
the UPDATE only matches while the row still has the expected status, so
two concurrent transitions can never both succeed.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.utils import timezone

from exchange.exceptions import NotFound
from exchange.models import Hospital, ResourceRequest

logger = logging.getLogger(__name__)

DETAIL_FIELDS = ('blood_group', 'quantity', 'organ_name')


def create(requesting_hospital_id: int, draft: dict) -> ResourceRequest:
    req = ResourceRequest.objects.create(
        requesting_hospital_id=requesting_hospital_id,
        providing_hospital=None,
        status=ResourceRequest.STATUS_OPEN,
        request_type=draft['request_type'],
        description=draft['description'],
        **{f: draft.get(f) for f in DETAIL_FIELDS},
    )
    logger.info('hospital %s opened %s request %s', requesting_hospital_id, req.request_type, req.pk)
    return req


def get(request_id: int) -> ResourceRequest:
    req = ResourceRequest.objects.select_related('requesting_hospital', 'providing_hospital').filter(pk=request_id).first()
    if req is None:
        raise NotFound('Request not found.')
    return req


def list_all(*, status: Optional[str] = None, request_type: Optional[str] = None):
    qs = ResourceRequest.objects.select_related('requesting_hospital', 'providing_hospital')
    if status:
        qs = qs.filter(status=status)
    if request_type:
        qs = qs.filter(request_type=request_type)
    return qs.order_by('-created_at', '-id')


def set_status(request_id: int, status: str, *, expected: str, providing_hospital_id: Optional[int] = None) -> bool:
    """Move the request to ``status`` only if it is currently ``expected``."""
    fields = {'status': status, 'updated_at': timezone.now()}
    if providing_hospital_id is not None:
        fields['providing_hospital_id'] = providing_hospital_id
    changed = ResourceRequest.objects.filter(pk=request_id, status=expected).update(**fields)
    return changed == 1


def delete(request_id: int, *, expected: Optional[str] = None) -> bool:
    qs = ResourceRequest.objects.filter(pk=request_id)
    if expected is not None:
        qs = qs.filter(status=expected)
    removed, _ = qs.delete()
    return removed > 0


def _hospital_ref(hospital: Optional[Hospital]) -> Optional[dict]:
    if hospital is None:
        return None
    return {'id': hospital.pk, 'hospitalName': hospital.name}


def serialize(req: ResourceRequest) -> dict:
    return {
        'id': req.pk,
        'requestingHospital': _hospital_ref(req.requesting_hospital),
        'providingHospital': _hospital_ref(req.providing_hospital),
        'requestType': req.request_type,
        'status': req.status,
        'details': {
            'bloodGroup': req.blood_group,
            'quantity': req.quantity,
            'organName': req.organ_name,
        },
        'description': req.description,
        'createdAt': req.created_at.isoformat() if req.created_at else None,
        'updatedAt': req.updated_at.isoformat() if req.updated_at else None,
    }
