"""
Inventory store: per-hospital oxygen, blood and organ availability.

Reads return an immutable :class:`InventorySnapshot`.  Writes are
expressed as typed deltas and applied with single conditional UPDATE or
DELETE statements, so a debit can never take a count below zero even
when two requests race for the same stock.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Union

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from exchange.exceptions import InsufficientInventory, InvalidArgument, NotFound
from exchange.models import BloodGroup, BloodStock, Hospital, OrganName, OrganOffer, ResourceRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrganOfferEntry:
    organ_name: OrganName
    blood_group: BloodGroup
    age: int
    notes: str = ''
    id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'organName': self.organ_name.value,
            'bloodGroup': self.blood_group.value,
            'age': self.age,
            'notes': self.notes,
        }


@dataclass(frozen=True)
class InventorySnapshot:
    hospital_id: int
    oxygen_cylinders: int
    blood: Dict[BloodGroup, int]
    organs: List[OrganOfferEntry] = field(default_factory=list)

    def blood_units(self, blood_group) -> int:
        return self.blood.get(BloodGroup(blood_group), 0)

    def to_dict(self) -> dict:
        return {
            'oxygenCylinders': {'total': self.oxygen_cylinders},
            'bloodAvailability': {bg.value: self.blood.get(bg, 0) for bg in BloodGroup},
            'organAvailability': [o.to_dict() for o in self.organs],
        }


@dataclass(frozen=True)
class BloodDebit:
    blood_group: BloodGroup
    quantity: int


@dataclass(frozen=True)
class OxygenDebit:
    quantity: int


@dataclass(frozen=True)
class OrganRemoval:
    organ_name: OrganName
    blood_group: BloodGroup


InventoryDelta = Union[BloodDebit, OxygenDebit, OrganRemoval]


def ensure_blood_stock(hospital_id: int) -> None:
    """Create the zero rows for any blood group the hospital is missing."""
    BloodStock.objects.bulk_create(
        [BloodStock(hospital_id=hospital_id, blood_group=bg.value, units=0) for bg in BloodGroup],
        ignore_conflicts=True,
    )


def get_snapshot(hospital_id: int) -> InventorySnapshot:
    oxygen = Hospital.objects.filter(pk=hospital_id).values_list('oxygen_cylinders', flat=True).first()
    if oxygen is None:
        raise NotFound('Hospital not found.')
    blood = {bg: 0 for bg in BloodGroup}
    for bg, units in BloodStock.objects.filter(hospital_id=hospital_id).values_list('blood_group', 'units'):
        blood[BloodGroup(bg)] = units
    organs = [
        OrganOfferEntry(
            id=o.id,
            organ_name=OrganName(o.organ_name),
            blood_group=BloodGroup(o.blood_group),
            age=o.age,
            notes=o.notes,
        )
        for o in OrganOffer.objects.filter(hospital_id=hospital_id).order_by('created_at', 'id')
    ]
    return InventorySnapshot(hospital_id=hospital_id, oxygen_cylinders=oxygen, blood=blood, organs=organs)


def delta_for_request(req: ResourceRequest) -> InventoryDelta:
    """Translate a request's type and details into the debit it implies."""
    if req.request_type == ResourceRequest.TYPE_BLOOD:
        return BloodDebit(blood_group=BloodGroup(req.blood_group), quantity=req.quantity)
    if req.request_type == ResourceRequest.TYPE_OXYGEN:
        return OxygenDebit(quantity=req.quantity)
    if req.request_type == ResourceRequest.TYPE_ORGAN:
        return OrganRemoval(organ_name=OrganName(req.organ_name), blood_group=BloodGroup(req.blood_group))
    raise InvalidArgument(f'Unknown request type: {req.request_type}')


def _matching_offer_ids(hospital_id: int, delta: OrganRemoval) -> list:
    """Ids of the hospital's offers matching ``delta``, oldest first."""
    return list(
        OrganOffer.objects.filter(
            hospital_id=hospital_id, organ_name=delta.organ_name, blood_group=delta.blood_group,
        )
        .order_by('created_at', 'id')
        .values_list('id', flat=True)
    )


def apply_delta(hospital_id: int, delta: InventoryDelta) -> None:
    """Apply ``delta`` to the hospital's inventory or raise InsufficientInventory."""
    if isinstance(delta, BloodDebit):
        changed = BloodStock.objects.filter(
            hospital_id=hospital_id, blood_group=delta.blood_group, units__gte=delta.quantity,
        ).update(units=F('units') - delta.quantity)
    elif isinstance(delta, OxygenDebit):
        changed = Hospital.objects.filter(
            pk=hospital_id, oxygen_cylinders__gte=delta.quantity,
        ).update(oxygen_cylinders=F('oxygen_cylinders') - delta.quantity, updated_at=timezone.now())
    elif isinstance(delta, OrganRemoval):
        changed = 0
        # a concurrent accept may delete a candidate first; fall through to the next one
        for offer_id in _matching_offer_ids(hospital_id, delta):
            changed = OrganOffer.objects.filter(pk=offer_id).delete()[0]
            if changed:
                break
    else:
        raise TypeError(f'unsupported inventory delta: {delta!r}')

    if not changed:
        logger.info('debit refused for hospital %s: %r', hospital_id, delta)
        raise InsufficientInventory()
    logger.debug('debited hospital %s: %r', hospital_id, delta)


@transaction.atomic
def replace_inventory(
    hospital: Hospital,
    *,
    oxygen_cylinders: Optional[int] = None,
    blood: Optional[Dict[str, int]] = None,
    organs: Optional[Iterable[dict]] = None,
) -> InventorySnapshot:
    """Overwrite whichever inventory sections are given.

    ``organs`` replaces the whole offer list, matching how the hospital
    edits its inventory form in one go.
    """
    if oxygen_cylinders is not None:
        if oxygen_cylinders < 0:
            raise InvalidArgument('Oxygen cylinders cannot be negative.')
        Hospital.objects.filter(pk=hospital.pk).update(oxygen_cylinders=oxygen_cylinders, updated_at=timezone.now())
    if blood is not None:
        ensure_blood_stock(hospital.pk)
        for bg, units in blood.items():
            if units < 0:
                raise InvalidArgument(f'Blood units for {bg} cannot be negative.')
            BloodStock.objects.filter(hospital_id=hospital.pk, blood_group=BloodGroup(bg)).update(units=units)
    if organs is not None:
        OrganOffer.objects.filter(hospital_id=hospital.pk).delete()
        OrganOffer.objects.bulk_create([
            OrganOffer(
                hospital_id=hospital.pk,
                organ_name=o['organ_name'],
                blood_group=o['blood_group'],
                age=o['age'],
                notes=o.get('notes') or '',
            )
            for o in organs
        ])
    return get_snapshot(hospital.pk)
