from dataclasses import dataclass, asdict
from typing import Optional

from exchange.exceptions import InvalidArgument
from exchange.models import BloodGroup, Hospital, OrganName, ResourceRequest
from exchange.services.principal import Principal, require_principal


@dataclass(frozen=True)
class HospitalSummary:
    id: int
    hospitalName: str
    address: str
    phone: str

    def to_dict(self) -> dict:
        return asdict(self)


def _positive_quantity(quantity) -> int:
    try:
        value = int(quantity)
    except (TypeError, ValueError):
        raise InvalidArgument('Quantity must be a positive integer.')
    if value < 1:
        raise InvalidArgument('Quantity must be a positive integer.')
    return value


def search_hospitals(principal: Optional[Principal], request_type: Optional[str], *, blood_group: Optional[str] = None,
                     organ_name: Optional[str] = None, quantity=None) -> list:
    """Hospitals other than the caller whose inventory covers the need."""
    principal = require_principal(principal)
    qs = Hospital.objects.all()
    if request_type == ResourceRequest.TYPE_BLOOD:
        if not blood_group or quantity in (None, ''):
            raise InvalidArgument('Blood group and quantity are required.')
        if blood_group not in BloodGroup.values:
            raise InvalidArgument('Invalid blood group.')
        qs = qs.filter(blood_stock__blood_group=blood_group, blood_stock__units__gte=_positive_quantity(quantity))
    elif request_type == ResourceRequest.TYPE_OXYGEN:
        if quantity in (None, ''):
            raise InvalidArgument('Quantity is required.')
        qs = qs.filter(oxygen_cylinders__gte=_positive_quantity(quantity))
    elif request_type == ResourceRequest.TYPE_ORGAN:
        if not organ_name or not blood_group:
            raise InvalidArgument('Organ name and blood group are required.')
        if organ_name not in OrganName.values or blood_group not in BloodGroup.values:
            raise InvalidArgument('Invalid organ name or blood group.')
        qs = qs.filter(organ_offers__organ_name=organ_name, organ_offers__blood_group=blood_group)
    else:
        raise InvalidArgument('Invalid request type.')

    if principal.hospital_id is not None:
        qs = qs.exclude(pk=principal.hospital_id)
    rows = qs.distinct().order_by('name', 'id').values_list('id', 'name', 'address', 'phone')
    return [HospitalSummary(*row) for row in rows]
