import logging
from typing import Optional

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q

from exchange.exceptions import InvalidArgument, NotFound
from exchange.models import Hospital, ResourceRequest
from exchange.services import inventory
from exchange.services.audit import log_action
from exchange.services.principal import Principal, require_admin, require_hospital

logger = logging.getLogger(__name__)

User = get_user_model()

CONTACT_FIELDS = ('name', 'address', 'phone')


@transaction.atomic
def create_hospital(*, username: str, password: str, name: str, email: str, address: str = '', phone: str = '',
                    oxygen_cylinders: int = 0) -> Hospital:
    """Create the login account and hospital record with an empty blood table."""
    if Hospital.objects.filter(email=email).exists() or User.objects.filter(username=username).exists():
        raise InvalidArgument('Hospital with this email already exists.')
    user = User.objects.create_user(username=username, password=password, email=email, role=User.ROLE_HOSPITAL)
    hospital = Hospital.objects.create(
        user=user, name=name, email=email, address=address, phone=phone, oxygen_cylinders=oxygen_cylinders,
    )
    inventory.ensure_blood_stock(hospital.pk)
    logger.info('created hospital %s (%s)', hospital.pk, name)
    return hospital


def serialize_hospital(hospital: Hospital, snapshot: Optional[inventory.InventorySnapshot] = None) -> dict:
    snapshot = snapshot or inventory.get_snapshot(hospital.pk)
    return {
        'id': hospital.pk,
        'hospitalName': hospital.name,
        'email': hospital.email,
        'address': hospital.address,
        'phone': hospital.phone,
        'details': snapshot.to_dict(),
        'createdAt': hospital.created_at.isoformat() if hospital.created_at else None,
        'updatedAt': hospital.updated_at.isoformat() if hospital.updated_at else None,
    }


def get_own_hospital(principal: Principal) -> Hospital:
    principal = require_hospital(principal)
    hospital = Hospital.objects.filter(pk=principal.hospital_id).first()
    if hospital is None:
        raise NotFound('Hospital not found.')
    return hospital


def update_details(principal: Principal, *, contact: dict, details: Optional[dict] = None) -> Hospital:
    """Update the caller's contact fields and, when given, its inventory."""
    hospital = get_own_hospital(principal)
    with transaction.atomic():
        changed = [f for f in CONTACT_FIELDS if f in contact]
        for f in changed:
            setattr(hospital, f, contact[f])
        if changed:
            hospital.save(update_fields=changed + ['updated_at'])
        if details:
            inventory.replace_inventory(
                hospital,
                oxygen_cylinders=details.get('oxygen_cylinders'),
                blood=details.get('blood'),
                organs=details.get('organs'),
            )
    hospital.refresh_from_db()
    logger.info('hospital %s updated details', hospital.pk)
    return hospital


def list_hospitals(principal: Principal) -> list:
    require_admin(principal)
    hospitals = Hospital.objects.order_by('name', 'id')
    return [serialize_hospital(h) for h in hospitals]


def delete_hospital(principal: Principal, hospital_id: int) -> None:
    """Remove a hospital, its login and every request it requested or provided."""
    require_admin(principal)
    with transaction.atomic():
        hospital = Hospital.objects.select_for_update().filter(pk=hospital_id).first()
        if hospital is None:
            raise NotFound('Hospital not found.')
        removed, _ = ResourceRequest.objects.filter(
            Q(requesting_hospital_id=hospital_id) | Q(providing_hospital_id=hospital_id)
        ).delete()
        name = hospital.name
        # deleting the user cascades to the hospital and its inventory rows
        User.objects.filter(pk=hospital.user_id).delete()
        log_action(user_id=principal.id, action='hospital_delete', object_type='hospital', object_id=hospital_id,
                   detail={'name': name, 'requestsRemoved': removed})
    logger.info('admin %s deleted hospital %s and %s requests', principal.id, hospital_id, removed)
