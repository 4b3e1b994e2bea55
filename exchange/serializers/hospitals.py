import bleach
from rest_framework import serializers

from exchange.models import BloodGroup, OrganName


class OxygenSerializer(serializers.Serializer):
    total = serializers.IntegerField(min_value=0)


class OrganOfferSerializer(serializers.Serializer):
    organName = serializers.ChoiceField(choices=OrganName.choices)
    bloodGroup = serializers.ChoiceField(choices=BloodGroup.choices)
    age = serializers.IntegerField(min_value=0, max_value=130)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=1000)


class InventorySerializer(serializers.Serializer):
    oxygenCylinders = OxygenSerializer(required=False)
    bloodAvailability = serializers.DictField(child=serializers.IntegerField(min_value=0), required=False)
    organAvailability = OrganOfferSerializer(many=True, required=False)

    def validate_bloodAvailability(self, v):
        unknown = [k for k in v if k not in BloodGroup.values]
        if unknown:
            raise serializers.ValidationError(f"Unknown blood groups: {', '.join(unknown)}")
        return v


class HospitalDetailsUpdateSerializer(serializers.Serializer):
    hospitalName = serializers.CharField(max_length=255, required=False)
    address = serializers.CharField(max_length=500, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    details = InventorySerializer(required=False)

    def validate_hospitalName(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if len(v) < 2:
            raise serializers.ValidationError('Hospital name must be at least 2 characters.')
        return v

    def to_update(self):
        """Return ``(contact, details)`` in the shape the hospitals service takes."""
        vd = self.validated_data
        contact = {}
        if 'hospitalName' in vd:
            contact['name'] = vd['hospitalName']
        for f in ('address', 'phone'):
            if f in vd:
                contact[f] = bleach.clean(vd[f].strip(), strip=True)
        details = None
        if 'details' in vd:
            d = vd['details']
            details = {}
            if 'oxygenCylinders' in d:
                details['oxygen_cylinders'] = d['oxygenCylinders']['total']
            if 'bloodAvailability' in d:
                details['blood'] = d['bloodAvailability']
            if 'organAvailability' in d:
                details['organs'] = [
                    {
                        'organ_name': o['organName'],
                        'blood_group': o['bloodGroup'],
                        'age': o['age'],
                        'notes': bleach.clean(o.get('notes', ''), strip=True),
                    }
                    for o in d['organAvailability']
                ]
        return contact, details


class HospitalSearchQuerySerializer(serializers.Serializer):
    requestType = serializers.CharField(max_length=16)
    bloodGroup = serializers.CharField(max_length=3, required=False)
    organName = serializers.CharField(max_length=16, required=False)
    quantity = serializers.CharField(max_length=12, required=False)
