from django.conf import settings
from rest_framework import serializers

from exchange.models import BloodGroup, OrganName, ResourceRequest


class RequestDetailsSerializer(serializers.Serializer):
    bloodGroup = serializers.ChoiceField(choices=BloodGroup.choices, required=False, allow_null=True)
    quantity = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    organName = serializers.ChoiceField(choices=OrganName.choices, required=False, allow_null=True)


class RequestCreateSerializer(serializers.Serializer):
    requestType = serializers.ChoiceField(choices=ResourceRequest.TYPE_CHOICES)
    details = RequestDetailsSerializer(required=False)
    description = serializers.CharField(max_length=settings.DESCRIPTION_MAX_LENGTH)

    def to_draft(self) -> dict:
        vd = self.validated_data
        details = vd.get('details') or {}
        return {
            'request_type': vd['requestType'],
            'blood_group': details.get('bloodGroup'),
            'quantity': details.get('quantity'),
            'organ_name': details.get('organName'),
            'description': vd['description'],
        }


class RequestActionSerializer(serializers.Serializer):
    requestId = serializers.IntegerField(min_value=1)


class RequestFinalizeSerializer(RequestActionSerializer):
    # validated by lifecycle.finalize
    finalStatus = serializers.CharField(max_length=16, required=False, allow_null=True, allow_blank=True)


class RequestListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ResourceRequest.STATUS_CHOICES, required=False)
    requestType = serializers.ChoiceField(choices=ResourceRequest.TYPE_CHOICES, required=False)
