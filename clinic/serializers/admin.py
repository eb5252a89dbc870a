import bleach
from rest_framework import serializers

from clinic.models import Professional, User


class UserListQuerySerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=[c for c, _ in User.ROLE_CHOICES], required=False)
    q = serializers.CharField(max_length=64, required=False)
    page = serializers.IntegerField(min_value=1, required=False)
    pageSize = serializers.IntegerField(min_value=1, max_value=200, required=False)


class SuspendSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255)

    def validate_reason(self, v):
        v = bleach.clean((v or '').strip(), tags=set(), attributes={}, strip=True)
        if not v:
            raise serializers.ValidationError('Suspension reason is required')
        return v


class ProfessionalCreateSerializer(serializers.Serializer):
    userId = serializers.IntegerField(min_value=1)
    kind = serializers.ChoiceField(choices=[c for c, _ in Professional.KIND_CHOICES])
    designation = serializers.CharField(max_length=255, required=False, allow_blank=True)
    specialization = serializers.CharField(max_length=255, required=False, allow_blank=True)
    qualification = serializers.CharField(max_length=255, required=False, allow_blank=True)
    experience = serializers.IntegerField(min_value=0, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    photo = serializers.URLField(max_length=512, required=False, allow_blank=True)
    consultationFee = serializers.IntegerField(min_value=0, required=False)
    licenseNumber = serializers.CharField(max_length=64, required=False, allow_blank=True)
    isVerified = serializers.BooleanField(required=False)

    FIELD_MAP = {
        'designation': 'designation',
        'specialization': 'specialization',
        'qualification': 'qualification',
        'experience': 'experience',
        'description': 'description',
        'photo': 'photo',
        'consultationFee': 'consultation_fee',
        'licenseNumber': 'license_number',
        'isVerified': 'is_verified',
    }

    def validate_description(self, v):
        return bleach.clean((v or '').strip(), tags=set(), attributes={}, strip=True)

    def profile_fields(self) -> dict:
        return {attr: self.validated_data[key] for key, attr in self.FIELD_MAP.items() if key in self.validated_data}


class PayoutSerializer(serializers.Serializer):
    bookingIds = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=False, max_length=500)
