import bleach
from rest_framework import serializers

from clinic.models import Booking, MedicalForm


def _clean(v):
    return bleach.clean((v or '').strip(), tags=set(), attributes={}, strip=True)


class MedicalFormSubmitSerializer(serializers.Serializer):
    patientName = serializers.CharField(max_length=255)
    age = serializers.IntegerField(min_value=0, max_value=130)
    sex = serializers.ChoiceField(choices=[c for c, _ in Booking.SEX_CHOICES])
    prescriptionDetails = serializers.CharField(max_length=5000)
    prescriptionUrl = serializers.URLField(max_length=512)
    additionalNotes = serializers.CharField(max_length=2000, required=False, allow_blank=True, default='')
    paymentId = serializers.CharField(max_length=128, required=False, allow_blank=True, default='')

    def validate_patientName(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('Patient name is required.')
        return v

    def validate_prescriptionDetails(self, v):
        return _clean(v)

    def validate_additionalNotes(self, v):
        return _clean(v)

    def to_service(self) -> dict:
        d = self.validated_data
        return {
            'patient_name': d['patientName'],
            'age': d['age'],
            'sex': d['sex'],
            'prescription_details': d['prescriptionDetails'],
            'prescription_url': d['prescriptionUrl'],
            'additional_notes': d.get('additionalNotes', ''),
            'payment_id': d.get('paymentId', ''),
        }


class MedicalFormAssignSerializer(serializers.Serializer):
    professionalId = serializers.IntegerField(min_value=1)


class MedicalFormResultSerializer(serializers.Serializer):
    resultPdfUrl = serializers.URLField(max_length=512)
    resultNotes = serializers.CharField(max_length=2000, required=False, allow_blank=True, default='')

    def validate_resultNotes(self, v):
        return _clean(v)


class MedicalFormListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c for c, _ in MedicalForm.STATUS_CHOICES], required=False)
