import bleach
from rest_framework import serializers

from clinic.models import Booking


class PatientDetailsSerializer(serializers.Serializer):
    age = serializers.IntegerField(min_value=0, max_value=130)
    sex = serializers.ChoiceField(choices=[c for c, _ in Booking.SEX_CHOICES])
    prescriptionUrl = serializers.URLField(max_length=512)
    additionalNotes = serializers.CharField(max_length=2000, required=False, allow_blank=True, default='')

    def validate_additionalNotes(self, v):
        return bleach.clean((v or '').strip(), tags=set(), attributes={}, strip=True)


class BookingCreateSerializer(serializers.Serializer):
    slotId = serializers.IntegerField(min_value=1)
    serviceType = serializers.ChoiceField(choices=[c for c, _ in Booking.SERVICE_CHOICES])
    patientDetails = PatientDetailsSerializer()
    paymentId = serializers.CharField(max_length=128, required=False, allow_blank=True, default='')

    def details(self) -> dict:
        d = self.validated_data['patientDetails']
        return {
            'age': d['age'],
            'sex': d['sex'],
            'prescription_url': d['prescriptionUrl'],
            'additional_notes': d.get('additionalNotes', ''),
        }


class RescheduleSerializer(serializers.Serializer):
    slotId = serializers.IntegerField(min_value=1)


class MeetingLinkSerializer(serializers.Serializer):
    meetLink = serializers.URLField(max_length=512)


class ReportSerializer(serializers.Serializer):
    reportUrl = serializers.URLField(max_length=512)


class TestResultSerializer(serializers.Serializer):
    testResultUrl = serializers.URLField(max_length=512)


class TreatmentStatusSerializer(serializers.Serializer):
    treatmentStatus = serializers.ChoiceField(choices=[c for c, _ in Booking.TREATMENT_CHOICES])


class ReviewSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)
    feedback = serializers.CharField(max_length=1000, required=False, allow_blank=True, default='')

    def validate_feedback(self, v):
        return bleach.clean((v or '').strip(), tags=set(), attributes={}, strip=True)
