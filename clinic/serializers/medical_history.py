import bleach
from rest_framework import serializers


def _clean(v):
    return bleach.clean((v or '').strip(), tags=set(), attributes={}, strip=True)


class MedicalRecordSerializer(serializers.Serializer):
    documents = serializers.ListField(child=serializers.URLField(max_length=512), required=False, max_length=50)
    details = serializers.DictField(required=False)


class PrescriptionSerializer(serializers.Serializer):
    prescriptionUrl = serializers.URLField(max_length=512)


class SelfAssessmentSerializer(serializers.Serializer):
    ANSWERS = ('currentMedications', 'allergies', 'chronicConditions', 'recentSymptoms', 'lifestyleFactors',
               'additionalNotes')

    currentMedications = serializers.CharField(max_length=2000, required=False, allow_blank=True, default='')
    allergies = serializers.CharField(max_length=1000, required=False, allow_blank=True, default='')
    chronicConditions = serializers.CharField(max_length=1000, required=False, allow_blank=True, default='')
    recentSymptoms = serializers.CharField(max_length=2000, required=False, allow_blank=True, default='')
    lifestyleFactors = serializers.CharField(max_length=1000, required=False, allow_blank=True, default='')
    additionalNotes = serializers.CharField(max_length=2000, required=False, allow_blank=True, default='')

    def validate(self, attrs):
        cleaned = {k: _clean(attrs.get(k, '')) for k in self.ANSWERS}
        if not any(cleaned.values()):
            raise serializers.ValidationError('At least one answer is required.')
        return cleaned

    def to_service(self) -> dict:
        return dict(self.validated_data)


class AssignPharmacistSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1)
    pharmacistId = serializers.IntegerField(min_value=1)


class AssessmentReportSerializer(serializers.Serializer):
    reportUrl = serializers.URLField(max_length=512)
    notes = serializers.CharField(max_length=2000, required=False, allow_blank=True, default='')

    def validate_notes(self, v):
        return _clean(v)


class ReportPaymentSerializer(serializers.Serializer):
    paymentId = serializers.CharField(max_length=128, required=False, allow_blank=True, default='')


class AssessmentReviewSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)
    feedback = serializers.CharField(max_length=1000, required=False, allow_blank=True, default='')

    def validate_feedback(self, v):
        return _clean(v)


class PatientDocumentSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1)
    reportUrl = serializers.URLField(max_length=512)
