import bleach
from rest_framework import serializers

from clinic.models import Complaint


def _clean(v):
    return bleach.clean((v or '').strip(), tags=set(), attributes={}, strip=True)


class ComplaintSubmitSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(max_length=2000)
    category = serializers.ChoiceField(choices=[c for c, _ in Complaint.CATEGORY_CHOICES])
    priority = serializers.ChoiceField(choices=[c for c, _ in Complaint.PRIORITY_CHOICES], required=False)
    relatedBooking = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    relatedProfessional = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    attachments = serializers.ListField(child=serializers.URLField(max_length=512), required=False, max_length=10)
    tags = serializers.ListField(child=serializers.CharField(max_length=32), required=False, max_length=10)

    def validate_title(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('Title is required.')
        return v

    def validate_description(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('Description is required.')
        return v

    def validate_tags(self, v):
        return [_clean(t) for t in v if _clean(t)]

    def to_service(self) -> dict:
        d = dict(self.validated_data)
        d['related_booking'] = d.pop('relatedBooking', None)
        d['related_professional'] = d.pop('relatedProfessional', None)
        return d


class ComplaintUpdateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200, required=False)
    description = serializers.CharField(max_length=2000, required=False)
    category = serializers.ChoiceField(choices=[c for c, _ in Complaint.CATEGORY_CHOICES], required=False)
    priority = serializers.ChoiceField(choices=[c for c, _ in Complaint.PRIORITY_CHOICES], required=False)
    attachments = serializers.ListField(child=serializers.URLField(max_length=512), required=False, max_length=10)

    def validate_title(self, v):
        return _clean(v)

    def validate_description(self, v):
        return _clean(v)


class ComplaintRatingSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)


class ComplaintListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c for c, _ in Complaint.STATUS_CHOICES], required=False)
    category = serializers.ChoiceField(choices=[c for c, _ in Complaint.CATEGORY_CHOICES], required=False)
    priority = serializers.ChoiceField(choices=[c for c, _ in Complaint.PRIORITY_CHOICES], required=False)
    assignedTo = serializers.IntegerField(min_value=1, required=False)
    search = serializers.CharField(max_length=100, required=False)
    page = serializers.IntegerField(min_value=1, required=False)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False)


class ComplaintAssignSerializer(serializers.Serializer):
    assignedTo = serializers.IntegerField(min_value=1)


class ComplaintStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c for c, _ in Complaint.STATUS_CHOICES])
    message = serializers.CharField(max_length=1000, required=False, allow_blank=True, default='')

    def validate_message(self, v):
        return _clean(v)


class ComplaintRespondSerializer(serializers.Serializer):
    message = serializers.CharField(max_length=1000)

    def validate_message(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('Message is required.')
        return v


class ComplaintNoteSerializer(serializers.Serializer):
    note = serializers.CharField(max_length=500)

    def validate_note(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('Note is required.')
        return v
