from rest_framework import serializers

from clinic.models import parse_slot_time


class SlotTimeField(serializers.CharField):
    """``HH:MM`` or ``hh:mm AM/PM``, kept exactly as submitted."""

    def __init__(self, **kwargs):
        kwargs.setdefault('max_length', 16)
        kwargs.setdefault('trim_whitespace', False)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        try:
            parse_slot_time(value)
        except ValueError:
            raise serializers.ValidationError('Use HH:MM or hh:mm AM/PM.')
        return value


def _check_window(attrs):
    start, end = attrs.get('startTime'), attrs.get('endTime')
    if start and end and parse_slot_time(end) <= parse_slot_time(start):
        raise serializers.ValidationError({'endTime': 'End time must be after start time.'})
    return attrs


class SlotCreateSerializer(serializers.Serializer):
    date = serializers.DateField()
    startTime = SlotTimeField()
    endTime = SlotTimeField()

    def validate(self, attrs):
        return _check_window(attrs)


class SlotUpdateSerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    startTime = SlotTimeField(required=False)
    endTime = SlotTimeField(required=False)
    version = serializers.IntegerField(min_value=0, required=False)

    def validate(self, attrs):
        if not ({'date', 'startTime', 'endTime'} & attrs.keys()):
            raise serializers.ValidationError('Nothing to update.')
        return _check_window(attrs)


class SlotEntrySerializer(serializers.Serializer):
    id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    date = serializers.DateField()
    startTime = SlotTimeField()
    endTime = SlotTimeField()
    # server-owned; accepted and ignored so older clients can echo what they read
    isBooked = serializers.BooleanField(required=False)

    def validate(self, attrs):
        return _check_window(attrs)


class SlotReplaceSerializer(serializers.Serializer):
    slots = SlotEntrySerializer(many=True, allow_empty=True)
    version = serializers.IntegerField(min_value=0, required=False, allow_null=True)

    def entries(self) -> list[dict]:
        return [
            {'id': e.get('id'), 'date': e['date'], 'start_time': e['startTime'], 'end_time': e['endTime']}
            for e in self.validated_data['slots']
        ]
