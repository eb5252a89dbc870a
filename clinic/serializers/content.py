import bleach
from rest_framework import serializers

from clinic.models import FAQ, CustomerServiceChannel

# Legal pages and answers may carry simple formatting.
ALLOWED_TAGS = ['p', 'br', 'strong', 'em', 'ul', 'ol', 'li', 'h2', 'h3', 'h4', 'a']
ALLOWED_ATTRIBUTES = {'a': ['href', 'title']}


def _plain(v):
    return bleach.clean((v or '').strip(), tags=set(), attributes={}, strip=True)


def _rich(v):
    return bleach.clean((v or '').strip(), tags=ALLOWED_TAGS, attributes=ALLOWED_ATTRIBUTES, strip=True)


class FAQSerializer(serializers.Serializer):
    question = serializers.CharField(max_length=500)
    answer = serializers.CharField(max_length=2000)
    category = serializers.ChoiceField(choices=[c for c, _ in FAQ.CATEGORY_CHOICES], required=False)
    order = serializers.IntegerField(min_value=0, required=False)
    isActive = serializers.BooleanField(required=False)

    def validate_question(self, v):
        return _plain(v)

    def validate_answer(self, v):
        return _rich(v)


class FAQListQuerySerializer(serializers.Serializer):
    category = serializers.ChoiceField(choices=[c for c, _ in FAQ.CATEGORY_CHOICES], required=False)
    active = serializers.BooleanField(required=False, allow_null=True, default=True)


class CustomerServiceSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(max_length=1000)
    icon = serializers.CharField(max_length=16, required=False)
    contactMethod = serializers.ChoiceField(choices=[c for c, _ in CustomerServiceChannel.CONTACT_CHOICES])
    contactValue = serializers.CharField(max_length=255)
    workingHours = serializers.CharField(max_length=100, required=False)
    order = serializers.IntegerField(min_value=0, required=False)
    isActive = serializers.BooleanField(required=False)

    def validate_title(self, v):
        return _plain(v)

    def validate_description(self, v):
        return _plain(v)


class LegalPageSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    content = serializers.CharField()
    version = serializers.CharField(max_length=10, required=False)
    isActive = serializers.BooleanField(required=False)

    def validate_title(self, v):
        return _plain(v)

    def validate_content(self, v):
        return _rich(v)
